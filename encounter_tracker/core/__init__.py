"""
Core system module for the encounter tracker.

This module contains the fundamental components shared by the rest of the
package: constants, logging, diagnostics, console helpers and the injected
randomness and identifier capabilities.
"""

from .capabilities import (
    EverIncreasingRandomSource,
    IdGenerator,
    RandomSource,
    SeededRandomSource,
    SequenceRandomSource,
    SequentialIdGenerator,
    UUIDGenerator,
)
from .constants import (
    DEFAULT_DIE_SIDES,
    FIRST_ROUND,
    MAX_DIE_SIDES,
    MIN_DIE_SIDES,
    DefinitionKind,
    EventKind,
    InsertPosition,
)
from .error_handling import (
    Diagnostic,
    DiagnosticCollector,
    DiagnosticKind,
    DuplicateIdentifierError,
    EncounterException,
)
from .utils import cprint, crule, get_stat_modifier, modifier_to_string

__all__ = [
    # Import from capabilities.py
    "EverIncreasingRandomSource",
    "IdGenerator",
    "RandomSource",
    "SeededRandomSource",
    "SequenceRandomSource",
    "SequentialIdGenerator",
    "UUIDGenerator",
    # Import from constants.py
    "DEFAULT_DIE_SIDES",
    "FIRST_ROUND",
    "MAX_DIE_SIDES",
    "MIN_DIE_SIDES",
    "DefinitionKind",
    "EventKind",
    "InsertPosition",
    # Import from error_handling.py
    "Diagnostic",
    "DiagnosticCollector",
    "DiagnosticKind",
    "DuplicateIdentifierError",
    "EncounterException",
    # Import from utils.py
    "cprint",
    "crule",
    "get_stat_modifier",
    "modifier_to_string",
]
