"""
Error taxonomy and diagnostics for the encounter tracker.

Recoverable problems (unknown combatant ids, starting an empty encounter,
malformed initiative settings) are resolved locally to a safe state and
reported as diagnostics next to the resulting state. Identifier collisions
are a broken contract in the identifier generator and raise.
"""

from enum import Enum
from typing import Any

from catchery import log_warning
from pydantic import BaseModel, Field


class DiagnosticKind(Enum):
    """Enumeration of the recoverable problems the core can report."""

    COMBATANT_NOT_FOUND = "combatant_not_found"
    EMPTY_ENCOUNTER_START = "empty_encounter_start"
    INVALID_SETTINGS = "invalid_settings"


class Diagnostic(BaseModel):
    """A recoverable problem found while applying an action."""

    kind: DiagnosticKind = Field(
        description="The kind of problem.",
    )
    message: str = Field(
        description="Human readable description of the problem.",
    )
    context: dict[str, Any] = Field(
        default_factory=dict,
        description="Values that help locate the problem when logging.",
    )

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class EncounterException(Exception):
    """Base class for errors raised by the encounter tracker."""


class DuplicateIdentifierError(EncounterException, ValueError):
    """Raised when an identifier is handed out twice within one run."""

    def __init__(self, identifier: Any):
        super().__init__(f"Identifier {identifier} is already in use")
        self.identifier = identifier


class DiagnosticCollector:
    """Gathers the diagnostics produced by a single transition.

    Each diagnostic is logged as a warning when it is reported, so hosts that
    ignore the returned diagnostics still see them in the log.
    """

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []

    def report(
        self,
        kind: DiagnosticKind,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> Diagnostic:
        """Record a diagnostic and log it."""
        diagnostic = Diagnostic(kind=kind, message=message, context=context or {})
        self.diagnostics.append(diagnostic)
        log_warning(message, {"kind": kind.value, **diagnostic.context})
        return diagnostic

    def has(self, kind: DiagnosticKind) -> bool:
        return any(d.kind == kind for d in self.diagnostics)

    def __bool__(self) -> bool:
        return bool(self.diagnostics)
