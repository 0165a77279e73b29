"""
Combat system module for the encounter tracker.

This module handles initiative rolling, the turn cursor state machine, the
running encounter state and the controller that applies in-combat actions.
"""

from .actions import (
    AddCombatant,
    AdvanceTurn,
    EncounterAction,
    RemoveCombatant,
    RerollInitiative,
    RollInitiative,
    SetInitiative,
    StartCombat,
)
from .controller import ActionResult, EncounterController
from .initiative import (
    InitiativeRoller,
    InitiativeSettings,
    initiative_sort_key,
    sort_by_initiative,
)
from .running_encounter import EncounterEvent, RunningEncounter
from .turn_cursor import Ended, NotStarted, TurnCursor, TurnState

__all__ = [
    # Import from actions.py
    "AddCombatant",
    "AdvanceTurn",
    "EncounterAction",
    "RemoveCombatant",
    "RerollInitiative",
    "RollInitiative",
    "SetInitiative",
    "StartCombat",
    # Import from controller.py
    "ActionResult",
    "EncounterController",
    # Import from initiative.py
    "InitiativeRoller",
    "InitiativeSettings",
    "initiative_sort_key",
    "sort_by_initiative",
    # Import from running_encounter.py
    "EncounterEvent",
    "RunningEncounter",
    # Import from turn_cursor.py
    "Ended",
    "NotStarted",
    "TurnCursor",
    "TurnState",
]
