"""
Encounter tracker package.

This package contains the turn-order core of a tabletop combat encounter
manager: combatants and encounters, initiative rolling, discriminators for
same-definition combatants, the turn cursor and the controller that applies
in-combat actions to a running encounter.
"""

from .combat import (
    ActionResult,
    EncounterController,
    InitiativeSettings,
    RunningEncounter,
    TurnCursor,
)
from .encounter import Combatant, CombatantDefinition, Encounter

__all__ = [
    "ActionResult",
    "Combatant",
    "CombatantDefinition",
    "Encounter",
    "EncounterController",
    "InitiativeSettings",
    "RunningEncounter",
    "TurnCursor",
]
