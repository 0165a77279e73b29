"""
Encounter module for the encounter tracker.

This module holds the combatants, the ordered identity-keyed encounter
collection and the discriminator assignment for same-definition combatants.
"""

from .combatant import Combatant, CombatantDefinition
from .discriminators import (
    assign_discriminator,
    freeze_discriminators,
    highest_discriminators,
    next_discriminator,
)
from .encounter import Encounter

__all__ = [
    # Import from combatant.py
    "Combatant",
    "CombatantDefinition",
    # Import from discriminators.py
    "assign_discriminator",
    "freeze_discriminators",
    "highest_discriminators",
    "next_discriminator",
    # Import from encounter.py
    "Encounter",
]
