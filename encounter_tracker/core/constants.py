"""
Constants and enumerations for the encounter tracker.

Defines the die limits used by initiative rolling, the kinds of combatant
definitions, insertion points for reinforcements and the kinds of entries
written to a running encounter's log.
"""

from enum import Enum

# Default die used for initiative rolls.
DEFAULT_DIE_SIDES = 20

# Valid range for a configured initiative die. Values outside are clamped.
MIN_DIE_SIDES = 2
MAX_DIE_SIDES = 100

# First round of every combat.
FIRST_ROUND = 1


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().replace("_", " ").capitalize()


class DefinitionKind(NiceEnum):
    """Defines where a combatant's stats come from."""

    AD_HOC = "AD_HOC"
    COMPENDIUM = "COMPENDIUM"
    PLAYER_CHARACTER = "PLAYER_CHARACTER"

    @property
    def color(self) -> str:
        """Returns the color string associated with this definition kind."""
        return {
            DefinitionKind.AD_HOC: "bold yellow",
            DefinitionKind.COMPENDIUM: "bold red",
            DefinitionKind.PLAYER_CHARACTER: "bold blue",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies the definition kind color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class InsertPosition(NiceEnum):
    """Where a combatant added mid-combat is placed in the order."""

    START = "START"
    END = "END"
    AFTER_ACTIVE = "AFTER_ACTIVE"


class EventKind(NiceEnum):
    """Kinds of entries recorded in a running encounter's log."""

    COMBAT_STARTED = "COMBAT_STARTED"
    COMBAT_ENDED = "COMBAT_ENDED"
    ROUND_STARTED = "ROUND_STARTED"
    TURN_STARTED = "TURN_STARTED"
    INITIATIVE_ROLLED = "INITIATIVE_ROLLED"
    INITIATIVE_SET = "INITIATIVE_SET"
    COMBATANT_ADDED = "COMBATANT_ADDED"
    COMBATANT_REMOVED = "COMBATANT_REMOVED"
