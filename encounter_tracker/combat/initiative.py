"""
Initiative module for the encounter tracker.

Rolls initiative for combatants and puts the encounter in initiative order.
Each combatant rolls one die (two, keeping the higher, with advantage) and adds
its modifier. Ties go to the higher modifier, then to whoever came first
before the roll.
"""

from collections.abc import Iterable
from uuid import UUID

from pydantic import BaseModel, Field

from encounter_tracker.core.capabilities import RandomSource
from encounter_tracker.core.constants import (
    DEFAULT_DIE_SIDES,
    MAX_DIE_SIDES,
    MIN_DIE_SIDES,
    DefinitionKind,
)
from encounter_tracker.core.error_handling import DiagnosticCollector, DiagnosticKind
from encounter_tracker.core.logging import log_debug
from encounter_tracker.encounter import Combatant, Encounter


class InitiativeSettings(BaseModel):
    """Options controlling an initiative roll."""

    group: bool = Field(
        default=True,
        description="Combatants sharing a definition share one die roll.",
    )
    advantage: bool = Field(
        default=False,
        description="Roll every combatant with advantage.",
    )
    overwrite: bool = Field(
        default=True,
        description="Roll again for combatants that already have an initiative.",
    )
    roll_for_player_characters: bool = Field(
        default=True,
        description="Roll for player characters too, instead of leaving them to their players.",
    )
    die_sides: int = Field(
        default=DEFAULT_DIE_SIDES,
        description=(
            f"Sides of the initiative die. Clamped to "
            f"[{MIN_DIE_SIDES}, {MAX_DIE_SIDES}] when rolling."
        ),
    )

    @classmethod
    def default(cls) -> "InitiativeSettings":
        return cls()


def initiative_sort_key(combatant: Combatant) -> tuple[int, int, int]:
    """
    Sort key putting combatants in initiative order.

    Higher totals come first, then higher modifiers. Combatants without an
    initiative go after everyone who has one. Equal keys keep their previous
    relative order because the sort is stable.
    """
    if combatant.initiative is None:
        return (1, 0, 0)
    return (0, -combatant.initiative, -combatant.definition.initiative_modifier)


def sort_by_initiative(encounter: Encounter) -> None:
    """Reorders the encounter in place to match initiative order."""
    encounter.reorder(initiative_sort_key)


class InitiativeRoller:
    """Rolls initiative using an injected random source."""

    def __init__(self, rng: RandomSource) -> None:
        self.rng = rng

    def effective_die_sides(
        self,
        settings: InitiativeSettings,
        collector: DiagnosticCollector | None = None,
    ) -> int:
        """Returns the die size to use, clamping nonsensical settings."""
        sides = min(max(settings.die_sides, MIN_DIE_SIDES), MAX_DIE_SIDES)
        if sides != settings.die_sides and collector is not None:
            collector.report(
                DiagnosticKind.INVALID_SETTINGS,
                f"Initiative die with {settings.die_sides} sides clamped to {sides}.",
                {"die_sides": settings.die_sides, "clamped_to": sides},
            )
        return sides

    def roll_die(self, sides: int, advantage: bool) -> int:
        """
        Rolls the initiative die.

        Args:
            sides (int): Number of sides of the die.
            advantage (bool): Roll twice and keep the higher result.

        Returns:
            int: The kept die result, within [1, sides].

        """
        value = self._clamped(self.rng.next(1, sides), sides)
        if advantage:
            value = max(value, self._clamped(self.rng.next(1, sides), sides))
        return value

    @staticmethod
    def _clamped(value: int, sides: int) -> int:
        return min(max(value, 1), sides)

    def roll(
        self,
        encounter: Encounter,
        settings: InitiativeSettings,
        combatant_ids: Iterable[UUID] | None = None,
        force: bool = False,
        collector: DiagnosticCollector | None = None,
    ) -> dict[UUID, int]:
        """
        Rolls initiative and puts the encounter in initiative order.

        Dice are rolled in the encounter's current order, so a fixed random
        sequence and a fixed input order always give the same result.
        Discriminators are left untouched.

        Args:
            encounter (Encounter): The encounter to roll for, modified in place.
            settings (InitiativeSettings): Options for the roll.
            combatant_ids (Iterable[UUID] | None):
                Restrict the roll to these combatants. All when None.
            force (bool):
                Roll the selected combatants regardless of the `overwrite` and
                `roll_for_player_characters` settings.
            collector (DiagnosticCollector | None): Receives diagnostics.

        Returns:
            dict[UUID, int]: The new initiative total per rolled combatant.

        """
        sides = self.effective_die_sides(settings, collector)
        selected = None if combatant_ids is None else set(combatant_ids)

        group_rolls: dict[str, int] = {}
        totals: dict[UUID, int] = {}
        for combatant in encounter.combatants:
            if selected is not None and combatant.id not in selected:
                continue
            if not force and not self._should_roll(combatant, settings):
                continue

            definition = combatant.definition
            advantage = settings.advantage or definition.has_advantage
            if settings.group:
                if definition.key not in group_rolls:
                    group_rolls[definition.key] = self.roll_die(sides, advantage)
                die = group_rolls[definition.key]
            else:
                die = self.roll_die(sides, advantage)

            combatant.initiative = die + definition.initiative_modifier
            totals[combatant.id] = combatant.initiative
            log_debug(
                f"{combatant.label} rolled {die} for initiative {combatant.initiative}",
                {"combatant_id": combatant.id, "advantage": advantage},
            )

        sort_by_initiative(encounter)
        return totals

    @staticmethod
    def _should_roll(combatant: Combatant, settings: InitiativeSettings) -> bool:
        if not settings.overwrite and combatant.initiative is not None:
            return False
        if (
            not settings.roll_for_player_characters
            and combatant.definition.kind == DefinitionKind.PLAYER_CHARACTER
        ):
            return False
        return True
