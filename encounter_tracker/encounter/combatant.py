"""
Combatant module for the encounter tracker.

Defines the stat source a combatant is built from and the combatant itself:
an immutable identity, an optional rolled initiative and an optional stable
discriminator.
"""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from encounter_tracker.core.constants import DefinitionKind
from encounter_tracker.core.utils import get_stat_modifier, modifier_to_string


class CombatantDefinition(BaseModel):
    """The part of a combatant's stat source that initiative depends on.

    Combatants created from the same definition share its `key`; that key is
    what groups them for shared rolls and for discriminators.
    """

    key: str = Field(
        description="Grouping key. Ad hoc definitions use a unique key.",
    )
    name: str = Field(
        description="Display name of the definition, e.g. 'Goblin'.",
    )
    initiative_modifier: int = Field(
        default=0,
        description="Modifier added to the initiative die roll. May be negative.",
    )
    has_advantage: bool = Field(
        default=False,
        description="Whether initiative is rolled with advantage.",
    )
    kind: DefinitionKind = Field(
        default=DefinitionKind.AD_HOC,
        description="Where the stats come from.",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if not self.key or not self.key.strip():
            raise ValueError("key must be a non-empty string")
        self.key = self.key.strip()

    @classmethod
    def from_dexterity(
        cls,
        key: str,
        name: str,
        dexterity: int,
        kind: DefinitionKind = DefinitionKind.COMPENDIUM,
        has_advantage: bool = False,
    ) -> "CombatantDefinition":
        """Builds a definition whose initiative modifier is the DEX modifier."""
        return cls(
            key=key,
            name=name,
            initiative_modifier=get_stat_modifier(dexterity),
            has_advantage=has_advantage,
            kind=kind,
        )

    def __str__(self) -> str:
        return f"{self.name} ({modifier_to_string(self.initiative_modifier)})"


class Combatant(BaseModel):
    """A participant in an encounter."""

    id: UUID = Field(
        description="Unique identifier, immutable for the combatant's lifetime.",
        frozen=True,
    )
    definition: CombatantDefinition = Field(
        description="The stat source of the combatant.",
    )
    initiative: int | None = Field(
        default=None,
        description="Rolled or entered initiative. None until rolled.",
    )
    discriminator: int | None = Field(
        default=None,
        description="Ordinal among combatants sharing the same definition.",
    )

    @property
    def definition_key(self) -> str:
        return self.definition.key

    @property
    def label(self) -> str:
        """Name of the combatant, with its discriminator when it has one."""
        if self.discriminator is None:
            return self.definition.name
        return f"{self.definition.name} {self.discriminator}"

    @property
    def colored_label(self) -> str:
        return self.definition.kind.colorize(self.label)

    def __str__(self) -> str:
        initiative = "-" if self.initiative is None else str(self.initiative)
        return f"{self.label} [{initiative}]"
