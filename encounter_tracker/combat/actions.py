"""
Actions module for the encounter tracker.

Every change to a running encounter is described by one of these action
values and applied by the controller. Actions are plain data so a session can
be logged and replayed.
"""

from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from encounter_tracker.core.constants import InsertPosition
from encounter_tracker.encounter import Combatant

from .initiative import InitiativeSettings


class StartCombat(BaseModel):
    """Starts turns at the top of the current order without rolling."""

    action_type: Literal["StartCombat"] = "StartCombat"


class RollInitiative(BaseModel):
    """Rolls initiative for the encounter and starts turns if needed."""

    action_type: Literal["RollInitiative"] = "RollInitiative"

    settings: InitiativeSettings = Field(
        default_factory=InitiativeSettings.default,
        description="Options for the roll.",
    )


class AdvanceTurn(BaseModel):
    """Ends the active turn and moves to the next combatant."""

    action_type: Literal["AdvanceTurn"] = "AdvanceTurn"


class RemoveCombatant(BaseModel):
    """Takes a combatant out of the encounter."""

    action_type: Literal["RemoveCombatant"] = "RemoveCombatant"

    combatant_id: UUID = Field(
        description="The combatant to remove.",
    )


class AddCombatant(BaseModel):
    """Brings a new combatant into the encounter."""

    action_type: Literal["AddCombatant"] = "AddCombatant"

    combatant: Combatant = Field(
        description="The combatant to add. Its id must be fresh.",
    )
    position: InsertPosition | int = Field(
        default=InsertPosition.END,
        description="Where to insert: START, END, AFTER_ACTIVE or an index.",
    )


class RerollInitiative(BaseModel):
    """Rolls initiative again for some combatants and re-sorts."""

    action_type: Literal["RerollInitiative"] = "RerollInitiative"

    combatant_ids: list[UUID] = Field(
        description="The combatants to roll for.",
    )
    settings: InitiativeSettings = Field(
        default_factory=InitiativeSettings.default,
        description="Options for the roll.",
    )


class SetInitiative(BaseModel):
    """Enters an initiative rolled at the table and re-sorts."""

    action_type: Literal["SetInitiative"] = "SetInitiative"

    combatant_id: UUID = Field(
        description="The combatant whose initiative is entered.",
    )
    value: int = Field(
        description="The initiative total.",
    )


EncounterAction = Annotated[
    StartCombat
    | RollInitiative
    | AdvanceTurn
    | RemoveCombatant
    | AddCombatant
    | RerollInitiative
    | SetInitiative,
    Field(discriminator="action_type"),
]
