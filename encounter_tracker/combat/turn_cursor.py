"""
Turn cursor module for the encounter tracker.

The cursor is a small state machine with three states:

- NotStarted: combat has not begun.
- TurnCursor: an active turn, identified by round and combatant id.
- Ended: the combatant list ran empty.

The active combatant is referenced by id, never by position, so reordering
the encounter never moves the turn to somebody else. Every transition is a
pure function of the previous state and the encounter order.
"""

from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from encounter_tracker.core.constants import FIRST_ROUND
from encounter_tracker.encounter import Encounter


class NotStarted(BaseModel):
    """Combat has not started yet."""

    phase: Literal["NotStarted"] = "NotStarted"


class TurnCursor(BaseModel):
    """The active round and the combatant whose turn it is."""

    phase: Literal["Active"] = "Active"

    round: int = Field(
        default=FIRST_ROUND,
        ge=FIRST_ROUND,
        description="The current round, starting at 1.",
    )
    combatant_id: UUID = Field(
        description="Identifier of the combatant whose turn it is.",
    )

    def __str__(self) -> str:
        return f"Round {self.round}, {self.combatant_id}"


class Ended(BaseModel):
    """No combatants are left, so there is no valid turn."""

    phase: Literal["Ended"] = "Ended"

    round: int | None = Field(
        default=None,
        description="The last round played, None if no turn was ever taken.",
    )


TurnState = Annotated[NotStarted | TurnCursor | Ended, Field(discriminator="phase")]


def last_round(turn: NotStarted | TurnCursor | Ended) -> int | None:
    """Returns the round the state is in or ended in, if any."""
    if isinstance(turn, NotStarted):
        return None
    return turn.round


def start(encounter: Encounter, round_number: int | None = None) -> TurnCursor | Ended:
    """
    Starts turns at the first combatant in the current order.

    Args:
        encounter (Encounter): The encounter, already in initiative order.
        round_number (int | None): Round to resume in. Defaults to the first round.

    Returns:
        TurnCursor | Ended: The first turn, or Ended for an empty encounter.

    """
    first = encounter.first()
    if first is None:
        return Ended(round=round_number)
    return TurnCursor(round=round_number or FIRST_ROUND, combatant_id=first.id)


def advance(
    turn: NotStarted | TurnCursor | Ended, encounter: Encounter
) -> NotStarted | TurnCursor | Ended:
    """
    Moves the turn to the next combatant, wrapping into a new round.

    A cursor that has not started is started. An ended cursor stays ended.
    """
    if isinstance(turn, Ended):
        return turn
    if isinstance(turn, NotStarted):
        return start(encounter)
    if encounter.is_empty():
        return Ended(round=turn.round)

    index = encounter.index_of(turn.combatant_id)
    if index is None:
        # The active combatant vanished without going through removal.
        return TurnCursor(round=turn.round, combatant_id=encounter.at(0).id)
    if index < encounter.size - 1:
        return TurnCursor(round=turn.round, combatant_id=encounter.at(index + 1).id)
    return TurnCursor(round=turn.round + 1, combatant_id=encounter.at(0).id)


def after_removal(
    turn: NotStarted | TurnCursor | Ended,
    encounter: Encounter,
    removed_id: UUID,
    removed_index: int,
    size_before: int,
) -> NotStarted | TurnCursor | Ended:
    """
    Repairs the cursor once a combatant has been taken out of the encounter.

    Must be called after the removal, with the removed combatant's position
    in the order before the removal.

    Args:
        turn: The cursor before the removal.
        encounter (Encounter): The encounter after the removal.
        removed_id (UUID): The removed combatant's id.
        removed_index (int): Its position before the removal.
        size_before (int): Number of combatants before the removal.

    Returns:
        The repaired cursor.

    """
    if not isinstance(turn, TurnCursor):
        return turn
    if encounter.is_empty():
        return Ended(round=turn.round)
    if turn.combatant_id != removed_id:
        return turn
    if removed_index < size_before - 1:
        # The combatant that followed has shifted into the removed position.
        return TurnCursor(round=turn.round, combatant_id=encounter.at(removed_index).id)
    return TurnCursor(round=turn.round + 1, combatant_id=encounter.at(0).id)


def after_insertion(
    turn: NotStarted | TurnCursor | Ended, encounter: Encounter
) -> NotStarted | TurnCursor | Ended:
    """
    Updates the cursor once a combatant has been added.

    Only an ended cursor changes: the encounter is no longer empty, so turns
    start again, in the round combat ended in.
    """
    if isinstance(turn, Ended) and not encounter.is_empty():
        return start(encounter, turn.round)
    return turn


def after_reorder(
    turn: NotStarted | TurnCursor | Ended, encounter: Encounter
) -> NotStarted | TurnCursor | Ended:
    """
    Checks the cursor after the encounter has been re-sorted.

    The active combatant keeps the turn wherever it moved to.
    """
    if isinstance(turn, TurnCursor) and not encounter.contains(turn.combatant_id):
        return start(encounter, turn.round)
    return turn
