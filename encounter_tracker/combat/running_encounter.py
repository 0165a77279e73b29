"""
Running encounter module for the encounter tracker.

A running encounter is the live instance of an encounter being played out:
the snapshot captured when the run started, the current snapshot that every
in-combat action changes, the turn state and a log of what happened.
"""

from uuid import UUID

from pydantic import BaseModel, Field

from encounter_tracker.core.constants import EventKind
from encounter_tracker.encounter import Combatant, Encounter

from .turn_cursor import Ended, NotStarted, TurnCursor, TurnState


class EncounterEvent(BaseModel):
    """An entry in a running encounter's log."""

    kind: EventKind = Field(
        description="What happened.",
    )
    round: int | None = Field(
        default=None,
        description="The round it happened in, None before combat started.",
    )
    combatant_id: UUID | None = Field(
        default=None,
        description="The combatant involved, if any.",
    )
    message: str = Field(
        default="",
        description="Human readable description.",
    )

    def __str__(self) -> str:
        prefix = "" if self.round is None else f"[R{self.round}] "
        return f"{prefix}{self.kind.display_name}: {self.message}"


class RunningEncounter(BaseModel):
    """The state of one run of an encounter."""

    id: UUID = Field(
        description="Unique identifier of this run.",
    )
    base: Encounter = Field(
        description="Snapshot captured when the run started.",
    )
    current: Encounter = Field(
        description="Live snapshot, changed by every in-combat action.",
    )
    turn: TurnState = Field(
        default_factory=NotStarted,
        description="Turn state of the run.",
    )
    log: list[EncounterEvent] = Field(
        default_factory=list,
        description="What happened during the run, oldest first.",
    )
    issued_ids: set[UUID] = Field(
        default_factory=set,
        description="Every combatant id that took part in the run.",
    )
    issued_discriminators: dict[str, int] = Field(
        default_factory=dict,
        description="Highest discriminator handed out per definition key.",
    )

    @property
    def turn_cursor(self) -> TurnCursor | None:
        """The active turn, or None when combat has not started or has ended."""
        return self.turn if isinstance(self.turn, TurnCursor) else None

    @property
    def active_combatant(self) -> Combatant | None:
        cursor = self.turn_cursor
        return None if cursor is None else self.current.get(cursor.combatant_id)

    @property
    def round(self) -> int | None:
        cursor = self.turn_cursor
        return None if cursor is None else cursor.round

    def is_started(self) -> bool:
        return not isinstance(self.turn, NotStarted)

    def is_ended(self) -> bool:
        return isinstance(self.turn, Ended)

    def invariant_violations(self) -> list[str]:
        """Lists every way the state is inconsistent. Empty when it is sound."""
        violations: list[str] = []
        cursor = self.turn_cursor
        if cursor is not None:
            if self.current.is_empty():
                violations.append("active turn in an empty encounter")
            elif not self.current.contains(cursor.combatant_id):
                violations.append(f"active combatant {cursor.combatant_id} is missing")
        if isinstance(self.turn, Ended) and not self.current.is_empty():
            violations.append("combat ended with combatants left")
        unknown = set(self.current.ids()) - self.issued_ids
        if unknown:
            violations.append(f"combatants {sorted(map(str, unknown))} were never issued")
        return violations

    def record(
        self,
        kind: EventKind,
        message: str,
        combatant_id: UUID | None = None,
    ) -> None:
        """Appends an entry to the log, stamped with the current round."""
        round_number = self.turn.round if not isinstance(self.turn, NotStarted) else None
        self.log.append(
            EncounterEvent(
                kind=kind,
                round=round_number,
                combatant_id=combatant_id,
                message=message,
            )
        )
