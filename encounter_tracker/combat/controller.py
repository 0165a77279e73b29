"""
Controller module for the encounter tracker.

Applies actions to a running encounter. Each action is a pure transition: the
caller's state is never changed, and the returned state either reflects the
whole action or is the unchanged input when the action was a no-op.
"""

from uuid import UUID

from pydantic import BaseModel, Field

from encounter_tracker.core.capabilities import IdGenerator, RandomSource
from encounter_tracker.core.constants import EventKind, InsertPosition
from encounter_tracker.core.error_handling import (
    Diagnostic,
    DiagnosticCollector,
    DiagnosticKind,
    DuplicateIdentifierError,
)
from encounter_tracker.core.logging import log_debug, log_info
from encounter_tracker.encounter import (
    Combatant,
    CombatantDefinition,
    Encounter,
    assign_discriminator,
    freeze_discriminators,
)

from . import turn_cursor
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
from .initiative import InitiativeRoller, sort_by_initiative
from .running_encounter import RunningEncounter
from .turn_cursor import Ended, NotStarted, TurnCursor


class ActionResult(BaseModel):
    """The outcome of applying one action."""

    state: RunningEncounter = Field(
        description="The state after the action.",
    )
    changed: bool = Field(
        description="False when the action was a no-op.",
    )
    diagnostics: list[Diagnostic] = Field(
        default_factory=list,
        description="Recoverable problems met while applying the action.",
    )


class EncounterController:
    """Runs encounters: starts runs and applies in-combat actions.

    Randomness and identifiers come from the capabilities given at
    construction, so the same action sequence against the same starting state
    always produces the same result.
    """

    def __init__(self, rng: RandomSource, id_generator: IdGenerator) -> None:
        """Initialize the controller with its capabilities.

        Args:
            rng (RandomSource): Source of initiative rolls.
            id_generator (IdGenerator): Source of run and combatant ids.

        """
        self.roller = InitiativeRoller(rng)
        self.id_generator = id_generator

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def create_combatant(self, definition: CombatantDefinition) -> Combatant:
        """Creates a combatant with a fresh id."""
        return Combatant(id=self.id_generator.next_id(), definition=definition)

    def start(self, encounter: Encounter) -> RunningEncounter:
        """
        Starts a run of the encounter.

        The encounter is cloned into both snapshots with stable discriminators
        turned on; turns do not start until initiative is rolled or combat is
        started explicitly.

        Args:
            encounter (Encounter): The encounter as built. Not modified.

        Returns:
            RunningEncounter: The new run.

        """
        current = encounter.model_copy(deep=True)
        issued: dict[str, int] = {}
        freeze_discriminators(current, issued)
        run = RunningEncounter(
            id=self.id_generator.next_id(),
            base=current.model_copy(deep=True),
            current=current,
            issued_ids=set(current.ids()),
            issued_discriminators=issued,
        )
        log_info(
            f"Started run of '{encounter.name}' with {current.size} combatants",
            {"run_id": run.id},
        )
        return run

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def apply(self, state: RunningEncounter, action: EncounterAction) -> RunningEncounter:
        """Applies an action and returns the resulting state."""
        return self.dispatch(state, action).state

    def dispatch(self, state: RunningEncounter, action: EncounterAction) -> ActionResult:
        """
        Applies an action, reporting any recoverable problems.

        Args:
            state (RunningEncounter): The state to start from. Not modified.
            action (EncounterAction): The action to apply.

        Returns:
            ActionResult: The new state and the diagnostics.

        Raises:
            DuplicateIdentifierError: If an added combatant reuses an id.

        """
        collector = DiagnosticCollector()
        new_state = state.model_copy(deep=True)

        if isinstance(action, StartCombat):
            changed = self._start_combat(new_state, collector)
        elif isinstance(action, RollInitiative):
            changed = self._roll_initiative(new_state, action, collector)
        elif isinstance(action, AdvanceTurn):
            changed = self._advance_turn(new_state)
        elif isinstance(action, RemoveCombatant):
            changed = self._remove_combatant(new_state, action, collector)
        elif isinstance(action, AddCombatant):
            changed = self._add_combatant(new_state, action)
        elif isinstance(action, RerollInitiative):
            changed = self._reroll_initiative(new_state, action, collector)
        elif isinstance(action, SetInitiative):
            changed = self._set_initiative(new_state, action, collector)
        else:
            raise TypeError(f"Unknown action: {action!r}")

        if not changed:
            log_debug(f"{action.action_type} left the encounter unchanged")
            return ActionResult(
                state=state, changed=False, diagnostics=collector.diagnostics
            )

        violations = new_state.invariant_violations()
        assert not violations, f"{action.action_type} broke the encounter: {violations}"
        before, after = turn_cursor.last_round(state.turn), turn_cursor.last_round(new_state.turn)
        assert before is None or after is None or after >= before, "round went backwards"

        log_debug(f"Applied {action.action_type}", {"turn": new_state.turn})
        return ActionResult(
            state=new_state, changed=True, diagnostics=collector.diagnostics
        )

    def _start_combat(
        self, state: RunningEncounter, collector: DiagnosticCollector
    ) -> bool:
        if state.is_started():
            return False
        self._begin_turns(state, collector)
        return True

    def _begin_turns(
        self, state: RunningEncounter, collector: DiagnosticCollector
    ) -> None:
        previous = state.turn
        state.turn = turn_cursor.start(state.current)
        if isinstance(state.turn, Ended):
            collector.report(
                DiagnosticKind.EMPTY_ENCOUNTER_START,
                "Cannot start combat without combatants.",
                {"run_id": state.id},
            )
        self._record_turn_change(state, previous)

    def _roll_initiative(
        self,
        state: RunningEncounter,
        action: RollInitiative,
        collector: DiagnosticCollector,
    ) -> bool:
        totals = self.roller.roll(state.current, action.settings, collector=collector)
        if not totals and state.is_started():
            return False
        if totals:
            state.record(
                EventKind.INITIATIVE_ROLLED,
                f"Rolled initiative for {len(totals)} combatant(s).",
            )
        if isinstance(state.turn, NotStarted):
            self._begin_turns(state, collector)
        else:
            state.turn = turn_cursor.after_reorder(state.turn, state.current)
        return True

    def _advance_turn(self, state: RunningEncounter) -> bool:
        if isinstance(state.turn, Ended):
            return False
        previous = state.turn
        state.turn = turn_cursor.advance(state.turn, state.current)
        self._record_turn_change(state, previous)
        return state.turn != previous

    def _remove_combatant(
        self,
        state: RunningEncounter,
        action: RemoveCombatant,
        collector: DiagnosticCollector,
    ) -> bool:
        size_before = state.current.size
        removed = state.current.remove(action.combatant_id)
        if removed is None:
            self._report_missing(state, action.combatant_id, collector)
            return False

        index, combatant = removed
        state.record(
            EventKind.COMBATANT_REMOVED,
            f"{combatant.label} left the encounter.",
            combatant.id,
        )
        previous = state.turn
        state.turn = turn_cursor.after_removal(
            state.turn, state.current, combatant.id, index, size_before
        )
        self._record_turn_change(state, previous)
        return True

    def _add_combatant(self, state: RunningEncounter, action: AddCombatant) -> bool:
        combatant = action.combatant.model_copy(deep=True)
        if combatant.id in state.issued_ids:
            raise DuplicateIdentifierError(combatant.id)

        combatant = assign_discriminator(
            state.current, combatant, state.issued_discriminators
        )
        state.current.insert(combatant, self._resolve_position(state, action.position))
        state.issued_ids.add(combatant.id)
        state.record(
            EventKind.COMBATANT_ADDED,
            f"{combatant.label} joined the encounter.",
            combatant.id,
        )
        previous = state.turn
        state.turn = turn_cursor.after_insertion(state.turn, state.current)
        self._record_turn_change(state, previous)
        return True

    @staticmethod
    def _resolve_position(
        state: RunningEncounter, position: InsertPosition | int
    ) -> int | None:
        if position == InsertPosition.START:
            return 0
        if position == InsertPosition.END:
            return None
        if position == InsertPosition.AFTER_ACTIVE:
            cursor = state.turn_cursor
            if cursor is None:
                return None
            index = state.current.index_of(cursor.combatant_id)
            return None if index is None else index + 1
        return max(int(position), 0)

    def _reroll_initiative(
        self,
        state: RunningEncounter,
        action: RerollInitiative,
        collector: DiagnosticCollector,
    ) -> bool:
        found: list[UUID] = []
        for combatant_id in action.combatant_ids:
            if state.current.contains(combatant_id):
                found.append(combatant_id)
            else:
                self._report_missing(state, combatant_id, collector)
        if not found:
            return False

        totals = self.roller.roll(
            state.current, action.settings, found, force=True, collector=collector
        )
        for combatant_id, total in totals.items():
            combatant = state.current.get(combatant_id)
            assert combatant is not None
            state.record(
                EventKind.INITIATIVE_ROLLED,
                f"{combatant.label} rerolled initiative: {total}.",
                combatant_id,
            )
        state.turn = turn_cursor.after_reorder(state.turn, state.current)
        return True

    def _set_initiative(
        self,
        state: RunningEncounter,
        action: SetInitiative,
        collector: DiagnosticCollector,
    ) -> bool:
        combatant = state.current.get(action.combatant_id)
        if combatant is None:
            self._report_missing(state, action.combatant_id, collector)
            return False

        combatant.initiative = action.value
        sort_by_initiative(state.current)
        state.record(
            EventKind.INITIATIVE_SET,
            f"{combatant.label} has initiative {action.value}.",
            combatant.id,
        )
        state.turn = turn_cursor.after_reorder(state.turn, state.current)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _report_missing(
        state: RunningEncounter, combatant_id: UUID, collector: DiagnosticCollector
    ) -> None:
        collector.report(
            DiagnosticKind.COMBATANT_NOT_FOUND,
            f"Combatant {combatant_id} is not in the encounter.",
            {"combatant_id": combatant_id, "run_id": state.id},
        )

    @staticmethod
    def _record_turn_change(
        state: RunningEncounter, previous: NotStarted | TurnCursor | Ended
    ) -> None:
        turn = state.turn
        if turn == previous:
            return
        if isinstance(turn, Ended):
            state.record(EventKind.COMBAT_ENDED, "No combatants are left.")
            return
        if not isinstance(turn, TurnCursor):
            return
        if isinstance(previous, NotStarted):
            state.record(EventKind.COMBAT_STARTED, "Combat started.")
        if turn_cursor.last_round(previous) != turn.round:
            state.record(EventKind.ROUND_STARTED, f"Round {turn.round} begins.")
        active = state.current.get(turn.combatant_id)
        label = active.label if active is not None else str(turn.combatant_id)
        state.record(EventKind.TURN_STARTED, f"{label}'s turn.", turn.combatant_id)
