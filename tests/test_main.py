"""
Tests for the demonstration entry point.
"""

from encounter_tracker.combat import EncounterController
from encounter_tracker.core import (
    EventKind,
    EverIncreasingRandomSource,
    SequentialIdGenerator,
)
from encounter_tracker.main import build_demo_encounter, main, run_demo


def test_demo_encounter_has_three_goblins():
    controller = EncounterController(EverIncreasingRandomSource(), SequentialIdGenerator())
    encounter = build_demo_encounter(controller)
    assert len(encounter.with_definition("goblin")) == 3
    assert encounter.size == 6


def test_demo_plays_the_requested_rounds():
    run = run_demo(seed=5, rounds=2)

    assert run.invariant_violations() == []
    assert run.turn_cursor is not None
    assert run.turn_cursor.round == 3
    kinds = {event.kind for event in run.log}
    assert EventKind.COMBATANT_REMOVED in kinds
    assert EventKind.COMBATANT_ADDED in kinds


def test_demo_is_reproducible():
    assert [c.definition.name for c in run_demo(8, 1).current.combatants] == [
        c.definition.name for c in run_demo(8, 1).current.combatants
    ]


def test_main_returns_zero():
    assert main(["--seed", "3", "--rounds", "1"]) == 0
