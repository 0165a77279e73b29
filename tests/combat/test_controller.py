"""
Tests for the running encounter controller.
"""

import random
from uuid import UUID

import pytest

from encounter_tracker.combat import (
    AddCombatant,
    AdvanceTurn,
    EncounterController,
    RemoveCombatant,
    RerollInitiative,
    RollInitiative,
    SetInitiative,
    StartCombat,
)
from encounter_tracker.combat.turn_cursor import Ended, NotStarted, TurnCursor
from encounter_tracker.core import (
    DiagnosticKind,
    DuplicateIdentifierError,
    EventKind,
    InsertPosition,
    SeededRandomSource,
    SequentialIdGenerator,
)
from encounter_tracker.encounter import CombatantDefinition, Encounter


@pytest.fixture
def two_combatants(make_adhoc):
    """Two ad hoc combatants with +1 initiative, as built before a run."""
    return Encounter(
        name="",
        combatants=[make_adhoc("A", modifier=1), make_adhoc("B", modifier=1)],
    )


@pytest.fixture
def ambush(make_combatant, goblin, orc, make_adhoc):
    return Encounter(
        name="Ambush",
        combatants=[
            make_adhoc("Hero", modifier=5),
            make_combatant(goblin),
            make_combatant(goblin),
            make_combatant(orc),
            make_adhoc("Wizard", modifier=-1),
        ],
    )


@pytest.fixture
def rolled(controller, ambush):
    """The ambush with initiative rolled and turns started."""
    return controller.apply(controller.start(ambush), RollInitiative())


# ----------------------------------------------------------------------
# Reference scenario
# ----------------------------------------------------------------------


def test_remove_active_combatant_flow(controller, two_combatants):
    """Roll with increasing dice, then remove the combatant whose turn it is."""
    a, b = two_combatants.combatants

    run = controller.start(two_combatants)
    assert run.base == run.current
    assert run.base.ensure_stable_discriminators
    assert isinstance(run.turn, NotStarted)

    run = controller.apply(run, RollInitiative())
    assert run.current.get(a.id).initiative == 2
    assert run.current.get(b.id).initiative == 3
    assert run.current.ids() == [b.id, a.id]
    assert run.turn == TurnCursor(round=1, combatant_id=b.id)

    run = controller.apply(run, RemoveCombatant(combatant_id=b.id))
    assert run.current.ids() == [a.id]
    assert run.turn == TurnCursor(round=1, combatant_id=a.id)


# ----------------------------------------------------------------------
# Starting
# ----------------------------------------------------------------------


def test_start_clones_and_freezes_discriminators(controller, ambush):
    run = controller.start(ambush)

    assert run.id == UUID(int=1005)
    assert [c.label for c in run.current.combatants] == [
        "Hero 1",
        "Goblin 1",
        "Goblin 2",
        "Orc 1",
        "Wizard 1",
    ]
    assert run.issued_ids == set(ambush.ids())
    assert run.issued_discriminators["goblin"] == 2
    # The encounter as built is untouched.
    assert not ambush.ensure_stable_discriminators
    assert all(c.discriminator is None for c in ambush.combatants)


def test_base_is_not_affected_by_actions(rolled):
    assert all(c.initiative is None for c in rolled.base.combatants)
    assert all(c.initiative is not None for c in rolled.current.combatants)


def test_start_combat_without_rolling(controller, ambush):
    run = controller.apply(controller.start(ambush), StartCombat())
    assert run.turn == TurnCursor(round=1, combatant_id=ambush.at(0).id)


def test_start_combat_twice_is_a_noop(controller, rolled):
    result = controller.dispatch(rolled, StartCombat())
    assert not result.changed
    assert result.state is rolled


def test_starting_an_empty_encounter_ends(controller):
    run = controller.start(Encounter(name="Empty"))

    result = controller.dispatch(run, RollInitiative())

    assert isinstance(result.state.turn, Ended)
    assert result.state.turn_cursor is None
    assert [d.kind for d in result.diagnostics] == [DiagnosticKind.EMPTY_ENCOUNTER_START]


def test_rolling_after_start_keeps_the_active_combatant(controller, ambush):
    run = controller.apply(controller.start(ambush), StartCombat())
    active = run.turn.combatant_id

    run = controller.apply(run, RollInitiative())

    assert run.turn == TurnCursor(round=1, combatant_id=active)


def test_rolling_logs_the_start(rolled):
    kinds = [event.kind for event in rolled.log]
    assert kinds == [
        EventKind.INITIATIVE_ROLLED,
        EventKind.COMBAT_STARTED,
        EventKind.ROUND_STARTED,
        EventKind.TURN_STARTED,
    ]
    assert rolled.log[-1].combatant_id == rolled.turn.combatant_id


# ----------------------------------------------------------------------
# Advancing
# ----------------------------------------------------------------------


def test_advance_walks_the_order_and_wraps(controller, rolled):
    order = rolled.current.ids()
    run = rolled
    seen = []
    for _ in range(len(order)):
        seen.append(run.turn.combatant_id)
        run = controller.apply(run, AdvanceTurn())

    assert seen == order
    assert run.turn == TurnCursor(round=2, combatant_id=order[0])
    assert run.log[-2].kind == EventKind.ROUND_STARTED


def test_advance_before_start_starts(controller, ambush):
    run = controller.apply(controller.start(ambush), AdvanceTurn())
    assert run.turn == TurnCursor(round=1, combatant_id=ambush.at(0).id)


def test_advance_after_the_end_is_a_noop(controller):
    run = controller.apply(controller.start(Encounter()), StartCombat())
    result = controller.dispatch(run, AdvanceTurn())
    assert not result.changed
    assert result.state is run


def test_round_never_decreases(controller, rolled):
    run = rolled
    rounds = []
    for _ in range(23):
        run = controller.apply(run, AdvanceTurn())
        rounds.append(run.turn.round)
    assert rounds == sorted(rounds)
    assert rounds[-1] == 5


# ----------------------------------------------------------------------
# Removing
# ----------------------------------------------------------------------


def test_removing_an_inactive_combatant_is_turn_neutral(controller, rolled):
    run = controller.apply(rolled, AdvanceTurn())
    for combatant_id in run.current.ids():
        if combatant_id == run.turn.combatant_id:
            continue
        after = controller.apply(run, RemoveCombatant(combatant_id=combatant_id))
        assert after.turn == run.turn


def test_removing_the_active_combatant_advances(controller, rolled):
    order = rolled.current.ids()
    run = controller.apply(rolled, AdvanceTurn())
    assert run.turn.combatant_id == order[1]

    run = controller.apply(run, RemoveCombatant(combatant_id=order[1]))

    assert run.turn == TurnCursor(round=1, combatant_id=order[2])
    assert [e.kind for e in run.log[-2:]] == [
        EventKind.COMBATANT_REMOVED,
        EventKind.TURN_STARTED,
    ]


def test_removing_the_active_last_combatant_wraps(controller, rolled):
    order = rolled.current.ids()
    run = rolled
    for _ in range(len(order) - 1):
        run = controller.apply(run, AdvanceTurn())
    assert run.turn.combatant_id == order[-1]

    run = controller.apply(run, RemoveCombatant(combatant_id=order[-1]))

    assert run.turn == TurnCursor(round=2, combatant_id=order[0])


def test_removing_everyone_ends_combat(controller, rolled):
    run = rolled
    for combatant_id in rolled.current.ids():
        run = controller.apply(run, RemoveCombatant(combatant_id=combatant_id))

    assert run.current.is_empty()
    assert run.turn == Ended(round=1)
    assert run.turn_cursor is None
    assert run.log[-1].kind == EventKind.COMBAT_ENDED


def test_removing_an_unknown_combatant_is_a_noop(controller, rolled, mocker):
    mock_log = mocker.patch("encounter_tracker.core.error_handling.log_warning")

    result = controller.dispatch(rolled, RemoveCombatant(combatant_id=UUID(int=1)))

    assert not result.changed
    assert result.state is rolled
    assert result.diagnostics[0].kind == DiagnosticKind.COMBATANT_NOT_FOUND
    mock_log.assert_called_once()


def test_actions_never_modify_the_given_state(controller, rolled):
    snapshot = rolled.model_copy(deep=True)
    controller.apply(rolled, RemoveCombatant(combatant_id=rolled.turn.combatant_id))
    controller.apply(rolled, AdvanceTurn())
    controller.apply(rolled, RollInitiative())
    assert rolled == snapshot


# ----------------------------------------------------------------------
# Adding
# ----------------------------------------------------------------------


def test_add_at_the_end(controller, rolled, goblin):
    newcomer = controller.create_combatant(goblin)
    run = controller.apply(rolled, AddCombatant(combatant=newcomer))

    assert run.current.ids()[-1] == newcomer.id
    assert run.current.get(newcomer.id).label == "Goblin 3"
    assert run.turn == rolled.turn
    assert newcomer.id in run.issued_ids
    assert newcomer.discriminator is None


def test_add_after_the_active_combatant(controller, rolled, orc):
    run = controller.apply(rolled, AdvanceTurn())
    active_index = run.current.index_of(run.turn.combatant_id)
    newcomer = controller.create_combatant(orc)

    run = controller.apply(
        run, AddCombatant(combatant=newcomer, position=InsertPosition.AFTER_ACTIVE)
    )
    assert run.current.index_of(newcomer.id) == active_index + 1

    run = controller.apply(run, AdvanceTurn())
    assert run.turn.combatant_id == newcomer.id


@pytest.mark.parametrize(
    "position, expected",
    [(InsertPosition.START, 0), (2, 2), (-3, 0), (99, 5)],
)
def test_add_at_positions(controller, rolled, goblin, position, expected):
    newcomer = controller.create_combatant(goblin)
    run = controller.apply(rolled, AddCombatant(combatant=newcomer, position=position))
    assert run.current.index_of(newcomer.id) == expected
    assert run.turn == rolled.turn


def test_new_discriminators_skip_removed_ones(controller, rolled, goblin):
    goblins = rolled.current.with_definition("goblin")
    run = controller.apply(rolled, RemoveCombatant(combatant_id=goblins[1].id))

    newcomer = controller.create_combatant(goblin)
    run = controller.apply(run, AddCombatant(combatant=newcomer))

    assert run.current.get(newcomer.id).discriminator == 3
    assert run.current.get(goblins[0].id).discriminator == 1


def test_add_after_the_end_restarts_in_the_same_round(controller, rolled, orc):
    run = rolled
    for _ in range(rolled.current.size):
        run = controller.apply(run, AdvanceTurn())
    for combatant_id in run.current.ids():
        run = controller.apply(run, RemoveCombatant(combatant_id=combatant_id))
    assert run.turn == Ended(round=2)

    newcomer = controller.create_combatant(orc)
    run = controller.apply(run, AddCombatant(combatant=newcomer))

    assert run.turn == TurnCursor(round=2, combatant_id=newcomer.id)


def test_add_before_start_keeps_waiting(controller, ambush, orc):
    run = controller.start(ambush)
    run = controller.apply(run, AddCombatant(combatant=controller.create_combatant(orc)))
    assert isinstance(run.turn, NotStarted)


def test_add_with_a_used_id_is_a_contract_violation(controller, rolled):
    existing = rolled.current.at(0)
    with pytest.raises(DuplicateIdentifierError):
        controller.apply(rolled, AddCombatant(combatant=existing))


def test_removed_ids_are_never_reused(controller, rolled):
    removed = rolled.current.at(2)
    run = controller.apply(rolled, RemoveCombatant(combatant_id=removed.id))
    with pytest.raises(DuplicateIdentifierError):
        controller.apply(run, AddCombatant(combatant=removed))


# ----------------------------------------------------------------------
# Rerolling and manual initiative
# ----------------------------------------------------------------------


def test_reroll_keeps_the_active_combatant(controller, rolled):
    run = controller.apply(rolled, AdvanceTurn())
    active = run.turn.combatant_id

    run = controller.apply(run, RerollInitiative(combatant_ids=[active]))

    assert run.turn == TurnCursor(round=1, combatant_id=active)
    assert run.log[-1].kind == EventKind.INITIATIVE_ROLLED


def test_reroll_a_new_arrival(controller, rolled, goblin):
    newcomer = controller.create_combatant(goblin)
    run = controller.apply(rolled, AddCombatant(combatant=newcomer))
    assert run.current.get(newcomer.id).initiative is None

    run = controller.apply(run, RerollInitiative(combatant_ids=[newcomer.id]))

    assert run.current.get(newcomer.id).initiative is not None
    assert run.turn == rolled.turn
    initiatives = [c.initiative for c in run.current.combatants]
    assert initiatives == sorted(initiatives, reverse=True)


def test_reroll_unknown_ids(controller, rolled):
    known = rolled.current.at(0).id
    result = controller.dispatch(
        rolled, RerollInitiative(combatant_ids=[UUID(int=7), known])
    )
    assert result.changed
    assert [d.kind for d in result.diagnostics] == [DiagnosticKind.COMBATANT_NOT_FOUND]

    result = controller.dispatch(rolled, RerollInitiative(combatant_ids=[UUID(int=7)]))
    assert not result.changed
    assert result.state is rolled


def test_set_initiative_resorts(controller, rolled):
    last = rolled.current.ids()[-1]
    run = controller.apply(rolled, SetInitiative(combatant_id=last, value=99))

    assert run.current.ids()[0] == last
    assert run.turn == rolled.turn
    assert run.log[-1].kind == EventKind.INITIATIVE_SET


def test_set_initiative_unknown(controller, rolled):
    result = controller.dispatch(rolled, SetInitiative(combatant_id=UUID(int=3), value=4))
    assert not result.changed
    assert result.diagnostics[0].kind == DiagnosticKind.COMBATANT_NOT_FOUND


def test_invalid_settings_are_clamped(controller, ambush):
    result = controller.dispatch(
        controller.start(ambush), RollInitiative(settings={"die_sides": 1})
    )
    assert isinstance(result.state.turn, TurnCursor)
    assert [d.kind for d in result.diagnostics] == [DiagnosticKind.INVALID_SETTINGS]


# ----------------------------------------------------------------------
# Determinism and invariants
# ----------------------------------------------------------------------


def replay(seed: int, actions_seed: int, steps: int = 60):
    """Plays a random but reproducible session and checks every state."""
    ids = SequentialIdGenerator()
    controller = EncounterController(SeededRandomSource(seed), ids)
    chooser = random.Random(actions_seed)
    definitions = [
        CombatantDefinition(key="goblin", name="Goblin", initiative_modifier=2),
        CombatantDefinition(key="orc", name="Orc", initiative_modifier=1),
        CombatantDefinition(key="elf", name="Elf", initiative_modifier=4, has_advantage=True),
    ]
    encounter = Encounter(
        name="Replay",
        combatants=[controller.create_combatant(chooser.choice(definitions)) for _ in range(4)],
    )

    run = controller.start(encounter)
    run = controller.apply(run, RollInitiative())
    states = [run]
    for _ in range(steps):
        roll = chooser.random()
        if roll < 0.5 or run.current.is_empty():
            action = (
                AdvanceTurn()
                if not run.current.is_empty()
                else AddCombatant(combatant=controller.create_combatant(definitions[0]))
            )
        elif roll < 0.7:
            action = RemoveCombatant(combatant_id=chooser.choice(run.current.ids()))
        elif roll < 0.85:
            action = AddCombatant(
                combatant=controller.create_combatant(chooser.choice(definitions)),
                position=chooser.choice(list(InsertPosition)),
            )
        else:
            action = RerollInitiative(combatant_ids=[chooser.choice(run.current.ids())])

        before = run
        run = controller.apply(run, action)

        assert run.invariant_violations() == []
        cursor = run.turn_cursor
        if cursor is not None:
            assert run.current.contains(cursor.combatant_id)
            assert cursor.round >= 1
        if before.turn_cursor is not None and cursor is not None:
            assert cursor.round >= before.turn_cursor.round
        assert (cursor is None) == (run.current.is_empty() or not run.is_started())
        states.append(run)
    return states


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_reachable_states_are_consistent(seed):
    replay(seed, seed * 31)


def test_same_inputs_same_session():
    assert replay(11, 12) == replay(11, 12)
