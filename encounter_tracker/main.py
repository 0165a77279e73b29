"""
Main entry point for the encounter tracker.

Runs a scripted demonstration encounter: a party against a goblin ambush.
Initiative is rolled, turns are advanced for a few rounds, a goblin falls
mid-round and a reinforcement joins right after the active combatant. The
turn order and the encounter log are printed after every step.
"""

import argparse
import logging
from collections.abc import Sequence

from rich.table import Table

from encounter_tracker.combat import (
    AddCombatant,
    AdvanceTurn,
    EncounterController,
    RemoveCombatant,
    RerollInitiative,
    RollInitiative,
    RunningEncounter,
)
from encounter_tracker.core import (
    DefinitionKind,
    InsertPosition,
    SeededRandomSource,
    UUIDGenerator,
    cprint,
    crule,
    modifier_to_string,
)
from encounter_tracker.core.logging import setup_logging
from encounter_tracker.encounter import CombatantDefinition, Encounter

GOBLIN = CombatantDefinition.from_dexterity("goblin", "Goblin", dexterity=14)
HOBGOBLIN = CombatantDefinition.from_dexterity("hobgoblin", "Hobgoblin", dexterity=12)


def build_demo_encounter(controller: EncounterController) -> Encounter:
    """Builds the goblin ambush used by the demonstration."""
    party = [
        CombatantDefinition(
            key="pc-naerin",
            name="Naerin",
            initiative_modifier=3,
            kind=DefinitionKind.PLAYER_CHARACTER,
        ),
        CombatantDefinition(
            key="pc-bram",
            name="Bram",
            initiative_modifier=-1,
            has_advantage=True,
            kind=DefinitionKind.PLAYER_CHARACTER,
        ),
    ]
    combatants = [controller.create_combatant(d) for d in party]
    combatants += [controller.create_combatant(GOBLIN) for _ in range(3)]
    combatants.append(controller.create_combatant(HOBGOBLIN))
    return Encounter(name="Goblin Ambush", combatants=combatants)


def print_turn_order(run: RunningEncounter) -> None:
    """Prints the current order with the active combatant highlighted."""
    cursor = run.turn_cursor
    title = f"Round {cursor.round}" if cursor else run.turn.phase
    table = Table(title=title)
    table.add_column("")
    table.add_column("Init", justify="right")
    table.add_column("Combatant")
    table.add_column("Mod", justify="right")
    for combatant in run.current.combatants:
        active = cursor is not None and cursor.combatant_id == combatant.id
        table.add_row(
            "▶" if active else "",
            "-" if combatant.initiative is None else str(combatant.initiative),
            combatant.colored_label,
            modifier_to_string(combatant.definition.initiative_modifier),
            style="bold" if active else None,
        )
    cprint(table)


def print_log(run: RunningEncounter, since: int = 0) -> None:
    """Prints the log entries recorded after position `since`."""
    for event in run.log[since:]:
        cprint(f"    📜 {event}")


def run_demo(seed: int | None, rounds: int) -> RunningEncounter:
    """
    Plays the demonstration encounter.

    Args:
        seed (int | None): Seed for the initiative rolls.
        rounds (int): Number of rounds to advance through.

    Returns:
        RunningEncounter: The final state of the run.

    """
    controller = EncounterController(SeededRandomSource(seed), UUIDGenerator())
    run = controller.start(build_demo_encounter(controller))

    def step(title: str, action) -> None:
        nonlocal run
        crule(title, style="bold green")
        seen = len(run.log)
        result = controller.dispatch(run, action)
        for diagnostic in result.diagnostics:
            cprint(f"    ⚠️  {diagnostic}", style="yellow")
        run = result.state
        print_log(run, seen)
        print_turn_order(run)

    step("Roll Initiative", RollInitiative())

    cursor = run.turn_cursor
    while cursor is not None and cursor.round <= rounds:
        active = run.active_combatant
        assert active is not None
        if cursor.round == 1 and active.definition_key == HOBGOBLIN.key:
            goblins = run.current.with_definition(GOBLIN.key)
            if goblins:
                step(f"{goblins[0].label} Falls", RemoveCombatant(combatant_id=goblins[0].id))
            reinforcement = controller.create_combatant(GOBLIN)
            step(
                "Reinforcement Arrives",
                AddCombatant(combatant=reinforcement, position=InsertPosition.AFTER_ACTIVE),
            )
            step(
                "Reinforcement Rolls Initiative",
                RerollInitiative(combatant_ids=[reinforcement.id]),
            )
        step(f"End of {active.label}'s Turn", AdvanceTurn())
        cursor = run.turn_cursor

    return run


def main(argv: Sequence[str] | None = None) -> int:
    """Parses the command line and runs the demonstration."""
    parser = argparse.ArgumentParser(
        prog="encounter-tracker",
        description="Run a demonstration combat encounter.",
    )
    parser.add_argument("--seed", type=int, default=None, help="seed for initiative rolls")
    parser.add_argument("--rounds", type=int, default=2, help="rounds to play")
    parser.add_argument("--verbose", action="store_true", help="log every transition")
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)
    crule("Encounter Tracker", style="bold blue")
    run_demo(args.seed, max(args.rounds, 1))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
