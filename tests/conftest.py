"""
Shared fixtures for the encounter tracker tests.
"""

import pytest

from encounter_tracker.combat import EncounterController
from encounter_tracker.core import (
    DefinitionKind,
    EverIncreasingRandomSource,
    SequentialIdGenerator,
)
from encounter_tracker.encounter import Combatant, CombatantDefinition, Encounter


@pytest.fixture
def id_generator():
    return SequentialIdGenerator(start=1000)


@pytest.fixture
def controller(id_generator):
    """A controller whose dice roll 1, 2, 3, ... and whose ids are sequential."""
    return EncounterController(EverIncreasingRandomSource(), id_generator)


@pytest.fixture
def goblin():
    return CombatantDefinition(
        key="goblin",
        name="Goblin",
        initiative_modifier=2,
        kind=DefinitionKind.COMPENDIUM,
    )


@pytest.fixture
def orc():
    return CombatantDefinition(
        key="orc",
        name="Orc",
        initiative_modifier=1,
        kind=DefinitionKind.COMPENDIUM,
    )


@pytest.fixture
def make_combatant(id_generator):
    """Builds combatants with sequential ids."""

    def _make(definition: CombatantDefinition, **kwargs) -> Combatant:
        return Combatant(id=id_generator.next_id(), definition=definition, **kwargs)

    return _make


@pytest.fixture
def make_adhoc(make_combatant):
    """Builds ad hoc combatants, each with its own definition."""

    def _make(name: str, modifier: int = 0, **kwargs) -> Combatant:
        definition = CombatantDefinition(
            key=f"adhoc-{name.lower()}",
            name=name,
            initiative_modifier=modifier,
        )
        return make_combatant(definition, **kwargs)

    return _make


@pytest.fixture
def ordered_encounter(make_adhoc):
    """Four ad hoc combatants already in initiative order: A, B, C, D."""
    return Encounter(
        name="Ordered",
        combatants=[
            make_adhoc("A", initiative=20),
            make_adhoc("B", initiative=15),
            make_adhoc("C", initiative=10),
            make_adhoc("D", initiative=5),
        ],
    )
