"""
Discriminator assignment for combatants sharing a definition.

Two goblins built from the same stat block are told apart by an ordinal:
"Goblin 1", "Goblin 2". Once frozen, ordinals never change; reinforcements get
the next ordinal after the highest one ever handed out for their definition,
so a removed "Goblin 3" is never replaced by a new "Goblin 3".
"""

from collections import Counter

from .combatant import Combatant
from .encounter import Encounter


def highest_discriminators(encounter: Encounter) -> Counter[str]:
    """Returns the highest discriminator present per definition key."""
    highest: Counter[str] = Counter()
    for combatant in encounter.combatants:
        if combatant.discriminator is not None:
            key = combatant.definition_key
            highest[key] = max(highest[key], combatant.discriminator)
    return highest


def freeze_discriminators(
    encounter: Encounter,
    issued: dict[str, int] | None = None,
) -> None:
    """
    Turns on stable discriminators and numbers every combatant lacking one.

    Combatants are numbered 1, 2, 3, ... per definition in their current
    order. Combatants that already carry a discriminator keep it, and the
    missing ones continue after the highest seen.

    Args:
        encounter (Encounter): The encounter to number, modified in place.
        issued (dict[str, int] | None):
            Highest discriminator handed out per definition key. Updated in
            place when given.

    """
    encounter.ensure_stable_discriminators = True
    highest = highest_discriminators(encounter)
    if issued is not None:
        for key, value in issued.items():
            highest[key] = max(highest[key], value)
    for combatant in encounter.combatants:
        if combatant.discriminator is None:
            highest[combatant.definition_key] += 1
            combatant.discriminator = highest[combatant.definition_key]
    if issued is not None:
        issued.update(highest)


def next_discriminator(
    encounter: Encounter,
    definition_key: str,
    issued: dict[str, int] | None = None,
) -> int:
    """Returns the next unused discriminator for a definition."""
    highest = highest_discriminators(encounter)[definition_key]
    if issued is not None:
        highest = max(highest, issued.get(definition_key, 0))
    return highest + 1


def assign_discriminator(
    encounter: Encounter,
    combatant: Combatant,
    issued: dict[str, int] | None = None,
) -> Combatant:
    """
    Gives a combatant about to join the encounter its discriminator.

    Nothing is assigned unless the encounter has stable discriminators.
    Existing combatants are never renumbered.

    Returns:
        Combatant: The combatant, with a fresh discriminator when needed.

    """
    if not encounter.ensure_stable_discriminators:
        return combatant
    discriminator = next_discriminator(encounter, combatant.definition_key, issued)
    if issued is not None:
        issued[combatant.definition_key] = discriminator
    return combatant.model_copy(update={"discriminator": discriminator})
