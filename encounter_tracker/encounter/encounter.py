"""
Encounter module for the encounter tracker.

An encounter is an ordered, identity-keyed collection of combatants. Before a
run the order is insertion order; once initiative is rolled it is initiative
order, and it is the single source of truth for who acts next.
"""

from collections.abc import Callable
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, PrivateAttr

from encounter_tracker.core.error_handling import DuplicateIdentifierError

from .combatant import Combatant


class Encounter(BaseModel):
    """A named, ordered set of combatants.

    Combatants are addressed both by position (for ordering) and by id (for
    references such as the turn cursor). An id to index map is maintained
    alongside the list so lookups by id do not scan.
    """

    name: str = Field(
        default="",
        description="Display name of the encounter.",
    )
    combatants: list[Combatant] = Field(
        default_factory=list,
        description="Combatants in insertion or initiative order.",
    )
    ensure_stable_discriminators: bool = Field(
        default=False,
        description=(
            "When set, discriminators are frozen and new combatants get fresh "
            "ones instead of renumbering existing combatants."
        ),
    )

    _index: dict[UUID, int] = PrivateAttr(default_factory=dict)

    def model_post_init(self, _: Any) -> None:
        """Builds the id index and rejects duplicated ids."""
        self._reindex()
        if len(self._index) != len(self.combatants):
            seen: set[UUID] = set()
            for combatant in self.combatants:
                if combatant.id in seen:
                    raise DuplicateIdentifierError(combatant.id)
                seen.add(combatant.id)

    def _reindex(self) -> None:
        self._index = {c.id: i for i, c in enumerate(self.combatants)}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        return len(self.combatants)

    def is_empty(self) -> bool:
        return not self.combatants

    def ids(self) -> list[UUID]:
        """Returns the combatant ids in order."""
        return [c.id for c in self.combatants]

    def contains(self, combatant_id: UUID) -> bool:
        return combatant_id in self._index

    def index_of(self, combatant_id: UUID) -> int | None:
        return self._index.get(combatant_id)

    def get(self, combatant_id: UUID) -> Combatant | None:
        index = self._index.get(combatant_id)
        return None if index is None else self.combatants[index]

    def at(self, index: int) -> Combatant:
        return self.combatants[index]

    def first(self) -> Combatant | None:
        return self.combatants[0] if self.combatants else None

    def with_definition(self, definition_key: str) -> list[Combatant]:
        """Returns the combatants built from the given definition, in order."""
        return [c for c in self.combatants if c.definition_key == definition_key]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert(self, combatant: Combatant, index: int | None = None) -> int:
        """
        Inserts a combatant, appending when no index is given.

        Out of range indices are clamped to the list bounds.

        Args:
            combatant (Combatant): The combatant to insert.
            index (int | None): Position to insert at.

        Returns:
            int: The position the combatant ended up at.

        Raises:
            DuplicateIdentifierError: If the id is already present.

        """
        if combatant.id in self._index:
            raise DuplicateIdentifierError(combatant.id)
        if index is None or index > len(self.combatants):
            index = len(self.combatants)
        index = max(index, 0)
        self.combatants.insert(index, combatant)
        self._reindex()
        return index

    def remove(self, combatant_id: UUID) -> tuple[int, Combatant] | None:
        """
        Removes a combatant by id.

        Returns:
            tuple[int, Combatant] | None:
                The position the combatant held and the combatant, or None if
                the id is unknown.

        """
        index = self._index.get(combatant_id)
        if index is None:
            return None
        removed = self.combatants.pop(index)
        self._reindex()
        return index, removed

    def reorder(self, key: Callable[[Combatant], Any]) -> None:
        """Stable-sorts the combatants by the given key."""
        self.combatants.sort(key=key)
        self._reindex()
