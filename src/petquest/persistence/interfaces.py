from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:
    from petquest.combat.combatant import Combatant
    from petquest.combat.outcome import BattleOutcome
    from petquest.items import InventoryItem


class InventoryLookup(Protocol):
    """Resolves an inventory item by identifier. Used only by the Use Item action."""

    def get_item(self, item_id: str) -> "InventoryItem":
        """Return the item with the given id.

        Should raise PersistenceError if the item cannot be fetched.
        """


class OutcomeSink(Protocol):
    """Receives the final state of a finished battle, exactly once per battle."""

    def commit_outcome(self, pet_id: Optional[str], combatant: "Combatant", outcome: "BattleOutcome") -> None:
        """Persist the combatant's base values plus loot and currency grants."""
