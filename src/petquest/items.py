from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .config import CombatConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemEffects:
    """
    Battle-relevant effects of an inventory item.

    ``full_restore_hp`` / ``full_restore_sp`` replace the additive amount with
    a refill to the effective maximum.
    """

    health: int = 0
    sp: int = 0
    full_restore_hp: bool = False
    full_restore_sp: bool = False

    def __post_init__(self) -> None:
        if self.health < 0 or self.sp < 0:
            raise ValueError("Item effects cannot be negative")


@dataclass(frozen=True)
class InventoryItem:
    """A concrete item resolved by the persistence boundary."""

    id: str
    name: str
    type: str
    rarity: str = "common"
    effects: ItemEffects = field(default_factory=ItemEffects)

    @classmethod
    def from_api(cls, data: Mapping[str, Any], config: Optional[CombatConfig] = None) -> "InventoryItem":
        """
        Parse an item document as served by the item API.

        Legacy documents encode "fully restore" as a huge effect value
        (health >= 5000 or sp >= 1000); those are turned into the explicit
        flags here so the engine never sees the sentinel.
        """
        cfg = config or CombatConfig()
        raw_effects = data.get("effects") or {}
        health = int(raw_effects.get("health", 0) or 0)
        sp = int(raw_effects.get("sp", 0) or 0)
        full_hp = bool(raw_effects.get("fullRestore", False)) or health >= cfg.full_restore_health
        full_sp = bool(raw_effects.get("fullRestore", False)) or sp >= cfg.full_restore_sp
        if full_hp or full_sp:
            logger.debug("Item %s treated as full restore (hp=%s, sp=%s)", data.get("name"), full_hp, full_sp)
        effects = ItemEffects(
            health=0 if full_hp else max(0, health),
            sp=0 if full_sp else max(0, sp),
            full_restore_hp=full_hp,
            full_restore_sp=full_sp,
        )
        item_id = data.get("_id", data.get("id"))
        if item_id is None:
            raise ValueError("Item document has no id")
        return cls(
            id=str(item_id),
            name=str(data.get("displayName") or data.get("name") or item_id),
            type=str(data.get("type", "medicine")),
            rarity=str(data.get("rarity", "common")),
            effects=effects,
        )
