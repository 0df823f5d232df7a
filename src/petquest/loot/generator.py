from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from petquest.config import LootConfig
from petquest.core.rng import RNG, weighted_choice

logger = logging.getLogger(__name__)

TIERS = (1, 2, 3, 4)


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


class ItemType(str, Enum):
    MEDICINE = "medicine"
    EQUIPMENT = "equipment"
    FOOD = "food"
    TOY = "toy"


@dataclass(frozen=True)
class LootRequest:
    """A request for one reward item; the persistence boundary picks the concrete item."""

    type: ItemType
    rarity: Rarity

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type.value, "rarity": self.rarity.value}


def _check_tier(tier: int) -> None:
    if tier not in TIERS:
        raise ValueError(f"difficulty tier must be one of {TIERS}, got {tier!r}")


def slot_count(tier: int, rng) -> int:
    """Number of independent drop chances: 1, 1-2, 2, 2-3 for tiers 1..4."""
    _check_tier(tier)
    if tier == 1:
        return 1
    if tier == 2:
        return 1 if rng.random() < 0.5 else 2
    if tier == 3:
        return 2
    return 2 if rng.random() < 0.5 else 3


def drop_probability(tier: int, level: int, config: Optional[LootConfig] = None) -> float:
    cfg = config or LootConfig()
    p = cfg.drop_base + level * cfg.drop_per_level + tier * cfg.drop_per_tier
    return min(cfg.drop_cap, p)


def rarity_weights_for_tier(tier: int, config: Optional[LootConfig] = None) -> Dict[Rarity, float]:
    cfg = config or LootConfig()
    _check_tier(tier)
    raw = cfg.rarity_weights.get(tier)
    if raw is None:
        raise ValueError(f"No rarity weights configured for tier {tier}")
    return {Rarity(name): float(weight) for name, weight in raw.items()}


class LootGenerator:
    """Rolls battle rewards. Each slot is an independent Bernoulli trial."""

    def __init__(self, config: Optional[LootConfig] = None, rng=None) -> None:
        self.config = config or LootConfig()
        self.rng = rng or RNG()
        self.item_types = [ItemType(t) for t in self.config.item_types]
        if not self.item_types:
            raise ValueError("LootConfig.item_types must not be empty")

    def generate(self, tier: int, level: int = 1) -> List[LootRequest]:
        slots = slot_count(tier, self.rng)
        p = drop_probability(tier, level, self.config)
        weights = rarity_weights_for_tier(tier, self.config)
        drops: List[LootRequest] = []
        for slot in range(slots):
            roll = self.rng.random()
            if roll >= p:
                logger.debug("Loot slot %d empty (roll=%.3f, p=%.3f)", slot, roll, p)
                continue
            item_type = self.rng.choice(self.item_types)
            rarity = weighted_choice(self.rng, weights)
            drops.append(LootRequest(type=item_type, rarity=rarity))
        logger.info("Generated %d loot drop(s) from %d slot(s) at tier %d", len(drops), slots, tier)
        return drops
