from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from petquest.config import CombatConfig
from petquest.core.rng import RNG

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DamageBreakdown:
    """Details of a computed damage roll.

    Attributes:
        base: Attack minus mitigated defense, before variance.
        multiplier: The variance multiplier drawn for this roll.
        rolled: floor(base * multiplier), before floors and defend.
        defended: Whether the defender's stance halved the hit.
        final: The integer damage to apply.
    """

    base: float
    multiplier: float
    rolled: int
    defended: bool
    final: int


class DamageCalculator:
    """Compute basic and special attack damage and self-heal amounts.

    The formulas are:
      basic   = max(1, floor((atk - def * 0.5) * U))
      special = max(2, floor((atk * 1.5 - def) * U))
      U ~ Uniform[0.9, 1.1)

    A defending target takes half (floored), and the action's minimum is
    applied again afterwards so every hit still lands.
    """

    def __init__(self, config: Optional[CombatConfig] = None) -> None:
        self.config = config or CombatConfig()
        if not 0.0 < self.config.variance_low <= self.config.variance_high:
            raise ValueError("variance bounds must satisfy 0 < low <= high")

    def _multiplier(self, rng) -> float:
        low, high = self.config.variance_low, self.config.variance_high
        return low + rng.random() * (high - low)

    def _finish(self, base: float, minimum: int, defending: bool, rng) -> DamageBreakdown:
        multiplier = self._multiplier(rng)
        rolled = math.floor(base * multiplier)
        final = max(minimum, rolled)
        if defending:
            final = max(minimum, math.floor(final * self.config.defend_multiplier))
        return DamageBreakdown(base=base, multiplier=multiplier, rolled=rolled, defended=defending, final=final)

    def basic(self, atk: int, defense: int, defending: bool = False, rng=None) -> DamageBreakdown:
        rng = rng or RNG()
        base = atk - defense * self.config.defense_efficiency
        result = self._finish(base, self.config.basic_min_damage, defending, rng)
        logger.debug("Basic attack roll: %s", result)
        return result

    def special(self, atk: int, defense: int, defending: bool = False, rng=None) -> DamageBreakdown:
        rng = rng or RNG()
        base = atk * self.config.special_attack_multiplier - defense
        result = self._finish(base, self.config.special_min_damage, defending, rng)
        logger.debug("Special attack roll: %s", result)
        return result

    def heal_amount(self, effective_max_hp: int) -> int:
        return math.floor(effective_max_hp * self.config.heal_fraction)
