from __future__ import annotations

import logging
from typing import Optional

from .combat.combatant import Combatant
from .combat.outcome import BattleOutcome, OutcomeKind
from .config import GameConfig
from .core.rng import RNG
from .loot.generator import LootGenerator
from .progression.leveling import LevelingSystem

logger = logging.getLogger(__name__)


def experience_reward(tier: int, opponent_level: int, config: Optional[GameConfig] = None) -> int:
    cfg = (config or GameConfig.default()).rewards
    return cfg.xp_base * tier * opponent_level


def currency_reward(tier: int, config: Optional[GameConfig] = None) -> int:
    cfg = (config or GameConfig.default()).rewards
    return cfg.currency_base + cfg.currency_per_tier * tier


class RewardCalculator:
    """Turns a finished battle into its outcome payload.

    Only a victory grants experience, currency and loot. Progression runs on
    the player's creature in place, so callers pass the battle's copy.
    """

    def __init__(self, config: Optional[GameConfig] = None, rng=None) -> None:
        self.config = config or GameConfig.default()
        self.rng = rng or RNG()
        self.loot = LootGenerator(self.config.loot, self.rng)
        self.leveling = LevelingSystem(self.config.progression, self.rng)

    def finalize(
        self, kind: OutcomeKind, player: Combatant, opponent: Combatant, tier: int, turns: int = 0
    ) -> BattleOutcome:
        if kind is not OutcomeKind.VICTORY:
            logger.info("Battle ended in %s; no rewards granted", kind.value)
            return BattleOutcome(kind=kind, final_state=player.persisted_state(), turns=turns)

        xp = experience_reward(tier, opponent.level, self.config)
        coins = currency_reward(tier, self.config)
        drops = self.loot.generate(tier, opponent.level)
        level_up = self.leveling.add_experience(player, xp)
        logger.info(
            "Victory rewards: %d XP, %d coins, %d item(s), %d level(s) gained",
            xp,
            coins,
            len(drops),
            level_up.levels_gained,
        )
        return BattleOutcome(
            kind=kind,
            experience_gained=xp,
            currency_gained=coins,
            loot=drops,
            level_up=level_up,
            final_state=player.persisted_state(),
            turns=turns,
        )
