from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from petquest.combat.combatant import Combatant
from petquest.config import EncounterConfig
from petquest.core.rng import RNG
from .content import AbilityCategory, AbilityDef, Archetype, Biome, ContentRegistry

logger = logging.getLogger(__name__)

MIN_TIER = 1
MAX_TIER = 4


@dataclass(frozen=True)
class Encounter:
    """One battle request: a scaled opponent and the area it was met in."""

    tier: int
    biome: Biome
    opponent: Combatant
    area_name: str
    description: str
    abilities: Tuple[AbilityDef, ...] = ()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def ability_count(tier: int, rng) -> int:
    """1, 1-2, 2, 2-3 abilities for tiers 1..4 (coin flips on the even tiers)."""
    if tier == 1:
        return 1
    if tier == 2:
        return 1 if rng.random() < 0.5 else 2
    if tier == 3:
        return 2
    return 2 if rng.random() < 0.5 else 3


def stat_multiplier(tier: int, config: Optional[EncounterConfig] = None) -> float:
    cfg = config or EncounterConfig()
    return 1 + (tier - 1) * cfg.tier_stat_step


class EncounterGenerator:
    """Builds a randomized, tier-scaled opponent for a battle request."""

    def __init__(
        self,
        config: Optional[EncounterConfig] = None,
        rng=None,
        registry: Optional[ContentRegistry] = None,
    ) -> None:
        self.config = config or EncounterConfig()
        self.rng = rng or RNG()
        self.registry = registry or ContentRegistry()

    def generate(self, tier: int, biome: Optional[Union[Biome, str]] = None) -> Encounter:
        if not isinstance(tier, int) or not (MIN_TIER <= tier <= MAX_TIER):
            raise ValueError(f"difficulty tier must be in {MIN_TIER}..{MAX_TIER}, got {tier!r}")
        chosen_biome = Biome.parse(biome) if biome is not None else self.rng.choice(self.registry.biomes())
        content = self.registry.get(chosen_biome)

        archetype = self.rng.choice(list(content.archetypes))
        abilities = self.draw_abilities(tier, content.abilities)
        opponent = self.build_opponent(archetype, tier, abilities)

        area_name = f"{self.rng.choice(list(content.name_prefixes))} {self.rng.choice(list(content.name_suffixes))}"
        description = self.rng.choice(list(content.descriptions))
        logger.info(
            "Generated tier %d %s encounter: %s in %s (abilities=%s)",
            tier,
            chosen_biome.value,
            opponent.name,
            area_name,
            opponent.abilities,
        )
        return Encounter(
            tier=tier,
            biome=chosen_biome,
            opponent=opponent,
            area_name=area_name,
            description=description,
            abilities=tuple(abilities),
        )

    def draw_abilities(self, tier: int, biome_pool: Sequence[AbilityDef]) -> List[AbilityDef]:
        """Draw abilities into an ordered set.

        Each draw picks the biome pool with ``biome_ability_chance``, otherwise
        the neutral pool. Below the top tier a category may appear only once;
        when that leaves nothing to draw, the unfiltered pool is used.
        """
        chosen: List[AbilityDef] = []
        for _ in range(ability_count(tier, self.rng)):
            use_biome = self.rng.random() < self.config.biome_ability_chance
            pool = list(biome_pool if use_biome else self.registry.neutral_abilities)
            if tier < MAX_TIER:
                used = {a.category for a in chosen}
                candidates = [a for a in pool if a.category not in used and a not in chosen]
            else:
                candidates = [a for a in pool if a not in chosen]
            if not candidates:
                candidates = pool
            pick = self.rng.choice(candidates)
            if pick not in chosen:
                chosen.append(pick)
        return chosen

    def build_opponent(self, archetype: Archetype, tier: int, abilities: Sequence[AbilityDef]) -> Combatant:
        mult = stat_multiplier(tier, self.config)
        hp = archetype.hp * mult
        sp = archetype.sp * mult
        if any(a.category is AbilityCategory.SUPPORT for a in abilities):
            hp *= self.config.support_hp_boost
            sp *= self.config.support_sp_boost
        return Combatant(
            name=archetype.name,
            key=archetype.key,
            max_hp=_round_half_up(hp),
            max_sp=_round_half_up(sp),
            atk=_round_half_up(archetype.atk * mult),
            defense=_round_half_up(archetype.defense * mult),
            level=tier,
            abilities=[a.name for a in abilities],
        )
