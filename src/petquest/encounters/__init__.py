from .content import AbilityCategory, AbilityDef, Archetype, Biome, BiomeContent, ContentRegistry, NEUTRAL_ABILITIES
from .generator import Encounter, EncounterGenerator, ability_count, stat_multiplier

__all__ = [
    "AbilityCategory",
    "AbilityDef",
    "Archetype",
    "Biome",
    "BiomeContent",
    "ContentRegistry",
    "Encounter",
    "EncounterGenerator",
    "NEUTRAL_ABILITIES",
    "ability_count",
    "stat_multiplier",
]
