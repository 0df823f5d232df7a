from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PETQUEST_CONFIG"


@dataclass
class CombatConfig:
    """
    Action costs and combat arithmetic.

    SP costs are deducted from the acting combatant before the effect is
    computed. Damage variance is drawn from [variance_low, variance_high).
    """

    basic_attack_cost: int = 5
    special_attack_cost: int = 10
    heal_self_cost: int = 10
    defend_cost: int = 5
    variance_low: float = 0.9
    variance_high: float = 1.1
    defense_efficiency: float = 0.5
    special_attack_multiplier: float = 1.5
    basic_min_damage: int = 1
    special_min_damage: int = 2
    defend_multiplier: float = 0.5
    heal_fraction: float = 0.25
    flee_chance: float = 0.5
    item_uses_per_battle: int = 1
    # Legacy item sentinel: effects at or above these values mean "fully restore".
    full_restore_health: int = 5000
    full_restore_sp: int = 1000
    ai_special_chance: float = 0.5
    ai_basic_chance: float = 0.7


@dataclass
class EncounterConfig:
    tier_stat_step: float = 0.5
    support_hp_boost: float = 1.1
    support_sp_boost: float = 1.2
    biome_ability_chance: float = 0.8


@dataclass
class LootConfig:
    drop_base: float = 0.4
    drop_per_level: float = 0.05
    drop_per_tier: float = 0.1
    drop_cap: float = 0.85
    item_types: List[str] = field(default_factory=lambda: ["medicine", "equipment", "food"])
    # Tiers 1-2 never produce legendary loot.
    rarity_weights: Dict[int, Dict[str, float]] = field(default_factory=lambda: {
        1: {"common": 70, "uncommon": 25, "rare": 5, "legendary": 0},
        2: {"common": 55, "uncommon": 32, "rare": 13, "legendary": 0},
        3: {"common": 40, "uncommon": 35, "rare": 20, "legendary": 5},
        4: {"common": 25, "uncommon": 35, "rare": 28, "legendary": 12},
    })


@dataclass
class ProgressionConfig:
    threshold_factor: int = 100
    atk_growth: Tuple[int, int] = (1, 5)
    def_growth: Tuple[int, int] = (1, 5)
    max_hp_growth: Tuple[int, int] = (10, 29)
    max_sp_growth: Tuple[int, int] = (5, 14)

    def __post_init__(self) -> None:
        # Thresholds must grow with level.
        if self.threshold_factor <= 0:
            raise ValueError(f"threshold_factor must be positive, got {self.threshold_factor}")


@dataclass
class RewardConfig:
    xp_base: int = 25
    currency_base: int = 50
    currency_per_tier: int = 50


@dataclass
class GameConfig:
    """Bundle of every tunable constant used by the engine."""

    combat: CombatConfig = field(default_factory=CombatConfig)
    encounters: EncounterConfig = field(default_factory=EncounterConfig)
    loot: LootConfig = field(default_factory=LootConfig)
    progression: ProgressionConfig = field(default_factory=ProgressionConfig)
    rewards: RewardConfig = field(default_factory=RewardConfig)

    @staticmethod
    def default() -> "GameConfig":
        return GameConfig()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "GameConfig":
        """Build a config from a nested mapping. Missing keys keep their defaults."""
        sections = {f.name: f for f in fields(cls)}
        unknown = set(raw) - set(sections)
        if unknown:
            raise ConfigError(f"Unknown config sections: {sorted(unknown)}")
        cfg = cls()
        for name, values in raw.items():
            if values is None:
                continue
            if not isinstance(values, Mapping):
                raise ConfigError(f"Config section '{name}' must be a mapping")
            current = getattr(cfg, name)
            setattr(cfg, name, _merge_section(current, values, name))
        return cfg

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "GameConfig":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
        if not isinstance(raw, Mapping):
            raise ConfigError(f"Top level of {path} must be a mapping")
        cfg = cls.from_dict(raw)
        logger.info("Loaded game config from %s", path)
        return cfg

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _merge_section(current: Any, values: Mapping[str, Any], section: str) -> Any:
    known = {f.name: f for f in fields(current)}
    merged = asdict(current)
    for key, value in values.items():
        if key not in known:
            raise ConfigError(f"Unknown key '{key}' in config section '{section}'")
        default = merged[key]
        if isinstance(default, tuple):
            value = tuple(int(v) for v in value)
            if len(value) != 2 or value[0] > value[1]:
                raise ConfigError(f"'{section}.{key}' must be an inclusive [low, high] range")
        elif key == "rarity_weights":
            # YAML keys may arrive as strings
            value = {int(tier): {str(k): float(w) for k, w in weights.items()} for tier, weights in value.items()}
        merged[key] = value
    try:
        return type(current)(**merged)
    except ValueError as exc:
        raise ConfigError(f"Invalid config section '{section}': {exc}") from exc


def load_config(path: Optional[Union[str, Path]] = None) -> GameConfig:
    """Load configuration from ``path``, the PETQUEST_CONFIG env var, or defaults."""
    if path is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        if env_path:
            path = env_path
    if path is None:
        logger.debug("No config file given; using defaults")
        return GameConfig.default()
    return GameConfig.from_yaml(path)
