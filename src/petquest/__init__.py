"""PetQuest combat and encounter engine."""

from .combat import Ability, ActionKind, ActionResult, Battle, BattleOutcome, Combatant, OutcomeKind, Side
from .config import GameConfig, load_config
from .encounters import Biome, Encounter, EncounterGenerator
from .errors import (
    CombatError,
    ConfigError,
    ExhaustedItemUse,
    InsufficientResource,
    InvalidAction,
    InvariantViolation,
    PersistenceError,
    PetQuestError,
)
from .service import BattleHandle, BattleService, EncounterRequest

__version__ = "0.1.0"

__all__ = [
    "Ability",
    "ActionKind",
    "ActionResult",
    "Battle",
    "BattleHandle",
    "BattleOutcome",
    "BattleService",
    "Biome",
    "CombatError",
    "Combatant",
    "ConfigError",
    "Encounter",
    "EncounterGenerator",
    "EncounterRequest",
    "ExhaustedItemUse",
    "GameConfig",
    "InsufficientResource",
    "InvalidAction",
    "InvariantViolation",
    "OutcomeKind",
    "PersistenceError",
    "PetQuestError",
    "Side",
    "load_config",
]
