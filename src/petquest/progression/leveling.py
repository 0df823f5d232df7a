from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

from petquest.config import ProgressionConfig
from petquest.core.rng import RNG

if TYPE_CHECKING:
    from petquest.combat.combatant import Combatant

logger = logging.getLogger(__name__)


@dataclass
class StatsDelta:
    max_hp: int = 0
    max_sp: int = 0
    atk: int = 0
    defense: int = 0

    def __add__(self, other: "StatsDelta") -> "StatsDelta":
        return StatsDelta(
            max_hp=self.max_hp + other.max_hp,
            max_sp=self.max_sp + other.max_sp,
            atk=self.atk + other.atk,
            defense=self.defense + other.defense,
        )

    def as_dict(self) -> Dict[str, int]:
        return {"max_hp": self.max_hp, "max_sp": self.max_sp, "atk": self.atk, "defense": self.defense}


@dataclass
class LevelUpEvent:
    from_level: int
    to_level: int
    delta: StatsDelta


@dataclass
class LevelUpResult:
    levels_gained: int
    events: List[LevelUpEvent] = field(default_factory=list)
    total_delta: StatsDelta = field(default_factory=StatsDelta)


class LevelingSystem:
    """Handles experience accrual and stat growth.

    - The threshold to leave level L is L^2 * 100.
    - Each level gained rolls random growth for atk, def, max HP and max SP.
    - Any level-up refills HP and SP to the new maximum.
    """

    def __init__(self, config: Optional[ProgressionConfig] = None, rng=None) -> None:
        self.config = config or ProgressionConfig()
        self.rng = rng or RNG()

    def threshold(self, level: int) -> int:
        return level * level * self.config.threshold_factor

    def add_experience(self, combatant: "Combatant", amount: int) -> LevelUpResult:
        if amount < 0:
            raise ValueError("Experience amount cannot be negative")
        combatant.experience += amount
        return self.resolve(combatant)

    def resolve(self, combatant: "Combatant") -> LevelUpResult:
        start_level = combatant.level
        events: List[LevelUpEvent] = []
        total = StatsDelta()

        while combatant.experience >= self.threshold(combatant.level):
            combatant.experience -= self.threshold(combatant.level)
            delta = self._roll_growth()
            from_level = combatant.level
            combatant.level += 1
            combatant.max_hp += delta.max_hp
            combatant.max_sp += delta.max_sp
            combatant.atk += delta.atk
            combatant.defense += delta.defense
            total = total + delta
            events.append(LevelUpEvent(from_level=from_level, to_level=combatant.level, delta=delta))
            logger.debug(
                "Level up: %s from L%d to L%d, delta=%s", combatant.name, from_level, combatant.level, delta.as_dict()
            )

        if events:
            combatant.hp = combatant.effective_max_hp
            combatant.sp = combatant.effective_max_sp
            logger.info("%s reached level %d", combatant.name, combatant.level)
        combatant.check_invariants()
        return LevelUpResult(levels_gained=combatant.level - start_level, events=events, total_delta=total)

    def _roll_growth(self) -> StatsDelta:
        cfg = self.config
        return StatsDelta(
            atk=self.rng.randint(*cfg.atk_growth),
            defense=self.rng.randint(*cfg.def_growth),
            max_hp=self.rng.randint(*cfg.max_hp_growth),
            max_sp=self.rng.randint(*cfg.max_sp_growth),
        )
