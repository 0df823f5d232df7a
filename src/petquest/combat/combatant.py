from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from petquest.errors import InsufficientResource, InvariantViolation

logger = logging.getLogger(__name__)

STAT_KEYS = ("hp", "sp", "atk", "def")


@dataclass
class ActiveBuffs:
    """
    Additive modifiers layered on top of base stats.

    Attributes:
        stats: Mapping of stat key ("hp", "sp", "atk", "def") to bonus.
        expires_at: Wall-clock timestamp (seconds). Only the session layer
            interprets it; the battle engine treats buffs as a snapshot.
    """

    stats: Dict[str, int] = field(default_factory=dict)
    expires_at: Optional[float] = None

    def __post_init__(self) -> None:
        unknown = set(self.stats) - set(STAT_KEYS)
        if unknown:
            raise ValueError(f"Unknown buff stats: {sorted(unknown)}")

    def bonus(self, stat: str) -> int:
        return int(self.stats.get(stat, 0))

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ActiveBuffs":
        if not data:
            return cls()
        stats = {k: int(v) for k, v in (data.get("stats") or {}).items()}
        expires_at = data.get("expiresAt", data.get("expires_at"))
        return cls(stats=stats, expires_at=float(expires_at) if expires_at is not None else None)


@dataclass
class Combatant:
    """
    A participant in battle: the player's creature or a generated opponent.

    Base values (max_hp, max_sp, atk, defense) are what persists. All combat
    math reads the ``effective_*`` values, which add the active buff bonus.
    ``hp``/``sp`` default to full pools.
    """

    name: str
    key: str
    max_hp: int
    max_sp: int
    atk: int
    defense: int
    hp: Optional[int] = None
    sp: Optional[int] = None
    level: int = 1
    experience: int = 0
    abilities: List[str] = field(default_factory=list)
    active_buffs: ActiveBuffs = field(default_factory=ActiveBuffs)

    def __post_init__(self) -> None:
        if self.max_hp <= 0:
            raise ValueError("max_hp must be positive")
        if self.max_sp < 0 or self.atk < 0 or self.defense < 0:
            raise ValueError("max_sp, atk and defense must be non-negative")
        if self.level < 1:
            raise ValueError("level must be at least 1")
        if self.hp is None:
            self.hp = self.effective_max_hp
        if self.sp is None:
            self.sp = self.effective_max_sp
        self.check_invariants()

    def effective(self, stat: str) -> int:
        """Base value plus buff bonus. ``hp``/``sp`` resolve to the pool maximum."""
        base = {"hp": self.max_hp, "sp": self.max_sp, "atk": self.atk, "def": self.defense}
        if stat not in base:
            raise KeyError(f"Unknown stat: {stat}")
        return base[stat] + self.active_buffs.bonus(stat)

    @property
    def effective_max_hp(self) -> int:
        return self.effective("hp")

    @property
    def effective_max_sp(self) -> int:
        return self.effective("sp")

    @property
    def effective_atk(self) -> int:
        return self.effective("atk")

    @property
    def effective_def(self) -> int:
        return self.effective("def")

    def is_defeated(self) -> bool:
        return self.hp <= 0

    def take_damage(self, amount: int) -> int:
        """Apply damage, clamping HP at zero. Returns the HP actually removed."""
        if amount < 0:
            raise ValueError("Damage amount cannot be negative.")
        before = self.hp
        self.hp = max(0, self.hp - amount)
        self.check_invariants()
        logger.debug("%s takes %d damage (HP: %d/%d)", self.name, before - self.hp, self.hp, self.effective_max_hp)
        return before - self.hp

    def heal(self, amount: int) -> int:
        """Heal up to the effective maximum. Returns the HP actually restored."""
        if amount < 0:
            raise ValueError("Heal amount cannot be negative.")
        before = self.hp
        self.hp = min(self.effective_max_hp, self.hp + amount)
        self.check_invariants()
        return self.hp - before

    def restore_sp(self, amount: int) -> int:
        if amount < 0:
            raise ValueError("SP amount cannot be negative.")
        before = self.sp
        self.sp = min(self.effective_max_sp, self.sp + amount)
        self.check_invariants()
        return self.sp - before

    def can_afford(self, cost: int) -> bool:
        return self.sp >= cost

    def spend_sp(self, cost: int) -> None:
        if not self.can_afford(cost):
            raise InsufficientResource(
                f"{self.name} needs {cost} SP but has {self.sp}.", required=cost, available=self.sp
            )
        self.sp -= cost
        self.check_invariants()

    def check_invariants(self) -> None:
        if not 0 <= self.hp <= self.effective_max_hp:
            raise InvariantViolation(f"{self.name} HP {self.hp} outside [0, {self.effective_max_hp}]")
        if not 0 <= self.sp <= self.effective_max_sp:
            raise InvariantViolation(f"{self.name} SP {self.sp} outside [0, {self.effective_max_sp}]")

    def copy(self) -> "Combatant":
        return copy.deepcopy(self)

    def persisted_state(self) -> Dict[str, Any]:
        """Base values only; current pools are clamped to the unbuffed maximum."""
        return {
            "name": self.name,
            "key": self.key,
            "level": self.level,
            "experience": self.experience,
            "stats": {"hp": self.max_hp, "sp": self.max_sp, "atk": self.atk, "def": self.defense},
            "currentHP": min(self.hp, self.max_hp),
            "currentSP": min(self.sp, self.max_sp),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Combatant":
        """Build a combatant from a persisted pet record."""
        stats = data.get("stats") or {}
        try:
            max_hp = int(stats["hp"])
            max_sp = int(stats["sp"])
            atk = int(stats["atk"])
            defense = int(stats["def"])
        except KeyError as exc:
            raise ValueError(f"Pet record is missing stat {exc}") from exc
        buffs = ActiveBuffs.from_dict(data.get("activeBuffs"))
        hp = data.get("currentHP")
        sp = data.get("currentSP")
        return cls(
            name=str(data.get("name", "Pet")),
            key=str(data.get("key", "")),
            max_hp=max_hp,
            max_sp=max_sp,
            atk=atk,
            defense=defense,
            hp=int(hp) if hp is not None else None,
            sp=int(sp) if sp is not None else None,
            level=int(data.get("level", 1)),
            experience=int(data.get("experience", 0)),
            abilities=list(data.get("abilities", [])),
            active_buffs=buffs,
        )
