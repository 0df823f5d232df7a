from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Union

from petquest.config import CombatConfig
from petquest.errors import InvalidAction

logger = logging.getLogger(__name__)


class Side(str, Enum):
    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> "Side":
        return Side.OPPONENT if self is Side.PLAYER else Side.PLAYER


class ActionKind(str, Enum):
    ATTACK = "attack"
    ABILITY = "ability"
    DEFEND = "defend"
    ITEM = "item"
    FLEE = "flee"
    # Opponent only: pass the turn without spending SP.
    SKIP = "skip"

    @classmethod
    def parse(cls, value: Union["ActionKind", str]) -> "ActionKind":
        if isinstance(value, ActionKind):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidAction(f"Unknown action kind: {value!r}") from None


class Ability(IntEnum):
    """Universal ability slots every combatant carries."""

    SPECIAL_ATTACK = 0
    HEAL_SELF = 1

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()

    @classmethod
    def from_index(cls, index) -> "Ability":
        try:
            return cls(int(index))
        except (TypeError, ValueError):
            raise InvalidAction(f"Ability index out of range: {index!r}") from None


def action_cost(kind: ActionKind, ability: Optional[Ability], config: CombatConfig) -> int:
    """SP cost of an action. Items, fleeing and skipping are free."""
    if kind is ActionKind.ATTACK:
        return config.basic_attack_cost
    if kind is ActionKind.DEFEND:
        return config.defend_cost
    if kind is ActionKind.ABILITY:
        if ability is Ability.SPECIAL_ATTACK:
            return config.special_attack_cost
        return config.heal_self_cost
    return 0


@dataclass
class ActionResult:
    """
    Outcome of one resolved action.

    Attributes:
        actor: Side that acted.
        kind: What it did.
        ability: Ability slot used, for ABILITY actions.
        sp_spent: SP deducted from the actor.
        damage: HP removed from the target.
        healed: HP restored to the actor.
        sp_restored: SP restored to the actor (items).
        fled: Whether a flee attempt succeeded.
        opponent_reply: The opponent's automatic follow-up turn, if any.
    """

    actor: Side
    kind: ActionKind
    ability: Optional[Ability] = None
    sp_spent: int = 0
    damage: int = 0
    healed: int = 0
    sp_restored: int = 0
    fled: bool = False
    opponent_reply: Optional["ActionResult"] = None


@dataclass
class FleeResult:
    success: bool
    probability: float


@dataclass
class FleeAction:
    """
    Attempt to leave the battle.

    The chance is a flat, unweighted roll taken from CombatConfig.flee_chance;
    no stat influences it.
    """

    rng: object
    config: Optional[CombatConfig] = None

    def attempt(self) -> FleeResult:
        probability = (self.config or CombatConfig()).flee_chance
        roll = self.rng.random()
        success = roll < probability
        logger.debug("Flee attempt: roll=%.5f, probability=%.5f, success=%s", roll, probability, success)
        return FleeResult(success=success, probability=probability)
