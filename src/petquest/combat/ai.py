from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from petquest.config import CombatConfig
from .actions import Ability, ActionKind
from .combatant import Combatant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AIDecision:
    kind: ActionKind
    ability: Optional[Ability] = None


def choose_opponent_action(combatant: Combatant, rng, config: Optional[CombatConfig] = None) -> AIDecision:
    """Pick the opponent's action from its SP and a few dice rolls.

    Priority order:
      1. Special Attack if affordable and a 50% roll succeeds.
      2. Basic Attack if affordable and a 70% roll succeeds.
      3. Defend if affordable.
      4. Skip the turn.

    A roll is only consumed when the SP condition for that branch holds.
    """
    cfg = config or CombatConfig()
    sp = combatant.sp
    if sp >= cfg.special_attack_cost and rng.random() < cfg.ai_special_chance:
        decision = AIDecision(ActionKind.ABILITY, Ability.SPECIAL_ATTACK)
    elif sp >= cfg.basic_attack_cost and rng.random() < cfg.ai_basic_chance:
        decision = AIDecision(ActionKind.ATTACK)
    elif sp >= cfg.defend_cost:
        decision = AIDecision(ActionKind.DEFEND)
    else:
        decision = AIDecision(ActionKind.SKIP)
    logger.debug("%s (SP %d) chooses %s", combatant.name, sp, decision)
    return decision
