from .actions import Ability, ActionKind, ActionResult, FleeAction, FleeResult, Side, action_cost
from .ai import AIDecision, choose_opponent_action
from .battle import Battle, BattleState
from .combatant import ActiveBuffs, Combatant
from .damage import DamageBreakdown, DamageCalculator
from .log import CombatEvent, CombatLog
from .outcome import BattleOutcome, OutcomeKind

__all__ = [
    "Ability",
    "ActionKind",
    "ActionResult",
    "ActiveBuffs",
    "AIDecision",
    "Battle",
    "BattleOutcome",
    "BattleState",
    "Combatant",
    "CombatEvent",
    "CombatLog",
    "DamageBreakdown",
    "DamageCalculator",
    "FleeAction",
    "FleeResult",
    "OutcomeKind",
    "Side",
    "action_cost",
    "choose_opponent_action",
]
