from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from petquest.config import GameConfig
from petquest.core.rng import RNG
from petquest.errors import ExhaustedItemUse, InsufficientResource, InvalidAction
from petquest.persistence.interfaces import InventoryLookup
from .actions import Ability, ActionKind, ActionResult, FleeAction, Side, action_cost
from .ai import choose_opponent_action
from .combatant import Combatant
from .damage import DamageCalculator
from .log import CombatLog
from .outcome import OutcomeKind

logger = logging.getLogger(__name__)


class BattleState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"


class Battle:
    """
    Turn-based duel between the player's creature and one opponent.

    Lifecycle: NOT_STARTED -> IN_PROGRESS(turn owner) -> ENDED(outcome).

    The player drives the battle through ``submit_action``. When the turn
    passes to the opponent its AI acts immediately (unless ``auto_opponent``
    is False, in which case the caller invokes ``opponent_turn``). Every
    transition resolves synchronously; pacing and animation are left to the
    caller. Only one action may be in flight per battle: a second call made
    while an action (for instance an item lookup) is pending is rejected.
    """

    def __init__(
        self,
        player: Combatant,
        opponent: Combatant,
        config: Optional[GameConfig] = None,
        rng=None,
        inventory: Optional[InventoryLookup] = None,
        battleground: str = "Unknown",
        auto_opponent: bool = True,
    ) -> None:
        if player is opponent:
            raise ValueError("player and opponent must be distinct combatants")
        self.player = player
        self.opponent = opponent
        self.config = config or GameConfig.default()
        self.rng = rng or RNG()
        self.inventory = inventory
        self.battleground = battleground
        self.auto_opponent = auto_opponent
        self.damage = DamageCalculator(self.config.combat)
        self.log = CombatLog()

        self.state = BattleState.NOT_STARTED
        self.turn_owner: Optional[Side] = None
        self.turn_count = 0
        self.outcome: Optional[OutcomeKind] = None
        self._defending: Dict[Side, bool] = {Side.PLAYER: False, Side.OPPONENT: False}
        self._item_uses_left = self.config.combat.item_uses_per_battle
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ queries

    def combatant(self, side: Side) -> Combatant:
        return self.player if side is Side.PLAYER else self.opponent

    def is_defending(self, side: Side) -> bool:
        return self._defending[side]

    @property
    def ended(self) -> bool:
        return self.state is BattleState.ENDED

    @property
    def item_uses_remaining(self) -> int:
        return self._item_uses_left

    def messages(self) -> List[str]:
        return self.log.messages()

    # -------------------------------------------------------------- transitions

    def start(self) -> Optional[ActionResult]:
        """Flip a coin for the first turn. Returns the opponent's opening action, if any."""
        with self._exclusive():
            if self.state is not BattleState.NOT_STARTED:
                raise InvalidAction("Battle has already been started")
            self.log.add("start", "Battle started!")
            self.log.add("start", f"{self.player.name} vs {self.opponent.name}")
            self.log.add("start", f"Battleground: {self.battleground}")
            self.turn_owner = Side.PLAYER if self.rng.random() < 0.5 else Side.OPPONENT
            self.state = BattleState.IN_PROGRESS
            self.log.add("start", f"{self.combatant(self.turn_owner).name} goes first!", first=self.turn_owner.value)
        if self.auto_opponent and self.turn_owner is Side.OPPONENT:
            return self.opponent_turn()
        return None

    def submit_action(
        self, kind: Union[ActionKind, str], payload: Optional[Mapping[str, Any]] = None
    ) -> ActionResult:
        """Resolve one player action.

        Payload keys: ``ability_index`` (ABILITY), ``item_id`` (ITEM).

        Raises:
            InvalidAction: unknown kind, not the player's turn, battle over,
                bad ability index, or another action still pending.
            InsufficientResource: the player lacks the SP cost.
            ExhaustedItemUse: the battle's item use was already spent.
        """
        with self._exclusive():
            kind = ActionKind.parse(kind)
            self._require_turn(Side.PLAYER)
            if kind is ActionKind.SKIP:
                raise InvalidAction("The player cannot skip a turn")
            payload = payload or {}
            ability = None
            if kind is ActionKind.ABILITY:
                if "ability_index" not in payload:
                    raise InvalidAction("Ability actions need an 'ability_index'")
                ability = Ability.from_index(payload["ability_index"])
            item_id = payload.get("item_id")
            result = self._execute(Side.PLAYER, kind, ability, item_id)
        if self.auto_opponent and self.state is BattleState.IN_PROGRESS and self.turn_owner is Side.OPPONENT:
            result.opponent_reply = self.opponent_turn()
        return result

    def opponent_turn(self) -> ActionResult:
        """Let the opponent's AI choose and resolve its action."""
        with self._exclusive():
            self._require_turn(Side.OPPONENT)
            decision = choose_opponent_action(self.opponent, self.rng, self.config.combat)
            return self._execute(Side.OPPONENT, decision.kind, decision.ability, None)

    # ----------------------------------------------------------------- internals

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise InvalidAction("Another action is still being resolved for this battle")
        try:
            yield
        finally:
            self._lock.release()

    def _require_turn(self, side: Side) -> None:
        if self.state is BattleState.NOT_STARTED:
            raise InvalidAction("Battle has not started")
        if self.state is BattleState.ENDED:
            raise InvalidAction(f"Battle is over ({self.outcome.value})")
        if self.turn_owner is not side:
            raise InvalidAction(f"It is not the {side.value}'s turn")

    def _refuse(self, actor: Combatant, error: Exception) -> None:
        self.log.add("refused", str(error), actor=actor.name)
        raise error

    def _execute(self, side: Side, kind: ActionKind, ability: Optional[Ability], item_id: Optional[str]) -> ActionResult:
        actor = self.combatant(side)
        cost = action_cost(kind, ability, self.config.combat)
        if not actor.can_afford(cost):
            self._refuse(
                actor,
                InsufficientResource(
                    f"{actor.name} does not have enough SP ({actor.sp}/{cost}).", required=cost, available=actor.sp
                ),
            )

        if kind is ActionKind.ITEM:
            if side is not Side.PLAYER:
                raise InvalidAction("Only the player can use items")
            result = self._use_item(item_id)
        else:
            actor.spend_sp(cost)
            result = ActionResult(actor=side, kind=kind, ability=ability, sp_spent=cost)
            if kind is ActionKind.ATTACK:
                self._attack(side, result, special=False)
            elif kind is ActionKind.ABILITY and ability is Ability.SPECIAL_ATTACK:
                self._attack(side, result, special=True)
            elif kind is ActionKind.ABILITY:
                self._heal_self(side, result)
            elif kind is ActionKind.DEFEND:
                self._defending[side] = True
                self.log.add("defend", f"{actor.name} takes a defensive stance!", actor=actor.name)
            elif kind is ActionKind.FLEE:
                self._flee(side, result)
            elif kind is ActionKind.SKIP:
                self.log.add("skip", f"{actor.name} hesitates and does nothing.", actor=actor.name)

        self.player.check_invariants()
        self.opponent.check_invariants()

        if self.state is BattleState.IN_PROGRESS and not self._check_end():
            self._switch_turn()
        return result

    def _attack(self, side: Side, result: ActionResult, special: bool) -> None:
        attacker = self.combatant(side)
        defender = self.combatant(side.other)
        defending = self._defending[side.other]
        roll = self.damage.special if special else self.damage.basic
        breakdown = roll(attacker.effective_atk, defender.effective_def, defending=defending, rng=self.rng)
        if defending:
            self.log.add("defend", f"{defender.name} is defending and takes reduced damage!", actor=defender.name)
            self._defending[side.other] = False
        dealt = defender.take_damage(breakdown.final)
        result.damage = dealt
        verb = f"uses {Ability.SPECIAL_ATTACK.label} on" if special else "attacks"
        self.log.add(
            "ability" if special else "attack",
            f"{attacker.name} {verb} {defender.name} for {dealt} damage!",
            attacker=attacker.name,
            defender=defender.name,
            damage=dealt,
        )
        self.log.add("status", f"{defender.name} has {defender.hp} HP remaining.", hp=defender.hp)

    def _heal_self(self, side: Side, result: ActionResult) -> None:
        actor = self.combatant(side)
        healed = actor.heal(self.damage.heal_amount(actor.effective_max_hp))
        result.healed = healed
        self.log.add(
            "ability",
            f"{actor.name} uses {Ability.HEAL_SELF.label} and heals for {healed} HP!",
            actor=actor.name,
            healed=healed,
        )

    def _flee(self, side: Side, result: ActionResult) -> None:
        actor = self.combatant(side)
        attempt = FleeAction(self.rng, self.config.combat).attempt()
        result.fled = attempt.success
        if attempt.success:
            self.log.add("flee", f"{actor.name} ran away!", actor=actor.name)
            self._end(OutcomeKind.ESCAPE)
        else:
            self.log.add("flee", f"{actor.name} tried to flee but couldn't escape!", actor=actor.name)

    def _use_item(self, item_id: Optional[str]) -> ActionResult:
        actor = self.player
        if self._item_uses_left <= 0:
            self._refuse(actor, ExhaustedItemUse("You've already used an item this battle!"))
        if not item_id:
            raise InvalidAction("Item actions need an 'item_id'")
        if self.inventory is None:
            raise InvalidAction("No inventory lookup is configured for this battle")

        # The lookup may be a network round-trip; the battle lock stays held.
        item = self.inventory.get_item(item_id)
        effects = item.effects
        hp_amount = actor.effective_max_hp if effects.full_restore_hp else effects.health
        sp_amount = actor.effective_max_sp if effects.full_restore_sp else effects.sp
        healed = actor.heal(hp_amount)
        restored = actor.restore_sp(sp_amount)
        self._item_uses_left -= 1
        self.log.add(
            "item",
            f"You used {item.name} on {actor.name} and restored {healed} HP and {restored} SP!",
            item=item.id,
            healed=healed,
            sp_restored=restored,
        )
        return ActionResult(actor=Side.PLAYER, kind=ActionKind.ITEM, healed=healed, sp_restored=restored)

    def _check_end(self) -> bool:
        if self.opponent.is_defeated():
            self._end(OutcomeKind.VICTORY)
            return True
        if self.player.is_defeated():
            self._end(OutcomeKind.DEFEAT)
            return True
        return False

    def _end(self, outcome: OutcomeKind) -> None:
        self.state = BattleState.ENDED
        self.outcome = outcome
        if outcome is OutcomeKind.VICTORY:
            message = f"{self.opponent.name} has been defeated. You won the battle!"
        elif outcome is OutcomeKind.DEFEAT:
            message = f"{self.player.name} has been defeated. You lost the battle."
        else:
            message = "You escaped from the battle."
        self.log.add(outcome.value, message, turns=self.turn_count)

    def _switch_turn(self) -> None:
        new_owner = self.turn_owner.other
        # A defensive stance lasts until its owner's next turn begins.
        self._defending[new_owner] = False
        if new_owner is Side.PLAYER:
            self.turn_count += 1
        self.turn_owner = new_owner
        self.log.add(
            "turn",
            f"Turn {self.turn_count + 1}: {self.combatant(new_owner).name}'s turn",
            turn=self.turn_count,
            owner=new_owner.value,
        )
