from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .combat.actions import ActionKind, ActionResult
from .combat.battle import Battle
from .combat.combatant import ActiveBuffs, Combatant
from .combat.outcome import BattleOutcome
from .config import GameConfig
from .core.rng import RNG
from .encounters.content import Biome, ContentRegistry
from .encounters.generator import Encounter, EncounterGenerator
from .errors import InvalidAction, PersistenceError
from .persistence.interfaces import InventoryLookup, OutcomeSink
from .rewards import RewardCalculator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncounterRequest:
    tier: int
    biome: Optional[Union[Biome, str]] = None
    pet_id: Optional[str] = None


@dataclass(frozen=True)
class BattleHandle:
    id: str


@dataclass
class _Session:
    battle: Battle
    encounter: Encounter
    pet_id: Optional[str]
    outcome: Optional[BattleOutcome] = None
    committed: bool = False
    commit_error: Optional[PersistenceError] = None


class BattleService:
    """
    Entry point for the surrounding application.

    Holds any number of independent battles keyed by handle. The player's
    creature is copied at battle start, so the caller's object is never
    mutated; the final state travels back through the outcome and the
    persistence sink, which is called once per finished battle. A failing
    commit does not hide the battle: the error is kept on the session and
    can be retried with ``retry_commit``.

    Sessions stay registered until the caller drops them with ``release``
    (finished battles) or ``abandon`` (any battle).
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        inventory: Optional[InventoryLookup] = None,
        persistence: Optional[OutcomeSink] = None,
        rng=None,
        clock: Callable[[], float] = time.time,
        registry: Optional[ContentRegistry] = None,
    ) -> None:
        self.config = config or GameConfig.default()
        self.inventory = inventory
        self.persistence = persistence
        self.rng = rng or RNG()
        self.clock = clock
        self.encounters = EncounterGenerator(self.config.encounters, self.rng, registry)
        self.rewards = RewardCalculator(self.config, self.rng)
        self._sessions: Dict[str, _Session] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def start_battle(self, player: Combatant, request: EncounterRequest) -> BattleHandle:
        encounter = self.encounters.generate(request.tier, request.biome)
        fighter = self._snapshot(player)
        battle = Battle(
            fighter,
            encounter.opponent,
            config=self.config,
            rng=self.rng,
            inventory=self.inventory,
            battleground=encounter.area_name,
        )
        with self._lock:
            handle = BattleHandle(id=f"battle-{next(self._ids)}")
            self._sessions[handle.id] = _Session(battle=battle, encounter=encounter, pet_id=request.pet_id)
        logger.info("Started %s: %s vs %s (tier %d)", handle.id, fighter.name, encounter.opponent.name, encounter.tier)
        battle.start()
        self._finalize_if_ended(handle)
        return handle

    def submit_action(
        self, handle: BattleHandle, kind: Union[ActionKind, str], payload: Optional[Mapping[str, Any]] = None
    ) -> ActionResult:
        session = self._session(handle)
        result = session.battle.submit_action(kind, payload)
        self._finalize_if_ended(handle)
        return result

    def get_battle(self, handle: BattleHandle) -> Battle:
        return self._session(handle).battle

    def get_encounter(self, handle: BattleHandle) -> Encounter:
        return self._session(handle).encounter

    def get_battle_log(self, handle: BattleHandle) -> List[str]:
        return self._session(handle).battle.messages()

    def get_outcome(self, handle: BattleHandle) -> Optional[BattleOutcome]:
        return self._session(handle).outcome

    def commit_error(self, handle: BattleHandle) -> Optional[PersistenceError]:
        """The last persistence failure for a finished battle, if its commit has not gone through."""
        return self._session(handle).commit_error

    def retry_commit(self, handle: BattleHandle) -> bool:
        """Retry a failed commit. Returns True once the outcome is persisted."""
        session = self._session(handle)
        if session.outcome is None:
            raise InvalidAction(f"Battle {handle.id} has not ended")
        self._commit(handle, session)
        return session.committed or self.persistence is None

    def release(self, handle: BattleHandle) -> BattleOutcome:
        """Forget a finished battle and return its outcome."""
        session = self._session(handle)
        if session.outcome is None:
            raise InvalidAction(f"Battle {handle.id} is still in progress; use abandon()")
        with self._lock:
            self._sessions.pop(handle.id, None)
        if session.commit_error is not None:
            logger.warning("Released %s with an uncommitted outcome", handle.id)
        return session.outcome

    def abandon(self, handle: BattleHandle) -> None:
        with self._lock:
            session = self._sessions.pop(handle.id, None)
        if session is None:
            raise InvalidAction(f"Unknown battle handle: {handle.id}")
        logger.info("Abandoned %s", handle.id)

    def _session(self, handle: BattleHandle) -> _Session:
        with self._lock:
            session = self._sessions.get(handle.id)
        if session is None:
            raise InvalidAction(f"Unknown battle handle: {handle.id}")
        return session

    def _snapshot(self, player: Combatant) -> Combatant:
        fighter = player.copy()
        buffs = fighter.active_buffs
        if buffs.stats and buffs.is_expired(self.clock()):
            logger.debug("Dropping expired buffs for %s: %s", fighter.name, buffs.stats)
            fighter.active_buffs = ActiveBuffs()
            fighter.hp = min(fighter.hp, fighter.effective_max_hp)
            fighter.sp = min(fighter.sp, fighter.effective_max_sp)
        fighter.check_invariants()
        return fighter

    def _finalize_if_ended(self, handle: BattleHandle) -> None:
        session = self._session(handle)
        battle = session.battle
        with self._lock:
            if not battle.ended or session.outcome is not None:
                return
            outcome = self.rewards.finalize(
                battle.outcome,
                battle.player,
                battle.opponent,
                session.encounter.tier,
                turns=battle.turn_count,
            )
            session.outcome = outcome
        self._announce(battle, outcome)
        self._commit(handle, session)

    def _commit(self, handle: BattleHandle, session: _Session) -> None:
        if self.persistence is None or session.committed:
            return
        try:
            self.persistence.commit_outcome(session.pet_id, session.battle.player, session.outcome)
        except PersistenceError as exc:
            session.commit_error = exc
            logger.error("Could not commit outcome of %s: %s", handle.id, exc)
            return
        session.committed = True
        session.commit_error = None
        logger.info("Committed outcome of %s (%s)", handle.id, session.outcome.kind.value)

    def _announce(self, battle: Battle, outcome: BattleOutcome) -> None:
        if outcome.experience_gained:
            battle.log.add("reward", f"{battle.player.name} gained {outcome.experience_gained} experience!")
        if outcome.currency_gained:
            battle.log.add("reward", f"You received {outcome.currency_gained} coins!")
        for drop in outcome.loot:
            battle.log.add("reward", f"Found a {drop.rarity.value} {drop.type.value}!")
        if outcome.levels_gained:
            battle.log.add("level_up", f"{battle.player.name} reached level {battle.player.level}!")
