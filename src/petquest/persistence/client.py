from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Optional

import requests

from petquest.errors import PersistenceError
from petquest.items import InventoryItem

if TYPE_CHECKING:
    from petquest.combat.combatant import Combatant
    from petquest.combat.outcome import BattleOutcome
    from petquest.loot.generator import LootRequest

logger = logging.getLogger(__name__)


class PetQuestAPI:
    """HTTP adapter for the PetQuest backend.

    Implements both boundary protocols the engine consumes: item lookup for
    the Use Item action and the one-shot commit after a battle ends.

    Usage:
        api = PetQuestAPI("https://petquest.example", token="...")
        item = api.get_item("64f0c2")
        api.commit_outcome("pet-1", combatant, outcome)
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        max_attempts: int = 2,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        if not token:
            raise ValueError("An API token is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self._sleep = sleep
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/json",
                "User-Agent": "petquest-combat/0.1",
            }
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        resp: Optional[requests.Response] = None
        for attempt in range(self.max_attempts):
            logger.debug("%s %s (attempt %d)", method, url, attempt + 1)
            try:
                resp = self._session.request(method, url, timeout=self.timeout, **kwargs)
            except requests.RequestException as exc:
                raise PersistenceError(f"{method} {url} failed: {exc}") from exc
            if resp.status_code == 429 and attempt + 1 < self.max_attempts:
                sleep_for = _retry_after(resp.headers.get("Retry-After"))
                logger.warning("Rate limited by %s. Sleeping for %.2fs", url, sleep_for)
                self._sleep(sleep_for)
                continue
            return resp
        return resp

    def _raise_for_status(self, resp: requests.Response, context: str) -> None:
        if 200 <= resp.status_code < 300:
            return
        try:
            data = resp.json()
        except ValueError:
            data = {"message": resp.text}
        raise PersistenceError(f"PetQuest API {context} failed: {resp.status_code} {data}")

    def _json(self, resp: requests.Response, context: str) -> Any:
        try:
            body = resp.json()
        except ValueError as exc:
            raise PersistenceError(f"PetQuest API {context} returned invalid JSON") from exc
        # Some endpoints wrap their payload as {"success": ..., "data": ...}
        if isinstance(body, dict) and "success" in body and "data" in body:
            if not body["success"]:
                raise PersistenceError(f"PetQuest API {context} reported failure: {body.get('message', body)}")
            return body["data"]
        return body

    def get_item(self, item_id: str) -> InventoryItem:
        context = f"get item {item_id}"
        resp = self._request("GET", f"/api/items/{item_id}")
        self._raise_for_status(resp, context)
        data = self._json(resp, context)
        if not isinstance(data, dict):
            raise PersistenceError(f"PetQuest API {context} returned an unexpected body")
        try:
            return InventoryItem.from_api(data)
        except ValueError as exc:
            raise PersistenceError(f"PetQuest API {context}: {exc}") from exc

    def commit_pet(self, pet_id: str, combatant: "Combatant") -> Dict[str, Any]:
        """Write the pet's stats, current HP/SP, level and experience.

        Older PetQuest backends only whitelist the stat and experience fields on
        this route and silently drop ``level``; the level is still sent so that a
        backend accepting it stays in sync.
        """
        state = combatant.persisted_state()
        stats = state["stats"]
        payload = {
            "hp": stats["hp"],
            "sp": stats["sp"],
            "atk": stats["atk"],
            "def": stats["def"],
            "currentHP": state["currentHP"],
            "currentSP": state["currentSP"],
            "level": state["level"],
            "experience": state["experience"],
        }
        context = f"update pet {pet_id}"
        resp = self._request("PUT", f"/api/pets/{pet_id}/stats", json=payload)
        self._raise_for_status(resp, context)
        return self._json(resp, context)

    def grant_rewards(self, loot: Iterable["LootRequest"], currency: int) -> None:
        items = [req.to_dict() for req in loot]
        # The rewards endpoint rejects an empty item list.
        if items:
            resp = self._request("POST", "/api/users/me/battle-rewards", json={"items": items})
            self._raise_for_status(resp, "grant battle rewards")
        if currency:
            resp = self._request("PUT", "/api/users/me/coins", json={"delta": currency})
            self._raise_for_status(resp, "update coins")
        logger.info("Granted %d item(s) and %d coin(s)", len(items), currency)

    def commit_outcome(self, pet_id: Optional[str], combatant: "Combatant", outcome: "BattleOutcome") -> None:
        if pet_id:
            self.commit_pet(pet_id, combatant)
        else:
            logger.debug("No pet id given; skipping pet stat update")
        self.grant_rewards(outcome.loot, outcome.currency_gained)


def _retry_after(value: Optional[str], default: float = 1.0) -> float:
    if value is None:
        return default
    try:
        return max(0.0, float(value))
    except ValueError:
        return default
