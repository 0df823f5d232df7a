import json

import pytest
import requests
import responses

from petquest.combat.combatant import Combatant
from petquest.combat.outcome import BattleOutcome, OutcomeKind
from petquest.errors import PersistenceError
from petquest.loot import ItemType, LootRequest, Rarity
from petquest.persistence import PetQuestAPI

BASE = "https://petquest.test"


def _api(**kwargs):
    kwargs.setdefault("sleep", lambda s: None)
    return PetQuestAPI(BASE, token="tok", **kwargs)


def _pet():
    return Combatant("Biscuit", "dog", max_hp=90, max_sp=40, atk=18, defense=9, level=3, experience=120)


def test_requires_token_and_base():
    with pytest.raises(ValueError):
        PetQuestAPI(BASE, token="")
    with pytest.raises(ValueError):
        PetQuestAPI("", token="tok")


@responses.activate
def test_get_item_bare_document():
    responses.add(
        responses.GET,
        f"{BASE}/api/items/i1",
        json={"_id": "i1", "name": "Berry", "type": "food", "effects": {"health": 15}},
        status=200,
    )
    item = _api().get_item("i1")
    assert item.name == "Berry"
    assert item.effects.health == 15
    assert responses.calls[0].request.headers["Authorization"] == "Bearer tok"


@responses.activate
def test_get_item_enveloped_sentinel():
    responses.add(
        responses.GET,
        f"{BASE}/api/items/i2",
        json={"success": True, "data": {"_id": "i2", "name": "Max Elixir", "effects": {"health": 5000, "sp": 1000}}},
        status=200,
    )
    item = _api().get_item("i2")
    assert item.effects.full_restore_hp
    assert item.effects.full_restore_sp


@responses.activate
def test_envelope_failure_raises():
    responses.add(
        responses.GET,
        f"{BASE}/api/items/i3",
        json={"success": False, "data": None, "message": "nope"},
        status=200,
    )
    with pytest.raises(PersistenceError):
        _api().get_item("i3")


@responses.activate
def test_error_status_raises():
    responses.add(responses.GET, f"{BASE}/api/items/missing", status=404, body=json.dumps({"message": "not found"}))
    with pytest.raises(PersistenceError, match="404"):
        _api().get_item("missing")


@responses.activate
def test_transport_error_raises():
    responses.add(responses.GET, f"{BASE}/api/items/i4", body=requests.ConnectionError("boom"))
    with pytest.raises(PersistenceError):
        _api().get_item("i4")


@responses.activate
def test_rate_limit_retried_once():
    slept = []
    responses.add(responses.GET, f"{BASE}/api/items/i5", status=429, headers={"Retry-After": "2"})
    responses.add(responses.GET, f"{BASE}/api/items/i5", json={"id": "i5", "name": "Nut"}, status=200)
    item = _api(sleep=slept.append).get_item("i5")
    assert item.name == "Nut"
    assert slept == [2.0]
    assert len(responses.calls) == 2


@responses.activate
def test_rate_limit_twice_gives_up():
    responses.add(responses.GET, f"{BASE}/api/items/i6", status=429)
    responses.add(responses.GET, f"{BASE}/api/items/i6", status=429)
    with pytest.raises(PersistenceError, match="429"):
        _api().get_item("i6")


@responses.activate
def test_commit_pet_sends_base_values():
    responses.add(responses.PUT, f"{BASE}/api/pets/p1/stats", json={"success": True, "data": {"ok": 1}}, status=200)
    pet = _pet()
    pet.take_damage(30)
    _api().commit_pet("p1", pet)
    body = json.loads(responses.calls[0].request.body)
    assert body == {
        "hp": 90,
        "sp": 40,
        "atk": 18,
        "def": 9,
        "currentHP": 60,
        "currentSP": 40,
        "level": 3,
        "experience": 120,
    }


@responses.activate
def test_grant_rewards_skips_empty_item_list():
    responses.add(responses.PUT, f"{BASE}/api/users/me/coins", json={"coins": 250}, status=200)
    _api().grant_rewards([], 150)
    assert len(responses.calls) == 1
    assert json.loads(responses.calls[0].request.body) == {"delta": 150}


@responses.activate
def test_commit_outcome_posts_everything():
    responses.add(responses.PUT, f"{BASE}/api/pets/p1/stats", json={}, status=200)
    responses.add(responses.POST, f"{BASE}/api/users/me/battle-rewards", json={"success": True, "data": []}, status=200)
    responses.add(responses.PUT, f"{BASE}/api/users/me/coins", json={}, status=200)
    outcome = BattleOutcome(
        kind=OutcomeKind.VICTORY,
        experience_gained=25,
        currency_gained=100,
        loot=[LootRequest(ItemType.FOOD, Rarity.UNCOMMON)],
    )
    _api().commit_outcome("p1", _pet(), outcome)
    assert [c.request.method for c in responses.calls] == ["PUT", "POST", "PUT"]
    assert json.loads(responses.calls[1].request.body) == {"items": [{"type": "food", "rarity": "uncommon"}]}


@responses.activate
def test_commit_outcome_without_pet_or_rewards_is_silent():
    _api().commit_outcome(None, _pet(), BattleOutcome(kind=OutcomeKind.ESCAPE))
    assert len(responses.calls) == 0
