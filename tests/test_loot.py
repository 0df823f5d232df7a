import pytest

from petquest.core.rng import RNG
from petquest.loot import ItemType, LootGenerator, LootRequest, Rarity, drop_probability, slot_count


class R:
    def __init__(self, values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)

    def choice(self, seq):
        return seq[0]


@pytest.mark.parametrize("tier, allowed", [(1, {1}), (2, {1, 2}), (3, {2}), (4, {2, 3})])
def test_slot_count_by_tier(tier, allowed):
    rng = RNG(seed=5)
    assert {slot_count(tier, rng) for _ in range(300)} == allowed


def test_drop_probability_and_cap():
    assert drop_probability(1, 1) == pytest.approx(0.55)
    assert drop_probability(3, 2) == pytest.approx(0.8)
    assert drop_probability(4, 10) == pytest.approx(0.85)


def test_successful_slot_picks_type_then_rarity():
    # slot roll 0.0 drops; rarity roll 0.99 -> 99 of 100 -> rare
    drops = LootGenerator(rng=R([0.0, 0.99])).generate(1, level=1)
    assert drops == [LootRequest(ItemType.MEDICINE, Rarity.RARE)]
    assert drops[0].to_dict() == {"type": "medicine", "rarity": "rare"}


def test_failed_roll_drops_nothing():
    assert LootGenerator(rng=R([0.9])).generate(1, level=1) == []


def test_low_tiers_never_legendary():
    gen = LootGenerator(rng=RNG(seed=8))
    for tier in (1, 2):
        for _ in range(2000):
            assert all(d.rarity is not Rarity.LEGENDARY for d in gen.generate(tier, level=5))


def test_top_tier_can_be_legendary():
    gen = LootGenerator(rng=RNG(seed=8))
    rarities = {d.rarity for _ in range(2000) for d in gen.generate(4, level=4)}
    assert Rarity.LEGENDARY in rarities


def test_types_come_from_configured_set():
    gen = LootGenerator(rng=RNG(seed=2))
    types = {d.type for _ in range(500) for d in gen.generate(3, level=3)}
    assert types == {ItemType.MEDICINE, ItemType.EQUIPMENT, ItemType.FOOD}


def test_invalid_tier():
    with pytest.raises(ValueError):
        LootGenerator(rng=RNG(seed=1)).generate(7)
