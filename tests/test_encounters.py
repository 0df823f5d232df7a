import pytest

from petquest.core.rng import RNG
from petquest.encounters import (
    AbilityCategory,
    AbilityDef,
    Archetype,
    Biome,
    BiomeContent,
    ContentRegistry,
    EncounterGenerator,
    ability_count,
    stat_multiplier,
)

ARCH = Archetype("Test Beast", "beast", hp=100, sp=50, atk=20, defense=10)


@pytest.mark.parametrize("tier", [0, 5, -1])
def test_tier_out_of_range(tier):
    with pytest.raises(ValueError):
        EncounterGenerator(rng=RNG(seed=1)).generate(tier)


def test_unknown_biome():
    with pytest.raises(ValueError):
        EncounterGenerator(rng=RNG(seed=1)).generate(1, "volcano")


@pytest.mark.parametrize("tier, allowed", [(1, {1}), (2, {1, 2}), (3, {2}), (4, {2, 3})])
def test_ability_count_by_tier(tier, allowed):
    rng = RNG(seed=tier)
    seen = {ability_count(tier, rng) for _ in range(200)}
    assert seen == allowed


def test_stat_multiplier_is_linear():
    assert [stat_multiplier(t) for t in (1, 2, 3, 4)] == [1.0, 1.5, 2.0, 2.5]


def test_scaling_without_support():
    gen = EncounterGenerator(rng=RNG(seed=1))
    opp = gen.build_opponent(ARCH, 3, [AbilityDef("Tackle", AbilityCategory.OFFENSIVE)])
    assert (opp.max_hp, opp.max_sp, opp.atk, opp.defense) == (200, 100, 40, 20)
    assert opp.hp == opp.max_hp and opp.sp == opp.max_sp
    assert opp.level == 3
    assert opp.abilities == ["Tackle"]


def test_support_ability_boosts_pools():
    gen = EncounterGenerator(rng=RNG(seed=1))
    opp = gen.build_opponent(ARCH, 2, [AbilityDef("Second Wind", AbilityCategory.SUPPORT)])
    # 150 * 1.1 and 75 * 1.2
    assert (opp.max_hp, opp.max_sp) == (165, 90)
    assert (opp.atk, opp.defense) == (30, 15)


def test_stats_round_half_up():
    gen = EncounterGenerator(rng=RNG(seed=1))
    opp = gen.build_opponent(Archetype("Mite", "mite", hp=11, sp=3, atk=5, defense=1), 2, [])
    # 16.5 -> 17, 4.5 -> 5, 7.5 -> 8, 1.5 -> 2
    assert (opp.max_hp, opp.max_sp, opp.atk, opp.defense) == (17, 5, 8, 2)


def test_generate_uses_biome_content(scripted):
    # tier 3: two draws, both from the biome pool
    gen = EncounterGenerator(rng=scripted([0.0, 0.0]))
    enc = gen.generate(3, "iceland")
    assert enc.biome is Biome.ICELAND
    assert enc.opponent.name == "Polar Yeti"
    assert enc.opponent.abilities == ["Frost Bite", "Ice Shell"]
    assert enc.area_name == "Frosty Tundra"
    assert enc.description == "A frozen tundra swept by icy winds."


def test_random_biome_when_unspecified(scripted):
    gen = EncounterGenerator(rng=scripted([0.5]))
    enc = gen.generate(1)
    assert enc.biome is Biome.FOREST
    assert enc.opponent.name == "Fierce Wolfling"


def test_categories_unique_below_top_tier():
    gen = EncounterGenerator(rng=RNG(seed=99))
    for tier in (1, 2, 3):
        for _ in range(100):
            enc = gen.generate(tier)
            categories = [a.category for a in enc.abilities]
            assert len(categories) == len(set(categories))
            assert enc.opponent.level == tier


def test_filtered_pool_empty_falls_back(scripted):
    lash = AbilityDef("Vine Lash", AbilityCategory.OFFENSIVE)
    tackle = AbilityDef("Tackle", AbilityCategory.OFFENSIVE)
    registry = ContentRegistry(
        biomes=[
            BiomeContent(
                biome=Biome.FOREST,
                archetypes=(ARCH,),
                abilities=(lash,),
                name_prefixes=("Mystic",),
                name_suffixes=("Grove",),
                descriptions=("Quiet.",),
            )
        ],
        neutral_abilities=[tackle],
    )
    # first draw from the biome, second from the neutral pool
    gen = EncounterGenerator(rng=scripted([0.0, 0.95]), registry=registry)
    assert gen.draw_abilities(3, registry.get("forest").abilities) == [lash, tackle]


def test_registry_rejects_duplicates():
    registry = ContentRegistry()
    with pytest.raises(ValueError):
        registry.add(registry.get(Biome.DESERT))
    assert set(registry.biomes()) == {Biome.FOREST, Biome.ICELAND, Biome.DESERT}


def test_top_tier_allows_repeated_categories(scripted):
    registry = ContentRegistry()
    # ability count roll, then one biome draw and one neutral draw
    gen = EncounterGenerator(rng=scripted([0.0, 0.0, 0.95]), registry=registry)
    drawn = gen.draw_abilities(4, registry.get(Biome.FOREST).abilities)
    assert [a.name for a in drawn] == ["Vine Lash", "Tackle"]
    assert {a.category for a in drawn} == {AbilityCategory.OFFENSIVE}
