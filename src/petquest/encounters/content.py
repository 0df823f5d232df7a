from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union


class Biome(str, Enum):
    FOREST = "forest"
    ICELAND = "iceland"
    DESERT = "desert"

    @classmethod
    def parse(cls, value: Union["Biome", str]) -> "Biome":
        if isinstance(value, Biome):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown biome: {value!r}") from None


class AbilityCategory(str, Enum):
    OFFENSIVE = "offensive"
    DEFENSIVE = "defensive"
    STATUS = "status"
    SUPPORT = "support"


@dataclass(frozen=True)
class AbilityDef:
    name: str
    category: AbilityCategory


@dataclass(frozen=True)
class Archetype:
    """Opponent template: display name, sprite key and unscaled stat block."""

    name: str
    key: str
    hp: int
    sp: int
    atk: int
    defense: int


@dataclass(frozen=True)
class BiomeContent:
    biome: Biome
    archetypes: Tuple[Archetype, ...]
    abilities: Tuple[AbilityDef, ...]
    name_prefixes: Tuple[str, ...]
    name_suffixes: Tuple[str, ...]
    descriptions: Tuple[str, ...]


def _abilities(*pairs: Tuple[str, AbilityCategory]) -> Tuple[AbilityDef, ...]:
    return tuple(AbilityDef(name, category) for name, category in pairs)


NEUTRAL_ABILITIES: Tuple[AbilityDef, ...] = _abilities(
    ("Tackle", AbilityCategory.OFFENSIVE),
    ("Guard Up", AbilityCategory.DEFENSIVE),
    ("Growl", AbilityCategory.STATUS),
    ("Second Wind", AbilityCategory.SUPPORT),
)


class ContentRegistry:
    """In-memory registry of biome content used to flavour encounters.

    The default set covers forest, iceland and desert with three archetypes
    and four abilities (one per category) each.
    """

    def __init__(
        self,
        biomes: Optional[Iterable[BiomeContent]] = None,
        neutral_abilities: Iterable[AbilityDef] = NEUTRAL_ABILITIES,
    ) -> None:
        self._biomes: Dict[Biome, BiomeContent] = {}
        self.neutral_abilities: Tuple[AbilityDef, ...] = tuple(neutral_abilities)
        if not self.neutral_abilities:
            raise ValueError("The neutral ability pool must not be empty")
        if biomes is not None:
            for content in biomes:
                self.add(content)
        else:
            self._bootstrap_defaults()

    def add(self, content: BiomeContent) -> None:
        if content.biome in self._biomes:
            raise ValueError(f"Duplicate biome: {content.biome.value}")
        if not content.archetypes:
            raise ValueError(f"Biome '{content.biome.value}' has no archetypes")
        if not content.abilities:
            raise ValueError(f"Biome '{content.biome.value}' has no abilities")
        self._biomes[content.biome] = content

    def get(self, biome: Union[Biome, str]) -> BiomeContent:
        biome = Biome.parse(biome)
        try:
            return self._biomes[biome]
        except KeyError as e:
            raise ValueError(f"No content registered for biome: {biome.value}") from e

    def biomes(self) -> List[Biome]:
        return list(self._biomes)

    def _bootstrap_defaults(self) -> None:
        self.add(
            BiomeContent(
                biome=Biome.FOREST,
                archetypes=(
                    Archetype("Fierce Wolfling", "wolf_idle", hp=75, sp=25, atk=16, defense=12),
                    Archetype("Shadow Bat", "bat_idle", hp=40, sp=25, atk=12, defense=3),
                    Archetype("Gloom Owl", "owl_idle", hp=60, sp=35, atk=14, defense=8),
                ),
                abilities=_abilities(
                    ("Vine Lash", AbilityCategory.OFFENSIVE),
                    ("Bark Skin", AbilityCategory.DEFENSIVE),
                    ("Spore Cloud", AbilityCategory.STATUS),
                    ("Moonlit Mend", AbilityCategory.SUPPORT),
                ),
                name_prefixes=("Mystic", "Twilight", "Emerald"),
                name_suffixes=("Forest", "Grove", "Woods"),
                descriptions=(
                    "A dense forest with glowing mushrooms.",
                    "A misty woodland hiding ancient secrets.",
                    "A lush grove teeming with wild creatures.",
                ),
            )
        )
        self.add(
            BiomeContent(
                biome=Biome.ICELAND,
                archetypes=(
                    Archetype("Polar Yeti", "yeti_idle", hp=120, sp=40, atk=20, defense=18),
                    Archetype("Ice Wraith", "ice_wraith_idle", hp=70, sp=60, atk=22, defense=8),
                    Archetype("Frost Drake", "frost_drake_idle", hp=100, sp=50, atk=24, defense=15),
                ),
                abilities=_abilities(
                    ("Frost Bite", AbilityCategory.OFFENSIVE),
                    ("Ice Shell", AbilityCategory.DEFENSIVE),
                    ("Deep Freeze", AbilityCategory.STATUS),
                    ("Glacial Renewal", AbilityCategory.SUPPORT),
                ),
                name_prefixes=("Frosty", "Glacial", "Arctic"),
                name_suffixes=("Tundra", "Glacier", "Fjord"),
                descriptions=(
                    "A frozen tundra swept by icy winds.",
                    "A glacial expanse with shimmering ice.",
                    "An arctic fjord hiding cold dangers.",
                ),
            )
        )
        self.add(
            BiomeContent(
                biome=Biome.DESERT,
                archetypes=(
                    Archetype("Sand Viper", "sand_viper_idle", hp=55, sp=30, atk=18, defense=6),
                    Archetype("Scorpion King", "scorpion_king_idle", hp=110, sp=40, atk=22, defense=20),
                    Archetype("Dust Wraith", "dust_wraith_idle", hp=65, sp=55, atk=20, defense=8),
                ),
                abilities=_abilities(
                    ("Sand Blast", AbilityCategory.OFFENSIVE),
                    ("Hardened Carapace", AbilityCategory.DEFENSIVE),
                    ("Venom Sting", AbilityCategory.STATUS),
                    ("Oasis Mirage", AbilityCategory.SUPPORT),
                ),
                name_prefixes=("Scorching", "Mirage", "Dune"),
                name_suffixes=("Desert", "Dunes", "Wastes"),
                descriptions=(
                    "A scorching desert with deadly sands.",
                    "A shimmering wasteland full of illusions.",
                    "A barren expanse hiding fierce predators.",
                ),
            )
        )
