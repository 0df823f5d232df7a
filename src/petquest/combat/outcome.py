from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from petquest.loot.generator import LootRequest
    from petquest.progression.leveling import LevelUpResult


class OutcomeKind(str, Enum):
    VICTORY = "victory"
    DEFEAT = "defeat"
    ESCAPE = "escape"


@dataclass
class BattleOutcome:
    """
    Payload produced once a battle has ended.

    Attributes:
        kind: victory, defeat or escape.
        experience_gained: Experience awarded to the player's creature.
        currency_gained: Coins awarded to the player.
        loot: Loot requests for the persistence boundary to resolve.
        level_up: Level-up summary, or None when no experience was applied.
        final_state: Persistable snapshot of the player's creature.
        turns: Full rounds played.
    """

    kind: OutcomeKind
    experience_gained: int = 0
    currency_gained: int = 0
    loot: List["LootRequest"] = field(default_factory=list)
    level_up: Optional["LevelUpResult"] = None
    final_state: Dict[str, Any] = field(default_factory=dict)
    turns: int = 0

    @property
    def levels_gained(self) -> int:
        return self.level_up.levels_gained if self.level_up else 0
