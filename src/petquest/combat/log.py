from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

# Events forwarded to logging at INFO; everything else goes to DEBUG.
_INFO_EVENTS = frozenset({"victory", "defeat", "escape", "refused"})


@dataclass(frozen=True)
class CombatEvent:
    """A log event emitted during battle.

    Common event types: "start", "turn", "attack", "ability", "defend",
    "item", "flee", "refused", "victory", "defeat", "escape".
    """

    type: str
    message: str
    data: Optional[Dict[str, Any]] = None


class CombatLog:
    """Append-only in-memory battle log, kept for UI display."""

    def __init__(self) -> None:
        self._events: List[CombatEvent] = []

    def add(self, event_type: str, message: str, **data: Any) -> None:
        ev = CombatEvent(type=event_type, message=message, data=data or None)
        self._events.append(ev)
        if event_type in _INFO_EVENTS:
            logger.info(message)
        else:
            logger.debug(message)

    def events(self) -> List[CombatEvent]:
        return list(self._events)

    def messages(self) -> List[str]:
        return [ev.message for ev in self._events]

    def __len__(self) -> int:
        return len(self._events)
