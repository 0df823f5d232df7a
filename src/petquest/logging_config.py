from __future__ import annotations

import logging
import os
from typing import Optional

LOG_LEVEL_ENV_VAR = "PETQUEST_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def resolve_level(name: Optional[str], default: int) -> int:
    """Turn a level name ("debug") or number ("10") into a logging level."""
    if not name:
        return default
    name = name.strip()
    if name.isdigit():
        return int(name)
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else default


def configure_logging(level: int = logging.INFO) -> int:
    """Configure the root logger for command-line use.

    PETQUEST_LOG_LEVEL, when set, takes precedence over ``level``. HTTP
    transport chatter stays at WARNING unless the engine itself is louder.
    Returns the effective level.
    """
    effective = resolve_level(os.getenv(LOG_LEVEL_ENV_VAR), level)
    logging.basicConfig(level=effective, format=LOG_FORMAT)
    logging.getLogger("urllib3").setLevel(max(effective, logging.WARNING))
    return effective
