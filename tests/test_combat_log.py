import logging

import pytest

from petquest.combat.log import CombatLog
from petquest.logging_config import configure_logging, resolve_level


def test_log_keeps_order_and_data():
    log = CombatLog()
    log.add("start", "Battle started!")
    log.add("attack", "A attacks B for 3 damage!", damage=3)
    assert log.messages() == ["Battle started!", "A attacks B for 3 damage!"]
    assert log.events()[1].data == {"damage": 3}
    assert log.events()[0].data is None
    assert len(log) == 2


def test_terminal_events_logged_at_info(caplog):
    log = CombatLog()
    with caplog.at_level(logging.DEBUG, logger="petquest.combat.log"):
        log.add("attack", "hit")
        log.add("victory", "won")
    levels = {r.getMessage(): r.levelno for r in caplog.records}
    assert levels == {"hit": logging.DEBUG, "won": logging.INFO}


def test_configure_logging_honours_env(monkeypatch):
    calls = {}
    monkeypatch.setenv("PETQUEST_LOG_LEVEL", "warning")
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
    assert configure_logging(logging.DEBUG) == logging.WARNING
    assert calls["level"] == logging.WARNING


def test_configure_logging_default_level(monkeypatch):
    monkeypatch.delenv("PETQUEST_LOG_LEVEL", raising=False)
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: None)
    assert configure_logging(logging.DEBUG) == logging.DEBUG


@pytest.mark.parametrize(
    "name, expected",
    [(None, logging.INFO), ("", logging.INFO), ("debug", logging.DEBUG), (" Error ", logging.ERROR), ("15", 15), ("loud", logging.INFO)],
)
def test_resolve_level(name, expected):
    assert resolve_level(name, logging.INFO) == expected
