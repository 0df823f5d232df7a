import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from petquest.combat.combatant import Combatant  # noqa: E402


class ScriptedRNG:
    """Replays fixed ``random()`` values; ``randint`` and ``choice`` take the low end."""

    def __init__(self, values=()):
        self.values = list(values)

    def random(self):
        if not self.values:
            raise AssertionError("ScriptedRNG ran out of values")
        return self.values.pop(0)

    def randint(self, a, b):
        return a

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def scripted():
    return ScriptedRNG


@pytest.fixture
def hero():
    return Combatant(name="Hero", key="hero_idle", max_hp=100, max_sp=50, atk=20, defense=10)


@pytest.fixture
def wolf():
    return Combatant(name="Wolf", key="wolf_idle", max_hp=80, max_sp=30, atk=15, defense=8)
