from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .combat.actions import Ability, ActionKind
from .combat.combatant import Combatant
from .config import load_config
from .core.rng import RNG
from .encounters.content import Biome
from .logging_config import configure_logging
from .service import BattleService, EncounterRequest

logger = logging.getLogger(__name__)

MAX_ACTIONS = 500


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="petquest-sim",
        description="Simulate one PetQuest battle against a generated opponent and print the battle log.",
    )
    parser.add_argument("--tier", type=int, default=1, choices=[1, 2, 3, 4], help="Difficulty tier (1=Easy .. 4=Expert).")
    parser.add_argument("--biome", choices=[b.value for b in Biome], default=None, help="Biome; random if omitted.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run.")
    parser.add_argument("--config", dest="config_path", type=Path, default=None, help="Game config YAML file.")
    parser.add_argument("--name", default="Buddy", help="Name of the simulated pet.")
    parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging.")
    return parser.parse_args(argv)


def default_pet(name: str) -> Combatant:
    return Combatant(name=name, key="pet_idle", max_hp=100, max_sp=50, atk=20, defense=10)


def choose_action(pet: Combatant, config) -> tuple:
    """Simple autopilot: heal when low, attack while SP lasts, otherwise try to flee."""
    combat = config.combat
    if pet.hp * 10 < pet.effective_max_hp * 3 and pet.sp >= combat.heal_self_cost:
        return ActionKind.ABILITY, {"ability_index": int(Ability.HEAL_SELF)}
    if pet.sp >= combat.special_attack_cost + combat.basic_attack_cost:
        return ActionKind.ABILITY, {"ability_index": int(Ability.SPECIAL_ATTACK)}
    if pet.sp >= combat.basic_attack_cost:
        return ActionKind.ATTACK, None
    return ActionKind.FLEE, None


def run(argv: Optional[List[str]] = None) -> List[str]:
    args = parse_args(argv)
    configure_logging(level=logging.DEBUG if args.debug else logging.WARNING)
    config = load_config(args.config_path)
    service = BattleService(config=config, rng=RNG(seed=args.seed))

    handle = service.start_battle(default_pet(args.name), EncounterRequest(tier=args.tier, biome=args.biome))
    battle = service.get_battle(handle)
    for _ in range(MAX_ACTIONS):
        if service.get_outcome(handle) is not None:
            break
        kind, payload = choose_action(battle.player, config)
        service.submit_action(handle, kind, payload)
    if service.get_outcome(handle) is None:
        logger.warning("Stopped %s after %d actions", handle.id, MAX_ACTIONS)

    encounter = service.get_encounter(handle)
    lines = [f"{encounter.area_name}: {encounter.description}"]
    lines.extend(service.get_battle_log(handle))
    outcome = service.get_outcome(handle)
    if outcome is not None:
        service.release(handle)
        lines.append(f"Outcome: {outcome.kind.value} after {outcome.turns} round(s)")
    return lines


def main(argv=None) -> int:
    for line in run(argv):
        print(line)
    return 0
