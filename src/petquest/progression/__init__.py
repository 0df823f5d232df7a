from .leveling import LevelingSystem, LevelUpEvent, LevelUpResult, StatsDelta

__all__ = ["LevelingSystem", "LevelUpEvent", "LevelUpResult", "StatsDelta"]
