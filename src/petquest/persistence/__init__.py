from .client import PetQuestAPI
from .interfaces import InventoryLookup, OutcomeSink

__all__ = ["PetQuestAPI", "InventoryLookup", "OutcomeSink"]
