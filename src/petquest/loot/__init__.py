from .generator import ItemType, LootGenerator, LootRequest, Rarity, drop_probability, slot_count

__all__ = ["ItemType", "LootGenerator", "LootRequest", "Rarity", "drop_probability", "slot_count"]
