from .rng import RNG, weighted_choice

__all__ = ["RNG", "weighted_choice"]
