"""
World for ForageSim.

The world is the unit square with wraparound edges. It owns the animals
and the food; food is never removed, only moved somewhere random when it is
eaten or when a generation ends.
"""

import numpy as np

from animal import Animal


class Food:

    __slots__ = ("position",)

    def __init__(self, position):
        self.position = np.array(position, dtype=np.float64)

    @classmethod
    def random(cls, rng) -> "Food":
        return cls(rng.random(2))

    def relocate(self, rng):
        self.position = rng.random(2)

    def snapshot(self) -> dict:
        return {"x": float(self.position[0]), "y": float(self.position[1])}


class World:
    """
    Ordered collections of animals and food.
    """

    def __init__(self, animals: list, food: list):
        self.animals = list(animals)
        self.food    = list(food)

    @classmethod
    def random(cls, rng, config) -> "World":
        animals = [Animal.random(rng, config) for _ in range(config.animal_count)]
        food    = [Food.random(rng) for _ in range(config.food_count)]
        return cls(animals, food)

    def food_positions(self) -> np.ndarray:
        """(N, 2) copy of every food position."""
        if not self.food:
            return np.empty((0, 2), dtype=np.float64)
        return np.array([f.position for f in self.food], dtype=np.float64)

    def relocate_food(self, rng):
        for food in self.food:
            food.relocate(rng)

    # ──────────────────────────────────────────────────────────────────────────
    # Snapshot for visualisation
    # ──────────────────────────────────────────────────────────────────────────

    def snapshot(self) -> dict:
        """
        Plain-data view of the world:
          {"animals": [{"x", "y", "heading", "speed"}, ...],
           "food":    [{"x", "y"}, ...]}
        """
        return {
            "animals": [a.snapshot() for a in self.animals],
            "food":    [f.snapshot() for f in self.food],
        }
