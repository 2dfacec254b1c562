"""
Simulation Engine for ForageSim.

Every tick:
  1. Collisions – animals eat food within COLLISION_DISTANCE; eaten food
     reappears at a random spot
  2. Brains     – each animal looks, thinks, turns and accelerates
  3. Movement   – each animal moves forward (world wraps around)
After `generation_length + 1` ticks the generation ends:
  4. Animals → individuals (fitness = food eaten) → genetic algorithm
  5. The whole population is replaced, all food is scattered again

Randomness comes only from the numpy Generator passed into `step` / `train`.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np

from animal import AnimalIndividual
from config import COLLISION_DISTANCE, Config
from genetic_algorithm import GeneticAlgorithm, Statistics
from world import World


class Simulation:
    """
    Main simulation controller.
    """

    def __init__(self, config: Config, world: World, workers: Optional[int] = None):
        self._config     = config
        self._world      = world
        self._ga         = GeneticAlgorithm.from_config(config)
        self._age        = 0           # ticks into the current generation
        self._generation = 0           # completed generations
        self._history    = []          # Statistics, one per generation
        self._last_population = []     # outgoing AnimalIndividuals
        self._executor   = (ThreadPoolExecutor(max_workers=workers)
                            if workers and workers > 1 else None)

    @classmethod
    def random(cls, rng, config: Optional[Config] = None,
               workers: Optional[int] = None) -> "Simulation":
        config = config if config is not None else Config()
        return cls(config, World.random(rng, config), workers)

    # ──────────────────────────────────────────────────────────────────────────
    # Read-only state
    # ──────────────────────────────────────────────────────────────────────────

    @property
    def config(self) -> Config:
        return self._config

    @property
    def age(self) -> int:
        return self._age

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def history(self) -> list:
        return list(self._history)

    @property
    def animals(self) -> tuple:
        return tuple(self._world.animals)

    @property
    def food(self) -> tuple:
        return tuple(self._world.food)

    @property
    def last_population(self) -> list:
        """Individuals of the most recently finished generation."""
        return list(self._last_population)

    def world(self) -> dict:
        """Plain-data snapshot of animals and food for presentation layers."""
        return self._world.snapshot()

    # ──────────────────────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────────────────────

    def step(self, rng):
        """Advance one tick; returns Statistics when a generation ended."""
        food_positions = self._process_collisions(rng)
        self._process_brains(food_positions)

        self._age += 1
        if self._age > self._config.generation_length:
            return self._evolve(rng)
        return None

    def train(self, rng) -> Statistics:
        """Step until the current generation ends."""
        while True:
            stats = self.step(rng)
            if stats is not None:
                return stats

    def run(self, rng, generations: int, on_generation=None,
            verbose: bool = True) -> list:
        """Train `generations` generations; returns their Statistics."""
        results = []
        for _ in range(generations):
            t0 = time.time()
            stats = self.train(rng)
            elapsed = time.time() - t0
            gen_idx = self._generation - 1
            results.append(stats)

            if verbose:
                self._print_stats(gen_idx, stats, elapsed)
            if on_generation:
                on_generation(gen_idx, stats, self)

        if verbose:
            print("\n=== Simulation complete ===")
        return results

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # ──────────────────────────────────────────────────────────────────────────
    # One tick
    # ──────────────────────────────────────────────────────────────────────────

    def _process_collisions(self, rng) -> np.ndarray:
        """
        Animals eat in order. Eaten food moves immediately, so an animal later
        in the list may eat the same item again at its new position.
        Returns the food positions after all moves.
        """
        food = self._world.food
        positions = self._world.food_positions()
        if not food:
            return positions

        for animal in self._world.animals:
            offsets = positions - animal.position
            dist = np.hypot(offsets[:, 0], offsets[:, 1])
            for index in np.flatnonzero(dist <= COLLISION_DISTANCE):
                animal.collisions += 1
                food[index].relocate(rng)
                positions[index] = food[index].position
        return positions

    def _process_brains(self, food_positions: np.ndarray):
        config = self._config

        def think_and_move(animal):
            animal.process_brain(food_positions, config)
            animal.process_movement()

        if self._executor is None:
            for animal in self._world.animals:
                think_and_move(animal)
        else:
            # list() re-raises the first worker exception
            list(self._executor.map(think_and_move, self._world.animals))

    # ──────────────────────────────────────────────────────────────────────────
    # Generation boundary
    # ──────────────────────────────────────────────────────────────────────────

    def _evolve(self, rng) -> Statistics:
        self._age = 0

        population = [AnimalIndividual.from_animal(a) for a in self._world.animals]
        evolved, stats = self._ga.evolve(rng, population)

        self._world.animals = [individual.into_animal(rng, self._config)
                               for individual in evolved]
        self._world.relocate_food(rng)

        self._last_population = population
        self._history.append(stats)
        self._generation += 1
        return stats

    def _print_stats(self, gen_idx: int, stats: Statistics, elapsed: float):
        if gen_idx % 10 == 0 or gen_idx < 5:
            print(
                f"Gen {gen_idx:>5}  |  "
                f"{stats}  |  "
                f"{elapsed:.2f}s"
            )
