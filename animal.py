"""
Animal class for ForageSim.

Each animal has:
  - a position on the unit torus [0, 1)²
  - a heading (radians, wrapped into (-π, π]) and a speed
  - an Eye and a Brain it owns exclusively
  - a collision counter = food eaten this generation (its fitness)

Every simulation tick the animal:
  1. Looks at the food with its eye
  2. Runs its brain on the vision vector
  3. Turns / accelerates, then moves forward
"""

import numpy as np

from brain import Brain
from eye import Eye, wrap_angle
from genome import Chromosome


def wrap_unit(position: np.ndarray) -> np.ndarray:
    """Wrap coordinates into [0, 1)."""
    wrapped = np.mod(position, 1.0)
    # mod of a tiny negative number rounds up to exactly 1.0
    wrapped[wrapped >= 1.0] = 0.0
    return wrapped


class Animal:
    """
    A single forager in the simulation.
    """
    __slots__ = ("position", "heading", "speed", "eye", "brain", "collisions")

    def __init__(self, eye: Eye, brain: Brain, position, heading: float,
                 speed: float):
        self.position   = wrap_unit(np.array(position, dtype=np.float64))
        self.heading    = float(wrap_angle(heading))
        self.speed      = float(speed)
        self.eye        = eye
        self.brain      = brain
        self.collisions = 0

    # ──────────────────────────────────────────────────────────────────────────

    @classmethod
    def random(cls, rng, config) -> "Animal":
        brain = Brain.random(rng, config)
        return cls._spawn(Eye.from_config(config), brain, rng, config)

    @classmethod
    def from_chromosome(cls, chromosome: Chromosome, rng, config) -> "Animal":
        brain = Brain.from_chromosome(chromosome, config)
        return cls._spawn(Eye.from_config(config), brain, rng, config)

    @classmethod
    def _spawn(cls, eye, brain, rng, config) -> "Animal":
        position = rng.random(2)
        heading  = rng.uniform(-np.pi, np.pi)
        return cls(eye, brain, position, heading, config.speed_min)

    def as_chromosome(self) -> Chromosome:
        return self.brain.as_chromosome()

    # ──────────────────────────────────────────────────────────────────────────

    def process_brain(self, food_positions: np.ndarray, config):
        """Sense → think → update speed and heading."""
        vision = self.eye.process_vision(self.position, self.heading, food_positions)
        response = self.brain.propagate(vision)

        d_speed   = float(np.clip(response[0], -config.speed_accel, config.speed_accel))
        d_heading = float(np.clip(response[1], -config.rot_accel,   config.rot_accel))

        self.speed   = float(np.clip(self.speed + d_speed,
                                     config.speed_min, config.speed_max))
        self.heading = float(wrap_angle(self.heading + d_heading))

    def process_movement(self):
        """Advance `speed` along the heading; the world wraps around."""
        step = self.speed * np.array([np.cos(self.heading), np.sin(self.heading)])
        self.position = wrap_unit(self.position + step)

    def snapshot(self) -> dict:
        return {
            "x":       float(self.position[0]),
            "y":       float(self.position[1]),
            "heading": self.heading,
            "speed":   self.speed,
        }


# ──────────────────────────────────────────────────────────────────────────────
# Genetic-algorithm view of an animal
# ──────────────────────────────────────────────────────────────────────────────

class AnimalIndividual:
    """Pairs an animal's chromosome with its fitness (collision count)."""

    __slots__ = ("_fitness", "_chromosome")

    def __init__(self, fitness: float, chromosome: Chromosome):
        self._fitness    = float(fitness)
        self._chromosome = chromosome

    def fitness(self) -> float:
        return self._fitness

    def chromosome(self) -> Chromosome:
        return self._chromosome

    @classmethod
    def create(cls, chromosome: Chromosome) -> "AnimalIndividual":
        return cls(0.0, chromosome)

    @classmethod
    def from_animal(cls, animal: Animal) -> "AnimalIndividual":
        return cls(animal.collisions, animal.as_chromosome())

    def into_animal(self, rng, config) -> Animal:
        return Animal.from_chromosome(self._chromosome, rng, config)
