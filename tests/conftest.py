"""
Shared fixtures for the ForageSim test-suite.
"""

import numpy as np
import pytest

from config import Config


class FakeIndividual:
    """
    Individual used by the genetic-algorithm tests.

    Built with a fitness only (selection tests) or with a chromosome, in
    which case its fitness is the sum of its genes.
    """

    def __init__(self, fitness=None, chromosome=None):
        self._fitness = fitness
        self._chromosome = chromosome

    def fitness(self):
        if self._chromosome is not None:
            return float(sum(self._chromosome))
        return self._fitness

    def chromosome(self):
        if self._chromosome is None:
            raise AssertionError("this FakeIndividual has no chromosome")
        return self._chromosome

    @classmethod
    def create(cls, chromosome):
        return cls(chromosome=chromosome)

    def __repr__(self):
        return f"FakeIndividual(fitness={self.fitness()})"


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def small_config():
    """A config small enough to run whole generations quickly."""
    return Config(generation_length=10, animal_count=6, food_count=15)
