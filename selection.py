"""
Parent selection for ForageSim.

Each method picks ONE member of a population, looking only at every member's
scalar fitness, and returns that member itself (no copy):

  ROULETTE   – probability ∝ fitness
  RANK       – probability ∝ rank (1 + number of members it strictly beats)
  TOURNAMENT – random-size tournament, later draws win ties
"""

import enum

import numpy as np


class Selection(enum.Enum):
    ROULETTE   = "Roulette"
    RANK       = "Rank"
    TOURNAMENT = "Tournament"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def names(cls) -> list:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, name) -> "Selection":
        """Look a method up by name, case-insensitively."""
        if isinstance(name, cls):
            return name
        for member in cls:
            if str(name).lower() in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"unknown selection method {name!r}; "
                         f"expected one of {cls.names()}")

    # ──────────────────────────────────────────────────────────────────────────

    def select(self, rng, population):
        if len(population) == 0:
            raise ValueError("cannot select from an empty population")
        fitness = np.array([individual.fitness() for individual in population],
                           dtype=np.float64)

        if self is Selection.ROULETTE:
            index = _roulette_index(rng, fitness)
        elif self is Selection.RANK:
            index = _rank_index(rng, fitness)
        else:
            index = _tournament_index(rng, fitness)
        return population[index]


# ──────────────────────────────────────────────────────────────────────────────

def _roulette_index(rng, fitness: np.ndarray) -> int:
    if np.any(fitness < 0) or not np.all(np.isfinite(fitness)):
        raise ValueError("roulette selection needs finite, non-negative fitness")
    total = fitness.sum()
    if total == 0:
        # Nobody scored: every member is equally (un)fit.
        return int(rng.integers(0, len(fitness)))
    return int(rng.choice(len(fitness), p=fitness / total))


def _rank_index(rng, fitness: np.ndarray) -> int:
    # Ties share a rank, so the weights need not be a permutation of 1..n.
    n = len(fitness)
    ranks = 1.0 + (fitness[:, None] > fitness[None, :]).sum(axis=1)
    weights = ranks / (n * (n + 1) / 2.0)
    return int(rng.choice(n, p=weights / weights.sum()))


def _tournament_index(rng, fitness: np.ndarray) -> int:
    n = len(fitness)
    tournament_size = int(rng.integers(0, n))
    selected = int(rng.integers(0, n))
    best = 0.0
    for _ in range(tournament_size):
        candidate = int(rng.integers(0, n))
        if fitness[candidate] >= best:
            best = fitness[candidate]
            selected = candidate
    return selected
