"""
Genetic algorithm for ForageSim.

One call to `GeneticAlgorithm.evolve` performs a whole generational
transition:
  for each slot in the population:
    1. select two parents (independently, with replacement)
    2. cross their chromosomes
    3. mutate the child in place
    4. build a new individual from the child chromosome
The outgoing population is summarised as `Statistics`.
"""

from dataclasses import dataclass
from typing import Protocol, Sequence, Tuple, TypeVar

from genome import Chromosome, Crossover, Mutation
from selection import Selection


class Individual(Protocol):
    """Anything the genetic algorithm can evolve."""

    def fitness(self) -> float: ...

    def chromosome(self) -> Chromosome: ...

    @classmethod
    def create(cls, chromosome: Chromosome) -> "Individual": ...


I = TypeVar("I", bound=Individual)


# ──────────────────────────────────────────────────────────────────────────────
# Statistics
# ──────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Statistics:
    min_fitness: float
    max_fitness: float
    avg_fitness: float

    @classmethod
    def from_population(cls, population: Sequence[Individual]) -> "Statistics":
        if not population:
            raise ValueError("cannot summarise an empty population")
        scores = [float(individual.fitness()) for individual in population]
        return cls(
            min_fitness=min(scores),
            max_fitness=max(scores),
            avg_fitness=sum(scores) / len(scores),
        )

    def as_dict(self) -> dict:
        return {
            "min_fitness": self.min_fitness,
            "max_fitness": self.max_fitness,
            "avg_fitness": self.avg_fitness,
        }

    def __str__(self) -> str:
        return (f"min={self.min_fitness:.2f}, "
                f"max={self.max_fitness:.2f}, "
                f"avg={self.avg_fitness:.2f}")


# ──────────────────────────────────────────────────────────────────────────────
# Genetic algorithm
# ──────────────────────────────────────────────────────────────────────────────

class GeneticAlgorithm:

    def __init__(self, selection_method: Selection,
                 crossover_method: Crossover,
                 mutation_method: Mutation):
        self.selection_method = selection_method
        self.crossover_method = crossover_method
        self.mutation_method  = mutation_method

    @classmethod
    def from_config(cls, config) -> "GeneticAlgorithm":
        return cls(config.selection_method,
                   config.crossover_method,
                   config.mutation_method)

    def evolve(self, rng, population: Sequence[I]) -> Tuple[list, Statistics]:
        """
        Produce a replacement population of the same size plus statistics
        of the population passed in.
        """
        if len(population) == 0:
            raise ValueError("cannot evolve an empty population")

        new_population = []
        for _ in range(len(population)):
            parent_a = self.selection_method.select(rng, population)
            parent_b = self.selection_method.select(rng, population)
            child = self.crossover_method.crossover(
                rng, parent_a.chromosome(), parent_b.chromosome())
            self.mutation_method.mutate(rng, child)
            new_population.append(type(parent_a).create(child))

        return new_population, Statistics.from_population(population)
