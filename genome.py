"""
Chromosome and genetic operators for ForageSim.

A chromosome is a flat, fixed-length vector of real-valued genes. The
simulation fills it with a brain's biases and weights, but nothing in this
module knows that: crossover and mutation work gene-by-gene on positions.

Operators:
  Crossover.UNIFORM            – per gene, a fair coin picks parent A or B
  Mutation.gaussian(p, coeff)  – with probability p, add ±coeff·U[0,1)
"""

import enum
from dataclasses import dataclass

import numpy as np

# ──────────────────────────────────────────────────────────────────────────────
# Chromosome
# ──────────────────────────────────────────────────────────────────────────────

class Chromosome:
    """Ordered sequence of float64 genes, compared and iterated by position."""

    __slots__ = ("genes",)

    def __init__(self, genes=()):
        genes = np.array(list(genes) if not isinstance(genes, np.ndarray) else genes,
                         dtype=np.float64)
        if genes.ndim != 1:
            raise ValueError(f"chromosome genes must be 1-D, got shape {genes.shape}")
        self.genes = genes

    def __len__(self) -> int:
        return len(self.genes)

    def __iter__(self):
        return iter(self.genes.tolist())

    def __getitem__(self, index):
        return float(self.genes[index])

    def __eq__(self, other) -> bool:
        if not isinstance(other, Chromosome):
            return NotImplemented
        return np.array_equal(self.genes, other.genes)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Chromosome({self.genes.tolist()!r})"

    def copy(self) -> "Chromosome":
        return Chromosome(self.genes.copy())


# ──────────────────────────────────────────────────────────────────────────────
# Crossover
# ──────────────────────────────────────────────────────────────────────────────

class Crossover(enum.Enum):
    UNIFORM = "Uniform"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def names(cls) -> list:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, name) -> "Crossover":
        if isinstance(name, cls):
            return name
        for member in cls:
            if str(name).lower() in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"unknown crossover method {name!r}; "
                         f"expected one of {cls.names()}")

    def crossover(self, rng, parent_a: Chromosome,
                  parent_b: Chromosome) -> Chromosome:
        # UNIFORM is the only method
        return _uniform_crossover(rng, parent_a, parent_b)


def _uniform_crossover(rng, parent_a: Chromosome,
                       parent_b: Chromosome) -> Chromosome:
    if len(parent_a) != len(parent_b):
        raise ValueError(
            f"parents differ in length: {len(parent_a)} != {len(parent_b)}")
    take_a = rng.random(len(parent_a)) < 0.5
    return Chromosome(np.where(take_a, parent_a.genes, parent_b.genes))


# ──────────────────────────────────────────────────────────────────────────────
# Mutation
# ──────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Mutation:
    """
    A mutation operator and its parameters.

    Only the "Gaussian" method exists. Despite the name the perturbation is
    uniform in magnitude: each selected gene gets ±coefficient·u with
    u ~ U[0, 1) and a fair random sign.
    """

    method:      str
    chance:      float
    coefficient: float

    GAUSSIAN = "Gaussian"

    def __post_init__(self):
        if self.method != Mutation.GAUSSIAN:
            raise ValueError(f"unknown mutation method {self.method!r}; "
                             f"expected one of {Mutation.names()}")
        if not 0.0 <= self.chance <= 1.0:
            raise ValueError(f"mutation chance must be in [0, 1], got {self.chance}")

    @classmethod
    def gaussian(cls, chance: float, coefficient: float) -> "Mutation":
        return cls(cls.GAUSSIAN, float(chance), float(coefficient))

    @classmethod
    def names(cls) -> list:
        return [cls.GAUSSIAN]

    # ──────────────────────────────────────────────────────────────────────────

    def mutate(self, rng, child: Chromosome):
        """Perturb `child` in place."""
        n      = len(child)
        signs  = np.where(rng.random(n) < 0.5, -1.0, 1.0)
        chosen = rng.random(n) < self.chance
        u      = rng.random(n)
        child.genes[:] = np.where(chosen,
                                  child.genes + signs * self.coefficient * u,
                                  child.genes)

    # ──────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {self.method: [self.chance, self.coefficient]}

    @classmethod
    def from_dict(cls, data) -> "Mutation":
        """Accepts `{"Gaussian": [chance, coeff]}` or an existing Mutation."""
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict) or len(data) != 1:
            raise ValueError(f"mutation must look like {{\"Gaussian\": [chance, coeff]}}, "
                             f"got {data!r}")
        (method, params), = data.items()
        method = next((m for m in cls.names() if m.lower() == str(method).lower()),
                      method)
        try:
            chance, coefficient = params
            return cls(method, float(chance), float(coefficient))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"bad mutation parameters {params!r}: {exc}") from None

    def __str__(self) -> str:
        return f"{self.method}(chance={self.chance}, coeff={self.coefficient})"
