"""
Brain for ForageSim animals.

Topology: eye cells → BRAIN_NEURONS hidden → 2 outputs (speed Δ, heading Δ).
The brain's chromosome is its network's flattened biases and weights.
"""

from genome import Chromosome
from neural_network import Network


class Brain:

    __slots__ = ("network",)

    def __init__(self, network: Network):
        self.network = network

    @staticmethod
    def topology(config) -> list:
        return [config.eye_cells, config.brain_neurons, 2]

    @classmethod
    def random(cls, rng, config) -> "Brain":
        return cls(Network.random(rng, cls.topology(config)))

    @classmethod
    def from_chromosome(cls, chromosome: Chromosome, config) -> "Brain":
        return cls(Network.from_weights(cls.topology(config), chromosome))

    def as_chromosome(self) -> Chromosome:
        return Chromosome(self.network.flatten_weights())

    def propagate(self, vision):
        return self.network.propagate(vision)
