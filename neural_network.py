"""
Feed-forward neural network (the animals' brains) for ForageSim.

A network is a stack of fully connected layers; every layer computes
    output = ReLU(weights · input + biases)
with `weights` shaped (outputs, inputs).

All parameters can be flattened into one gene sequence and rebuilt from it:
per layer, first the biases, then the weights in row-major order. The two
traversals in `flatten_weights` and `from_weights` mirror each other.
"""

import numpy as np

DTYPE = np.float64


class Layer:

    __slots__ = ("weights", "biases")

    def __init__(self, weights: np.ndarray, biases: np.ndarray):
        weights = np.asarray(weights, dtype=DTYPE)
        biases  = np.asarray(biases,  dtype=DTYPE)
        if weights.ndim != 2 or biases.shape != (weights.shape[0],):
            raise ValueError(
                f"layer shape mismatch: weights {weights.shape}, biases {biases.shape}")
        self.weights = weights
        self.biases  = biases

    @property
    def input_size(self) -> int:
        return self.weights.shape[1]

    @property
    def output_size(self) -> int:
        return self.weights.shape[0]

    def propagate(self, inputs: np.ndarray) -> np.ndarray:
        return np.maximum(self.weights @ inputs + self.biases, 0.0)

    @classmethod
    def random(cls, rng, input_size: int, output_size: int) -> "Layer":
        weights = rng.uniform(-1.0, 1.0, size=(output_size, input_size))
        biases  = rng.uniform(-1.0, 1.0, size=output_size)
        return cls(weights, biases)

    @classmethod
    def from_weights(cls, input_size: int, output_size: int, genes) -> "Layer":
        """Consume exactly output_size·(input_size+1) values from `genes`."""
        biases  = _take(genes, output_size)
        weights = _take(genes, output_size * input_size)
        return cls(weights.reshape(output_size, input_size), biases)


def _take(genes, count: int) -> np.ndarray:
    values = np.empty(count, dtype=DTYPE)
    for i in range(count):
        try:
            values[i] = next(genes)
        except StopIteration:
            raise ValueError("not enough genes for this topology") from None
    return values


# ──────────────────────────────────────────────────────────────────────────────

class Network:
    """
    Ordered list of layers; layer i's output size equals layer i+1's input.
    """

    def __init__(self, layers: list):
        for prev, nxt in zip(layers, layers[1:]):
            if prev.output_size != nxt.input_size:
                raise ValueError(
                    f"layer sizes do not chain: {prev.output_size} -> {nxt.input_size}")
        self.layers = list(layers)

    def topology(self) -> list:
        if not self.layers:
            return []
        return [self.layers[0].input_size] + [l.output_size for l in self.layers]

    def propagate(self, inputs) -> np.ndarray:
        outputs = np.asarray(inputs, dtype=DTYPE)
        for layer in self.layers:
            outputs = layer.propagate(outputs)
        return outputs

    # ──────────────────────────────────────────────────────────────────────────

    @classmethod
    def random(cls, rng, topology) -> "Network":
        """Random weights/biases in [-1, 1] for the given layer sizes."""
        _check_topology(topology)
        return cls([Layer.random(rng, n_in, n_out)
                    for n_in, n_out in zip(topology, topology[1:])])

    def flatten_weights(self):
        """Yield every bias and weight: per layer, biases then row-major weights."""
        for layer in self.layers:
            yield from layer.biases.tolist()
            yield from layer.weights.ravel(order="C").tolist()

    @classmethod
    def from_weights(cls, topology, genes) -> "Network":
        """
        Rebuild a network from a gene sequence produced by `flatten_weights`
        for the same topology. Too few or too many genes raise ValueError.
        """
        _check_topology(topology)
        genes = iter(genes)
        layers = [Layer.from_weights(n_in, n_out, genes)
                  for n_in, n_out in zip(topology, topology[1:])]
        if next(genes, None) is not None:
            raise ValueError("too many genes for this topology")
        return cls(layers)

    @staticmethod
    def weight_count(topology) -> int:
        """Number of genes `flatten_weights` yields for `topology`."""
        _check_topology(topology)
        return sum((n_in + 1) * n_out for n_in, n_out in zip(topology, topology[1:]))


def _check_topology(topology):
    if len(topology) < 2:
        raise ValueError(f"a topology needs at least 2 layer sizes, got {list(topology)}")
    if any(int(size) < 1 for size in topology):
        raise ValueError(f"layer sizes must be positive, got {list(topology)}")
