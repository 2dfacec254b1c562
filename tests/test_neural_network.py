"""
Tests for Layer / Network propagation and weight flattening.
"""

import numpy as np
import pytest

from neural_network import DTYPE, Layer, Network


class TestLayer:

    def test_propagate_relu_clamps_negatives(self):
        layer = Layer(weights=[[1.0, 1.0], [-1.0, -1.0]], biases=[0.0, 0.0])
        np.testing.assert_array_equal(layer.propagate(np.array([-1.0, -1.0])), [0.0, 2.0])
        np.testing.assert_array_equal(layer.propagate(np.array([0.0, 0.0])), [0.0, 0.0])

    def test_single_neuron(self):
        layer = Layer(weights=[[-0.3, 0.8]], biases=[0.5])
        assert layer.propagate(np.array([-10.0, -10.0]))[0] == 0.0
        assert layer.propagate(np.array([0.5, 1.0]))[0] == pytest.approx(1.15)

    def test_sizes(self):
        layer = Layer(weights=np.zeros((4, 3)), biases=np.zeros(4))
        assert layer.input_size == 3
        assert layer.output_size == 4

    def test_shape_mismatch_raises(self):
        with pytest.raises(ValueError):
            Layer(weights=np.zeros((4, 3)), biases=np.zeros(3))

    def test_random_is_in_range(self, rng):
        layer = Layer.random(rng, 5, 7)
        assert layer.weights.shape == (7, 5)
        assert layer.biases.shape == (7,)
        assert np.all(np.abs(layer.weights) <= 1.0)
        assert np.all(np.abs(layer.biases) <= 1.0)
        assert layer.weights.dtype == DTYPE

    def test_from_weights_consumes_biases_then_weights(self):
        genes = iter([5.0, 6.0, 1.0, 2.0, 3.0, 4.0, 99.0])
        layer = Layer.from_weights(2, 2, genes)
        np.testing.assert_array_equal(layer.biases, [5.0, 6.0])
        np.testing.assert_array_equal(layer.weights, [[1.0, 2.0], [3.0, 4.0]])
        assert next(genes) == 99.0

    def test_from_weights_too_few_raises(self):
        with pytest.raises(ValueError):
            Layer.from_weights(2, 2, iter([1.0, 2.0, 3.0]))


class TestNetwork:

    def test_propagate_through_layers(self):
        network = Network([
            Layer(weights=[[1.0, 2.0]], biases=[0.5]),
            Layer(weights=[[2.0], [-1.0]], biases=[0.0, 0.0]),
        ])
        # hidden = 1 + 4 + 0.5 = 5.5
        np.testing.assert_allclose(network.propagate([1.0, 2.0]), [11.0, 0.0])

    def test_layers_must_chain(self):
        with pytest.raises(ValueError):
            Network([Layer(np.zeros((3, 2)), np.zeros(3)),
                     Layer(np.zeros((1, 2)), np.zeros(1))])

    def test_topology(self, rng):
        assert Network.random(rng, [9, 9, 2]).topology() == [9, 9, 2]

    def test_flatten_order(self):
        network = Network([
            Layer(weights=[[0.2, 0.3, 0.4]], biases=[0.1]),
            Layer(weights=[[0.6]], biases=[0.5]),
        ])
        assert list(network.flatten_weights()) == [0.1, 0.2, 0.3, 0.4, 0.5, 0.6]

    def test_flatten_weights_are_row_major(self):
        network = Network([Layer(weights=[[1.0, 2.0], [3.0, 4.0]], biases=[5.0, 6.0])])
        assert list(network.flatten_weights()) == [5.0, 6.0, 1.0, 2.0, 3.0, 4.0]

    def test_from_weights(self):
        network = Network.from_weights([3, 1, 1], [0.1, 0.2, 0.3, 0.4, 0.5, 0.6])
        np.testing.assert_array_equal(network.layers[0].biases, [0.1])
        np.testing.assert_array_equal(network.layers[0].weights, [[0.2, 0.3, 0.4]])
        np.testing.assert_array_equal(network.layers[1].biases, [0.5])
        np.testing.assert_array_equal(network.layers[1].weights, [[0.6]])

    def test_flatten_then_rebuild_is_identical(self, rng):
        topology = [9, 9, 2]
        network = Network.random(rng, topology)
        genes = list(network.flatten_weights())
        rebuilt = Network.from_weights(topology, genes)
        assert list(rebuilt.flatten_weights()) == genes

        inputs = rng.random(9)
        np.testing.assert_array_equal(rebuilt.propagate(inputs), network.propagate(inputs))

    @pytest.mark.parametrize("count", [5, 7, 0])
    def test_from_weights_wrong_gene_count_raises(self, count):
        with pytest.raises(ValueError):
            Network.from_weights([3, 1, 1], [0.0] * count)

    def test_random_is_deterministic_for_a_seed(self):
        a = Network.random(np.random.default_rng(1), [4, 3, 2])
        b = Network.random(np.random.default_rng(1), [4, 3, 2])
        assert list(a.flatten_weights()) == list(b.flatten_weights())

    def test_random_values_are_in_range(self, rng):
        genes = np.array(list(Network.random(rng, [9, 9, 2]).flatten_weights()))
        assert len(genes) == 110
        assert np.all((genes >= -1.0) & (genes <= 1.0))

    @pytest.mark.parametrize("topology,count", [
        ([9, 9, 2], 110),
        ([3, 1, 1], 6),
        ([2, 2], 6),
    ])
    def test_weight_count(self, topology, count):
        assert Network.weight_count(topology) == count

    @pytest.mark.parametrize("topology", [[], [3], [3, 0, 2]])
    def test_bad_topology_raises(self, rng, topology):
        with pytest.raises(ValueError):
            Network.random(rng, topology)
