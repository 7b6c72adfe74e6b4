"""
Topology and weight construction tests.

Validates:
- Neuron index layout and dimension checks
- Polarity alternation with the output forced excitatory
- Sign constraint and connection blocking of the initial weights
"""

import numpy as np
import pytest

from edla.exceptions import ConfigurationError
from edla.neuron_structure import create_ei_flags, create_ei_pairs
from edla.topology import NetworkTopology, as_slice, build_weight_matrix


def _build(topology, seed=3, **flags):
    polarity = create_ei_flags(topology.n_slots, topology.output_index())
    weights = build_weight_matrix(topology, polarity, rng=np.random.RandomState(seed), **flags)
    return weights, polarity


class TestNetworkTopology:
    """Dimensions and named index accessors."""

    def test_dimensions(self):
        topology = NetworkTopology(size_input=4, size_output=1, size_hidden1=8)
        assert topology.total_neurons == 13
        assert topology.n_slots == 15
        assert topology.size_hidden == 8

    def test_index_ranges(self):
        topology = NetworkTopology(size_input=4, size_output=1, size_hidden1=8, size_hidden2=3)
        assert topology.bias_indices() == (0, 1)
        assert list(topology.input_range()) == [2, 3, 4, 5]
        assert topology.output_index() == 6
        assert list(topology.hidden_range()) == list(range(7, 18))
        assert list(topology.compute_range()) == list(range(6, 18))
        assert list(topology.second_layer_range()) == [15, 16, 17]

    def test_no_second_layer(self):
        topology = NetworkTopology(size_input=2, size_output=1, size_hidden1=4)
        assert len(topology.second_layer_range()) == 0

    def test_equality(self):
        a = NetworkTopology(4, 2, 8, 1)
        b = NetworkTopology(4, 2, 8, 1)
        assert a == b
        assert a != NetworkTopology(4, 2, 8, 0)

    @pytest.mark.parametrize("args", [
        (3, 1, 8, 0),    # odd input size
        (0, 1, 8, 0),    # no inputs
        (4, 0, 8, 0),    # no outputs
        (4, 1, -1, 0),   # negative hidden
        (4, 1, 8, -2),   # negative second layer
        (4.0, 1, 8, 0),  # not an integer
        (True, 1, 8, 0),
    ])
    def test_invalid_dimensions_rejected(self, args):
        with pytest.raises(ConfigurationError):
            NetworkTopology(*args)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            NetworkTopology(5, 1, 8)


class TestPolarity:
    """E/I flags and input pairing."""

    def test_alternation(self):
        flags = create_ei_flags(n_slots=9, output_index=6)
        assert flags.tolist() == [1, -1, 1, -1, 1, -1, 1, -1, 1]

    def test_output_forced_excitatory(self):
        flags = create_ei_flags(n_slots=8, output_index=5)
        assert flags[5] == 1
        assert flags[3] == -1
        assert flags[4] == 1

    def test_input_pairs(self):
        paired = create_ei_pairs([0.1, 0.2, 0.3])
        np.testing.assert_allclose(paired, [0.1, 0.1, 0.2, 0.2, 0.3, 0.3])


class TestWeightMatrix:
    """Initial weights respect the connection rules."""

    @pytest.mark.parametrize("flags", [
        {},
        {"loop_cutting": False},
        {"self_loop_cutting": False},
        {"multi_layer": False},
        {"inhibitory_inputs": False},
        {"loop_cutting": False, "self_loop_cutting": False, "multi_layer": False},
    ])
    def test_sign_constraint(self, flags):
        topology = NetworkTopology(4, 1, 6, 2)
        weights, polarity = _build(topology, **flags)
        target, source = np.nonzero(weights)
        assert len(target) > 0
        signs = np.sign(weights[target, source])
        np.testing.assert_array_equal(signs, polarity[source] * polarity[target])

    def test_rows_outside_compute_range_are_zero(self):
        topology = NetworkTopology(4, 1, 6)
        weights, _ = _build(topology, loop_cutting=False)
        assert not np.any(weights[:topology.output_index()])

    def test_loop_cutting_blocks_hidden_links(self):
        topology = NetworkTopology(4, 1, 6)
        weights, _ = _build(topology)
        hidden = as_slice(topology.hidden_range())
        compute = as_slice(topology.compute_range())
        block = weights[hidden, compute]
        # 隠れ層同士・出力→隠れ層の結合はない
        assert not np.any(block)
        assert not np.any(weights[:, topology.output_index()])

    def test_hidden_feeds_output(self):
        topology = NetworkTopology(4, 1, 6)
        weights, _ = _build(topology)
        out = topology.output_index()
        assert np.all(weights[out, as_slice(topology.hidden_range())] != 0)

    def test_without_loop_cutting_hidden_links_exist(self):
        topology = NetworkTopology(4, 1, 6)
        weights, _ = _build(topology, loop_cutting=False)
        hidden = as_slice(topology.hidden_range())
        assert np.count_nonzero(weights[hidden, hidden]) > 0

    def test_self_loop_cutting_zero_diagonal(self):
        topology = NetworkTopology(4, 1, 6)
        weights, _ = _build(topology, loop_cutting=False)
        assert not np.any(np.diag(weights))

    def test_self_loops_enabled(self):
        topology = NetworkTopology(4, 1, 6)
        weights, _ = _build(topology, self_loop_cutting=False)
        rows = list(topology.compute_range())
        assert np.all(weights[rows, rows] > 0)

    def test_multi_layer_cuts_input_to_output(self):
        topology = NetworkTopology(4, 1, 6)
        weights, _ = _build(topology)
        out = topology.output_index()
        assert not np.any(weights[out, as_slice(topology.input_range())])

        weights, _ = _build(topology, multi_layer=False)
        assert np.all(weights[out, as_slice(topology.input_range())] != 0)

    def test_inhibitory_inputs_disabled(self):
        topology = NetworkTopology(6, 1, 4)
        weights, _ = _build(topology, inhibitory_inputs=False)
        odd_inputs = [i for i in topology.input_range() if i % 2 == 1]
        even_inputs = [i for i in topology.input_range() if i % 2 == 0]
        hidden = list(topology.hidden_range())
        assert not np.any(weights[:, odd_inputs])
        assert np.all(weights[np.ix_(hidden, even_inputs)] != 0)

    def test_second_layer_reads_hidden_not_inputs(self):
        topology = NetworkTopology(4, 1, 4, 2)
        weights, _ = _build(topology)
        second = list(topology.second_layer_range())
        assert not np.any(weights[np.ix_(second, list(topology.input_range()))])
        for t in second:
            sources = [s for s in range(topology.size_input + 3, topology.n_slots) if s != t]
            assert np.all(weights[t, sources] != 0)

    def test_ranges_scale_magnitudes(self):
        topology = NetworkTopology(4, 1, 6)
        weights, _ = _build(topology, weight_range=0.5, threshold_range=0.0)
        assert not np.any(weights[:, :2])
        assert np.max(np.abs(weights)) <= 0.5

    def test_same_seed_same_matrix(self):
        topology = NetworkTopology(4, 1, 6, 1)
        a, _ = _build(topology, seed=42)
        b, _ = _build(topology, seed=42)
        np.testing.assert_array_equal(a, b)
