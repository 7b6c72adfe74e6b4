"""
Pattern display modes and verification report tests.
"""

import numpy as np
import pytest

from edla.accuracy_verifier import PatternAccuracyVerifier


@pytest.fixture
def verifier(small_network):
    small_network.train_step([1.0, 0.0], [1.0])
    return PatternAccuracyVerifier(small_network)


class TestFormatPattern:
    """Display modes 0-3."""

    def test_silent(self, verifier):
        assert verifier.format_pattern(0, [1.0]) == ''

    def test_verbose(self, verifier):
        line = verifier.format_pattern(1, [1.0])
        assert line.startswith("inputs: 1.00 0.00 -> ")
        assert "hidden:" in line
        assert len(line.split("hidden:")[1].split()) == 4

    def test_compact_digits(self, verifier):
        line = verifier.format_pattern(2, [1.0])
        target, digits = line.split(": ")
        assert target == "9"
        output_digit, hidden_digits = digits.split(" ")
        assert len(output_digit) == 1
        assert len(hidden_digits) == 4
        assert hidden_digits.isdigit()

    def test_minimal(self, verifier, small_network):
        out = small_network.snapshot(0)['output']
        assert verifier.format_pattern(3, 0.0) == f"0:{int(out * 9.999)}"

    def test_unknown_mode(self, verifier):
        with pytest.raises(ValueError):
            verifier.format_pattern(4, [1.0])

    def test_display_does_not_change_state(self, verifier, small_network):
        weights = small_network.weights.copy()
        for mode in range(4):
            verifier.format_pattern(mode, [1.0])
        verifier.format_weight_matrix()
        np.testing.assert_array_equal(small_network.weights, weights)


class TestReports:
    """Weight matrix dump and verification statistics."""

    def test_weight_matrix_rows(self, verifier, small_network):
        text = verifier.format_weight_matrix()
        lines = text.splitlines()
        assert len(lines) == len(small_network.topology.compute_range()) + 2
        assert lines[2].startswith(f"Neuron {small_network.topology.output_index():2d}:")

    def test_verify(self, verifier, xor_data, capsys):
        inputs, targets = xor_data
        stats = verifier.verify(inputs, targets, "XOR")
        assert set(stats) == {'error_total', 'error_count', 'accuracy', 'status', 'outputs'}
        assert stats['outputs'].shape == (4, 1)
        assert 0 <= stats['error_count'] <= 4
        assert stats['accuracy'] == (4 - stats['error_count']) / 4
        assert "XOR" in capsys.readouterr().out

    def test_verify_does_not_touch_counters(self, verifier, small_network, xor_data):
        before = small_network.error_total
        verifier.verify(*xor_data, show_patterns=False)
        assert small_network.error_total == before
