"""
Pattern generation and pattern-set file tests.
"""

import json

import numpy as np
import pytest

from edla.exceptions import ConfigurationError, PatternShapeError
from edla.pattern_generation import (
    generate_patterns,
    load_pattern_set,
    parse_pattern_type,
    save_pattern_set,
    xor_patterns,
)


class TestInputs:
    """Input pattern modes."""

    def test_binary_inputs_follow_bits(self):
        inputs, _ = generate_patterns(4, 16, ['parity'])
        assert inputs.shape == (16, 4)
        assert inputs[0].tolist() == [0, 0, 0, 0]
        assert inputs[1].tolist() == [1, 0, 0, 0]
        assert inputs[6].tolist() == [0, 1, 1, 0]
        assert inputs[15].tolist() == [1, 1, 1, 1]

    def test_random_inputs(self, rng):
        inputs, _ = generate_patterns(3, 10, ['random'], input_mode='random', rng=rng)
        assert inputs.shape == (10, 3)
        assert np.all((inputs >= 0.0) & (inputs < 1.0))

    def test_unknown_input_mode(self):
        with pytest.raises(ConfigurationError):
            generate_patterns(2, 4, ['parity'], input_mode='gray')


class TestTargets:
    """Target pattern types."""

    def test_xor(self):
        inputs, targets = xor_patterns()
        assert inputs.tolist() == [[0, 0], [1, 0], [0, 1], [1, 1]]
        assert targets[:, 0].tolist() == [0, 1, 1, 0]

    def test_parity_counts_inputs_above_half(self):
        _, targets = generate_patterns(3, 8, ['parity'])
        assert targets[:, 0].tolist() == [0, 1, 1, 0, 1, 0, 0, 1]

    def test_mirror(self):
        _, targets = generate_patterns(4, 16, ['mirror'])
        symmetric = np.nonzero(targets[:, 0])[0].tolist()
        assert symmetric == [0, 6, 9, 15]

    def test_random_is_binary(self, rng):
        _, targets = generate_patterns(3, 8, ['random'], rng=rng)
        assert set(targets[:, 0].tolist()) <= {0.0, 1.0}

    def test_real_random(self, rng):
        _, targets = generate_patterns(3, 8, ['real_random'], rng=rng)
        assert np.all((targets >= 0.0) & (targets < 1.0))

    def test_one_hot_distinct_patterns(self, rng):
        _, targets = generate_patterns(3, 8, ['one_hot'] * 4, rng=rng)
        assert np.all(targets.sum(axis=0) == 1)
        chosen = np.argmax(targets, axis=0)
        assert len(set(chosen.tolist())) == 4

    def test_one_hot_more_outputs_than_patterns(self, rng):
        _, targets = generate_patterns(1, 2, ['one_hot'] * 3, rng=rng)
        assert np.all(targets.sum(axis=0) == 1)

    def test_independent_output_types(self):
        _, targets = generate_patterns(4, 16, ['parity', 'mirror'])
        assert targets.shape == (16, 2)
        assert targets[6].tolist() == [0.0, 1.0]

    def test_manual_from_values(self):
        _, targets = generate_patterns(2, 4, ['manual'], manual_targets=[0.1, 0.2, 0.3, 0.4])
        np.testing.assert_allclose(targets[:, 0], [0.1, 0.2, 0.3, 0.4])

    @pytest.mark.parametrize("values", [[0.1, 0.2, 0.3], [0.0] * 5])
    def test_manual_wrong_count(self, values):
        with pytest.raises(ConfigurationError):
            generate_patterns(2, 4, ['manual'], manual_targets=values)

    def test_manual_prompt(self, capsys):
        answers = iter(['1', '', '0.5', '0'])
        _, targets = generate_patterns(2, 4, ['manual'], input_fn=lambda prompt: next(answers))
        np.testing.assert_allclose(targets[:, 0], [1.0, 0.0, 0.5, 0.0])
        assert "Pattern 3 input" in capsys.readouterr().out

    @pytest.mark.parametrize("code, name", [(0, 'random'), (1, 'parity'), ('2', 'mirror'),
                                            (5, 'one_hot'), ('Real_Random', 'real_random')])
    def test_integer_aliases(self, code, name):
        assert parse_pattern_type(code) == name

    @pytest.mark.parametrize("value", [6, -1, 'xor', True])
    def test_unknown_type(self, value):
        with pytest.raises(ConfigurationError):
            parse_pattern_type(value)

    def test_invalid_counts(self):
        with pytest.raises(ConfigurationError):
            generate_patterns(0, 4, ['parity'])


class TestPatternSetFiles:
    """inputs.npy / targets.npy / metadata.json."""

    def test_save_and_load(self, tmp_path):
        inputs, targets = generate_patterns(4, 16, ['parity', 'mirror'])
        save_pattern_set(str(tmp_path), inputs, targets, name='pm')

        loaded_inputs, loaded_targets, metadata = load_pattern_set(str(tmp_path))
        np.testing.assert_array_equal(loaded_inputs, inputs)
        np.testing.assert_array_equal(loaded_targets, targets)
        assert metadata == {'name': 'pm', 'n_input': 4, 'n_output': 2, 'n_patterns': 16}

    def test_missing_metadata(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_pattern_set(str(tmp_path))

    def test_broken_metadata(self, tmp_path):
        (tmp_path / 'metadata.json').write_text('{"n_input": 2,', encoding='utf-8')
        with pytest.raises(ValueError):
            load_pattern_set(str(tmp_path))

    def test_missing_arrays(self, tmp_path):
        inputs, targets = xor_patterns()
        save_pattern_set(str(tmp_path), inputs, targets)
        (tmp_path / 'targets.npy').unlink()
        with pytest.raises(FileNotFoundError):
            load_pattern_set(str(tmp_path))

    def test_shape_mismatch(self, tmp_path):
        inputs, targets = xor_patterns()
        save_pattern_set(str(tmp_path), inputs, targets)
        metadata = json.loads((tmp_path / 'metadata.json').read_text(encoding='utf-8'))
        metadata['n_input'] = 3
        (tmp_path / 'metadata.json').write_text(json.dumps(metadata), encoding='utf-8')
        with pytest.raises(PatternShapeError):
            load_pattern_set(str(tmp_path))

    def test_save_rejects_mismatched_counts(self, tmp_path):
        with pytest.raises(PatternShapeError):
            save_pattern_set(str(tmp_path), np.zeros((4, 2)), np.zeros(3))
