"""
Preset table and configuration validation tests.
"""

import numpy as np
import pytest

from edla.exceptions import ConfigurationError
from edla.hyperparameters import HyperParams, validate_config
from edla.weight_update import UpdateMode


class TestHyperParams:
    """Preset lookup."""

    def test_defaults(self):
        config = HyperParams().get_config()
        assert config['n_input'] == 4
        assert config['n_patterns'] == 16
        assert config['timesteps'] == 2
        assert config['learning_rate'] == 0.8
        assert config['sigmoid_steepness'] == 0.4
        assert config['bias'] == 0.8
        assert config['update_mode'] == 'selective'
        assert config['convergence_threshold'] == 0.1

    def test_presets_are_independent_copies(self):
        hp = HyperParams()
        config = hp.get_config('xor')
        config['hidden'] = 99
        assert hp.get_config('xor')['hidden'] == 8

    def test_unknown_preset(self):
        with pytest.raises(ConfigurationError):
            HyperParams().get_config('nand')

    def test_list_configs(self, capsys):
        HyperParams().list_configs()
        out = capsys.readouterr().out
        assert "[xor]" in out
        assert "learning_rate" in out


class TestValidateConfig:
    """Validation never clamps."""

    def test_normalizes_update_mode(self):
        checked = validate_config({'update_mode': 'bidirectional'})
        assert checked['update_mode'] is UpdateMode.BIDIRECTIONAL

    def test_accepts_numpy_integer_timesteps(self):
        checked = validate_config({'timesteps': np.int64(3)})
        assert checked['timesteps'] == 3

    def test_all_presets_valid(self):
        hp = HyperParams()
        for name in hp.problem_configs:
            validate_config(hp.get_config(name))

    @pytest.mark.parametrize("config", [
        {'timesteps': 0},
        {'timesteps': 1.5},
        {'sigmoid_steepness': -0.4},
        {'weight_range': -0.1},
        {'learning_rate': -1.0},
        {'convergence_threshold': -0.1},
        {'update_mode': 'random'},
    ])
    def test_rejects(self, config):
        with pytest.raises(ConfigurationError):
            validate_config(config)
