"""
Command line entry point tests.
"""

import os

import pytest

from edla.pattern_generation import save_pattern_set, xor_patterns
import recurrent_ed_ann


def test_list_hyperparams(capsys):
    assert recurrent_ed_ann.main(['--list_hyperparams']) == 0
    assert "[parity]" in capsys.readouterr().out


def test_short_xor_run(tmp_path, capsys):
    state = tmp_path / "xor_state"
    code = recurrent_ed_ann.main(['--preset', 'xor', '--max_epochs', '5', '--seed', '1',
                                  '--write_mode', '3', '--show_weights',
                                  '--save_state', str(state)])
    assert code == 0
    assert os.path.exists(str(state) + ".npz")
    out = capsys.readouterr().out
    assert "学習開始" in out
    assert "重み行列" in out


def test_overrides_and_flags(capsys):
    code = recurrent_ed_ann.main(['--preset', 'mirror', '--max_epochs', '2', '--hidden', '3',
                                  '--hidden2', '2', '--timesteps', '1', '--no-loop_cutting',
                                  '--bidirectional', '--outputs', '2',
                                  '--pattern_type', 'mirror,parity'])
    assert code == 0
    out = capsys.readouterr().out
    assert "hidden: 3" in out
    assert "update_mode: bidirectional" in out


def test_pattern_type_count_mismatch(capsys):
    code = recurrent_ed_ann.main(['--preset', 'xor', '--max_epochs', '1', '--outputs', '3',
                                  '--pattern_type', 'parity,mirror'])
    assert code == 1


def test_pattern_dir(tmp_path, capsys):
    save_pattern_set(str(tmp_path), *xor_patterns(), name='xor_file')
    code = recurrent_ed_ann.main(['--pattern_dir', str(tmp_path), '--max_epochs', '2'])
    assert code == 0
    assert "xor_file" in capsys.readouterr().out


def test_manual_targets(capsys):
    code = recurrent_ed_ann.main(['--preset', 'manual', '--max_epochs', '2',
                                  '--manual_targets', '0,1,1,0'])
    assert code == 0


@pytest.mark.parametrize("values", ['0,1,1', '0,1,x,0'])
def test_bad_manual_targets(values, capsys):
    code = recurrent_ed_ann.main(['--preset', 'manual', '--max_epochs', '2',
                                  '--manual_targets', values])
    assert code == 1
    assert "エラー" in capsys.readouterr().out


def test_seed_is_reported(capsys):
    code = recurrent_ed_ann.main(['--preset', 'xor', '--max_epochs', '1', '--seed', '7'])
    assert code == 0
    assert "乱数シード固定: 7" in capsys.readouterr().out


def test_unknown_preset_falls_back(capsys):
    code = recurrent_ed_ann.main(['--preset', 'nand', '--max_epochs', '1'])
    assert code == 0
    assert "Warning" in capsys.readouterr().out
