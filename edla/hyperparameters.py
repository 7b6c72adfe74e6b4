#!/usr/bin/env python3
"""
問題別ハイパーパラメータ管理モジュール

役割:
  - 問題（パターン種別）ごとのネットワーク構成テーブル管理
  - 金子氏オリジナルED法の既定値（共通パラメータ）
  - 構成パラメータの検証（不正値は丸めずにConfigurationError）

クラス:
  - HyperParams: パラメータテーブル管理クラス

関数:
  - validate_config: 構成辞書の検証

使用例:
    from edla.hyperparameters import HyperParams

    hp = HyperParams()
    config = hp.get_config('parity')
    # → 4ビットパリティ用の構成 + 共通パラメータ
"""

import numpy as np

from .exceptions import ConfigurationError
from .weight_update import UpdateMode


class HyperParams:
    """
    問題別パラメータをテーブル管理するクラス

    設計方針:
      - 問題ごとに入力数・パターン数・隠れ層構成・最大エポック数を提供
      - 学習則のパラメータは共通（金子氏ED法の既定値）
      - コマンドライン引数でオーバーライド可能

    使用例:
      hp = HyperParams()
      config = hp.get_config('xor')
      network = EDNetwork.from_config(config, n_input=config['n_input'], n_output=1)
    """

    def __init__(self):
        """問題別設定テーブルの初期化"""

        # 問題別設定テーブル
        self.problem_configs = {
            'xor': {
                'n_input': 2,
                'n_patterns': 4,
                'pattern_type': 'parity',
                'hidden': 8,
                'hidden2': 0,
                'max_epochs': 2000,
                'description': 'XOR（2入力パリティ）、ED法の基本問題'
            },

            # 金子氏ED法の既定構成（入力4、パターン16、隠れ8）
            'parity': {
                'n_input': 4,
                'n_patterns': 16,
                'pattern_type': 'parity',
                'hidden': 8,
                'hidden2': 0,
                'max_epochs': 10000,
                'description': '4ビットパリティ（ED法の既定構成）'
            },

            'mirror': {
                'n_input': 4,
                'n_patterns': 16,
                'pattern_type': 'mirror',
                'hidden': 8,
                'hidden2': 0,
                'max_epochs': 10000,
                'description': '4入力の鏡像対称性判定'
            },

            'random': {
                'n_input': 4,
                'n_patterns': 16,
                'pattern_type': 'random',
                'hidden': 16,
                'hidden2': 0,
                'max_epochs': 10000,
                'description': 'ランダム2値教師（記憶課題）'
            },

            'real_random': {
                'n_input': 4,
                'n_patterns': 16,
                'pattern_type': 'real_random',
                'hidden': 16,
                'hidden2': 0,
                'max_epochs': 10000,
                'description': '連続値ランダム教師（回帰）、誤差0.1未満に達しないことが多い'
            },

            'one_hot': {
                'n_input': 4,
                'n_patterns': 16,
                'pattern_type': 'one_hot',
                'hidden': 8,
                'hidden2': 0,
                'max_epochs': 10000,
                'description': '1パターンのみ1（分類）'
            },

            'manual': {
                'n_input': 2,
                'n_patterns': 4,
                'pattern_type': 'manual',
                'hidden': 8,
                'hidden2': 0,
                'max_epochs': 10000,
                'description': '教師値を手入力'
            },
        }

        # 共通パラメータ（問題非依存、オリジナルED法の既定値）
        self.common_params = {
            'timesteps': 2,
            'weight_range': 1.0,
            'threshold_range': 1.0,
            'multi_layer': True,
            'update_mode': 'selective',
            'loop_cutting': True,
            'self_loop_cutting': True,
            'inhibitory_inputs': True,
            'sigmoid_steepness': 0.4,
            'error_amplification': 1.0,
            'learning_rate': 0.8,
            'bias': 0.8,
            'convergence_threshold': 0.1,
            'input_mode': 'binary',
        }

    def get_config(self, problem='parity'):
        """
        指定問題の設定を取得

        Args:
            problem: 問題名（'xor', 'parity', 'mirror', 'random', 'real_random', 'one_hot', 'manual'）

        Returns:
            dict: 問題別設定と共通パラメータをマージした辞書

        Raises:
            ConfigurationError: 未知の問題名
        """
        if problem not in self.problem_configs:
            supported = list(self.problem_configs.keys())
            raise ConfigurationError(
                f"問題 {problem!r} はサポートされていません。サポート問題: {supported}"
            )

        config = dict(self.common_params)
        config.update(self.problem_configs[problem])
        return config

    def list_configs(self):
        """利用可能な設定一覧を表示"""
        print("\n=== 利用可能な問題別設定 ===")
        for name, config in self.problem_configs.items():
            print(f"\n[{name}] {config['description']}")
            print(f"  n_input: {config['n_input']}")
            print(f"  n_patterns: {config['n_patterns']}")
            print(f"  pattern_type: {config['pattern_type']}")
            print(f"  hidden: {config['hidden']} (+ hidden2: {config['hidden2']})")
            print(f"  max_epochs: {config['max_epochs']}")
        print("\n=== 共通パラメータ ===")
        for key, value in self.common_params.items():
            print(f"  {key}: {value}")


def validate_config(config):
    """
    構成辞書の検証

    Args:
        config: HyperParams.get_config()形式の辞書

    Returns:
        config（検証済み、update_modeはUpdateModeに正規化）

    Raises:
        ConfigurationError: 不正な値
    """
    checked = dict(config)

    timesteps = checked.get('timesteps', 2)
    if isinstance(timesteps, bool) or not isinstance(timesteps, (int, np.integer)) or timesteps < 1:
        raise ConfigurationError(f"timestepsは1以上の整数が必要です: {timesteps!r}")

    if checked.get('sigmoid_steepness', 0.4) <= 0:
        raise ConfigurationError(
            f"sigmoid_steepnessは正の値が必要です: {checked.get('sigmoid_steepness')}"
        )

    for key in ('weight_range', 'threshold_range'):
        if checked.get(key, 1.0) < 0:
            raise ConfigurationError(f"{key}は0以上が必要です: {checked.get(key)}")

    if checked.get('learning_rate', 0.8) < 0:
        raise ConfigurationError(f"learning_rateは0以上が必要です: {checked.get('learning_rate')}")

    if checked.get('convergence_threshold', 0.1) < 0:
        raise ConfigurationError(
            f"convergence_thresholdは0以上が必要です: {checked.get('convergence_threshold')}"
        )

    checked['update_mode'] = UpdateMode.parse(checked.get('update_mode', 'selective'))
    return checked
