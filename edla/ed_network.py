#!/usr/bin/env python3
"""
ED法ネットワークモジュール（統合クラス）

★Recurrent Error Diffusion Network★
役割:
  - EDNetworkクラス（ネットワーク状態の唯一の所有者）
  - 再帰的順伝播（timesteps回の反復）
  - 誤差拡散（興奮性/抑制性チャネルの一斉放送）
  - 同時重み更新（ED法準拠、微分の連鎖律不使用）
  - エポック誤差カウンタ（外部のトレーナーが読み出し・リセット）
  - 状態の保存・復元

クラス:
  - EDNetwork: メインネットワーククラス

使用例:
    from edla.ed_network import EDNetwork
    from edla.hyperparameters import HyperParams

    hp = HyperParams()
    config = hp.get_config('xor')
    network = EDNetwork.from_config(config, n_input=2, n_output=1, seed=1)

    # 1エポック
    network.reset_epoch_counters()
    for x, y in zip(inputs, targets):
        network.train_step(x, y)
    print(network.error_total, network.error_count)
"""

import json
import os

import numpy as np

from .activation_functions import sigmoid
from .amine_diffusion import diffuse_amine
from .exceptions import ConfigurationError, PatternShapeError
from .hyperparameters import validate_config
from .neuron_structure import create_ei_pairs, create_ei_flags
from .topology import NetworkTopology, as_slice, build_weight_matrix
from .weight_update import apply_ed_update

# この値を超える誤差のパターンを「誤りパターン」として数える
ERROR_COUNT_THRESHOLD = 0.5


class EDNetwork:
    """
    Recurrent Error Diffusion Network（金子氏のED法）

    出力ごとに完全に独立したサブネットワーク（重み行列・活性・極性）を持ち、
    同じ入力パターンを共有する。各配列の先頭次元はサブネットワーク番号。

    状態:
      weights             : [size_output, n_slots, n_slots]（[n, target, source]）
      weights_oscillating : [size_output, n_slots]（極性 +1/-1）
      neuron_input        : [size_output, n_slots]
      neuron_output       : [size_output, n_slots]
      error_delta         : [size_output, n_slots, 2]（興奮性/抑制性チャネル）
    """

    def __init__(self, n_input=2, n_output=1, n_hidden=8, n_hidden2=0,
                 timesteps=2, learning_rate=0.8, bias=0.8, sigmoid_steepness=0.4,
                 error_amplification=1.0, weight_range=1.0, threshold_range=1.0,
                 multi_layer=True, loop_cutting=True, self_loop_cutting=True,
                 inhibitory_inputs=True, update_mode='selective', seed=None, verbose=False):
        """
        初期化（トポロジー構築 + 符号制約付き重み生成）

        Args:
            n_input: 論理入力数（内部で興奮性/抑制性ペアに2倍化）
            n_output: 出力数（独立サブネットワーク数）
            n_hidden: 第1隠れ層のニューロン数（出力ニューロンを除く）
            n_hidden2: 第2隠れ層のニューロン数（0なら1層）
            timesteps: 順伝播の再帰反復回数（1なら純粋な順伝播）
            learning_rate: 学習率
            bias: バイアスニューロンの入力値
            sigmoid_steepness: シグモイドの傾き
            error_amplification: 隠れ層へ拡散する誤差の増幅係数
            weight_range: 重みの初期化範囲
            threshold_range: バイアス結合の初期化範囲
            multi_layer: 入力→出力の直結を切る
            loop_cutting: 隠れ層間の再帰結合を切る（パターンごとに隠れ層をゼロ初期化）
            self_loop_cutting: 自己結合を切る
            inhibitory_inputs: 抑制性入力ニューロンを使う
            update_mode: 'selective'（既定）または 'bidirectional'
            seed: 重み初期化の乱数シード（同じシード・構成なら同一の重み）
            verbose: 構築時のサマリー表示
        """
        if isinstance(n_input, bool) or not isinstance(n_input, (int, np.integer)):
            raise ConfigurationError(f"n_inputは整数で指定してください: {n_input!r}")

        config = validate_config({
            'timesteps': timesteps,
            'learning_rate': learning_rate,
            'bias': bias,
            'sigmoid_steepness': sigmoid_steepness,
            'error_amplification': error_amplification,
            'weight_range': weight_range,
            'threshold_range': threshold_range,
            'update_mode': update_mode,
        })

        self.topology = NetworkTopology(n_input * 2, n_output, n_hidden, n_hidden2)
        self.n_input = int(n_input)
        self.n_output = int(n_output)
        self.n_hidden = int(n_hidden)
        self.n_hidden2 = int(n_hidden2)

        # パラメータ保存
        self.timesteps = config['timesteps']
        self.learning_rate = float(learning_rate)
        self.bias = float(bias)
        self.sigmoid_steepness = float(sigmoid_steepness)
        self.error_amplification = float(error_amplification)
        self.weight_range = float(weight_range)
        self.threshold_range = float(threshold_range)
        self.multi_layer = bool(multi_layer)
        self.loop_cutting = bool(loop_cutting)
        self.self_loop_cutting = bool(self_loop_cutting)
        self.inhibitory_inputs = bool(inhibitory_inputs)
        self.update_mode = config['update_mode']
        self.seed = seed

        n_slots = self.topology.n_slots
        output_index = self.topology.output_index()

        # 極性ベクトル（サブネットワークごとに1本、内容は共通）
        ei_flags = create_ei_flags(n_slots, output_index)
        self.weights_oscillating = np.tile(ei_flags, (self.n_output, 1))

        # 重みの初期化（サブネットワーク順に同じ乱数列から抽選）
        rng = np.random.RandomState(seed)
        self.weights = np.stack([
            build_weight_matrix(
                self.topology, self.weights_oscillating[n],
                weight_range=self.weight_range,
                threshold_range=self.threshold_range,
                self_loop_cutting=self.self_loop_cutting,
                loop_cutting=self.loop_cutting,
                multi_layer=self.multi_layer,
                inhibitory_inputs=self.inhibitory_inputs,
                rng=rng
            )
            for n in range(self.n_output)
        ])

        # 活性と誤差信号
        self.neuron_input = np.zeros((self.n_output, n_slots))
        self.neuron_output = np.zeros((self.n_output, n_slots))
        self.error_delta = np.zeros((self.n_output, n_slots, 2))

        # バイアス入力（構築時に1回だけ設定）
        for index in self.topology.bias_indices():
            self.neuron_input[:, index] = self.bias

        self._error_total = 0.0
        self._error_count = 0

        if verbose:
            print(f"\n[ED法ネットワーク初期化]")
            print(f"  - 入力: {self.n_input} (E/Iペア化: {self.topology.size_input})")
            print(f"  - 隠れ層: {self.topology.size_hidden} ({self.n_hidden}+{self.n_hidden2})")
            print(f"  - 出力: {self.n_output} (独立サブネットワーク)")
            print(f"  - ニューロン番号: 0-{n_slots - 1} (出力ニューロン={output_index})")
            n_connections = [int(np.count_nonzero(self.weights[n])) for n in range(self.n_output)]
            print(f"  - 有効結合数: {n_connections}")
            print(f"  - 更新モード: {self.update_mode.value}")

    @classmethod
    def from_config(cls, config, n_input, n_output=1, seed=None, verbose=False):
        """
        HyperParams形式の辞書から構築

        Args:
            config: HyperParams.get_config()の戻り値（またはget_config()の戻り値）
            n_input: 論理入力数
            n_output: 出力数
            seed: 乱数シード
        """
        return cls(
            n_input=n_input,
            n_output=n_output,
            n_hidden=config.get('hidden', 8),
            n_hidden2=config.get('hidden2', 0),
            timesteps=config.get('timesteps', 2),
            learning_rate=config.get('learning_rate', 0.8),
            bias=config.get('bias', 0.8),
            sigmoid_steepness=config.get('sigmoid_steepness', 0.4),
            error_amplification=config.get('error_amplification', 1.0),
            weight_range=config.get('weight_range', 1.0),
            threshold_range=config.get('threshold_range', 1.0),
            multi_layer=config.get('multi_layer', True),
            loop_cutting=config.get('loop_cutting', True),
            self_loop_cutting=config.get('self_loop_cutting', True),
            inhibitory_inputs=config.get('inhibitory_inputs', True),
            update_mode=config.get('update_mode', 'selective'),
            seed=seed,
            verbose=verbose
        )

    # ========================================
    # エポック誤差カウンタ（読み出し専用）
    # ========================================
    @property
    def error_total(self):
        """前回リセット以降の|誤差|の合計"""
        return self._error_total

    @property
    def error_count(self):
        """前回リセット以降に|誤差| > 0.5だったパターン数"""
        return self._error_count

    def reset_epoch_counters(self):
        """誤差カウンタをゼロにする（エポック開始時にトレーナーが呼ぶ）"""
        self._error_total = 0.0
        self._error_count = 0

    # ========================================
    # 形状チェック
    # ========================================
    def _check_pattern(self, values, expected, name):
        pattern = np.atleast_1d(np.asarray(values, dtype=float))
        if pattern.ndim != 1 or len(pattern) != expected:
            raise PatternShapeError(
                f"{name}の長さが不正です: shape={pattern.shape}, 期待値={expected}"
            )
        return pattern

    def _check_input(self, pattern_in):
        return self._check_pattern(pattern_in, self.topology.size_input // 2, '入力パターン')

    def _check_target(self, pattern_target):
        return self._check_pattern(pattern_target, self.topology.size_output, '教師パターン')

    # ========================================
    # ED法の3ステップ
    # ========================================
    def forward(self, n, input_pattern):
        """
        再帰的順伝播（サブネットワークn）

        ステップ:
          (a) 論理入力kを番号2k+2と2k+3の双子ニューロンへ同じ値で入力
          (b) ループカット時は出力・隠れ層の入力をゼロ初期化
          (c) timesteps回: 全ての計算対象ニューロンを同じ入力スナップショットから計算し、
              出力を入力へ書き戻す（バイアス・入力スロットは固定）

        Args:
            n: サブネットワーク番号
            input_pattern: 論理入力 shape [size_input / 2]

        Returns:
            出力ニューロンの活性（予測値）
        """
        x = self._check_input(input_pattern)
        topology = self.topology
        rows = as_slice(topology.compute_range())

        z_input = self.neuron_input[n]
        z_output = self.neuron_output[n]
        w = self.weights[n]

        # 入力ペア構造
        z_input[as_slice(topology.input_range())] = create_ei_pairs(x)

        # 隠れ層の初期化（パターンごとに前回の活性を持ち越さない）
        if self.loop_cutting:
            z_input[rows] = 0.0

        for _ in range(self.timesteps):
            z_output[rows] = sigmoid(np.dot(w[rows], z_input), self.sigmoid_steepness)
            # 次のtimestepへのフィードバック
            z_input[rows] = z_output[rows]

        return float(z_output[topology.output_index()])

    def diffuse(self, n, target, amplification=None):
        """
        誤差拡散（サブネットワークn、直前の順伝播結果を使用）

        Args:
            n: サブネットワーク番号
            target: 教師値
            amplification: 隠れ層用の増幅係数（Noneなら構築時の値）

        Returns:
            error_delta[n]: 誤差信号テーブル shape [n_slots, 2]
        """
        if amplification is None:
            amplification = self.error_amplification

        error = float(target) - self.neuron_output[n, self.topology.output_index()]

        # 収束判定用の統計
        self._error_total += abs(error)
        if abs(error) > ERROR_COUNT_THRESHOLD:
            self._error_count += 1

        self.error_delta[n] = diffuse_amine(self.topology, error, amplification)
        return self.error_delta[n]

    def update(self, n, learning_rate=None, mode=None):
        """
        重み更新（サブネットワークn、ED法の同時更新）

        Args:
            n: サブネットワーク番号
            learning_rate: 学習率（Noneなら構築時の値）
            mode: UpdateMode（Noneなら構築時の値）

        Returns:
            delta_w: 適用した変化量 shape [n_slots, n_slots]
        """
        if learning_rate is None:
            learning_rate = self.learning_rate
        if mode is None:
            mode = self.update_mode

        return apply_ed_update(
            self.weights[n],
            self.neuron_input[n],
            self.neuron_output[n],
            self.error_delta[n],
            self.weights_oscillating[n],
            self.topology,
            learning_rate,
            mode
        )

    def train_step(self, pattern_in, pattern_target):
        """
        1パターンの学習（全サブネットワークで 順伝播 → 誤差拡散 → 重み更新）

        形状が不正な場合はどのサブネットワークも更新せずにPatternShapeErrorを送出する。

        Args:
            pattern_in: 論理入力 shape [size_input / 2]
            pattern_target: 教師値 shape [size_output]

        Returns:
            outputs: 更新前の順伝播による各出力の予測値 shape [size_output]
        """
        x = self._check_input(pattern_in)
        y = self._check_target(pattern_target)

        outputs = np.zeros(self.n_output)
        for n in range(self.n_output):
            outputs[n] = self.forward(n, x)
            self.diffuse(n, y[n])
            self.update(n)
        return outputs

    def predict(self, pattern_in):
        """
        順伝播のみ（学習なし、誤差カウンタも変化しない）

        Returns:
            outputs: 各出力の予測値 shape [size_output]
        """
        x = self._check_input(pattern_in)
        return np.array([self.forward(n, x) for n in range(self.n_output)])

    # ========================================
    # 表示・保存用
    # ========================================
    def snapshot(self, n=0):
        """
        サブネットワークnの状態のコピー（表示・監視用、元の状態は変更されない）

        Returns:
            dict: neuron_input, neuron_output, weights, polarity, error_delta, output
        """
        return {
            'neuron_input': self.neuron_input[n].copy(),
            'neuron_output': self.neuron_output[n].copy(),
            'weights': self.weights[n].copy(),
            'polarity': self.weights_oscillating[n].copy(),
            'error_delta': self.error_delta[n].copy(),
            'output': float(self.neuron_output[n, self.topology.output_index()]),
        }

    def get_config(self):
        """構成パラメータ（JSON化可能な辞書）"""
        return {
            'n_input': self.n_input,
            'n_output': self.n_output,
            'hidden': self.n_hidden,
            'hidden2': self.n_hidden2,
            'timesteps': self.timesteps,
            'learning_rate': self.learning_rate,
            'bias': self.bias,
            'sigmoid_steepness': self.sigmoid_steepness,
            'error_amplification': self.error_amplification,
            'weight_range': self.weight_range,
            'threshold_range': self.threshold_range,
            'multi_layer': self.multi_layer,
            'loop_cutting': self.loop_cutting,
            'self_loop_cutting': self.self_loop_cutting,
            'inhibitory_inputs': self.inhibitory_inputs,
            'update_mode': self.update_mode.value,
            'seed': self.seed,
        }

    def save_state(self, path):
        """
        ネットワーク状態を保存（.npz: 配列 + JSON化した構成）

        Args:
            path: 保存先（拡張子.npzは自動付加）

        Returns:
            str: 実際に保存したパス
        """
        if not str(path).endswith('.npz'):
            path = f"{path}.npz"
        parent = os.path.dirname(str(path))
        if parent:
            os.makedirs(parent, exist_ok=True)

        np.savez(
            path,
            config=np.array(json.dumps(self.get_config())),
            weights=self.weights,
            weights_oscillating=self.weights_oscillating,
            neuron_input=self.neuron_input,
            neuron_output=self.neuron_output,
            error_delta=self.error_delta
        )
        return str(path)

    @classmethod
    def load_state(cls, path):
        """
        save_state()で保存した状態から復元

        Raises:
            FileNotFoundError: ファイルが存在しない
            ValueError: 構成と配列の形状が一致しない
        """
        if not os.path.exists(path) and os.path.exists(f"{path}.npz"):
            path = f"{path}.npz"
        if not os.path.exists(path):
            raise FileNotFoundError(f"ネットワーク状態ファイルが見つかりません: {path}")

        with np.load(path, allow_pickle=False) as data:
            try:
                config = json.loads(str(data['config']))
            except json.JSONDecodeError as e:
                raise ValueError(f"構成情報のJSON形式が不正です: {path}\nエラー詳細: {e}") from e

            network = cls.from_config(config, n_input=config['n_input'],
                                      n_output=config['n_output'], seed=config.get('seed'))

            for name in ('weights', 'weights_oscillating', 'neuron_input',
                         'neuron_output', 'error_delta'):
                array = data[name]
                expected = getattr(network, name).shape
                if array.shape != expected:
                    raise ValueError(
                        f"{name}の形状が構成と一致しません: {array.shape} (期待値: {expected})"
                    )
                setattr(network, name, np.array(array, dtype=float))

        return network
