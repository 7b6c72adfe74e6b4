#!/usr/bin/env python3
"""
ネットワークトポロジーモジュール（ニューロン番号体系と符号制約付き重み）

★ED法の結合制約★
役割:
  - ネットワーク次元の計算と検証（NetworkTopology）
  - ニューロン番号の名前付きアクセサ（バイアス・入力・出力・隠れ層・第2隠れ層）
  - フラグで制御される結合規則を順番に適用した重み行列の生成

ニューロン番号体系（全サブネットワーク共通）:
  0                       : 正バイアス
  1                       : 負バイアス
  2 .. size_input+1       : 入力の興奮性/抑制性ペア（偶数=興奮性、奇数=抑制性）
  size_input+2            : 最初の隠れニューロン = 出力ニューロン
  size_input+3 .. total+1 : 残りの隠れニューロン（末尾size_hidden2個が第2隠れ層）

関数:
  - as_slice: range → slice変換（NumPyのビュー参照用）
  - build_weight_matrix: 1サブネットワーク分の重み行列生成

使用例:
    from edla.topology import NetworkTopology, build_weight_matrix
    from edla.neuron_structure import create_ei_flags
    import numpy as np

    topology = NetworkTopology(size_input=4, size_output=1, size_hidden1=8)
    polarity = create_ei_flags(topology.n_slots, topology.output_index())
    weights = build_weight_matrix(topology, polarity, rng=np.random.RandomState(1))
"""

import numpy as np

from .exceptions import ConfigurationError


def as_slice(index_range):
    """連続したrangeをNumPyのスライスに変換（コピーではなくビューで扱うため）"""
    return slice(index_range.start, index_range.stop)


class NetworkTopology:
    """
    ED法ネットワークの次元（構築後は不変）

    属性:
      size_input   : 入力ニューロン数（論理入力数の2倍、常に偶数）
      size_output  : 出力数 = 独立したサブネットワーク数
      size_hidden  : 第1隠れ層 + 第2隠れ層のニューロン数
      size_hidden2 : 第2隠れ層のニューロン数
      total_neurons: size_input + 1 + size_hidden（+1はバイアスペア分）
      n_slots      : 各配列の長さ（total_neurons + 2）
    """

    def __init__(self, size_input, size_output, size_hidden1, size_hidden2=0):
        for name, value in (('size_input', size_input), ('size_output', size_output),
                            ('size_hidden1', size_hidden1), ('size_hidden2', size_hidden2)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ConfigurationError(f"{name}は整数で指定してください: {value!r}")

        if size_input <= 0:
            raise ConfigurationError(f"size_inputは正の値が必要です: {size_input}")
        if size_input % 2 != 0:
            raise ConfigurationError(
                f"size_inputは偶数が必要です（興奮性/抑制性ペアで2倍済みの値）: {size_input}"
            )
        if size_output <= 0:
            raise ConfigurationError(f"size_outputは1以上が必要です: {size_output}")
        if size_hidden1 < 0 or size_hidden2 < 0:
            raise ConfigurationError(
                f"隠れ層のニューロン数は0以上が必要です: hidden1={size_hidden1}, hidden2={size_hidden2}"
            )
        if size_hidden2 > size_hidden1 + size_hidden2:
            raise ConfigurationError(
                f"第2隠れ層が隠れ層全体を超えています: hidden2={size_hidden2}"
            )

        self._size_input = int(size_input)
        self._size_output = int(size_output)
        self._size_hidden = int(size_hidden1) + int(size_hidden2)
        self._size_hidden2 = int(size_hidden2)
        self._total_neurons = self._size_input + 1 + self._size_hidden

    @property
    def size_input(self):
        return self._size_input

    @property
    def size_output(self):
        return self._size_output

    @property
    def size_hidden(self):
        return self._size_hidden

    @property
    def size_hidden2(self):
        return self._size_hidden2

    @property
    def total_neurons(self):
        return self._total_neurons

    @property
    def n_slots(self):
        return self._total_neurons + 2

    # ========================================
    # 名前付きインデックス（番号計算はここだけで行う）
    # ========================================
    def bias_indices(self):
        """正バイアス(0)と負バイアス(1)"""
        return (0, 1)

    def input_range(self):
        """入力ペアの番号 2 .. size_input+1"""
        return range(2, self._size_input + 2)

    def output_index(self):
        """出力ニューロン（最初の隠れニューロン）の番号"""
        return self._size_input + 2

    def hidden_range(self):
        """出力ニューロンを除く隠れニューロンの番号（誤差の拡散先）"""
        return range(self._size_input + 3, self.n_slots)

    def compute_range(self):
        """活性を計算・学習するニューロン（出力 + 隠れ層）の番号"""
        return range(self.output_index(), self.n_slots)

    def second_layer_range(self):
        """第2隠れ層の番号（隠れ層末尾のsize_hidden2個）"""
        return range(self.n_slots - self._size_hidden2, self.n_slots)

    def __eq__(self, other):
        if not isinstance(other, NetworkTopology):
            return NotImplemented
        return (self._size_input, self._size_output, self._size_hidden, self._size_hidden2) == \
               (other._size_input, other._size_output, other._size_hidden, other._size_hidden2)

    def __repr__(self):
        return (f"NetworkTopology(size_input={self._size_input}, size_output={self._size_output}, "
                f"size_hidden={self._size_hidden}, size_hidden2={self._size_hidden2}, "
                f"total_neurons={self._total_neurons})")


def build_weight_matrix(topology, polarity, weight_range=1.0, threshold_range=1.0,
                        self_loop_cutting=True, loop_cutting=True, multi_layer=True,
                        inhibitory_inputs=True, rng=None):
    """
    1サブネットワーク分の符号制約付き重み行列を生成

    対象（target）は出力+隠れ層、結合元（source）は全番号。
    以下の規則をこの順番で適用する（後段の規則6・9は前段の結果を前提とする）:
      1. source < 2（バイアス）       : threshold_range × U(0,1)
      2. それ以外                     : weight_range × U(0,1)
      3. 第2隠れ層 ← 入力             : 0
      4. ループカット（2条件）         : 隠れ層間の相互結合と出力ニューロンからの結合を0
      5. 多層フラグ: 出力 ← 入力      : 0
      6. 第2隠れ層 ← 隠れ層           : weight_range × U(0,1)（規則3の後に再有効化）
      7. 自己結合                     : 自己ループカットなら0、それ以外は再抽選
      8. 抑制性入力無効: 奇数番号の入力: 0
      9. 極性の積 polarity[source] × polarity[target] を乗算（0は0のまま）

    Args:
        topology: NetworkTopology
        polarity: 極性ベクトル shape [n_slots]
        weight_range: 通常結合の初期化範囲
        threshold_range: バイアス結合の初期化範囲
        self_loop_cutting: 自己結合を切るか
        loop_cutting: 隠れ層間の再帰結合を切るか
        multi_layer: 入力→出力の直結を切るか
        inhibitory_inputs: 抑制性入力ニューロンからの結合を使うか
        rng: np.random.RandomState（Noneならnp.randomのグローバル状態）

    Returns:
        weights: shape [n_slots, n_slots]（[target, source]）
    """
    if rng is None:
        rng = np.random

    n_slots = topology.n_slots
    shape = (n_slots, n_slots)
    out = topology.output_index()
    inputs = topology.input_range()
    last = topology.total_neurons + 1

    target, source = np.indices(shape)
    is_input_source = (source >= inputs.start) & (source < inputs.stop)
    is_second_layer_target = target > last - topology.size_hidden2

    # 乱数は規則ごとにまとめて抽選（同じseedなら同じ行列になる）
    draw_threshold = threshold_range * rng.random_sample(shape)
    draw_weight = weight_range * rng.random_sample(shape)
    draw_second_layer = weight_range * rng.random_sample(shape)
    draw_self_loop = weight_range * rng.random_sample(shape)

    # 規則1, 2
    weights = np.where(source < 2, draw_threshold, draw_weight)

    # 規則3: 第2隠れ層は入力を直接読まない
    weights[is_second_layer_target & is_input_source] = 0.0

    # 規則4: ループカット
    if loop_cutting:
        weights[(target != source) & (target > out) & (source > inputs.stop - 1)] = 0.0
        weights[(target > inputs.stop - 1) & (source == out)] = 0.0

    # 規則5: 入力→出力の直結を切る
    if multi_layer:
        weights[is_input_source & (target == out)] = 0.0

    # 規則6: 第2隠れ層内の結合を再有効化
    second_layer_links = is_second_layer_target & (source >= out + 1)
    weights[second_layer_links] = draw_second_layer[second_layer_links]

    # 規則7: 自己結合
    diagonal = target == source
    if self_loop_cutting:
        weights[diagonal] = 0.0
    else:
        weights[diagonal] = draw_self_loop[diagonal]

    # 規則8: 抑制性入力からの結合を切る
    if not inhibitory_inputs:
        weights[is_input_source & (source % 2 == 1)] = 0.0

    # 計算対象外（バイアス・入力）の行は常に0
    weights[:out, :] = 0.0

    # 規則9: 符号制約（Dale's Principle）
    weights *= np.outer(polarity, polarity)
    return weights
