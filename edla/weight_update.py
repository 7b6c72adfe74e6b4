#!/usr/bin/env python3
"""
重み更新モジュール（ED法の学習則）

★微分の連鎖律不使用★
役割:
  - 更新モード（双方向 / 選択的）の定義
  - 拡散済み誤差信号と極性の積による重み変化量の計算
  - スナップショット読み出し → 一括書き込み（同時更新）

ED法の学習則:
  delta = α × neuron_input[s] × |z[t]| × (1 - |z[t]|)
  双方向: w[t, s] += delta × pol[t] × (exc[t] - inh[t])
  選択的: pol[s] > 0 なら w[t, s] += delta × exc[t] × pol[s] × pol[t]
          pol[s] < 0 なら w[t, s] += delta × inh[t] × pol[s] × pol[t]

重みが0の結合は「結合なし」を意味し、更新対象外（永久に0のまま）。
全ての変化量は順伝播・拡散直後の活性と誤差信号から一度に計算されるため、
結合の走査順序は結果に影響しない。
"""

from enum import Enum

import numpy as np

from .activation_functions import saturation_term
from .exceptions import ConfigurationError
from .topology import as_slice


class UpdateMode(Enum):
    """重み更新モード"""
    BIDIRECTIONAL = 'bidirectional'
    SELECTIVE = 'selective'

    @classmethod
    def parse(cls, value):
        """文字列またはUpdateModeからUpdateModeを得る"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            supported = [mode.value for mode in cls]
            raise ConfigurationError(
                f"未知の重み更新モードです: {value!r}（サポート: {supported}）"
            ) from None


def _bidirectional_signal(error_rows, polarity_rows, polarity):
    """双方向モード: 興奮性と抑制性の差を対象ニューロンの極性で符号付け"""
    signal = polarity_rows * (error_rows[:, 0] - error_rows[:, 1])
    return np.broadcast_to(signal[:, np.newaxis], (len(polarity_rows), len(polarity)))


def _selective_signal(error_rows, polarity_rows, polarity):
    """選択的モード: 結合元の極性でチャネルを選び、極性の積で方向を決める"""
    channel = np.where(polarity[np.newaxis, :] > 0, error_rows[:, 0:1], error_rows[:, 1:2])
    return channel * polarity[np.newaxis, :] * polarity_rows[:, np.newaxis]


_LEARNING_SIGNALS = {
    UpdateMode.BIDIRECTIONAL: _bidirectional_signal,
    UpdateMode.SELECTIVE: _selective_signal,
}


def compute_weight_delta(weights, neuron_input, neuron_output, error_delta, polarity,
                         topology, learning_rate, mode=UpdateMode.SELECTIVE):
    """
    重み変化量の計算（更新はしない）

    Args:
        weights: 1サブネットワーク分の重み shape [n_slots, n_slots]
        neuron_input: 順伝播後のニューロン入力 shape [n_slots]
        neuron_output: 順伝播後のニューロン出力 shape [n_slots]
        error_delta: 拡散済み誤差信号 shape [n_slots, 2]
        polarity: 極性ベクトル shape [n_slots]
        topology: NetworkTopology
        learning_rate: 学習率
        mode: UpdateMode

    Returns:
        delta_w: shape [n_slots, n_slots]（0の結合と計算対象外の行は0）
    """
    mode = UpdateMode.parse(mode)
    rows = as_slice(topology.compute_range())

    # 基本変化量: 学習率 × 結合元の入力 × 対象の飽和項
    base = learning_rate * saturation_term(neuron_output[rows])[:, np.newaxis] * neuron_input[np.newaxis, :]

    # モードごとの学習信号（モードの分岐は1回だけ）
    signal = _LEARNING_SIGNALS[mode](error_delta[rows], polarity[rows], polarity)

    delta_w = np.zeros_like(weights)
    delta_w[rows] = np.where(weights[rows] != 0, base * signal, 0.0)
    return delta_w


def apply_ed_update(weights, neuron_input, neuron_output, error_delta, polarity,
                    topology, learning_rate, mode=UpdateMode.SELECTIVE):
    """
    ED法の重み更新（in-place、一括書き込み）

    Returns:
        delta_w: 適用した変化量
    """
    delta_w = compute_weight_delta(weights, neuron_input, neuron_output, error_delta,
                                   polarity, topology, learning_rate, mode)
    weights += delta_w
    return delta_w
