#!/usr/bin/env python3
"""
アミン拡散モジュール（誤差信号の一斉放送）

★ED法の核心メカニズム★
役割:
  - 出力誤差を興奮性チャネルと抑制性チャネルに分離
  - 同じチャネル値（増幅係数付き）を全隠れニューロンへ一律に拡散
    （層ごとの勾配ではなく、神経伝達物質のような大域信号）

関数:
  - split_error_channels: 誤差 → (興奮性, 抑制性) の非負ペア
  - diffuse_amine: 1サブネットワーク分の誤差信号テーブルを生成

使用例:
    from edla.amine_diffusion import split_error_channels, diffuse_amine

    exc, inh = split_error_channels(-0.3)
    # → (0.0, 0.3)

    error_delta = diffuse_amine(topology, error=0.25, amplification=1.0)
    # error_delta[topology.output_index()] → [0.25, 0.0]
    # error_delta[隠れ層の全番号]          → [0.25, 0.0]
"""

import numpy as np

from .topology import as_slice


def split_error_channels(error):
    """
    誤差を興奮性・抑制性チャネルに分離

    誤差 > 0（出力を上げたい）: (error, 0)
    それ以外（出力を下げたい）: (0, -error)
    抑制性チャネルは常に非負の大きさとして保持する。

    Args:
        error: target - output

    Returns:
        (excitatory, inhibitory)
    """
    if error > 0:
        return float(error), 0.0
    return 0.0, float(-error)


def diffuse_amine(topology, error, amplification=1.0):
    """
    誤差信号テーブルの生成（出力ニューロン + 全隠れニューロンへ一斉拡散）

    ★層別配分ではなく、金子氏ED法の一律拡散★
    出力ニューロン自身には増幅なしのペアを、隠れニューロンには
    同じペアに増幅係数を掛けた値を格納する。バイアス・入力は(0, 0)。

    Args:
        topology: NetworkTopology
        error: 出力ニューロンの誤差（target - output）
        amplification: 隠れ層用の誤差増幅係数

    Returns:
        error_delta: shape [n_slots, 2]（[:, 0]=興奮性、[:, 1]=抑制性）
    """
    error_delta = np.zeros((topology.n_slots, 2))
    channels = np.array(split_error_channels(error))

    error_delta[topology.output_index()] = channels
    error_delta[as_slice(topology.hidden_range())] = channels * amplification
    return error_delta
