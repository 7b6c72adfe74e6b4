#!/usr/bin/env python3
"""
興奮性・抑制性ニューロンペア構造モジュール

★Dale's Principle実装の基礎★
役割:
  - 入力の興奮性・抑制性ペア（双子ニューロン）生成
  - ニューロン番号ごとのE/Iフラグ（極性ベクトル）生成

関数:
  - create_ei_pairs: 論理入力を隣接する双子スロット用に複製
  - create_ei_flags: 極性ベクトル（weights_oscillating）生成

使用例:
    from edla.neuron_structure import create_ei_pairs, create_ei_flags
    import numpy as np

    # 入力ペア生成（隣接配置）
    x = np.array([0.1, 0.2, 0.3])
    x_paired = create_ei_pairs(x)
    # → [0.1, 0.1, 0.2, 0.2, 0.3, 0.3]

    # E/Iフラグ生成（偶数番号=興奮性、奇数番号=抑制性、出力ニューロンは常に興奮性）
    ei_flags = create_ei_flags(n_slots=9, output_index=6)
    # → [1, -1, 1, -1, 1, -1, 1, -1, 1]
"""

import numpy as np


def create_ei_pairs(x):
    """
    入力データを興奮性・抑制性ペアに変換

    ★Dale's Principle★
    論理入力kは番号2k+2（興奮性）と2k+3（抑制性）の双子ニューロンへ
    同じ値で入力される。方向性の学習は入力値の違いではなく極性で決まる。

    Args:
        x: 入力データ shape [n_input]

    Returns:
        x_paired: ペア構造 shape [n_input * 2]
                 [x1, x1, x2, x2, ..., xn, xn]
    """
    return np.repeat(np.asarray(x, dtype=float), 2)


def create_ei_flags(n_slots, output_index):
    """
    興奮性・抑制性フラグ配列（極性ベクトル）を生成

    Args:
        n_slots: ニューロン番号の総数（total_neurons + 2）
        output_index: 出力ニューロンの番号（size_input + 2）

    Returns:
        ei_flags: フラグ配列 shape [n_slots]
                 +1 = 興奮性ニューロン（偶数番号）
                 -1 = 抑制性ニューロン（奇数番号）

    Notes:
        - ((i + 1) % 2) * 2 - 1 による交互配置
        - 出力ニューロンは番号の偶奇に関わらず+1
        - 構築後に変化することはない
    """
    index = np.arange(n_slots)
    ei_flags = ((index + 1) % 2) * 2.0 - 1.0
    ei_flags[output_index] = 1.0
    return ei_flags
