#!/usr/bin/env python3
"""
活性化関数モジュール

★ED法準拠★
役割:
  - 傾き（steepness）付きシグモイド関数
  - 飽和項 |z| × (1 - |z|)（重み更新の微分代替項）
  - 数値安定性確保（overflow回避、0または1に飽和）

重要: このモジュールの関数は微分の連鎖律を使用しません

関数:
  - sigmoid: シグモイド関数 1 / (1 + exp(-2x / steepness))
  - saturation_term: 飽和項

使用例:
    from edla.activation_functions import sigmoid, saturation_term
    import numpy as np

    z = sigmoid(np.dot(w, z_input), steepness=0.4)
    sat = saturation_term(z)
"""

import numpy as np

# exp()の引数の上限（これを超えるとfloat64がoverflowする）
EXPONENT_LIMIT = 500.0


def sigmoid(x, steepness=0.4):
    """
    シグモイド関数（steepness付き、overflow回避）

    sigmoid(x) = 1 / (1 + exp(-2x / steepness))

    steepnessが小さいほど遷移が急峻になる。
    重み付き和が極端に大きい場合は指数部をクリップし、
    overflow値を伝播させずに0または1へ飽和させる。

    Args:
        x: 入力値または配列（重み付き和）
        steepness: 傾きパラメータ（> 0）

    Returns:
        シグモイド変換後の値（0-1の範囲）
    """
    exponent = np.clip(-2.0 * np.asarray(x, dtype=float) / steepness,
                       -EXPONENT_LIMIT, EXPONENT_LIMIT)
    return 1.0 / (1.0 + np.exp(exponent))


def saturation_term(z):
    """
    飽和項 |z| × (1 - |z|)

    シグモイド出力は(0, 1)に収まるため z × (1 - z) と一致するが、
    絶対値の形を互換性のため保持する（出力が負になる活性化関数を想定した形）

    Args:
        z: ニューロン出力（スカラーまたは配列）

    Returns:
        飽和項
    """
    z_abs = np.abs(z)
    return z_abs * (1.0 - z_abs)
