#!/usr/bin/env python3
"""
パターン精度検証・表示モジュール

役割:
  - パターンごとの出力表示（4つの表示モード）
  - 重み行列のダンプ（計算対象ニューロンの行ごと）
  - 学習済みネットワークの検証レポート

表示モード:
  0: 表示なし
  1: 詳細（興奮性入力、出力と教師値、先頭4個の隠れニューロン）
  2: 数字1桁表示（教師値と全計算ニューロンを int(|a| × 9.999) で表示）
  3: 最小（教師値と出力の数字1桁のみ）

表示はsnapshot()のコピーを読むだけで、ネットワーク状態は変更しない。
"""

import numpy as np

from .topology import as_slice
from .trainer import learning_status


def _digit(value):
    return int(abs(value) * 9.999)


class PatternAccuracyVerifier:
    """
    パターン単位の精度検証と表示

    使用例:
      verifier = PatternAccuracyVerifier(network)
      network.train_step(x, y)
      print(verifier.format_pattern(1, y))
      stats = verifier.verify(inputs, targets, "XOR")
    """

    def __init__(self, network):
        self.network = network

    def format_pattern(self, write_mode, target, n=0):
        """
        直前の順伝播結果を表示モードに従って文字列化

        Args:
            write_mode: 表示モード(0-3)
            target: 教師値（スカラーまたは出力ごとの配列）
            n: 表示するサブネットワーク番号

        Returns:
            str（モード0は空文字列）
        """
        if write_mode == 0:
            return ''

        topology = self.network.topology
        state = self.network.snapshot(n)
        target_value = float(np.atleast_1d(target)[n])
        out = topology.output_index()

        if write_mode == 1:
            # 入力は興奮性側（偶数番号）だけを表示
            inputs = state['neuron_input'][as_slice(topology.input_range())][::2]
            hidden = state['neuron_output'][as_slice(topology.hidden_range())][:4]
            return ("inputs: " + " ".join(f"{v:4.2f}" for v in inputs) +
                    f" -> {state['output']:7.5f}, {target_value:4.2f}" +
                    " hidden: " + " ".join(f"{v:7.4f}" for v in hidden))

        if write_mode == 2:
            hidden = state['neuron_output'][as_slice(topology.hidden_range())]
            return (f"{_digit(target_value)}: {_digit(state['neuron_output'][out])} " +
                    "".join(str(_digit(v)) for v in hidden))

        if write_mode == 3:
            return f"{_digit(target_value)}:{_digit(state['neuron_output'][out])}"

        raise ValueError(f"未知の表示モードです: {write_mode}（0-3）")

    def format_weight_matrix(self, n=0):
        """重み行列の表示（出力・隠れニューロンの行のみ）"""
        topology = self.network.topology
        weights = self.network.snapshot(n)['weights']

        lines = [
            "=== 重み行列 ===",
            "結合元: th+   th-   in1+  in1-  in2+  in2-  ...",
        ]
        for t in topology.compute_range():
            lines.append(f"Neuron {t:2d}: " + " ".join(f"{w:6.2f}" for w in weights[t]))
        return "\n".join(lines)

    def verify(self, inputs, targets, name="Patterns", show_patterns=True):
        """
        全パターンの予測と統計（学習なし）

        Returns:
            dict: error_total, error_count, accuracy, status, outputs
        """
        inputs = np.asarray(inputs, dtype=float)
        targets = np.asarray(targets, dtype=float)
        if targets.ndim == 1:
            targets = targets[:, np.newaxis]
        n_patterns = len(inputs)

        outputs = np.array([self.network.predict(x) for x in inputs])
        errors = np.abs(targets - outputs)
        error_total = float(np.sum(errors))
        error_count = int(np.sum(np.any(errors > 0.5, axis=1)))
        accuracy = (n_patterns - error_count) / n_patterns

        print("\n" + "=" * 70)
        print(f"パターン検証レポート - {name}")
        print("=" * 70)

        if show_patterns:
            print(f"\nパターン別出力:")
            for c in range(n_patterns):
                pattern = ",".join(f"{v:.0f}" if v in (0.0, 1.0) else f"{v:.2f}" for v in inputs[c])
                result = " ".join(f"{o:.4f}/{t:.2f}" for o, t in zip(outputs[c], targets[c]))
                mark = "✗" if np.any(errors[c] > 0.5) else "✓"
                print(f"  Pattern {c:3d}: [{pattern}] → {result} {mark}")

        status = learning_status(error_count, n_patterns)
        print(f"\n全体統計:")
        print(f"  誤差合計: {error_total:.6f}")
        print(f"  誤りパターン: {error_count}/{n_patterns}")
        print(f"  精度: {accuracy:.4f} ({accuracy * 100:.2f}%)")
        print(f"  状況: {status}")
        print("=" * 70 + "\n")

        return {
            'error_total': error_total,
            'error_count': error_count,
            'accuracy': accuracy,
            'status': status,
            'outputs': outputs,
        }
