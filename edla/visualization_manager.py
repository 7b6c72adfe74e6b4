#!/usr/bin/env python3
"""
可視化マネージャー - 学習曲線・重み/活性ヒートマップ表示

役割:
  - 保存パス決定（ディレクトリ指定ならタイムスタンプ付きベース名）
  - リアルタイム学習曲線表示（パターンあたり誤差、誤りパターン数）
  - 重み行列と活性のヒートマップ表示（サブネットワーク0）
  - 図の保存

図のラベルは英語（フォント問題回避）
"""

from datetime import datetime
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns

from .topology import as_slice

IMAGE_SUFFIXES = ['.png', '.jpg', '.jpeg', '.pdf', '.svg']


def resolve_save_base(save_path):
    """
    保存パスからベースファイル名（拡張子なし）を決定

    - None: 保存なし（Noneを返す）
    - 末尾が'/': ディレクトリとして扱い viz_results_YYYYMMDD_HHMMSS
    - それ以外: ベースファイル名（画像拡張子のみ除去）
    """
    if save_path is None:
        return None

    if save_path.endswith('/'):
        save_path_obj = Path(save_path)
        save_path_obj.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        return str(save_path_obj / f'viz_results_{timestamp}')

    save_path_obj = Path(save_path)
    if save_path_obj.parent != Path('.'):
        save_path_obj.parent.mkdir(parents=True, exist_ok=True)
    if save_path_obj.suffix.lower() in IMAGE_SUFFIXES:
        return str(save_path_obj.with_suffix(''))
    return save_path


class VisualizationManager:
    """
    リアルタイム可視化マネージャー

    機能:
    - 学習曲線表示（エポック誤差、誤りパターン数）
    - 重み行列・活性ヒートマップ表示
    - 図の保存
    """

    def __init__(self, enable_viz=False, enable_heatmap=False, save_path=None,
                 max_epochs=10000, update_every=1, pause_seconds=0.1):
        """
        Parameters:
        -----------
        enable_viz : bool
            学習曲線表示の有効化
        enable_heatmap : bool
            ヒートマップ表示の有効化
        save_path : str or None
            保存パス（ディレクトリまたはベースファイル名）
        max_epochs : int
            最大エポック数（学習曲線の横軸設定用）
        update_every : int
            描画を更新するエポック間隔
        pause_seconds : float
            描画更新ごとの待ち時間（plt.pause）
        """
        self.enable_viz = enable_viz
        self.enable_heatmap = enable_heatmap
        self.save_path = resolve_save_base(save_path)
        self.max_epochs = max_epochs
        self.update_every = max(1, int(update_every))
        self.pause_seconds = pause_seconds

        self.fig_viz = None
        self.fig_heatmap = None

        if self.enable_viz:
            plt.ion()
            self.fig_viz = plt.figure(figsize=(12, 4))
            self.fig_viz.canvas.manager.set_window_title('ED Learning Curve')

        if self.enable_heatmap:
            plt.ion()
            self.fig_heatmap = plt.figure(figsize=(14, 7))
            self.fig_heatmap.canvas.manager.set_window_title('Weights and Activations')

    def should_update(self, epoch):
        """描画更新するエポックか"""
        return epoch == 1 or epoch % self.update_every == 0

    def _refresh(self, fig):
        plt.figure(fig.number)
        plt.pause(self.pause_seconds)
        plt.draw()

    def update_learning_curve(self, error_history, error_count_history, n_patterns, n_output=1):
        """
        学習曲線を更新

        Parameters:
        -----------
        error_history : list[float]
            エポックごとの誤差合計
        error_count_history : list[int]
            エポックごとの誤りパターン数
        n_patterns : int
            パターン数
        n_output : int
            出力数（誤差をパターン×出力あたりに正規化）
        """
        if not self.enable_viz or self.fig_viz is None:
            return

        self.fig_viz.clear()
        ax1, ax2 = self.fig_viz.subplots(1, 2)

        epochs_list = list(range(1, len(error_history) + 1))
        mean_error = np.asarray(error_history, dtype=float) / (n_patterns * n_output)

        # パターンあたりの誤差
        ax1.plot(epochs_list, mean_error, color='tab:blue')
        ax1.set_xlabel('Epoch')
        ax1.set_ylabel('Error per pattern')
        ax1.set_title('Learning Curve')
        ax1.set_xlim(0, self.max_epochs)
        ax1.set_ylim(0.0, 1.0)
        ax1.grid(True, alpha=0.3)

        # 誤りパターン数
        ax2.plot(epochs_list, error_count_history, color='tab:red')
        ax2.set_xlabel('Epoch')
        ax2.set_ylabel('Error patterns')
        ax2.set_title('Error Patterns (|error| > 0.5)')
        ax2.set_xlim(0, self.max_epochs)
        ax2.set_ylim(0, max(1, n_patterns * n_output))
        ax2.grid(True, alpha=0.3)

        self._refresh(self.fig_viz)

    def update_heatmap(self, epoch, network, n=0):
        """
        重み行列と活性のヒートマップを更新

        Parameters:
        -----------
        epoch : int
            現在のエポック番号
        network : EDNetwork
            表示対象（snapshot()のコピーのみ参照）
        n : int
            サブネットワーク番号
        """
        if not self.enable_heatmap or self.fig_heatmap is None:
            return

        topology = network.topology
        state = network.snapshot(n)
        rows = as_slice(topology.compute_range())

        self.fig_heatmap.clear()
        ax1, ax2 = self.fig_heatmap.subplots(1, 2, gridspec_kw={'width_ratios': [3, 1]})
        self.fig_heatmap.suptitle(f'Epoch: {epoch}  Output: {state["output"]:.4f}',
                                  fontsize=14, fontweight='bold')

        # 重み行列（出力・隠れニューロンの行のみ）
        weights = state['weights'][rows]
        limit = max(float(np.max(np.abs(weights))), 1e-6)
        sns.heatmap(weights, ax=ax1, cmap='coolwarm', center=0.0, vmin=-limit, vmax=limit,
                    yticklabels=list(topology.compute_range()),
                    cbar_kws={'label': 'Weight'})
        ax1.set_xlabel('Source neuron')
        ax1.set_ylabel('Target neuron')
        ax1.set_title(f'Weights (sub-network {n})')

        # 活性（列ベクトル表示）
        activations = state['neuron_output'][rows][:, np.newaxis]
        sns.heatmap(activations, ax=ax2, cmap='rainbow', vmin=0.0, vmax=1.0, annot=len(activations) <= 20,
                    fmt='.2f', yticklabels=list(topology.compute_range()), xticklabels=['output'],
                    cbar_kws={'label': 'Activation'})
        ax2.set_title('Activations')

        self._refresh(self.fig_heatmap)

    def save_figures(self):
        """
        可視化図を保存

        Returns:
        --------
        tuple[str, str] or tuple[None, None]
            (学習曲線保存パス, ヒートマップ保存パス)
        """
        if not (self.enable_viz or self.enable_heatmap):
            return None, None

        if self.save_path is None:
            return None, None

        plt.ioff()

        save_path_viz = None
        save_path_heatmap = None
        both = self.fig_viz is not None and self.fig_heatmap is not None

        if self.fig_viz is not None:
            save_path_viz = f"{self.save_path}_viz.png" if both else f"{self.save_path}.png"
            self.fig_viz.savefig(save_path_viz, dpi=150, bbox_inches='tight')
            print(f"[学習曲線保存] {save_path_viz}")

        if self.fig_heatmap is not None:
            save_path_heatmap = f"{self.save_path}_heatmap.png" if both else f"{self.save_path}.png"
            self.fig_heatmap.savefig(save_path_heatmap, dpi=150, bbox_inches='tight')
            print(f"[ヒートマップ保存] {save_path_heatmap}")

        return save_path_viz, save_path_heatmap

    def close(self):
        """可視化ウィンドウを閉じる"""
        if self.fig_viz is not None:
            plt.close(self.fig_viz)
        if self.fig_heatmap is not None:
            plt.close(self.fig_heatmap)
