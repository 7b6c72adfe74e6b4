#!/usr/bin/env python3
"""
エポックループ・収束判定モジュール

役割:
  - 1エポック = 全パターンを順番に1回ずつtrain_step
  - 収束判定（エポック誤差合計 < 閾値）と最大エポック数での打ち切り
  - 誤差履歴の記録（学習曲線用）
  - 学習状況の判定（PERFECT / Excellent / Good / Learning...）と最終判定（GOOD / BAD）

クラス:
  - EDTrainer: エポックループの管理

関数:
  - learning_status: エポックごとの学習状況ラベル
  - final_verdict: 打ち切り時の最終判定

使用例:
    from edla.trainer import EDTrainer

    trainer = EDTrainer(network, inputs, targets, convergence_threshold=0.1, max_epochs=2000)
    result = trainer.fit()
    trainer.report(result)
"""

import numpy as np
from tqdm import tqdm


def learning_status(error_count, n_patterns):
    """誤り数（パターン数または出力判定数に対する）から学習状況ラベルを返す"""
    if error_count == 0:
        return 'PERFECT'
    if error_count <= n_patterns * 0.1:
        return 'Excellent'
    if error_count <= n_patterns * 0.3:
        return 'Good'
    return 'Learning...'


def final_verdict(error_count, n_patterns):
    """誤りが1割以下ならGOOD、それ以外はBAD"""
    return 'GOOD' if error_count <= n_patterns * 0.1 else 'BAD'


class EDTrainer:
    """
    ED法ネットワークのエポックループ

    ネットワークの誤差カウンタをエポック開始時にリセットし、
    全パターンの学習後に読み出して収束を判定する。
    """

    def __init__(self, network, inputs, targets, convergence_threshold=0.1, max_epochs=10000):
        self.network = network
        self.inputs = np.asarray(inputs, dtype=float)
        self.targets = np.asarray(targets, dtype=float)
        if self.targets.ndim == 1:
            self.targets = self.targets[:, np.newaxis]
        self.convergence_threshold = convergence_threshold
        self.max_epochs = max_epochs

        self.error_history = []
        self.error_count_history = []

    @property
    def n_patterns(self):
        return len(self.inputs)

    @property
    def n_checks(self):
        """誤差カウンタの分母（パターン数 × 出力数）"""
        return self.n_patterns * self.network.n_output

    def train_epoch(self, on_pattern=None):
        """
        1エポックの学習

        Args:
            on_pattern: パターンごとのコールバック on_pattern(index, pattern_in, target)
                        （表示用、train_step直後に呼ばれる）

        Returns:
            (error_total, error_count)
        """
        self.network.reset_epoch_counters()
        for index, (x, y) in enumerate(zip(self.inputs, self.targets)):
            self.network.train_step(x, y)
            if on_pattern is not None:
                on_pattern(index, x, y)
        return self.network.error_total, self.network.error_count

    def fit(self, progress=True, on_epoch_end=None, on_pattern=None):
        """
        収束または最大エポック数まで学習

        Args:
            progress: tqdmの進捗バーを表示
            on_epoch_end: エポックごとのコールバック on_epoch_end(epoch, error_total, error_count)
            on_pattern: train_epoch()へ渡すパターンごとのコールバック

        Returns:
            dict: converged, epochs, error_total, error_count, accuracy,
                  error_history, error_count_history
        """
        error_total, error_count = 0.0, 0
        converged = False
        epoch = 0

        pbar = tqdm(range(1, self.max_epochs + 1), desc="Training", ncols=120, disable=not progress)
        for epoch in pbar:
            error_total, error_count = self.train_epoch(on_pattern=on_pattern)

            # 履歴記録
            self.error_history.append(error_total)
            self.error_count_history.append(error_count)

            # 進捗表示
            pbar.set_postfix({
                'Error': f'{error_total:.4f}',
                'Miss': f'{error_count}/{self.n_checks}',
                'Status': learning_status(error_count, self.n_checks)
            })

            if on_epoch_end is not None:
                on_epoch_end(epoch, error_total, error_count)

            # 収束判定
            if error_total < self.convergence_threshold:
                converged = True
                break
        pbar.close()

        return {
            'converged': converged,
            'epochs': epoch,
            'error_total': error_total,
            'error_count': error_count,
            'accuracy': (self.n_checks - error_count) / self.n_checks,
            'error_history': list(self.error_history),
            'error_count_history': list(self.error_count_history),
        }

    def report(self, result):
        """学習結果のサマリー表示"""
        n_patterns = self.n_patterns
        n_checks = self.n_checks
        print("\n" + "=" * 70)
        if result['converged']:
            print("ED法 収束")
            print("=" * 70)
            print(f"収束エポック: {result['epochs']}")
            print(f"最終誤差合計: {result['error_total']:.6f} (閾値: {self.convergence_threshold})")
            print(f"誤り出力: {result['error_count']}/{n_checks}")
            print(f"最終精度: {100.0 * result['accuracy']:.1f}%")
            print(f"パターンあたり平均誤差: {result['error_total'] / n_patterns:.6f}")
        else:
            print("学習打ち切り（最大エポック数に到達）")
            print("=" * 70)
            print(f"エポック数: {result['epochs']}")
            print(f"最終誤差合計: {result['error_total']:.4f}")
            print(f"誤り出力: {result['error_count']}/{n_checks} "
                  f"({100.0 * result['error_count'] / n_checks:.1f}%)")
            verdict = final_verdict(result['error_count'], n_checks)
            if verdict == 'GOOD':
                print("判定: GOOD - ネットワークは十分に学習しました")
            else:
                print("判定: BAD - 学習の継続またはパラメータ調整が必要です")
        print("=" * 70)
