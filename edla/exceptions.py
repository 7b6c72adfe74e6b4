#!/usr/bin/env python3
"""
例外定義モジュール

役割:
  - ED法ネットワークの構成エラー（初期化時に即座に失敗させる）
  - パターン形状の不一致エラー（train_step時に検出、状態は一切変更しない）

クラス:
  - EDNetworkError: 基底クラス
  - ConfigurationError: 構成パラメータの不正
  - PatternShapeError: 入力/教師パターンの長さ不一致
"""


class EDNetworkError(Exception):
    """ED法ネットワーク関連の例外の基底クラス"""


class ConfigurationError(EDNetworkError, ValueError):
    """
    構成パラメータが構造上の不変条件を満たさない

    例: size_inputが奇数、次元が負、timesteps < 1、未知の更新モード
    値を黙って丸めることはせず、必ずこの例外を送出する
    """


class PatternShapeError(EDNetworkError, ValueError):
    """入力パターン長がsize_input/2と、または教師パターン長がsize_outputと一致しない"""
