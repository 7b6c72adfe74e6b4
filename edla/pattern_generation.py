#!/usr/bin/env python3
"""
学習パターン生成モジュール

役割:
  - 入力パターン生成（全2値組み合わせ / 一様乱数）
  - 出力ごとの教師パターン生成（ランダム・パリティ・鏡像・手入力・連続値・1パターンのみ1）
  - パターンセットの保存・読み込み（inputs.npy, targets.npy, metadata.json）

関数:
  - parse_pattern_type: 教師パターン種別の正規化（整数コード0-5も可）
  - generate_patterns: 入力と教師のペアを生成
  - xor_patterns: XORの4パターン
  - save_pattern_set / load_pattern_set: パターンセットのファイル入出力

教師パターン種別:
  0: random       - ランダム2値（U > 0.5なら1）
  1: parity       - 0.5を超える入力の個数が奇数なら1（2入力ならXOR）
  2: mirror       - 入力が左右対称（回文）なら1
  3: manual       - 教師値を手入力（空入力は0.0）
  4: real_random  - 連続値 U(0,1)
  5: one_hot      - 1つのパターンのみ1（出力ごとに別のパターンを選ぶ）

使用例:
    from edla.pattern_generation import generate_patterns

    inputs, targets = generate_patterns(n_input=4, n_patterns=16, pattern_types=['parity'])
    # inputs.shape  → (16, 4)
    # targets.shape → (16, 1)
"""

import json
import os

import numpy as np

from .exceptions import ConfigurationError, PatternShapeError

PATTERN_TYPES = ('random', 'parity', 'mirror', 'manual', 'real_random', 'one_hot')
INPUT_MODES = ('binary', 'random')


def parse_pattern_type(value):
    """
    教師パターン種別を名前に正規化

    Args:
        value: 種別名または整数コード(0-5)

    Raises:
        ConfigurationError: 未知の種別
    """
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        if 0 <= value < len(PATTERN_TYPES):
            return PATTERN_TYPES[value]
    else:
        name = str(value).strip().lower()
        if name.isdigit() and int(name) < len(PATTERN_TYPES):
            return PATTERN_TYPES[int(name)]
        if name in PATTERN_TYPES:
            return name
    raise ConfigurationError(
        f"未知の教師パターン種別です: {value!r}（サポート: {list(PATTERN_TYPES)} または 0-5）"
    )


def _binary_inputs(n_input, n_patterns):
    # パターンcの特徴sは「cのビットsが立っていれば1」
    codes = np.arange(n_patterns)[:, np.newaxis]
    bits = np.arange(n_input)[np.newaxis, :]
    return ((codes >> bits) & 1).astype(float)


def _parity_targets(inputs):
    return (np.sum(inputs > 0.5, axis=1) % 2 == 1).astype(float)


def _mirror_targets(inputs):
    return np.all(inputs == inputs[:, ::-1], axis=1).astype(float)


def _manual_targets(inputs, n, input_fn):
    targets = np.zeros(len(inputs))
    for c, pattern in enumerate(inputs):
        values = ' '.join(f"{v:4.2f}" for v in pattern)
        print(f"Pattern {c} input: {values} → output {n}")
        answer = input_fn("Target value? ").strip()
        targets[c] = float(answer) if answer else 0.0
    return targets


def generate_patterns(n_input, n_patterns, pattern_types, input_mode='binary',
                      rng=None, manual_targets=None, input_fn=input):
    """
    学習パターンの生成

    Args:
        n_input: 論理入力数
        n_patterns: パターン数（binaryモードで2^n_inputを超えると入力が重複する）
        pattern_types: 出力ごとの教師パターン種別のリスト（長さ = 出力数）
        input_mode: 'binary'（全組み合わせ）または 'random'（一様乱数）
        rng: np.random.RandomState（Noneならnp.randomのグローバル状態）
        manual_targets: manual種別の教師値 shape [n_patterns, n_output]（Noneなら対話入力）
        input_fn: 対話入力に使う関数（既定はinput）

    Returns:
        inputs: shape [n_patterns, n_input]
        targets: shape [n_patterns, n_output]

    Raises:
        ConfigurationError: 未知の種別・モード、不正なパターン数、manual_targetsの個数不一致
    """
    if rng is None:
        rng = np.random
    if n_input <= 0 or n_patterns <= 0:
        raise ConfigurationError(
            f"n_inputとn_patternsは正の値が必要です: n_input={n_input}, n_patterns={n_patterns}"
        )
    if input_mode not in INPUT_MODES:
        raise ConfigurationError(
            f"未知の入力モードです: {input_mode!r}（サポート: {list(INPUT_MODES)}）"
        )
    if isinstance(pattern_types, (str, int)):
        pattern_types = [pattern_types]
    pattern_types = [parse_pattern_type(t) for t in pattern_types]
    if not pattern_types:
        raise ConfigurationError("pattern_typesには1つ以上の種別が必要です")
    n_output = len(pattern_types)

    if manual_targets is not None:
        manual_targets = np.asarray(manual_targets, dtype=float)
        if manual_targets.size != n_patterns * n_output:
            raise ConfigurationError(
                f"manual_targetsの個数が不正です: {manual_targets.size}"
                f"（必要数: パターン数{n_patterns} × 出力数{n_output} = {n_patterns * n_output}）"
            )
        manual_targets = manual_targets.reshape(n_patterns, n_output)

    # 入力パターン
    if input_mode == 'binary':
        inputs = _binary_inputs(n_input, n_patterns)
    else:
        inputs = rng.random_sample((n_patterns, n_input))

    # 教師パターン（出力ごとに独立）
    targets = np.zeros((n_patterns, n_output))
    used = set()
    for n, pattern_type in enumerate(pattern_types):
        if pattern_type == 'random':
            targets[:, n] = (rng.random_sample(n_patterns) > 0.5).astype(float)
        elif pattern_type == 'parity':
            targets[:, n] = _parity_targets(inputs)
        elif pattern_type == 'mirror':
            targets[:, n] = _mirror_targets(inputs)
        elif pattern_type == 'manual':
            if manual_targets is not None:
                targets[:, n] = manual_targets[:, n]
            else:
                targets[:, n] = _manual_targets(inputs, n, input_fn)
        elif pattern_type == 'real_random':
            targets[:, n] = rng.random_sample(n_patterns)
        elif pattern_type == 'one_hot':
            # 他の出力が選んでいないパターンから1つ選ぶ（使い切ったら重複を許す）
            free = [c for c in range(n_patterns) if c not in used]
            candidates = free if free else list(range(n_patterns))
            chosen = candidates[rng.randint(len(candidates))]
            used.add(chosen)
            targets[chosen, n] = 1.0

    return inputs, targets


def xor_patterns():
    """XORの4パターン（入力2、出力1）"""
    return generate_patterns(2, 4, ['parity'])


def save_pattern_set(directory, inputs, targets, name='patterns'):
    """
    パターンセットの保存

    ディレクトリ構成:
        directory/
        ├── inputs.npy
        ├── targets.npy
        └── metadata.json   # name, n_input, n_output, n_patterns

    Returns:
        str: 保存先ディレクトリ
    """
    inputs = np.asarray(inputs, dtype=float)
    targets = np.asarray(targets, dtype=float)
    if targets.ndim == 1:
        targets = targets[:, np.newaxis]
    if inputs.ndim != 2 or len(inputs) != len(targets):
        raise PatternShapeError(
            f"入力と教師のパターン数が一致しません: inputs={inputs.shape}, targets={targets.shape}"
        )

    os.makedirs(directory, exist_ok=True)
    np.save(os.path.join(directory, 'inputs.npy'), inputs)
    np.save(os.path.join(directory, 'targets.npy'), targets)

    metadata = {
        'name': name,
        'n_input': int(inputs.shape[1]),
        'n_output': int(targets.shape[1]),
        'n_patterns': int(inputs.shape[0]),
    }
    with open(os.path.join(directory, 'metadata.json'), 'w', encoding='utf-8') as f:
        json.dump(metadata, f, ensure_ascii=False, indent=2)
    return directory


def load_pattern_set(directory):
    """
    パターンセットの読み込み（metadata.jsonで形状を検証）

    Returns:
        (inputs, targets, metadata)

    Raises:
        FileNotFoundError: 必須ファイルがない
        ValueError: metadata.jsonが不正
        PatternShapeError: 配列形状がmetadataと一致しない
        IOError: .npyの読み込み失敗
    """
    metadata_path = os.path.join(directory, 'metadata.json')
    if not os.path.exists(metadata_path):
        raise FileNotFoundError(
            f"metadata.json が見つかりません: {metadata_path}\n"
            f"\nmetadata.json形式の例:\n"
            f"  {{\n"
            f"    \"name\": \"xor\",\n"
            f"    \"n_input\": 2,\n"
            f"    \"n_output\": 1,\n"
            f"    \"n_patterns\": 4\n"
            f"  }}"
        )

    try:
        with open(metadata_path, 'r', encoding='utf-8') as f:
            metadata = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(
            f"metadata.jsonのJSON形式が不正です: {metadata_path}\n"
            f"エラー詳細: {e}\n"
            f"  行 {e.lineno}, 列 {e.colno}: {e.msg}"
        ) from e

    missing_fields = [field for field in ('n_input', 'n_output', 'n_patterns') if field not in metadata]
    if missing_fields:
        raise ValueError(
            f"metadata.jsonに必須フィールドがありません: {metadata_path}\n"
            f"不足フィールド: {', '.join(missing_fields)}"
        )

    data_files = {
        'inputs': os.path.join(directory, 'inputs.npy'),
        'targets': os.path.join(directory, 'targets.npy'),
    }
    missing_files = [f"  - {name}.npy" for name, path in data_files.items() if not os.path.exists(path)]
    if missing_files:
        raise FileNotFoundError(
            f"必須データファイルが見つかりません:\n" + "\n".join(missing_files) +
            f"\n\nパターンセットディレクトリ: {directory}"
        )

    try:
        inputs = np.load(data_files['inputs'])
        targets = np.load(data_files['targets'])
    except Exception as e:
        raise IOError(
            f"パターンファイルの読み込み中にエラーが発生しました\n"
            f"エラー詳細: {e}"
        ) from e

    expected_inputs = (metadata['n_patterns'], metadata['n_input'])
    expected_targets = (metadata['n_patterns'], metadata['n_output'])
    if inputs.shape != expected_inputs or targets.shape != expected_targets:
        raise PatternShapeError(
            f"パターン形状がmetadata.jsonと一致しません\n"
            f"  inputs: {inputs.shape} (期待値: {expected_inputs})\n"
            f"  targets: {targets.shape} (期待値: {expected_targets})\n"
            f"metadata.json: {metadata_path}"
        )

    return inputs.astype(float), targets.astype(float), metadata
