#!/usr/bin/env python3
"""
Recurrent ED-ANN（金子氏のError Diffusion学習法）コマンドライン実行スクリプト

バージョン番号: 1.0.0
"""

import argparse
import sys

import numpy as np
from tqdm import tqdm

from edla.accuracy_verifier import PatternAccuracyVerifier
from edla.ed_network import EDNetwork
from edla.exceptions import ConfigurationError
from edla.hyperparameters import HyperParams
from edla.pattern_generation import generate_patterns, load_pattern_set, save_pattern_set
from edla.trainer import EDTrainer
from edla.visualization_manager import VisualizationManager

# コマンドライン引数名 → 構成辞書のキー
CONFIG_OVERRIDES = {
    'hidden': 'hidden',
    'hidden2': 'hidden2',
    'timesteps': 'timesteps',
    'lr': 'learning_rate',
    'steepness': 'sigmoid_steepness',
    'amplification': 'error_amplification',
    'bias': 'bias',
    'weight_range': 'weight_range',
    'threshold_range': 'threshold_range',
    'multi_layer': 'multi_layer',
    'loop_cutting': 'loop_cutting',
    'self_loop_cutting': 'self_loop_cutting',
    'inhibitory_inputs': 'inhibitory_inputs',
    'threshold': 'convergence_threshold',
    'max_epochs': 'max_epochs',
    'input_mode': 'input_mode',
}


def parse_args(argv=None):
    """コマンドライン引数の解析"""
    parser = argparse.ArgumentParser(
        description='Recurrent ED法（Error Diffusion Learning Algorithm）ニューラルネットワーク\n'
                    '\n'
                    '【重要】問題別の自動パラメータ設定:\n'
                    '  - --presetで指定した問題の構成（入力数・パターン数・隠れ層・最大エポック数）が自動適用されます\n'
                    '  - 学習則のパラメータはオリジナルED法の既定値が適用されます\n'
                    '  - コマンドライン引数で明示的に指定した値は自動設定より優先されます\n'
                    '  - --list_hyperparams で利用可能な設定一覧を確認できます\n',
        formatter_class=argparse.RawTextHelpFormatter
    )

    # ========================================
    # 実行関連のパラメータ
    # ========================================
    exec_group = parser.add_argument_group('実行関連のパラメータ')
    exec_group.add_argument('--preset', type=str, default='parity',
                           help='問題別設定名（xor, parity, mirror, random, real_random, one_hot, manual）'
                                '（デフォルト値: parity）')
    exec_group.add_argument('--patterns', type=int, default=None,
                           help='学習パターン数（デフォルト値: 問題別設定）')
    exec_group.add_argument('--inputs', type=int, default=None,
                           help='論理入力数（デフォルト値: 問題別設定）')
    exec_group.add_argument('--outputs', type=int, default=1,
                           help='出力数（独立サブネットワーク数、デフォルト値: 1）')
    exec_group.add_argument('--input_mode', type=str, default=None, choices=['binary', 'random'],
                           help='入力パターン生成モード（binary=全2値組み合わせ, random=一様乱数）')
    exec_group.add_argument('--pattern_type', type=str, default=None,
                           help='教師パターン種別（出力ごとにカンマ区切り、例: parity,mirror）'
                                '。1つだけ指定すると全出力に適用。整数コード0-5も可')
    exec_group.add_argument('--manual_targets', type=str, default=None,
                           help='manual種別の教師値（カンマ区切り、パターン順×出力順）。'
                                '未指定なら対話入力')
    exec_group.add_argument('--pattern_dir', type=str, default=None,
                           help='パターンセットのディレクトリ（inputs.npy, targets.npy, metadata.json）。'
                                '指定時はパターン生成を行わない')
    exec_group.add_argument('--save_patterns', type=str, default=None, metavar='DIR',
                           help='生成したパターンセットを保存するディレクトリ')
    exec_group.add_argument('--seed', type=int, default=42,
                           help='乱数シード（デフォルト値: 42、再現性確保用）')
    exec_group.add_argument('--max_epochs', type=int, default=None,
                           help='最大エポック数（デフォルト値: 問題別設定）')
    exec_group.add_argument('--list_hyperparams', action='store_true',
                           help='利用可能なHyperParams設定一覧を表示して終了')

    # ========================================
    # ED法関連のパラメータ
    # ========================================
    ed_group = parser.add_argument_group('ED法関連のパラメータ')
    ed_group.add_argument('--hidden', type=int, default=None,
                         help='第1隠れ層ニューロン数（出力ニューロンを除く）')
    ed_group.add_argument('--hidden2', type=int, default=None,
                         help='第2隠れ層ニューロン数（0なら1層）')
    ed_group.add_argument('--timesteps', type=int, default=None,
                         help='順伝播の再帰反復回数（デフォルト値: 2）')
    ed_group.add_argument('--lr', type=float, default=None,
                         help='学習率（デフォルト値: 0.8）')
    ed_group.add_argument('--steepness', type=float, default=None,
                         help='シグモイドの傾き（デフォルト値: 0.4）')
    ed_group.add_argument('--amplification', type=float, default=None,
                         help='隠れ層への誤差増幅係数（デフォルト値: 1.0）')
    ed_group.add_argument('--bias', type=float, default=None,
                         help='バイアス入力値（デフォルト値: 0.8）')
    ed_group.add_argument('--weight_range', type=float, default=None,
                         help='重みの初期化範囲（デフォルト値: 1.0）')
    ed_group.add_argument('--threshold_range', type=float, default=None,
                         help='バイアス結合の初期化範囲（デフォルト値: 1.0）')
    ed_group.add_argument('--multi_layer', action=argparse.BooleanOptionalAction, default=None,
                         help='入力→出力の直結を切る（デフォルト: 有効）')
    ed_group.add_argument('--loop_cutting', action=argparse.BooleanOptionalAction, default=None,
                         help='隠れ層間の再帰結合を切る（デフォルト: 有効）')
    ed_group.add_argument('--self_loop_cutting', action=argparse.BooleanOptionalAction, default=None,
                         help='自己結合を切る（デフォルト: 有効）')
    ed_group.add_argument('--inhibitory_inputs', action=argparse.BooleanOptionalAction, default=None,
                         help='抑制性入力ニューロンを使う（デフォルト: 有効）')
    ed_group.add_argument('--bidirectional', action='store_true',
                         help='双方向更新モード（デフォルトは選択的更新モード）')
    ed_group.add_argument('--threshold', type=float, default=None,
                         help='収束判定閾値（エポック誤差合計、デフォルト値: 0.1）')

    # ========================================
    # 出力・可視化関連のパラメータ
    # ========================================
    out_group = parser.add_argument_group('出力・可視化関連のパラメータ')
    out_group.add_argument('--write_mode', type=int, default=0, choices=[0, 1, 2, 3],
                          help='パターン表示モード（0=なし, 1=詳細, 2=数字1桁, 3=最小）')
    out_group.add_argument('--show_weights', action='store_true',
                          help='学習後に重み行列（サブネットワーク0）を表示')
    out_group.add_argument('--save_state', type=str, default=None, metavar='PATH',
                          help='学習後のネットワーク状態を保存（.npz）')
    out_group.add_argument('--viz', action='store_true',
                          help='学習曲線のリアルタイム可視化を有効化')
    out_group.add_argument('--heatmap', action='store_true',
                          help='重み・活性ヒートマップの表示を有効化')
    out_group.add_argument('--viz_interval', type=int, default=10,
                          help='可視化を更新するエポック間隔（デフォルト値: 10）')
    out_group.add_argument('--save_viz', type=str, nargs='?', const='viz_results/',
                          default=None, metavar='PATH',
                          help='可視化結果を保存。'
                               'パス指定: 末尾"/"でディレクトリ（タイムスタンプ付き）、末尾"/"なしでベースファイル名。'
                               '学習曲線とヒートマップを同時に保存する場合は、_viz.pngと_heatmap.pngが付加されます。'
                               '引数なし: viz_results/にタイムスタンプ付きで保存。'
                               'オプション未指定: 保存しない。')

    return parser.parse_args(argv)


def build_config(args):
    """問題別設定 + コマンドライン引数の上書き"""
    hp = HyperParams()
    try:
        config = hp.get_config(args.preset)
    except ConfigurationError as e:
        print(f"Warning: HyperParamsテーブルの取得に失敗: {e}")
        print("parity設定で継続します。\n")
        config = hp.get_config('parity')

    # 明示指定された値のみ上書き
    for arg_name, key in CONFIG_OVERRIDES.items():
        value = getattr(args, arg_name)
        if value is not None:
            config[key] = value
    if args.bidirectional:
        config['update_mode'] = 'bidirectional'
    if args.inputs is not None:
        config['n_input'] = args.inputs
    if args.patterns is not None:
        config['n_patterns'] = args.patterns
    if args.pattern_type is not None:
        config['pattern_type'] = args.pattern_type

    print(f"\n=== 問題別HyperParams設定を自動適用（{args.preset}） ===")
    print("*** コマンドライン引数で明示的に指定された値は、テーブル値より優先されます。")
    for key in ('n_input', 'n_patterns', 'pattern_type', 'hidden', 'hidden2', 'timesteps',
                'learning_rate', 'sigmoid_steepness', 'error_amplification', 'bias',
                'update_mode', 'convergence_threshold', 'max_epochs'):
        print(f"{key}: {config[key]}")
    print("=" * 70 + "\n")
    return config


def prepare_patterns(args, config, rng):
    """パターンセットの読み込みまたは生成"""
    if args.pattern_dir is not None:
        inputs, targets, metadata = load_pattern_set(args.pattern_dir)
        print(f"パターンセット読み込み: {metadata.get('name', args.pattern_dir)} "
              f"(入力:{inputs.shape[1]}, 出力:{targets.shape[1]}, パターン:{len(inputs)})")
        return inputs, targets

    pattern_types = [t.strip() for t in str(config['pattern_type']).split(',')]
    if len(pattern_types) == 1:
        pattern_types = pattern_types * args.outputs
    elif len(pattern_types) != args.outputs:
        raise ConfigurationError(
            f"--pattern_typeの個数({len(pattern_types)})が出力数({args.outputs})と一致しません"
        )

    manual_targets = None
    if args.manual_targets is not None:
        try:
            manual_targets = [float(v) for v in args.manual_targets.split(',')]
        except ValueError:
            raise ConfigurationError(f"--manual_targetsは数値のカンマ区切りで指定してください: "
                                     f"{args.manual_targets!r}")

    print(f"学習パターン生成中... (入力:{config['n_input']}, パターン:{config['n_patterns']}, "
          f"種別:{pattern_types}, 入力モード:{config['input_mode']})")
    inputs, targets = generate_patterns(
        config['n_input'], config['n_patterns'], pattern_types,
        input_mode=config['input_mode'], rng=rng, manual_targets=manual_targets
    )

    print("\nサンプルパターン（先頭4個）:")
    for c in range(min(4, len(inputs))):
        pattern = ",".join(f"{v:.0f}" for v in inputs[c])
        target = ",".join(f"{v:.0f}" for v in targets[c])
        print(f"  Pattern {c}: [{pattern}] → {target}")

    if args.save_patterns is not None:
        save_pattern_set(args.save_patterns, inputs, targets, name=args.preset)
        print(f"パターンセット保存: {args.save_patterns}")
    return inputs, targets


def main(argv=None):
    """メイン処理"""
    args = parse_args(argv)

    # 乱数シード設定（再現性確保）
    print(f"\n=== 乱数シード固定: {args.seed} ===")
    print("再現性モード: 有効（パターン生成・重み初期化を固定）\n")
    rng = np.random.RandomState(args.seed)

    # HyperParams設定一覧の表示
    if args.list_hyperparams:
        hp = HyperParams()
        hp.list_configs()
        return 0

    # ========================================
    # 1. 構成とパターン
    # ========================================
    config = build_config(args)
    try:
        inputs, targets = prepare_patterns(args, config, rng)
    except ConfigurationError as e:
        print(f"エラー: {e}")
        return 1
    n_input = inputs.shape[1]
    n_output = targets.shape[1]

    # ========================================
    # 2. ネットワークの構築
    # ========================================
    print("\nネットワーク初期化中...")
    try:
        network = EDNetwork.from_config(config, n_input=n_input, n_output=n_output,
                                        seed=args.seed, verbose=True)
    except ConfigurationError as e:
        print(f"エラー: ネットワーク構成が不正です: {e}")
        return 1

    # ========================================
    # 3. 可視化マネージャーの初期化
    # ========================================
    viz_manager = None
    if args.viz or args.heatmap:
        try:
            viz_manager = VisualizationManager(
                enable_viz=args.viz,
                enable_heatmap=args.heatmap,
                save_path=args.save_viz,
                max_epochs=config['max_epochs'],
                update_every=args.viz_interval
            )
            print("\n可視化機能: 有効")
            if args.heatmap:
                print("  - ヒートマップ表示: 有効")
            if args.save_viz:
                print(f"  - 保存先: {args.save_viz}")
        except Exception as e:
            print(f"\n警告: 可視化モジュールの初期化に失敗しました: {e}")
            print("可視化なしで学習を継続します。")
            viz_manager = None

    # ========================================
    # 4. 学習ループ
    # ========================================
    print("\n" + "=" * 70)
    print("学習開始（Error Diffusion Learning）")
    print("=" * 70)

    trainer = EDTrainer(network, inputs, targets,
                        convergence_threshold=config['convergence_threshold'],
                        max_epochs=config['max_epochs'])
    verifier = PatternAccuracyVerifier(network)

    def on_pattern(index, pattern_in, target):
        line = verifier.format_pattern(args.write_mode, target)
        if line:
            tqdm.write(f"{index:3d} {line}")

    def on_epoch_end(epoch, error_total, error_count):
        if viz_manager is None or not viz_manager.should_update(epoch):
            return
        viz_manager.update_learning_curve(trainer.error_history, trainer.error_count_history,
                                          trainer.n_patterns, n_output)
        viz_manager.update_heatmap(epoch, network)

    result = trainer.fit(on_epoch_end=on_epoch_end,
                         on_pattern=on_pattern if args.write_mode > 0 else None)

    # ========================================
    # 5. 結果サマリー
    # ========================================
    trainer.report(result)
    verifier.verify(inputs, targets, args.pattern_dir or args.preset)

    if args.show_weights:
        print(verifier.format_weight_matrix())

    if args.save_state is not None:
        saved = network.save_state(args.save_state)
        print(f"\n[ネットワーク状態保存] {saved}")

    # 可視化の最終処理
    if viz_manager is not None:
        viz_manager.update_learning_curve(trainer.error_history, trainer.error_count_history,
                                          trainer.n_patterns, n_output)
        viz_manager.update_heatmap(result['epochs'], network)
        saved_viz, saved_heatmap = viz_manager.save_figures()
        if saved_viz or saved_heatmap:
            print("\n可視化結果を保存しました:")
            if saved_viz:
                print(f"  - 学習曲線: {saved_viz}")
            if saved_heatmap:
                print(f"  - ヒートマップ: {saved_heatmap}")
        viz_manager.close()

    print("\n" + "=" * 70)
    return 0


if __name__ == '__main__':
    sys.exit(main())
