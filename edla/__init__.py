"""
Recurrent ED-ANN プロジェクトモジュール

モジュール構成:
- ed_network: ED法ネットワーク本体（順伝播・誤差拡散・重み更新）
- topology: ニューロン番号体系と符号制約付き重み行列
- hyperparameters: 問題別パラメータテーブル
- pattern_generation: 学習パターン生成
- trainer: エポックループ・収束判定
- accuracy_verifier: パターン表示・検証レポート
- visualization_manager: 学習曲線・ヒートマップ表示
"""

from .exceptions import EDNetworkError, ConfigurationError, PatternShapeError
from .topology import NetworkTopology
from .weight_update import UpdateMode
from .ed_network import EDNetwork
from .hyperparameters import HyperParams
from .pattern_generation import generate_patterns, xor_patterns
from .trainer import EDTrainer
from .accuracy_verifier import PatternAccuracyVerifier
from .visualization_manager import VisualizationManager

__all__ = [
    'EDNetworkError', 'ConfigurationError', 'PatternShapeError',
    'NetworkTopology', 'UpdateMode', 'EDNetwork', 'HyperParams',
    'generate_patterns', 'xor_patterns', 'EDTrainer',
    'PatternAccuracyVerifier', 'VisualizationManager',
]

__version__ = "1.0.0"
