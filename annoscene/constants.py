#!/usr/bin/env python3
"""
共通定数・設定値

ノード命名規則、特殊ノード名、グリッド幅、出力精度などを一元管理し、
モジュール間の循環依存を解消します。
"""

from typing import Final

# =============================================================================
# ノード命名規則（判定順序に意味がある）
# =============================================================================

PROP_PREFIX: Final[str] = "prop_"
PARTICLE_PREFIX: Final[str] = "particle_"
FEEDBACK_PREFIX: Final[str] = "fc_"
FILE_PREFIX: Final[str] = "file_"

# 特殊ノード
GROUND_NODE_NAME: Final[str] = "ground"
UNEVEN_BLOCKER_NODE_NAME: Final[str] = "UnevenBlocker"
HITBOX_PREFIX: Final[str] = "hitbox"

# メッシュ名から参照ファイル名を得る際の拡張子
PROP_FILE_EXTENSION: Final[str] = ".prp"
FILE_FILE_EXTENSION: Final[str] = ".cfg"

# "oak.prp.002" の ".002" 部分
VARIANT_SUFFIX_PATTERN: Final[str] = r"\.\d\d\d$"

# =============================================================================
# 出力精度・グリッド
# =============================================================================

RECORD_PRECISION: Final[int] = 6

BUILD_BLOCKER_GRID: Final[float] = 0.5
BUILD_BLOCKER_PRECISION: Final[int] = 1

UNEVEN_BLOCKER_GRID: Final[float] = 0.5
UNEVEN_BLOCKER_PRECISION: Final[int] = 6

DECAL_GRID: Final[float] = 0.01
DECAL_HALF_HEIGHT: Final[float] = 0.25
DECAL_PRECISION: Final[int] = 6

# 回転判定の許容誤差
ROTATION_TOLERANCE: Final[float] = 1e-6

# 派生形状に必要な最小頂点数
MIN_SHAPE_VERTICES: Final[int] = 3

# =============================================================================
# glTF アクセサ定義
# =============================================================================

COMPONENT_TYPE_FLOAT: Final[int] = 5126
ACCESSOR_TYPE_VEC3: Final[str] = "VEC3"
VEC3_COMPONENTS: Final[int] = 3

DATA_URI_SCHEME: Final[str] = "data:"
