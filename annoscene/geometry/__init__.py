"""
Annoscene 幾何プリミティブ

ベクトル・クォータニオン・ボックスの値型と、
回転・グリッド丸めのユーティリティを提供します。
"""

from .primitives import (
    Vector,
    Vector2,
    Quaternion,
    Box,
    format_fixed,
    snap_to_grid
)

from .rotation import (
    quaternion_to_yaw,
    rotation_matrix,
    rotate_points
)

__all__ = [
    # 値型
    'Vector',
    'Vector2',
    'Quaternion',
    'Box',
    'format_fixed',
    'snap_to_grid',

    # 回転
    'quaternion_to_yaw',
    'rotation_matrix',
    'rotate_points'
]
