"""
Annoscene 形状導出フェーズ

特殊ノードの頂点から当たり判定ボックス・建築不可領域・
凹凸領域・デカール範囲を導出します。
"""

from .deriver import (
    GeometryDeriver,
    Footprint,
    DecalExtents
)

__all__ = [
    'GeometryDeriver',
    'Footprint',
    'DecalExtents'
]
