#!/usr/bin/env python3
"""
形状導出

特殊ノード（ground / hitbox* / UnevenBlocker）の頂点バッファをデコードし、
ノードのローカル変換（スケール → 回転 → 平行移動）を適用したうえで
当たり判定ボックス・建築不可領域・凹凸領域・デカール範囲を導出します。

失敗方針:
- 特殊ノードが無い → 情報ログを出して「なし」を返す
- バッファ不正・頂点不足 → 警告ログを出してその形状のみ「なし」
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from annoscene import get_logger
from annoscene.config import ExtractionConfig
from annoscene.constants import MIN_SHAPE_VERTICES, ROTATION_TOLERANCE, DECAL_PRECISION
from annoscene.data_types import BufferDecodeError, NodeRole
from annoscene.geometry import Box, Vector, Vector2, format_fixed, rotate_points, snap_to_grid
from annoscene.scene import BufferResolver, SceneDocument, SceneIndex, SceneNode, read_accessor_positions

logger = get_logger(__name__)


@dataclass(frozen=True)
class Footprint:
    """水平面上の多角形領域（グリッド丸め済み）"""
    name: str
    points: Tuple[Vector2, ...]
    precision: int = 6

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))

    def __len__(self) -> int:
        return len(self.points)

    def to_fixed_text(self) -> List[Dict[str, str]]:
        """出力フォーマット固有の精度で整形した点列"""
        return [p.to_fixed_text(self.precision) for p in self.points]


@dataclass(frozen=True)
class DecalExtents:
    """デカールの半幅・半奥行き（半高さは固定値）"""
    half_x: float
    half_z: float
    half_y: float

    def to_fixed_text(self, precision: int = DECAL_PRECISION) -> Dict[str, str]:
        return {
            "Extents_x": format_fixed(self.half_x, precision),
            "Extents_y": format_fixed(self.half_y, precision),
            "Extents_z": format_fixed(self.half_z, precision),
        }


def _box_corners(min_point: np.ndarray, max_point: np.ndarray) -> np.ndarray:
    """AABBの8頂点 (8, 3)"""
    xs = (min_point[0], max_point[0])
    ys = (min_point[1], max_point[1])
    zs = (min_point[2], max_point[2])
    return np.array([[x, y, z] for x in xs for y in ys for z in zs], dtype=np.float64)


class GeometryDeriver:
    """特殊ノードからの形状導出器（状態を持たない。キャッシュは呼び出し側）"""

    def __init__(
        self,
        document: SceneDocument,
        index: SceneIndex,
        resolver: BufferResolver,
        config: ExtractionConfig
    ):
        self.document = document
        self.index = index
        self.resolver = resolver
        self.config = config

    # -------------------------------------------------------------------------
    # 頂点取得・変換
    # -------------------------------------------------------------------------

    def read_positions(self, node: SceneNode) -> Optional[np.ndarray]:
        """
        ノードのメッシュのローカル頂点を (N, 3) float64 配列で取得

        Returns:
            頂点配列。メッシュ無し・デコード失敗・頂点不足ならNone（警告ログ）
        """
        mesh = self.document.mesh_for(node)
        if mesh is None:
            logger.warning(f"Invalid glTF. Node '{node.name}' ({node.index}) has no valid mesh.")
            return None

        accessor_index = self.document.position_accessor(mesh)
        if accessor_index is None:
            logger.warning(f"Invalid glTF. Mesh '{mesh.name}' ({node.mesh}) has no POSITION attribute.")
            return None

        try:
            flat = read_accessor_positions(self.document, self.resolver, accessor_index)
        except BufferDecodeError as e:
            logger.warning(f"Invalid glTF. Could not get buffer for node '{node.name}' ({node.index}): {e}")
            return None

        points = flat.reshape(-1, 3).astype(np.float64)
        if len(points) < MIN_SHAPE_VERTICES:
            logger.warning(
                f"Invalid glTF. Node '{node.name}' ({node.index}) has {len(points)} vertices, "
                f"at least {MIN_SHAPE_VERTICES} required."
            )
            return None
        return points

    def transform_points(self, node: SceneNode, points: np.ndarray) -> np.ndarray:
        """ローカル → オブジェクト空間（スケール → 回転 → 平行移動）"""
        result = points * node.scale.to_array()
        if not node.rotation.is_identity(ROTATION_TOLERANCE):
            if self.config.apply_special_node_rotation:
                result = rotate_points(node.rotation, result)
            else:
                logger.warning(f"Node '{node.name}' is rotated; rotation is ignored for derived shapes.")
        return result + node.translation.to_array()

    def find_first_node(self, name: str) -> Optional[SceneNode]:
        """ノード名、またはメッシュ名が一致する最初のノード"""
        for node in self.document.nodes:
            if node.name == name or self.document.mesh_name(node) == name:
                return node
        return None

    def special_vertices(self, name: str) -> Optional[Tuple[Vector, ...]]:
        """特殊ノードの変換済み頂点（ノードが無い・不正ならNone）"""
        node = self.find_first_node(name)
        if node is None:
            logger.info(f"No '{name}' node/mesh found.")
            return None

        points = self.read_positions(node)
        if points is None:
            return None

        transformed = self.transform_points(node, points)
        return tuple(Vector(float(x), float(y), float(z)) for x, y, z in transformed.tolist())

    # -------------------------------------------------------------------------
    # 形状
    # -------------------------------------------------------------------------

    def build_blocker(self, ground: Optional[Tuple[Vector, ...]]) -> Optional[Footprint]:
        """地面頂点を水平面に投影し粗いグリッドへ丸める"""
        if not ground:
            return None
        grid = self.config.build_blocker_grid
        return Footprint(
            name="BuildBlocker",
            points=tuple(v.to_vector2().snap(grid) for v in ground),
            precision=self.config.build_blocker_precision,
        )

    def uneven_blocker(self) -> Optional[Footprint]:
        """UnevenBlocker ノードから建築不可領域と同じ手順で導出"""
        vertices = self.special_vertices(self.config.uneven_blocker_name)
        if not vertices:
            return None
        grid = self.config.uneven_blocker_grid
        return Footprint(
            name="UnevenBlocker",
            points=tuple(v.to_vector2().snap(grid) for v in vertices),
            precision=self.config.uneven_blocker_precision,
        )

    def decal_extents(self, ground: Optional[Tuple[Vector, ...]]) -> Optional[DecalExtents]:
        """細かいグリッドへ丸めた地面頂点の水平範囲の半分"""
        if not ground:
            return None
        grid = self.config.decal_grid

        min_x = max_x = snap_to_grid(ground[0].x, grid)
        min_z = max_z = snap_to_grid(ground[0].z, grid)
        for v in ground[1:]:
            x = snap_to_grid(v.x, grid)
            z = snap_to_grid(v.z, grid)
            min_x, max_x = min(min_x, x), max(max_x, x)
            min_z, max_z = min(min_z, z), max(max_z, z)

        return DecalExtents(
            half_x=(max_x - min_x) / 2,
            half_z=(max_z - min_z) / 2,
            half_y=self.config.decal_half_height,
        )

    def hit_boxes(self) -> List[Box]:
        """hitbox* ノードごとに軸並行ボックスを1つ生成（不正なノードはスキップ）"""
        nodes = self.index.nodes_with_role(NodeRole.HITBOX)
        if not nodes:
            logger.info(f"No node starting with '{self.config.hitbox_prefix}' found.")
            return []

        boxes = []
        for node in nodes:
            points = self.read_positions(node)
            if points is None:
                continue

            local_min = Vector.from_array(points[0])
            local_max = local_min
            for i in range(1, len(points)):
                v = Vector.from_array(points[i])
                local_min = local_min.down(v)
                local_max = local_max.up(v)

            corners = self.transform_points(node, _box_corners(local_min.to_array(), local_max.to_array()))
            min_vector = Vector.from_array(corners.min(axis=0))
            max_vector = Vector.from_array(corners.max(axis=0))
            boxes.append(Box.from_min_max(node.name, min_vector, max_vector))

        logger.info(f"{len(boxes)} hitboxes found")
        return boxes
