#!/usr/bin/env python3
"""
シーン文書の型付き表現

パース済みglTF辞書のうち、頂点位置の取得に必要な部分集合
（nodes / meshes / accessors / bufferViews / buffers）を一度だけ検証し、
pygltflib の GLTF2 として読み込みます。ノードの変換は Vector / Quaternion
に変換した SceneNode として保持します。
"""

import math
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pygltflib

from annoscene import get_logger
from annoscene.data_types import SceneStructureError
from annoscene.geometry import Vector, Quaternion

logger = get_logger(__name__)


@dataclass(frozen=True)
class SceneNode:
    """変換付きの名前ノード"""
    index: int
    name: str
    mesh: Optional[int] = None
    translation: Vector = field(default_factory=Vector.zero)
    rotation: Quaternion = field(default_factory=Quaternion.identity)
    scale: Vector = field(default_factory=Vector.one)


# =============================================================================
# フィールド検証ヘルパー
# =============================================================================

def _as_index(value: Any, what: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        logger.warning(f"Invalid glTF. {what} is not a valid index: {value!r}")
        return None
    return value


def _as_int(value: Any, default: int, what: str) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        logger.warning(f"Invalid glTF. {what} is not a non-negative integer: {value!r}")
        return default
    return value


def _as_floats(value: Any, arity: int, what: str) -> Optional[List[float]]:
    """数値配列を検証（不正ならNone → 既定値で補完）"""
    if value is None:
        return None
    if not isinstance(value, (list, tuple)) or len(value) != arity:
        logger.warning(f"Invalid glTF. {what} must have {arity} components: {value!r}")
        return None
    result = []
    for item in value:
        if isinstance(item, bool):
            item = None
        try:
            number = float(item)
        except (TypeError, ValueError):
            logger.warning(f"Invalid glTF. {what} has non-numeric component: {value!r}")
            return None
        if not math.isfinite(number):
            logger.warning(f"Invalid glTF. {what} has non-finite component: {value!r}")
            return None
        result.append(number)
    return result


def _as_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    logger.warning(f"Invalid glTF. {what} is not an object: {value!r}")
    return {}


def _as_list(data: Mapping[str, Any], key: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Invalid glTF. '{key}' is not an array, ignored")
        return []
    return value


def _put(target: Dict[str, Any], key: str, value: Any) -> None:
    # None は pygltflib 側の既定値に任せる
    if value is not None:
        target[key] = value


# =============================================================================
# 要素の検証（pygltflib へ渡す前に不正値を落とす）
# =============================================================================

def _clean_node(index: int, raw: Any) -> Dict[str, Any]:
    data = _as_mapping(raw, f"nodes[{index}]")
    node: Dict[str, Any] = {}
    name = data.get("name")
    _put(node, "name", name if isinstance(name, str) else None)
    _put(node, "mesh", _as_index(data.get("mesh"), f"nodes[{index}].mesh"))
    _put(node, "translation", _as_floats(data.get("translation"), 3, f"nodes[{index}].translation"))
    _put(node, "rotation", _as_floats(data.get("rotation"), 4, f"nodes[{index}].rotation"))
    _put(node, "scale", _as_floats(data.get("scale"), 3, f"nodes[{index}].scale"))
    return node


def _clean_mesh(index: int, raw: Any) -> Dict[str, Any]:
    data = _as_mapping(raw, f"meshes[{index}]")
    primitives = []
    for p_idx, p_raw in enumerate(_as_list(data, "primitives")):
        primitive = _as_mapping(p_raw, f"meshes[{index}].primitives[{p_idx}]")
        attributes = _as_mapping(primitive.get("attributes", {}),
                                 f"meshes[{index}].primitives[{p_idx}].attributes")
        cleaned: Dict[str, Any] = {}
        _put(cleaned, "POSITION", _as_index(attributes.get("POSITION"),
                                            f"meshes[{index}].primitives[{p_idx}].POSITION"))
        primitives.append({"attributes": cleaned})

    mesh: Dict[str, Any] = {"primitives": primitives}
    name = data.get("name")
    _put(mesh, "name", name if isinstance(name, str) else None)
    return mesh


def _clean_accessor(index: int, raw: Any) -> Dict[str, Any]:
    data = _as_mapping(raw, f"accessors[{index}]")
    accessor: Dict[str, Any] = {
        "count": _as_int(data.get("count"), 0, f"accessors[{index}].count"),
        "byteOffset": _as_int(data.get("byteOffset"), 0, f"accessors[{index}].byteOffset"),
    }
    component_type = data.get("componentType")
    accessor_type = data.get("type")
    _put(accessor, "componentType",
         component_type if isinstance(component_type, int) and not isinstance(component_type, bool) else None)
    _put(accessor, "type", accessor_type if isinstance(accessor_type, str) else None)
    _put(accessor, "bufferView", _as_index(data.get("bufferView"), f"accessors[{index}].bufferView"))
    return accessor


def _clean_buffer_view(index: int, raw: Any) -> Dict[str, Any]:
    data = _as_mapping(raw, f"bufferViews[{index}]")
    view: Dict[str, Any] = {
        "byteLength": _as_int(data.get("byteLength"), 0, f"bufferViews[{index}].byteLength"),
        "byteOffset": _as_int(data.get("byteOffset"), 0, f"bufferViews[{index}].byteOffset"),
    }
    _put(view, "buffer", _as_index(data.get("buffer"), f"bufferViews[{index}].buffer"))
    # ストライド0は密レイアウトと同じ扱い
    _put(view, "byteStride", _as_index(data.get("byteStride"), f"bufferViews[{index}].byteStride") or None)
    return view


def _clean_buffer(index: int, raw: Any) -> Dict[str, Any]:
    data = _as_mapping(raw, f"buffers[{index}]")
    buffer: Dict[str, Any] = {}
    uri = data.get("uri")
    _put(buffer, "uri", uri if isinstance(uri, str) and uri else None)
    _put(buffer, "byteLength", _as_index(data.get("byteLength"), f"buffers[{index}].byteLength"))
    return buffer


def _to_scene_node(index: int, node: pygltflib.Node) -> SceneNode:
    return SceneNode(
        index=index,
        name=node.name or "",
        mesh=node.mesh,
        translation=Vector.from_array(node.translation) or Vector.zero(),
        rotation=Quaternion.from_array(node.rotation) or Quaternion.identity(),
        scale=Vector.from_array(node.scale) or Vector.one(),
    )


class SceneDocument:
    """型付きシーン文書（pygltflib.GLTF2 とノード変換のビュー）"""

    def __init__(self, gltf: pygltflib.GLTF2):
        self.gltf = gltf
        self.nodes: Tuple[SceneNode, ...] = tuple(
            _to_scene_node(i, node) for i, node in enumerate(gltf.nodes)
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'SceneDocument':
        """
        パース済みglTF辞書から生成

        Raises:
            SceneStructureError: 文書がオブジェクトでない、または nodes 配列が無い
        """
        if not isinstance(data, Mapping):
            raise SceneStructureError(f"scene document must be an object, got {type(data).__name__}")
        nodes = data.get("nodes")
        if not isinstance(nodes, list):
            raise SceneStructureError("scene document has no 'nodes' array")

        cleaned = {
            "nodes": [_clean_node(i, raw) for i, raw in enumerate(nodes)],
            "meshes": [_clean_mesh(i, raw) for i, raw in enumerate(_as_list(data, "meshes"))],
            "accessors": [_clean_accessor(i, raw) for i, raw in enumerate(_as_list(data, "accessors"))],
            "bufferViews": [_clean_buffer_view(i, raw) for i, raw in enumerate(_as_list(data, "bufferViews"))],
            "buffers": [_clean_buffer(i, raw) for i, raw in enumerate(_as_list(data, "buffers"))],
        }

        # 既定値補完の RuntimeWarning は GLTF2.from_json と同様に抑制
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            gltf = pygltflib.GLTF2.from_dict(cleaned)

        # from_dict は attributes を辞書のまま残す
        for mesh in gltf.meshes:
            for primitive in mesh.primitives:
                if isinstance(primitive.attributes, dict):
                    primitive.attributes = pygltflib.Attributes(**primitive.attributes)

        document = cls(gltf)
        logger.debug(
            f"Scene document parsed: {len(document.nodes)} nodes, {len(gltf.meshes)} meshes, "
            f"{len(gltf.accessors)} accessors, {len(gltf.buffers)} buffers"
        )
        return document

    @property
    def meshes(self) -> List[pygltflib.Mesh]:
        return self.gltf.meshes

    @property
    def accessors(self) -> List[pygltflib.Accessor]:
        return self.gltf.accessors

    @property
    def buffer_views(self) -> List[pygltflib.BufferView]:
        return self.gltf.bufferViews

    @property
    def buffers(self) -> List[pygltflib.Buffer]:
        return self.gltf.buffers

    def mesh_for(self, node: SceneNode) -> Optional[pygltflib.Mesh]:
        """ノードが参照するメッシュ（範囲外・未参照はNone）"""
        if node.mesh is None or node.mesh >= len(self.meshes):
            return None
        return self.meshes[node.mesh]

    def mesh_name(self, node: SceneNode) -> Optional[str]:
        mesh = self.mesh_for(node)
        return mesh.name if mesh is not None else None

    @staticmethod
    def position_accessor(mesh: pygltflib.Mesh) -> Optional[int]:
        """最初のプリミティブのPOSITIONアクセサ"""
        if not mesh.primitives:
            return None
        return mesh.primitives[0].attributes.POSITION

    def summary(self) -> Dict[str, int]:
        """要素数の概要"""
        return {
            "nodes": len(self.nodes),
            "meshes": len(self.meshes),
            "accessors": len(self.accessors),
            "bufferViews": len(self.buffer_views),
            "buffers": len(self.buffers),
        }
