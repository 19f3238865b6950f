#!/usr/bin/env python3
"""
シーンインデクサー

ノード一覧を文書順に一度だけ走査し、名前プレフィックスで役割を判定して
カテゴリ別（名前キー）の配置レコード表を構築します。

判定順序:
1. prop_ / particle_ / fc_ / file_ （配置レコード）
2. ground / hitbox* / UnevenBlocker （形状導出用の特殊ノード）
3. それ以外は PLAIN
"""

import re
from typing import Dict, List, Optional, TypeVar

from annoscene import get_logger
from annoscene.config import ExtractionConfig
from annoscene.constants import (
    PROP_PREFIX, PARTICLE_PREFIX, FEEDBACK_PREFIX, FILE_PREFIX,
    VARIANT_SUFFIX_PATTERN,
)
from annoscene.data_types import NodeRole
from annoscene.geometry import Quaternion, format_fixed, quaternion_to_yaw
from .document import SceneDocument, SceneNode
from .records import PropEntry, ParticleEntry, FeedbackEntry, FileEntry

logger = get_logger(__name__)

_VARIANT_SUFFIX = re.compile(VARIANT_SUFFIX_PATTERN)

_PREFIX_ROLES = (
    (PROP_PREFIX, NodeRole.PROP),
    (PARTICLE_PREFIX, NodeRole.PARTICLE),
    (FEEDBACK_PREFIX, NodeRole.FEEDBACK),
    (FILE_PREFIX, NodeRole.FILE_REF),
)

T = TypeVar("T")


def strip_variant_suffix(name: str) -> str:
    """末尾の ".NNN"（3桁）を除去"""
    return _VARIANT_SUFFIX.sub("", name)


def file_name_for(mesh_name: Optional[str], extension: str) -> Optional[str]:
    """メッシュ名から参照ファイル名を得る（拡張子が合わなければNone）"""
    if not mesh_name:
        return None
    candidate = strip_variant_suffix(mesh_name)
    return candidate if candidate.endswith(extension) else None


def classify_node(name: str, config: ExtractionConfig) -> NodeRole:
    """ノード名から役割を判定（固定順の述語チェーン）"""
    for prefix, role in _PREFIX_ROLES:
        if name.startswith(prefix):
            return role
    if name == config.ground_name:
        return NodeRole.GROUND
    if name.startswith(config.hitbox_prefix):
        return NodeRole.HITBOX
    if name == config.uneven_blocker_name:
        return NodeRole.UNEVEN_BLOCKER
    return NodeRole.PLAIN


class SceneIndex:
    """役割判定結果とカテゴリ別レコード表"""

    def __init__(self, document: SceneDocument, config: ExtractionConfig):
        self.document = document
        self.config = config
        self.roles: List[NodeRole] = []
        self.props: Dict[str, PropEntry] = {}
        self.particles: Dict[str, ParticleEntry] = {}
        self.feedbacks: Dict[str, FeedbackEntry] = {}
        self.files: Dict[str, FileEntry] = {}

        self._build()

    def _build(self) -> None:
        for node in self.document.nodes:
            role = classify_node(node.name, self.config)
            self.roles.append(role)

            if role is NodeRole.PROP:
                self._insert(self.props, node, self._make_prop(node))
            elif role is NodeRole.PARTICLE:
                self._insert(self.particles, node, self._make_particle(node))
            elif role is NodeRole.FEEDBACK:
                self._insert(self.feedbacks, node, self._make_feedback(node))
            elif role is NodeRole.FILE_REF:
                self._insert(self.files, node, self._make_file(node))

        logger.info(
            f"Indexed {len(self.document.nodes)} nodes: {len(self.props)} props, "
            f"{len(self.particles)} particles, {len(self.feedbacks)} feedbacks, {len(self.files)} files"
        )

    def _insert(self, table: Dict[str, T], node: SceneNode, record: T) -> None:
        # 同名は後勝ち。上書きされた項目は後のノードの位置へ移動する
        if node.name in table:
            logger.debug(f"Node name '{node.name}' (node {node.index}) overwrites an earlier entry")
            del table[node.name]
        table[node.name] = record

    # -------------------------------------------------------------------------
    # レコード生成
    # -------------------------------------------------------------------------

    def _make_prop(self, node: SceneNode) -> PropEntry:
        precision = self.config.record_precision
        return PropEntry(
            name=node.name,
            file_name=file_name_for(self.document.mesh_name(node), self.config.prop_file_extension),
            position=node.translation.to_fixed_text(precision),
            rotation=node.rotation.to_fixed_text(precision),
            scale=node.scale.to_fixed_text(precision),
        )

    def _make_particle(self, node: SceneNode) -> ParticleEntry:
        precision = self.config.record_precision
        return ParticleEntry(
            name=node.name,
            position=node.translation.to_fixed_text(precision),
            rotation=node.rotation.to_fixed_text(precision),
            scale=format_fixed(node.scale.z, precision),
        )

    def _make_feedback(self, node: SceneNode) -> FeedbackEntry:
        precision = self.config.record_precision
        orientation = node.rotation.to_fixed_text(precision)
        # ヨー角は出力した Orientation と同じ丸め済みの値から求める
        rounded = Quaternion.parse(orientation)
        return FeedbackEntry(
            name=node.name,
            position=node.translation.to_fixed_text(precision),
            orientation=orientation,
            rotation_y=format_fixed(quaternion_to_yaw(rounded), precision),
        )

    def _make_file(self, node: SceneNode) -> FileEntry:
        precision = self.config.record_precision
        return FileEntry(
            name=node.name,
            file_name=file_name_for(self.document.mesh_name(node), self.config.file_file_extension),
            position=node.translation.to_fixed_text(precision),
            rotation=node.rotation.to_fixed_text(precision),
            scale=format_fixed(node.scale.z, precision),
        )

    # -------------------------------------------------------------------------
    # 問い合わせ
    # -------------------------------------------------------------------------

    def role_of(self, node: SceneNode) -> NodeRole:
        return self.roles[node.index]

    def nodes_with_role(self, role: NodeRole) -> List[SceneNode]:
        """指定役割のノード（文書順）"""
        return [node for node, r in zip(self.document.nodes, self.roles) if r is role]
