#!/usr/bin/env python3
"""
セマンティックモデル（公開問い合わせ窓口）

パース済みglTF文書から一度だけノード分類を行い、配置レコードの参照と
形状導出（初回呼び出し時に計算してキャッシュ）を提供します。

スレッドセーフではありません。キャッシュは一度だけ書き込まれ、無効化されません。
"""

import os
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, TypeVar, Union

from annoscene import get_logger
from annoscene.config import ExtractionConfig, get_config
from annoscene.derive import DecalExtents, Footprint, GeometryDeriver
from annoscene.geometry import Box, Vector
from annoscene.scene import (
    BufferResolver, SceneDocument, SceneIndex,
    PropEntry, ParticleEntry, FeedbackEntry, FileEntry,
)

logger = get_logger(__name__)

T = TypeVar("T")


class SceneModel:
    """glTF文書の配置・形状情報モデル"""

    def __init__(
        self,
        document: Union[Mapping[str, Any], SceneDocument],
        resource_folder: Optional[Union[str, os.PathLike]] = None,
        buffers: Optional[Mapping[int, bytes]] = None,
        config: Optional[ExtractionConfig] = None
    ):
        """
        初期化（ノード分類はここで完了する）

        Args:
            document: パース済みglTF辞書、または型付き文書
            resource_folder: 外部バッファファイルの基準フォルダ
            buffers: 解決済みバイト列（バッファ番号 → bytes）
            config: 抽出設定（Noneならグローバル設定）

        Raises:
            SceneStructureError: nodes 配列が無いなど致命的な構造欠落
        """
        self.config = config if config is not None else get_config()
        if isinstance(document, SceneDocument):
            self.document = document
        else:
            self.document = SceneDocument.from_dict(document)

        self.resolver = BufferResolver(self.document, resource_folder, buffers)
        self.index = SceneIndex(self.document, self.config)
        self.deriver = GeometryDeriver(self.document, self.index, self.resolver, self.config)

        self._cache: Dict[str, Any] = {}
        logger.debug(f"SceneModel created: {self.document.summary()}")

    def _memoize(self, key: str, compute: Callable[[], T]) -> T:
        # None（なし）も結果としてキャッシュする
        if key not in self._cache:
            self._cache[key] = compute()
            logger.debug(f"Cached '{key}'")
        return self._cache[key]

    # -------------------------------------------------------------------------
    # 配置レコード
    # -------------------------------------------------------------------------

    def get_props(self) -> List[PropEntry]:
        return list(self.index.props.values())

    def get_prop(self, name: str) -> Optional[PropEntry]:
        return self.index.props.get(name)

    def get_particles(self) -> List[ParticleEntry]:
        return list(self.index.particles.values())

    def get_particle(self, name: str) -> Optional[ParticleEntry]:
        return self.index.particles.get(name)

    def get_feedbacks(self) -> List[FeedbackEntry]:
        return list(self.index.feedbacks.values())

    def get_feedback(self, name: str) -> Optional[FeedbackEntry]:
        return self.index.feedbacks.get(name)

    def get_files(self) -> List[FileEntry]:
        return list(self.index.files.values())

    def get_file(self, name: str) -> Optional[FileEntry]:
        return self.index.files.get(name)

    # -------------------------------------------------------------------------
    # 形状（初回計算後キャッシュ）
    # -------------------------------------------------------------------------

    def _ground(self) -> Optional[Tuple[Vector, ...]]:
        return self._memoize("ground", lambda: self.deriver.special_vertices(self.config.ground_name))

    def get_hit_boxes(self) -> List[Box]:
        """当たり判定ボックス（hitbox* ノードごとに1つ）"""
        return list(self._memoize("hitboxes", lambda: tuple(self.deriver.hit_boxes())))

    def get_build_blocker(self) -> Optional[Footprint]:
        """建築不可領域（ground ノードが無ければNone）"""
        return self._memoize("build_blocker", lambda: self.deriver.build_blocker(self._ground()))

    def get_decal_extents(self) -> Optional[DecalExtents]:
        """デカール範囲（ground ノードが無ければNone）"""
        return self._memoize("decal_extents", lambda: self.deriver.decal_extents(self._ground()))

    def get_uneven_blocker(self) -> Optional[Footprint]:
        """凹凸領域（UnevenBlocker ノードが無ければNone）"""
        return self._memoize("uneven_blocker", self.deriver.uneven_blocker)
