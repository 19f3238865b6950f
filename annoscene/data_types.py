#!/usr/bin/env python3
"""
共通型定義

ノード役割の列挙と、ライブラリ全体で使用する例外を一元管理し、
モジュール間の循環依存を解消します。
"""

from enum import Enum


class NodeRole(Enum):
    """ノード名から決まる役割"""
    PROP = "prop"
    PARTICLE = "particle"
    FEEDBACK = "feedback"
    FILE_REF = "file"
    GROUND = "ground"
    HITBOX = "hitbox"
    UNEVEN_BLOCKER = "uneven_blocker"
    PLAIN = "plain"

    @property
    def is_placement(self) -> bool:
        """配置レコードを生成する役割か"""
        return self in (NodeRole.PROP, NodeRole.PARTICLE, NodeRole.FEEDBACK, NodeRole.FILE_REF)


class SceneStructureError(ValueError):
    """シーン文書の必須構造が欠落している（致命的）"""


class BufferDecodeError(ValueError):
    """バッファ・アクセサのデコードに失敗"""
