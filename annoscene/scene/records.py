#!/usr/bin/env python3
"""
配置レコード

ノード名で分類された配置情報（プロップ・パーティクル・フィードバック・ファイル）。
数値は全て固定小数点テキストで保持し、to_dict() は出力フォーマットの
フィールド名そのままの辞書を返すため、再整形せずに書き出せます。
"""

import copy
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

# =============================================================================
# 出力テンプレートの既定値
# =============================================================================

PROP_DEFAULTS: Dict[str, Any] = {
    "ConfigType": "PROP",
    "Name": "",
    "Position_x": "0.000000",
    "Position_y": "0.000000",
    "Position_z": "0.000000",
    "Rotation_x": "0.000000",
    "Rotation_y": "0.000000",
    "Rotation_z": "0.000000",
    "Rotation_w": "1.000000",
    "Scale_x": "1.000000",
    "Scale_y": "1.000000",
    "Scale_z": "1.000000",
    "Flags": "1",
}

PROPCONTAINER_DEFAULTS: Dict[str, Any] = {
    "ConfigType": "PROPCONTAINER",
    "Name": "",
    "VariationEnabled": 0,
    "VariationProbability": 100,
}

FILE_DEFAULTS: Dict[str, Any] = {
    "ConfigType": "FILE",
    "Transformer": {
        "Config": {
            "ConfigType": "ORIENTATION_TRANSFORM",
            "Conditions": "0",
            "Position_x": "0.000000",
            "Position_y": "0.000000",
            "Position_z": "0.000000",
            "Rotation_x": "0.000000",
            "Rotation_y": "0.000000",
            "Rotation_z": "0.000000",
            "Rotation_w": "1.000000",
            "Scale": "1.0",
        }
    },
    "Name": "",
    "FileName": "",
    "AdaptTerrainHeight": 1,
}


def with_defaults(record: Mapping[str, Any], defaults: Mapping[str, Any]) -> Dict[str, Any]:
    """既定値テンプレートにレコードを再帰的に上書きマージ"""
    merged = copy.deepcopy(dict(defaults))
    for key, value in record.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = with_defaults(value, merged[key])
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _transform_config(position: Mapping[str, str], rotation: Mapping[str, str]) -> Dict[str, str]:
    return {
        "Position_x": position["x"],
        "Position_y": position["y"],
        "Position_z": position["z"],
        "Rotation_x": rotation["x"],
        "Rotation_y": rotation["y"],
        "Rotation_z": rotation["z"],
        "Rotation_w": rotation["w"],
    }


def _freeze(record: Any, *names: str) -> None:
    """テキスト辞書フィールドを読み取り専用の複製に置き換える"""
    for name in names:
        object.__setattr__(record, name, MappingProxyType(dict(getattr(record, name))))


@dataclass(frozen=True)
class PropEntry:
    """プロップ配置 (prop_*)"""
    name: str
    file_name: Optional[str]
    position: Mapping[str, str]
    rotation: Mapping[str, str]
    scale: Mapping[str, str]

    def __post_init__(self):
        _freeze(self, "position", "rotation", "scale")

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"Name": self.name}
        # 拡張子が合わない場合は FileName を上書きしない
        if self.file_name is not None:
            result["FileName"] = self.file_name
        result.update(_transform_config(self.position, self.rotation))
        result.update({
            "Scale_x": self.scale["x"],
            "Scale_y": self.scale["y"],
            "Scale_z": self.scale["z"],
        })
        return result


@dataclass(frozen=True)
class ParticleEntry:
    """パーティクル配置 (particle_*)"""
    name: str
    position: Mapping[str, str]
    rotation: Mapping[str, str]
    scale: str

    def __post_init__(self):
        _freeze(self, "position", "rotation")

    def to_dict(self) -> Dict[str, Any]:
        config = _transform_config(self.position, self.rotation)
        config["Scale"] = self.scale
        return {
            "Transformer": {"Config": config},
            "Name": self.name,
        }


@dataclass(frozen=True)
class FeedbackEntry:
    """フィードバックマーカー (fc_*)"""
    name: str
    position: Mapping[str, str]
    orientation: Mapping[str, str]
    rotation_y: str

    def __post_init__(self):
        _freeze(self, "position", "orientation")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Position": dict(self.position),
            "Orientation": dict(self.orientation),
            "RotationY": self.rotation_y,
            "Name": self.name,
        }


@dataclass(frozen=True)
class FileEntry:
    """ファイル参照 (file_*)"""
    name: str
    file_name: Optional[str]
    position: Mapping[str, str]
    rotation: Mapping[str, str]
    scale: str

    def __post_init__(self):
        _freeze(self, "position", "rotation")

    def to_dict(self) -> Dict[str, Any]:
        config = _transform_config(self.position, self.rotation)
        config["Scale"] = self.scale
        result: Dict[str, Any] = {"Name": self.name}
        if self.file_name is not None:
            result["FileName"] = self.file_name
        result["Transformer"] = {"Config": config}
        return result
