#!/usr/bin/env python3
"""
幾何プリミティブ

ベクトル・クォータニオン・ボックスの不変値型を提供します。
全ての演算は新しいインスタンスを返し、固定小数点テキストへの
整形（出力フォーマットへそのまま埋め込める形）をサポートします。
"""

import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Union

import numpy as np

Number = Union[int, float]
FlatArray = Union[Sequence[float], np.ndarray]


def format_fixed(value: float, precision: int = 6) -> str:
    """固定小数点文字列に変換（丸めて 0 になる負値も "0" として出力）"""
    text = f"{float(value):.{precision}f}"
    if text.startswith("-") and float(text) == 0.0:
        return text[1:]
    return text


def snap_to_grid(value: float, grid: float) -> float:
    """最も近いグリッド点に丸める（0.5 は正方向へ）"""
    factor = 1.0 / grid
    return math.floor(value * factor + 0.5) / factor


def _parse_number(text: object) -> Optional[float]:
    if text is None or text == "":
        return None
    try:
        result = float(text)
    except (TypeError, ValueError):
        return None
    if math.isnan(result):
        return None
    return result


@dataclass(frozen=True)
class Vector:
    """3次元ベクトル"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def zero(cls) -> 'Vector':
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def one(cls) -> 'Vector':
        return cls(1.0, 1.0, 1.0)

    @classmethod
    def from_array(cls, array: Optional[FlatArray], index: int = 0) -> Optional['Vector']:
        """
        フラット配列の index 番目の3要素組からベクトルを生成

        Args:
            array: [x0, y0, z0, x1, y1, z1, ...] 形式の配列
            index: 組のインデックス

        Returns:
            ベクトル。要素数が (index + 1) * 3 未満ならNone
        """
        if array is None or len(array) < (index + 1) * 3:
            return None
        offset = index * 3
        return cls(float(array[offset]), float(array[offset + 1]), float(array[offset + 2]))

    @classmethod
    def parse(cls, obj: Optional[Mapping[str, object]]) -> Optional['Vector']:
        """{"x": "1.0", "y": ..., "z": ...} 形式の文字列組から生成（欠落・不正値はNone）"""
        if not obj:
            return None
        values = [_parse_number(obj.get(key)) for key in ("x", "y", "z")]
        if any(v is None for v in values):
            return None
        return cls(*values)

    def add(self, b: 'Vector') -> 'Vector':
        return Vector(self.x + b.x, self.y + b.y, self.z + b.z)

    def sub(self, b: 'Vector') -> 'Vector':
        return Vector(self.x - b.x, self.y - b.y, self.z - b.z)

    def mul(self, b: Union[Number, 'Vector']) -> 'Vector':
        """スカラー倍、またはベクトルとの要素ごとの積"""
        if isinstance(b, Vector):
            return Vector(self.x * b.x, self.y * b.y, self.z * b.z)
        return Vector(self.x * b, self.y * b, self.z * b)

    def div(self, b: Number) -> 'Vector':
        return Vector(self.x / b, self.y / b, self.z / b)

    def down(self, b: 'Vector') -> 'Vector':
        """要素ごとの最小値"""
        return Vector(min(self.x, b.x), min(self.y, b.y), min(self.z, b.z))

    def up(self, b: 'Vector') -> 'Vector':
        """要素ごとの最大値"""
        return Vector(max(self.x, b.x), max(self.y, b.y), max(self.z, b.z))

    def snap(self, grid: float) -> 'Vector':
        return Vector(snap_to_grid(self.x, grid), snap_to_grid(self.y, grid), snap_to_grid(self.z, grid))

    def to_vector2(self) -> 'Vector2':
        """鉛直軸（y）を落として水平面へ投影"""
        return Vector2(self.x, self.z)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def to_fixed_text(self, precision: int = 6) -> Dict[str, str]:
        """{"x": "0.000000", "y": ..., "z": ...}"""
        return {
            "x": format_fixed(self.x, precision),
            "y": format_fixed(self.y, precision),
            "z": format_fixed(self.z, precision),
        }


@dataclass(frozen=True)
class Vector2:
    """水平面上の2次元点（x, z）"""
    x: float = 0.0
    z: float = 0.0

    def snap(self, grid: float) -> 'Vector2':
        return Vector2(snap_to_grid(self.x, grid), snap_to_grid(self.z, grid))

    def to_fixed_text(self, precision: int = 6) -> Dict[str, str]:
        return {
            "x": format_fixed(self.x, precision),
            "z": format_fixed(self.z, precision),
        }


@dataclass(frozen=True)
class Quaternion:
    """回転クォータニオン (x, y, z, w)"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @classmethod
    def identity(cls) -> 'Quaternion':
        return cls(0.0, 0.0, 0.0, 1.0)

    @classmethod
    def from_array(cls, array: Optional[FlatArray]) -> Optional['Quaternion']:
        """4要素配列から生成（要素不足はNone）"""
        if array is None or len(array) < 4:
            return None
        return cls(float(array[0]), float(array[1]), float(array[2]), float(array[3]))

    @classmethod
    def parse(cls, obj: Optional[Mapping[str, object]]) -> Optional['Quaternion']:
        """{"x": ..., "y": ..., "z": ..., "w": ...} 形式の文字列組から生成（欠落・不正値はNone）"""
        if not obj:
            return None
        values = [_parse_number(obj.get(key)) for key in ("x", "y", "z", "w")]
        if any(v is None for v in values):
            return None
        return cls(*values)

    def is_identity(self, tolerance: float = 1e-6) -> bool:
        """単位回転か（q と -q は同じ回転）"""
        return (abs(self.x) <= tolerance and abs(self.y) <= tolerance
                and abs(self.z) <= tolerance and abs(abs(self.w) - 1.0) <= tolerance)

    def to_fixed_text(self, precision: int = 6) -> Dict[str, str]:
        return {
            "x": format_fixed(self.x, precision),
            "y": format_fixed(self.y, precision),
            "z": format_fixed(self.z, precision),
            "w": format_fixed(self.w, precision),
        }


@dataclass(frozen=True)
class Box:
    """軸並行ボックス（名前付き）"""
    name: str
    center: Vector
    size: Vector

    @classmethod
    def from_min_max(cls, name: str, min_vector: Vector, max_vector: Vector) -> 'Box':
        return cls(
            name=name,
            center=min_vector.add(max_vector).div(2),
            size=max_vector.sub(min_vector),
        )

    @property
    def extents(self) -> Vector:
        """半サイズ"""
        return self.size.div(2)

    @property
    def min_point(self) -> Vector:
        return self.center.sub(self.extents)

    @property
    def max_point(self) -> Vector:
        return self.center.add(self.extents)

    def to_fixed_text(self, precision: int = 6) -> Dict[str, object]:
        """IntersectBox 形式（回転は常に単位、小数0桁）"""
        return {
            "Name": self.name,
            "Position": self.center.to_fixed_text(precision),
            "Rotation": Quaternion.identity().to_fixed_text(0),
            "Extents": self.extents.to_fixed_text(precision),
        }
