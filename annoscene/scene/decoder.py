#!/usr/bin/env python3
"""
バッファデコーダー

生バイト列から固定長タプルの数値配列を取り出します。
密に詰まったレイアウトはゼロコピーのビューとして、
インターリーブ（ストライド付き）レイアウトは1回のコピーで平坦化して返します。
"""

from typing import Optional, Union

import numpy as np

from annoscene import get_logger
from annoscene.constants import (
    ACCESSOR_TYPE_VEC3, COMPONENT_TYPE_FLOAT, VEC3_COMPONENTS
)
from annoscene.data_types import BufferDecodeError
from .buffers import BufferResolver
from .document import SceneDocument

logger = get_logger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]

# glTFはリトルエンディアン
POSITION_DTYPE = np.dtype("<f4")


def _check_range(byte_offset: int, count: int, end: int, buffer_length: int, layout: str) -> None:
    if byte_offset < 0 or count < 0:
        raise BufferDecodeError(f"negative offset or count: offset={byte_offset}, count={count}")
    if end > buffer_length:
        raise BufferDecodeError(
            f"{layout} range [{byte_offset}, {end}) exceeds buffer of {buffer_length} bytes"
        )


def packed_view(
    data: BytesLike,
    byte_offset: int,
    count: int,
    num_components: int,
    dtype: np.dtype = POSITION_DTYPE
) -> np.ndarray:
    """密に詰まった N*K 成分をゼロコピーで読み替える"""
    dtype = np.dtype(dtype)
    end = byte_offset + count * num_components * dtype.itemsize
    _check_range(byte_offset, count, end, memoryview(data).nbytes, "packed")
    if count == 0:
        return np.empty(0, dtype=dtype)
    return np.frombuffer(data, dtype=dtype, count=count * num_components, offset=byte_offset)


def interleaved_copy(
    data: BytesLike,
    byte_offset: int,
    count: int,
    num_components: int,
    byte_stride: int,
    dtype: np.dtype = POSITION_DTYPE
) -> np.ndarray:
    """S バイト間隔で並ぶ要素から K 成分ずつを新しい平坦配列へコピー"""
    dtype = np.dtype(dtype)
    element_size = num_components * dtype.itemsize
    if byte_stride < element_size:
        raise BufferDecodeError(f"byte stride {byte_stride} is smaller than element size {element_size}")

    end = byte_offset + max(count - 1, 0) * byte_stride + (element_size if count else 0)
    _check_range(byte_offset, count, end, memoryview(data).nbytes, "strided")
    if count == 0:
        return np.empty(0, dtype=dtype)

    source = np.ndarray(
        shape=(count, num_components),
        dtype=dtype,
        buffer=data,
        offset=byte_offset,
        strides=(byte_stride, dtype.itemsize),
    )
    return source.copy().reshape(count * num_components)


def build_array(
    data: BytesLike,
    byte_offset: int,
    count: int,
    num_components: int,
    byte_stride: Optional[int] = None,
    dtype: np.dtype = POSITION_DTYPE
) -> np.ndarray:
    """
    count 個の num_components 要素タプルを平坦な配列として取り出す

    Args:
        data: 生バイト列
        byte_offset: 先頭要素のバイトオフセット
        count: 要素数 N
        num_components: 1要素あたりの成分数 K
        byte_stride: 要素間のバイト間隔 S（None または K*成分サイズなら密）
        dtype: 成分の型

    Returns:
        長さ N*K の1次元配列

    Raises:
        BufferDecodeError: 要求範囲がバッファを超える、ストライドが不正
    """
    element_size = num_components * np.dtype(dtype).itemsize
    if byte_stride is None or byte_stride == element_size:
        return packed_view(data, byte_offset, count, num_components, dtype)
    return interleaved_copy(data, byte_offset, count, num_components, byte_stride, dtype)


def read_accessor_positions(
    document: SceneDocument,
    resolver: BufferResolver,
    accessor_index: int
) -> np.ndarray:
    """
    POSITIONアクセサ（VEC3 / FLOAT）を平坦な float32 配列として読む

    Raises:
        BufferDecodeError: インデックス範囲外、未対応の型、範囲外アクセス
    """
    if accessor_index >= len(document.accessors):
        raise BufferDecodeError(f"accessor index out of range: {accessor_index}")
    accessor = document.accessors[accessor_index]

    if accessor.type != ACCESSOR_TYPE_VEC3 or accessor.componentType != COMPONENT_TYPE_FLOAT:
        raise BufferDecodeError(
            f"accessor {accessor_index} is {accessor.type}/{accessor.componentType}, "
            f"expected {ACCESSOR_TYPE_VEC3}/{COMPONENT_TYPE_FLOAT}"
        )
    view_index = accessor.bufferView
    if view_index is None:
        raise BufferDecodeError(f"accessor {accessor_index} has no bufferView")
    if view_index >= len(document.buffer_views):
        raise BufferDecodeError(f"bufferView index out of range: {view_index}")

    view = document.buffer_views[view_index]
    if view.buffer is None:
        raise BufferDecodeError(f"bufferView {view_index} has no buffer")

    buffer = resolver.get(view.buffer)
    view_offset = view.byteOffset or 0
    view_end = view_offset + (view.byteLength or 0)
    if view_end > len(buffer):
        raise BufferDecodeError(
            f"bufferView {view_index} range [{view_offset}, {view_end}) "
            f"exceeds buffer {view.buffer} of {len(buffer)} bytes"
        )

    view_bytes = memoryview(buffer)[view_offset:view_end]
    positions = build_array(
        view_bytes,
        accessor.byteOffset or 0,
        accessor.count or 0,
        VEC3_COMPONENTS,
        view.byteStride,
    )
    logger.debug(f"Accessor {accessor_index}: decoded {accessor.count} positions")
    return positions
