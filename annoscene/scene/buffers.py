#!/usr/bin/env python3
"""
バッファ解決

glTFバッファ参照を生バイト列に解決します。
- data URI（base64 またはテキスト）
- リソースフォルダ相対の外部ファイル
- 呼び出し側が解決済みのバイト列（GLBのBINチャンクなど）

各バッファの読み込みは最初に必要になった時点で一度だけ行います。
"""

import binascii
import os
from typing import Dict, Mapping, Optional, Union
from urllib.parse import unquote

import pygltflib

from annoscene import get_logger
from annoscene.constants import DATA_URI_SCHEME
from annoscene.data_types import BufferDecodeError
from .document import SceneDocument

logger = get_logger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


def data_uri_to_bytes(uri: str) -> bytes:
    """
    data URI をバイト列に変換

    ヘッダーに base64 指定があればbase64デコード、無ければUTF-8テキストとして扱う。
    pygltflib のデコーダーは octet-stream ヘッダーのみ受け付けるため、
    MIMEタイプに関わらずヘッダーを揃えて渡す。
    """
    header, sep, payload = uri.partition(",")
    if not sep:
        raise BufferDecodeError(f"malformed data URI (no ',' separator): {uri[:32]}...")
    if "base64" in header:
        try:
            return pygltflib.GLTF2.decode_data_uri(pygltflib.DATA_URI_HEADER + payload)
        except (binascii.Error, ValueError) as e:
            raise BufferDecodeError(f"invalid base64 payload in data URI: {e}") from e
    return payload.encode("utf-8")


class BufferResolver:
    """バッファ番号 → 生バイト列の解決器（結果はキャッシュ）"""

    def __init__(
        self,
        document: SceneDocument,
        resource_folder: Optional[Union[str, os.PathLike]] = None,
        buffers: Optional[Mapping[int, BytesLike]] = None
    ):
        """
        初期化

        Args:
            document: 型付きシーン文書
            resource_folder: 外部バッファファイルの基準フォルダ
            buffers: 解決済みバイト列（バッファ番号 → bytes）。URIより優先
        """
        self.document = document
        self.resource_folder = os.fspath(resource_folder) if resource_folder is not None else None
        self._provided: Dict[int, BytesLike] = dict(buffers or {})
        self._cache: Dict[int, bytes] = {}
        self._failed: Dict[int, str] = {}
        self.read_count = 0

    def get(self, buffer_index: int) -> bytes:
        """
        バッファのバイト列を取得

        Raises:
            BufferDecodeError: 範囲外・URI未解決・読み込み失敗
        """
        if buffer_index in self._cache:
            return self._cache[buffer_index]
        if buffer_index in self._failed:
            raise BufferDecodeError(self._failed[buffer_index])

        try:
            data = self._resolve(buffer_index)
        except BufferDecodeError as e:
            self._failed[buffer_index] = str(e)
            raise

        self._cache[buffer_index] = data
        return data

    def _resolve(self, buffer_index: int) -> bytes:
        if buffer_index in self._provided:
            logger.debug(f"Buffer {buffer_index}: using provided bytes")
            return bytes(self._provided[buffer_index])

        if buffer_index >= len(self.document.buffers):
            raise BufferDecodeError(f"buffer index out of range: {buffer_index}")

        ref = self.document.buffers[buffer_index]
        if ref.uri is None:
            raise BufferDecodeError(f"buffer {buffer_index} has no uri and no bytes were provided")

        if ref.uri.startswith(DATA_URI_SCHEME):
            logger.debug(f"Buffer {buffer_index}: decoding data URI")
            return data_uri_to_bytes(ref.uri)

        return self._read_file(buffer_index, ref.uri)

    def _read_file(self, buffer_index: int, uri: str) -> bytes:
        relative = unquote(uri)
        path = os.path.join(self.resource_folder, relative) if self.resource_folder else relative

        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise BufferDecodeError(f"could not read buffer {buffer_index} from {path}: {e}") from e

        self.read_count += 1
        logger.debug(f"Buffer {buffer_index}: read {len(data)} bytes from {path}")
        return data
