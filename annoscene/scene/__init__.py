"""
Annoscene シーン読み込みフェーズ

パース済みglTF文書を型付き構造へ変換し、バッファを解決・デコードして、
ノード名の命名規則から配置レコード表を構築します。

処理フロー:
1. 文書の検証と型付け (document.py)
2. バッファ解決 (buffers.py) - data URI / 外部ファイル / 供給済みバイト列
3. 頂点デコード (decoder.py) - 密・インターリーブ両レイアウト
4. ノード分類とレコード生成 (indexer.py, records.py)
"""

from .document import (
    SceneDocument,
    SceneNode
)

from .buffers import (
    BufferResolver,
    data_uri_to_bytes
)

from .decoder import (
    build_array,
    packed_view,
    interleaved_copy,
    read_accessor_positions
)

from .records import (
    PropEntry,
    ParticleEntry,
    FeedbackEntry,
    FileEntry,
    PROP_DEFAULTS,
    PROPCONTAINER_DEFAULTS,
    FILE_DEFAULTS,
    with_defaults
)

from .indexer import (
    SceneIndex,
    classify_node,
    strip_variant_suffix,
    file_name_for
)

__all__ = [
    # 文書
    'SceneDocument',
    'SceneNode',

    # バッファ
    'BufferResolver',
    'data_uri_to_bytes',
    'build_array',
    'packed_view',
    'interleaved_copy',
    'read_accessor_positions',

    # レコード
    'PropEntry',
    'ParticleEntry',
    'FeedbackEntry',
    'FileEntry',
    'PROP_DEFAULTS',
    'PROPCONTAINER_DEFAULTS',
    'FILE_DEFAULTS',
    'with_defaults',

    # 分類
    'SceneIndex',
    'classify_node',
    'strip_variant_suffix',
    'file_name_for'
]
