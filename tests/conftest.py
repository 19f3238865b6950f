#!/usr/bin/env python3
"""
pytest共通設定とフィクスチャ

テスト実行時のロギング設定、グローバル設定のリセット、
glTFビルダーのフィクスチャを提供します。
"""

import os
import sys
import tempfile
from typing import Generator

import pytest

# パッケージのパス追加
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.dirname(__file__))

from annoscene import setup_logging, get_logger
from annoscene.config import reset_config

from scene_builder import GltfBuilder


# =============================================================================
# テストロギング設定
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """テスト全体のロギング設定"""
    setup_logging(level="DEBUG")
    logger = get_logger("annoscene.tests")
    logger.info("=== テストセッション開始 ===")
    yield
    logger.info("=== テストセッション終了 ===")


@pytest.fixture(autouse=True)
def isolated_config():
    """グローバル設定をテストごとに破棄"""
    reset_config()
    yield
    reset_config()


# =============================================================================
# テストデータフィクスチャ
# =============================================================================

@pytest.fixture
def gltf_builder() -> GltfBuilder:
    """空のglTFビルダー"""
    return GltfBuilder()


@pytest.fixture
def temp_directory() -> Generator[str, None, None]:
    """一時ディレクトリ"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir
