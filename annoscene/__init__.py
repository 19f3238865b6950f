#!/usr/bin/env python3
"""
Annoscene メインパッケージ

glTFシーンからAnno向けの配置情報・当たり判定情報を抽出するライブラリ。
パッケージ共通のロガー設定を提供します。
"""

import logging
import sys
from pathlib import Path
from typing import Optional

__version__ = "0.1.0"

PACKAGE_LOGGER_NAME = "annoscene"

_FORMATS = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    "debug": "%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d: %(message)s"
}

# 利用側が設定するまでは何も出力しない
logging.getLogger(PACKAGE_LOGGER_NAME).addHandler(logging.NullHandler())


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_style: str = "detailed"
) -> logging.Logger:
    """
    annoscene パッケージロガーの出力設定

    ルートロガーには触れず、annoscene 配下のロガーだけを対象にする。
    繰り返し呼んでもハンドラーは重複しない。

    Args:
        level: ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: ログファイルパス（Noneならコンソールのみ）
        format_style: フォーマットスタイル ("simple", "detailed", "debug")

    Returns:
        設定済みパッケージロガー
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    formatter = logging.Formatter(_FORMATS.get(format_style, _FORMATS["detailed"]), datefmt='%H:%M:%S')

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(numeric_level)

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """モジュール用ロガー（通常は __name__ を渡す）"""
    return logging.getLogger(name)
