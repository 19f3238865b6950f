#!/usr/bin/env python3
"""
Annoscene 設定管理システム

抽出処理で使用するグリッド幅・出力精度・特殊ノード名などを統一管理し、
Magic Numberのハードコーディングを解消します。
"""

from dataclasses import dataclass, fields, asdict
from typing import Optional, Dict, Any
from pathlib import Path

import yaml

from annoscene import get_logger
from annoscene.constants import (
    RECORD_PRECISION,
    BUILD_BLOCKER_GRID, BUILD_BLOCKER_PRECISION,
    UNEVEN_BLOCKER_GRID, UNEVEN_BLOCKER_PRECISION,
    DECAL_GRID, DECAL_HALF_HEIGHT,
    GROUND_NODE_NAME, UNEVEN_BLOCKER_NODE_NAME, HITBOX_PREFIX,
    PROP_FILE_EXTENSION, FILE_FILE_EXTENSION,
)

logger = get_logger(__name__)


@dataclass
class ExtractionConfig:
    """抽出設定"""
    # 配置レコード
    record_precision: int = RECORD_PRECISION
    prop_file_extension: str = PROP_FILE_EXTENSION
    file_file_extension: str = FILE_FILE_EXTENSION

    # 建築不可領域・凹凸領域
    build_blocker_grid: float = BUILD_BLOCKER_GRID
    build_blocker_precision: int = BUILD_BLOCKER_PRECISION
    uneven_blocker_grid: float = UNEVEN_BLOCKER_GRID
    uneven_blocker_precision: int = UNEVEN_BLOCKER_PRECISION

    # デカール範囲
    decal_grid: float = DECAL_GRID
    decal_half_height: float = DECAL_HALF_HEIGHT

    # 特殊ノード
    ground_name: str = GROUND_NODE_NAME
    uneven_blocker_name: str = UNEVEN_BLOCKER_NODE_NAME
    hitbox_prefix: str = HITBOX_PREFIX
    apply_special_node_rotation: bool = True

    # ログ設定
    log_level: str = "INFO"
    log_format_style: str = "detailed"


# 0より大きいことが必要な設定
_POSITIVE_KEYS = ("build_blocker_grid", "uneven_blocker_grid", "decal_grid")


def _coerce_value(expected: type, value: Any) -> Any:
    """
    設定値をフィールドの型に変換

    Raises:
        TypeError: 変換できない型
        ValueError: 変換できない値
    """
    if expected is bool:
        if not isinstance(value, bool):
            raise TypeError(f"expected true/false, got {value!r}")
        return value
    if isinstance(value, bool):
        raise TypeError(f"expected {expected.__name__}, got {value!r}")
    if expected is int:
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError(f"expected an integer, got {value!r}")
            return int(value)
        return int(value)
    if expected is float:
        return float(value)
    if expected is str:
        if isinstance(value, (str, int, float)):
            return str(value)
        raise TypeError(f"expected a string, got {value!r}")
    return value


class ConfigManager:
    """設定管理クラス"""

    def __init__(self):
        self._config: Optional[ExtractionConfig] = None
        self._config_file_path: Optional[Path] = None

    def load_config(self, config_file: Optional[Path] = None) -> ExtractionConfig:
        """
        設定ファイルを読み込み

        Args:
            config_file: 設定ファイルパス（Noneの場合はデフォルト位置を探索）

        Returns:
            読み込まれた設定
        """
        if config_file is None:
            default_paths = [
                Path.cwd() / "annoscene.yaml",
                Path.home() / ".annoscene" / "config.yaml"
            ]

            for path in default_paths:
                if path.exists():
                    config_file = path
                    break

        if config_file is not None:
            config_file = Path(config_file)

        if config_file and config_file.exists():
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    config_dict = yaml.safe_load(f) or {}

                self._config = self._dict_to_config(config_dict)
                self._config_file_path = config_file
                logger.info(f"Configuration loaded from {config_file}")

            except (OSError, yaml.YAMLError, TypeError) as e:
                logger.warning(f"Failed to load config from {config_file}: {e}")
                logger.info("Using default configuration")
                self._config = ExtractionConfig()
        else:
            logger.info("No config file found, using default configuration")
            self._config = ExtractionConfig()

        return self._config

    def save_config(self, config_file: Optional[Path] = None) -> bool:
        """
        設定をファイルに保存

        Args:
            config_file: 保存先ファイルパス

        Returns:
            保存成功したかどうか
        """
        if self._config is None:
            logger.error("No configuration to save")
            return False

        if config_file is None:
            config_file = self._config_file_path or Path("annoscene.yaml")
        config_file = Path(config_file)

        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)

            with open(config_file, 'w', encoding='utf-8') as f:
                yaml.safe_dump(asdict(self._config), f, default_flow_style=False,
                               allow_unicode=True, indent=2, sort_keys=False)

            logger.info(f"Configuration saved to {config_file}")
            return True

        except OSError as e:
            logger.error(f"Failed to save config to {config_file}: {e}")
            return False

    def get_config(self) -> ExtractionConfig:
        """現在の設定を取得"""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> ExtractionConfig:
        """辞書を設定オブジェクトに変換（未知のキーは無視、不正な値は既定値のまま）"""
        if not isinstance(config_dict, dict):
            raise TypeError(f"config root must be a mapping, got {type(config_dict).__name__}")

        config = ExtractionConfig()
        types = {f.name: f.type for f in fields(ExtractionConfig)}
        for key, value in config_dict.items():
            if key not in types:
                logger.debug(f"Ignoring unknown config key: {key}")
                continue
            try:
                coerced = _coerce_value(types[key], value)
                if key in _POSITIVE_KEYS and not coerced > 0:
                    raise ValueError(f"must be greater than 0, got {value!r}")
            except (TypeError, ValueError) as e:
                logger.warning(f"Invalid config value for '{key}', using default {getattr(config, key)!r}: {e}")
                continue
            setattr(config, key, coerced)
        return config


# グローバル設定マネージャー
_config_manager: Optional[ConfigManager] = None

def get_config_manager() -> ConfigManager:
    """グローバル設定マネージャーを取得"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager

def get_config() -> ExtractionConfig:
    """現在の設定を取得"""
    return get_config_manager().get_config()

def load_config(config_file: Optional[Path] = None) -> ExtractionConfig:
    """設定を読み込み"""
    return get_config_manager().load_config(config_file)

def save_config(config_file: Optional[Path] = None) -> bool:
    """設定を保存"""
    return get_config_manager().save_config(config_file)

def reset_config() -> None:
    """グローバル設定を破棄（主にテスト用）"""
    global _config_manager
    _config_manager = None
