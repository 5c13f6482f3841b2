"""設定管理マネージャー

YAMLベースの設定ファイル管理とバリデーション機能を提供。
優先順位（低→高）: デフォルト値 → 設定ファイル → 環境変数
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from stonky.configuration.client_config import ClientConfig
from stonky.configuration.settings import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_SESSION_PATH,
    ENV_API_TIMEOUT,
    ENV_API_URL,
    ENV_CONFIG_PATH,
    ENV_LOG_LEVEL,
    ENV_MODE,
    ENV_SESSION_PATH,
    LOG_LEVELS,
    PRODUCTION_MODE,
    SESSION_STORAGE_TYPES,
)
from stonky.core.exceptions import ConfigurationError
from stonky.core.session import FileSessionStorage, MemorySessionStorage, SessionStore
from stonky.utils.logger_manager import LoggerManager

logger = logging.getLogger(__name__)


class ConfigManager:
    """設定管理マネージャー

    設定ファイルの例:
        api:
          url: https://staging.example.com
          production: false
          timeout: 30
        session:
          storage: file
          path: ~/.stonky/session.yaml
        logging:
          level: INFO

    Attributes:
        config_path: 設定ファイルのパス
        _config: 現在の設定値
        _defaults: デフォルト設定値
    """

    # 環境変数 → 設定キー
    ENV_OVERRIDES = {
        ENV_API_URL: "api.url",
        ENV_API_TIMEOUT: "api.timeout",
        ENV_SESSION_PATH: "session.path",
        ENV_LOG_LEVEL: "logging.level",
    }

    def __init__(self, config_path: Optional[Path] = None):
        """初期化

        Args:
            config_path: 設定ファイルのパス（Noneの場合は STONKY_CONFIG_PATH かデフォルト）
        """
        if config_path is None:
            env_path = os.getenv(ENV_CONFIG_PATH)
            config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH

        self.config_path = Path(config_path)
        self._defaults = self._get_default_config()
        self._config: Dict[str, Any] = {}
        self._loaded = False

        logger.info(f"ConfigManager initialized with path: {self.config_path}")

    def load(self) -> Dict[str, Any]:
        """設定ファイルを読み込み、環境変数でオーバーライドする

        Returns:
            Dict[str, Any]: 最終的な設定

        Raises:
            ConfigurationError: 設定ファイルの読み込みに失敗
        """
        self._config = self.load_config(self.config_path)
        self._apply_env_overrides()

        warnings = self.validate_config(self._config)
        if warnings:
            logger.warning(f"Configuration validation warnings: {warnings}")

        self._loaded = True
        return self.get_all()

    def get(self, key: str, default: Any = None) -> Any:
        """設定値を取得

        ドット記法で階層的なキーを指定可能。
        例: "api.url" → config["api"]["url"]
        """
        self._ensure_loaded()
        value = self._config

        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """設定値を設定（存在しない階層は自動作成）"""
        keys = key.split(".")
        config = self._config

        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        logger.debug(f"Configuration updated: {key} = {value}")

    def get_all(self) -> Dict[str, Any]:
        """全設定の深いコピー"""
        return copy.deepcopy(self._config)

    def load_config(self, config_path: Path) -> Dict[str, Any]:
        """設定ファイルを読み込み、デフォルト値とマージ

        Raises:
            ConfigurationError: ファイル読み込みエラー（E0001）
        """
        if not config_path.exists():
            logger.info(f"Config file not found: {config_path}, using defaults")
            return copy.deepcopy(self._defaults)

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Failed to parse YAML config file: {e}",
                config_file=str(config_path),
                cause=e,
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to load config file: {e}", config_file=str(config_path), cause=e
            ) from e

        if not isinstance(config, dict):
            raise ConfigurationError(
                "Config file must contain a mapping", config_file=str(config_path)
            )

        logger.info(f"Configuration loaded successfully from {config_path}")
        return self._deep_merge(copy.deepcopy(self._defaults), config)

    def save_config(self, config: Dict[str, Any], config_path: Optional[Path] = None) -> None:
        """設定をファイルに保存

        Raises:
            ConfigurationError: ファイル保存エラー（E0003）
        """
        config_path = config_path or self.config_path

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(
                    config, f, default_flow_style=False, allow_unicode=True, sort_keys=False
                )
        except OSError as e:
            raise ConfigurationError(
                f"Failed to save config file: {e}",
                config_file=str(config_path),
                error_code="E0003",
                cause=e,
            ) from e

        logger.info(f"Configuration saved successfully to {config_path}")

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        """設定値のバリデーション

        Returns:
            List[str]: 警告メッセージのリスト（空の場合は有効）
        """
        errors = []

        api = config.get("api") or {}
        url = api.get("url")
        if url is not None and not (
            isinstance(url, str) and url.startswith(("http://", "https://"))
        ):
            errors.append(f"Invalid api.url: {url!r} (must start with http:// or https://)")

        timeout = api.get("timeout")
        if timeout is not None and (
            isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0
        ):
            errors.append(f"Invalid api.timeout: {timeout!r} (must be a positive number)")

        storage = (config.get("session") or {}).get("storage")
        if storage not in SESSION_STORAGE_TYPES:
            errors.append(f"Invalid session.storage: {storage!r}")

        level = (config.get("logging") or {}).get("level")
        if level is not None and str(level).upper() not in LOG_LEVELS:
            errors.append(f"Invalid logging.level: {level!r}")

        return errors

    # ------------------------------------------------------------------------
    # クライアント用オブジェクトの構築
    # ------------------------------------------------------------------------

    def build_client_config(self) -> ClientConfig:
        """設定からClientConfigを構築

        型が不正な値（validate_config() の警告対象）は未指定として扱う。
        """
        url = self.get("api.url")
        if not isinstance(url, str):
            url = None

        timeout = self.get("api.timeout")
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            timeout = None

        return ClientConfig(
            override_url=url or None,
            is_production=bool(self.get("api.production", False)),
            timeout=float(timeout) if timeout is not None else None,
        )

    def build_session_store(self) -> SessionStore:
        """設定に従ったストレージでSessionStoreを構築"""
        if self.get("session.storage") == "file":
            path = Path(str(self.get("session.path", DEFAULT_SESSION_PATH))).expanduser()
            return SessionStore(FileSessionStorage(path))
        return SessionStore(MemorySessionStorage())

    def setup_logging(self) -> LoggerManager:
        """設定のログレベルでLoggerManagerを初期化

        logging.level が未指定の場合は実行環境ごとの既定レベルを使う。
        LoggerManagerはシングルトンのため、初期化済みなら既存のものを返す。
        """
        level = self.get("logging.level")
        if level is not None and str(level).upper() not in LOG_LEVELS:
            logger.warning(f"Ignoring invalid logging.level: {level!r}")
            level = None

        return LoggerManager(log_level=str(level) if level is not None else None)

    # ------------------------------------------------------------------------
    # 内部処理
    # ------------------------------------------------------------------------

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def _apply_env_overrides(self) -> None:
        """環境変数による設定のオーバーライド"""
        for env_key, config_key in self.ENV_OVERRIDES.items():
            env_value = os.getenv(env_key)
            if env_value:
                self.set(config_key, self._parse_env_value(env_value))
                logger.debug(f"Environment override: {config_key} from {env_key}")

        # セッションパスの指定はファイル保存を意味する
        if os.getenv(ENV_SESSION_PATH):
            self.set("session.storage", "file")

        if os.getenv(ENV_MODE):
            self.set("api.production", os.getenv(ENV_MODE).strip().lower() == PRODUCTION_MODE)

    def _parse_env_value(self, value: str) -> Any:
        """環境変数の値を適切な型に変換"""
        if value.lower() in ["true", "yes"]:
            return True
        elif value.lower() in ["false", "no"]:
            return False

        try:
            if "." in value:
                return float(value)
            else:
                return int(value)
        except ValueError:
            pass

        return value

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """辞書を再帰的にマージ"""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _get_default_config(self) -> Dict[str, Any]:
        return {
            "api": {"url": None, "production": False, "timeout": None},
            "session": {"storage": "memory", "path": str(DEFAULT_SESSION_PATH)},
            "logging": {"level": None},
        }

    def __repr__(self) -> str:
        return f"ConfigManager(config_path={self.config_path}, loaded={self._loaded})"
