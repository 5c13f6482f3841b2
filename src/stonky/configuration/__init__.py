"""
Stonky Configuration Package

ConfigManagerによる設定ファイル管理、ClientConfigによる接続先解決、
settingsモジュールによる定数管理を行う。
"""

from stonky.configuration.client_config import (
    ClientConfig,
    get_default_base_url,
    resolve_base_url,
)
from stonky.configuration.config_manager import ConfigManager
from stonky.configuration.settings import (
    API_PREFIX,
    DEFAULT_CONFIG_PATH,
    DEFAULT_SESSION_PATH,
    LOCAL_API_URL,
    PRODUCTION_API_URL,
    VERSION,
    mask_token,
)

__all__ = [
    # クラス
    "ConfigManager",
    "ClientConfig",
    # 接続先
    "resolve_base_url",
    "get_default_base_url",
    "API_PREFIX",
    "LOCAL_API_URL",
    "PRODUCTION_API_URL",
    # パス・バージョン
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_SESSION_PATH",
    "VERSION",
    # ヘルパー関数
    "mask_token",
]
