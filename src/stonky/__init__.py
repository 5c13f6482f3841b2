"""
Stonky Client

Stonky家計管理バックエンドの非同期HTTPクライアント。
接続先の解決、Bearer認証、エラーの正規化、ローカルセッション管理を提供する。
"""

__version__ = "0.2.0"
__author__ = "Stonky Team"
__license__ = "MIT"

from stonky.configuration import ClientConfig, ConfigManager, resolve_base_url
from stonky.core.api.client import StonkyAPIClient
from stonky.core.exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    NotAuthenticatedError,
    ResponseValidationError,
    SessionStorageError,
    StonkyError,
)
from stonky.core.session import FileSessionStorage, MemorySessionStorage, SessionStore
from stonky.utils.logger_manager import LoggerManager

__all__ = [
    # バージョン情報
    "__version__",
    "__author__",
    "__license__",
    # クライアント
    "StonkyAPIClient",
    "ClientConfig",
    "ConfigManager",
    "resolve_base_url",
    # セッション
    "SessionStore",
    "MemorySessionStorage",
    "FileSessionStorage",
    # 例外クラス
    "StonkyError",
    "ConfigurationError",
    "APIError",
    "AuthenticationError",
    "NotAuthenticatedError",
    "ResponseValidationError",
    "SessionStorageError",
    "NetworkError",
    # ログ
    "LoggerManager",
]
