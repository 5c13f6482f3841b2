"""
Stonky Core Package

基底クラス、例外、セッション、API通信などの中核機能を含む。
"""

from stonky.core.base import ComponentState, StonkyComponent
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
from stonky.core.session import (
    FileSessionStorage,
    MemorySessionStorage,
    SessionStorage,
    SessionStore,
)

__all__ = [
    # 基底クラス
    "StonkyComponent",
    "ComponentState",
    # 例外クラス
    "StonkyError",
    "ConfigurationError",
    "APIError",
    "AuthenticationError",
    "NotAuthenticatedError",
    "ResponseValidationError",
    "SessionStorageError",
    "NetworkError",
    # セッション
    "SessionStorage",
    "MemorySessionStorage",
    "FileSessionStorage",
    "SessionStore",
]
