"""API通信関連モジュール

- base.py: BaseAPIClient（リクエストディスパッチャー）
- client.py: StonkyAPIClient（認証・CRUD）
- schemas.py: 認証レスポンスの検証
"""

from .base import BaseAPIClient
from .client import StonkyAPIClient
from .schemas import AuthPayload, parse_auth_payload

__all__ = [
    "BaseAPIClient",
    "StonkyAPIClient",
    "AuthPayload",
    "parse_auth_payload",
]
