"""レスポンスの境界検証

セッションに保存する値だけを検証する。
それ以外のレスポンスはバックエンドが返した形のまま扱う。
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from stonky.core.exceptions import ResponseValidationError


@dataclass
class AuthPayload:
    """ログインレスポンスのうちセッションに関わる部分

    Attributes:
        token: Bearerトークン
        user: ユーザー情報
    """

    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None

    @property
    def has_session(self) -> bool:
        return self.token is not None or self.user is not None


def parse_auth_payload(payload: Any) -> AuthPayload:
    """ログインレスポンスを検証

    token / user はどちらも省略可能。存在する場合は
    token は空でない文字列、user はオブジェクトでなければならない。

    Args:
        payload: パース済みのレスポンスボディ

    Returns:
        AuthPayload: 検証済みの値

    Raises:
        ResponseValidationError: 形式が不正な場合
    """
    if not isinstance(payload, dict):
        raise ResponseValidationError(
            f"Auth response must be an object, got {type(payload).__name__}"
        )

    token = payload.get("token")
    if token is not None and not isinstance(token, str):
        raise ResponseValidationError(
            f"Auth token must be a string, got {type(token).__name__}", field="token"
        )

    user = payload.get("user")
    if user is not None and not isinstance(user, dict):
        raise ResponseValidationError(
            f"Auth user must be an object, got {type(user).__name__}", field="user"
        )

    return AuthPayload(token=token or None, user=user)
