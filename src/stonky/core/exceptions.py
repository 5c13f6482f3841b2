"""Stonky 例外クラス階層

クライアント全体で使用される例外クラスを定義。
呼び出し側が文字列比較ではなく型で分岐できるよう、
エラーコード付きの構造化された例外を提供する。

エラーコード体系:
    E0001-E0999: 設定
    E2000-E2999: API通信（プロトコル・認証・レスポンス）
    E5100-E5199: セッションストレージ
    E5200-E5299: ネットワーク
"""

from datetime import datetime
from typing import Any, Dict, Optional


class StonkyError(Exception):
    """Stonkyクライアントの基底例外クラス

    Attributes:
        message: ユーザー向けエラーメッセージ（そのまま表示可能）
        error_code: エラーコード（E0001など）
        details: 詳細情報の辞書
        cause: 原因となった例外
        timestamp: エラー発生時刻
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """エラー情報を辞書形式で取得

        Returns:
            Dict[str, Any]: エラー情報の辞書
        """
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "cause": str(self.cause) if self.cause else None,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


# ============================================================================
# 設定関連エラー (E0001-E0999)
# ============================================================================


class ConfigurationError(StonkyError):
    """設定関連エラー (E0001-E0099)

    設定ファイルの読み込み、パースに関するエラー
    """

    def __init__(self, message: str, config_file: Optional[str] = None, **kwargs):
        if "error_code" not in kwargs:
            kwargs["error_code"] = "E0001"
        super().__init__(message, **kwargs)
        if config_file:
            self.details["config_file"] = config_file


# ============================================================================
# API通信関連エラー (E2000-E2999)
# ============================================================================


class APIError(StonkyError):
    """HTTPエラーレスポンス (E2000)

    2xx以外のステータスを受け取った場合のエラー。
    messageにはレスポンスの message / error フィールド、
    どちらも無い場合は "HTTP {status}" が入る。

    Attributes:
        status_code: HTTPステータスコード
        payload: パース済みのレスポンスボディ
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
        endpoint: Optional[str] = None,
        **kwargs,
    ):
        if "error_code" not in kwargs:
            kwargs["error_code"] = "E2000"
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.payload = payload
        if status_code is not None:
            self.details["status_code"] = status_code
        if endpoint:
            self.details["endpoint"] = endpoint


class AuthenticationError(APIError):
    """認証エラー (E2003)

    401レスポンス。送出前にローカルセッションは破棄済み。
    """

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("status_code", 401)
        super().__init__(message, error_code="E2003", **kwargs)


class NotAuthenticatedError(StonkyError):
    """未認証エラー (E2004)

    トークンが無い状態で認証必須の操作を呼んだ場合。
    リクエストは送信されない。
    """

    def __init__(self, message: str = "No authentication token available", **kwargs):
        if "error_code" not in kwargs:
            kwargs["error_code"] = "E2004"
        super().__init__(message, **kwargs)


class ResponseValidationError(StonkyError):
    """レスポンス形式エラー (E2100)

    バックエンドのレスポンスが期待する形と異なる場合
    """

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        if "error_code" not in kwargs:
            kwargs["error_code"] = "E2100"
        super().__init__(message, **kwargs)
        if field:
            self.details["field"] = field


# ============================================================================
# システム関連エラー (E5000-E5999)
# ============================================================================


class SessionStorageError(StonkyError):
    """セッションストレージエラー (E5100-E5199)

    セッションファイルの読み書きに失敗した場合
    """

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        if "error_code" not in kwargs:
            kwargs["error_code"] = "E5100"
        super().__init__(message, **kwargs)
        if path:
            self.details["path"] = path


class NetworkError(StonkyError):
    """ネットワーク関連エラー (E5200-E5299)

    接続拒否、DNS解決失敗、タイムアウトなど、
    レスポンスを受け取れなかった場合のエラー

    エラーコード:
        E5200: 一般的な通信エラー
        E5202: 接続失敗
        E5205: タイムアウト
    """

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        if "error_code" not in kwargs:
            kwargs["error_code"] = "E5200"
        super().__init__(message, **kwargs)
        if url:
            self.details["url"] = url
