"""API通信基底クラス

バックエンドへの1リクエストの送信から結果の正規化までを担う。
URL構築、ヘッダーのマージ、JSONパース、エラーの型付けを統合実装。

- リトライは行わない（失敗はそのまま呼び出し側へ）
- タイムアウトは設定された場合のみ適用
"""

# 標準ライブラリ
import asyncio
import logging
import ssl
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

# サードパーティ
import aiohttp
import certifi

# プロジェクト内
from stonky.configuration.settings import API_PREFIX, USER_AGENT
from stonky.core.base import ComponentState, StonkyComponent
from stonky.core.exceptions import APIError, AuthenticationError, NetworkError

logger = logging.getLogger(__name__)


class BaseAPIClient(StonkyComponent, ABC):
    """認証付きリクエストディスパッチャー

    すべてのAPIクライアントはこのクラスを継承し、
    _prepare_headers() で認証ヘッダーを供給する。

    Attributes:
        base_url: APIベースURL（プレフィックスを含まない）
        timeout: リクエスト全体のタイムアウト（秒）。Noneなら無制限
        _session: aiohttp ClientSession（遅延生成）
        _connector: 接続プール管理
    """

    # 接続プール設定
    CONNECTION_LIMIT = 100
    CONNECTION_LIMIT_PER_HOST = 50
    DNS_TTL = 300  # DNSキャッシュ（秒）

    def __init__(self, base_url: str, timeout: Optional[float] = None):
        """BaseAPIClientの初期化

        Args:
            base_url: APIベースURL
            timeout: リクエスト全体のタイムアウト（秒）
        """
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self._session: Optional[aiohttp.ClientSession] = None
        self._connector: Optional[aiohttp.TCPConnector] = None

    # ------------------------------------------------------------------------
    # 非同期コンテキストマネージャー
    # ------------------------------------------------------------------------

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ------------------------------------------------------------------------
    # セッション管理
    # ------------------------------------------------------------------------

    async def _ensure_session(self) -> None:
        """HTTPセッションが存在しなければ作成する"""
        if self._session is not None and not self._session.closed:
            return

        timeout = aiohttp.ClientTimeout(total=self.timeout)

        self._connector = aiohttp.TCPConnector(
            ssl=self._create_ssl_context(),
            limit=self.CONNECTION_LIMIT,
            limit_per_host=self.CONNECTION_LIMIT_PER_HOST,
            ttl_dns_cache=self.DNS_TTL,
        )

        self._session = aiohttp.ClientSession(
            connector=self._connector,
            timeout=timeout,
            headers=self._get_default_headers(),
            trust_env=True,  # 環境変数のプロキシ設定を信頼
        )

        self._set_state(ComponentState.READY)
        logger.info(
            f"{self.__class__.__name__} session initialized",
            extra={"base_url": self.base_url, "timeout": self.timeout},
        )

    def _create_ssl_context(self) -> ssl.SSLContext:
        """certifiのCAバンドルを使うSSLコンテキスト"""
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
        return ssl_context

    def _get_default_headers(self) -> Dict[str, str]:
        """セッション共通のヘッダー"""
        return {"User-Agent": USER_AGENT}

    async def close(self) -> None:
        """セッションとコネクターをクローズ"""
        if self._session:
            await self._session.close()
            self._session = None

        if self._connector:
            await self._connector.close()
            self._connector = None

        if self._state != ComponentState.TERMINATED:
            self._set_state(ComponentState.TERMINATED)
            logger.info(f"{self.__class__.__name__} session closed")

    # ------------------------------------------------------------------------
    # リクエスト処理
    # ------------------------------------------------------------------------

    def _build_url(self, endpoint: str) -> str:
        """ベースURL + /api + エンドポイント"""
        return f"{self.base_url}{API_PREFIX}{endpoint}"

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """HTTPリクエストを1回実行

        Args:
            method: HTTPメソッド（GET, POST, etc.）
            endpoint: /api 以下のパス（クエリ文字列を含んでよい）
            data: JSONとして送信するボディ
            headers: 既定ヘッダーに上書きマージするヘッダー

        Returns:
            Any: パース済みのレスポンスボディ（パース不能なら空の辞書）

        Raises:
            AuthenticationError: 401レスポンス（セッション破棄済み）
            APIError: その他の2xx以外のレスポンス
            NetworkError: レスポンスを受け取れなかった
        """
        await self._ensure_session()

        url = self._build_url(endpoint)

        request_headers = await self._prepare_headers()
        if headers:
            request_headers.update(headers)

        logger.info(f"{method} {url}", extra={"method": method, "endpoint": endpoint})

        try:
            async with self._session.request(
                method=method,
                url=url,
                headers=request_headers,
                json=data,
            ) as response:
                payload = await self._read_body(response)

                if not 200 <= response.status < 300:
                    self._handle_response_error(response.status, payload, endpoint)

        except (APIError, NetworkError) as e:
            logger.error(
                f"Error in {endpoint}: {e}",
                extra={"endpoint": endpoint, "error_type": type(e).__name__},
            )
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            error = self._handle_connection_error(e, url)
            self._error = error
            self._set_state(ComponentState.ERROR)
            logger.error(
                f"Error in {endpoint}: {error}",
                extra={"endpoint": endpoint, "error_type": type(e).__name__},
            )
            raise error from e

        if self._state == ComponentState.ERROR:
            self._set_state(ComponentState.READY)

        # ボディの値はログに出さない
        logger.debug(
            f"Success: {method} {endpoint}",
            extra={"endpoint": endpoint, "payload_summary": self._summarize_payload(payload)},
        )
        return payload

    @staticmethod
    def _summarize_payload(payload: Any) -> str:
        """ログ用のボディ概要（値は含めない）"""
        if isinstance(payload, dict):
            return f"dict(keys={sorted(str(k) for k in payload)})"
        if isinstance(payload, list):
            return f"list(len={len(payload)})"
        return type(payload).__name__

    async def _read_body(self, response: aiohttp.ClientResponse) -> Any:
        """ボディをJSONとして読む

        Content-Typeに関係なくパースを試み、
        空ボディやパース失敗は空の辞書として扱う。
        """
        try:
            payload = await response.json(content_type=None)
        except ValueError:
            logger.debug(f"Non-JSON response body (status {response.status})")
            return {}

        return {} if payload is None else payload

    @staticmethod
    def _extract_error_message(payload: Any, status: int) -> str:
        """エラーメッセージを抽出

        優先順位: message → error → "HTTP {status}"
        """
        if isinstance(payload, dict):
            for key in ("message", "error"):
                value = payload.get(key)
                if value:
                    return value if isinstance(value, str) else str(value)
        return f"HTTP {status}"

    def _handle_response_error(self, status: int, payload: Any, endpoint: str) -> None:
        """HTTPエラーレスポンスの処理

        Args:
            status: HTTPステータス
            payload: パース済みボディ
            endpoint: リクエストしたエンドポイント

        Raises:
            AuthenticationError: 401の場合（_on_unauthorized() 実行後）
            APIError: それ以外
        """
        message = self._extract_error_message(payload, status)

        if status == 401:
            self._on_unauthorized()
            raise AuthenticationError(message, payload=payload, endpoint=endpoint)

        raise APIError(message, status_code=status, payload=payload, endpoint=endpoint)

    def _handle_connection_error(self, error: Exception, url: str) -> NetworkError:
        """接続エラーをNetworkErrorに変換

        Args:
            error: aiohttp / asyncio の例外
            url: リクエストURL

        Returns:
            NetworkError: 原因を連鎖させたNetworkError
        """
        if isinstance(error, asyncio.TimeoutError):
            return NetworkError(
                f"Request timed out: {url}", url=url, error_code="E5205", cause=error
            )
        elif isinstance(error, aiohttp.ClientConnectorError):
            return NetworkError(
                f"Cannot connect to server: {url}", url=url, error_code="E5202", cause=error
            )
        else:
            return NetworkError(f"Network error: {error}", url=url, cause=error)

    # ------------------------------------------------------------------------
    # サブクラスで実装するフック
    # ------------------------------------------------------------------------

    @abstractmethod
    async def _prepare_headers(self) -> Dict[str, str]:
        """リクエストごとの既定ヘッダーを準備

        Returns:
            Dict[str, str]: 新しい辞書（呼び出し側が変更する）
        """

    def _on_unauthorized(self) -> None:
        """401受信時、例外送出の直前に呼ばれる"""

    def get_status(self) -> Dict[str, Any]:
        status = super().get_status()
        status["base_url"] = self.base_url
        status["session_open"] = self._session is not None and not self._session.closed
        return status

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} "
            f"base_url={self.base_url} "
            f"state={self._state.value}>"
        )
