"""Stonky APIクライアント

認証、ダッシュボード、取引・予算・目標のCRUDを
コルーチンとして公開する。

使用方法:
    async with StonkyAPIClient() as api:
        await api.login("a@b.com", "secret")
        overview = await api.get_dashboard_overview()
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from stonky.configuration.client_config import (
    ClientConfig,
    get_default_base_url,
    resolve_base_url,
)
from stonky.core.api.base import BaseAPIClient
from stonky.core.api.schemas import parse_auth_payload
from stonky.core.exceptions import NotAuthenticatedError
from stonky.core.session import SessionStore

if TYPE_CHECKING:
    from stonky.configuration.config_manager import ConfigManager

logger = logging.getLogger(__name__)


class StonkyAPIClient(BaseAPIClient):
    """Stonkyバックエンドのクライアント

    セッション（トークンとユーザー）はインスタンスが保持する
    SessionStoreに置かれ、ログインで作成、ログアウトと401で破棄される。

    Attributes:
        config: 接続設定
        session_store: ローカルセッション
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session_store: Optional[SessionStore] = None,
    ):
        """StonkyAPIClientの初期化

        Args:
            config: 接続設定（Noneの場合は環境変数から解決）
            session_store: セッション（Noneの場合はメモリ上に作成）
        """
        if config is None:
            config = ClientConfig.from_env()
            base_url = get_default_base_url()
        else:
            base_url = resolve_base_url(config)

        super().__init__(base_url=base_url, timeout=config.timeout)
        self.config = config
        self.session_store = session_store if session_store is not None else SessionStore()

    @classmethod
    def from_config_manager(cls, manager: "ConfigManager") -> "StonkyAPIClient":
        """ConfigManagerの設定からクライアントを構築"""
        return cls(
            config=manager.build_client_config(),
            session_store=manager.build_session_store(),
        )

    # ------------------------------------------------------------------------
    # ディスパッチャーのフック
    # ------------------------------------------------------------------------

    async def _prepare_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.session_store.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _on_unauthorized(self) -> None:
        logger.warning("Received 401, clearing local session")
        self.session_store.clear()

    # ========================================================================
    # 認証
    # ========================================================================

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """ログインしてセッションを保存

        Returns:
            Dict[str, Any]: レスポンス全体

        Raises:
            ResponseValidationError: token / user の形式が不正
        """
        response = await self._make_request(
            "POST", "/auth/login", data={"email": email, "password": password}
        )

        auth = parse_auth_payload(response)
        if auth.has_session:
            self.session_store.save(token=auth.token, user=auth.user)

        return response

    async def register(self, email: str, password: str, confirm_password: str) -> Any:
        """新規ユーザー登録"""
        return await self._make_request(
            "POST",
            "/auth/register",
            data={"email": email, "password": password, "confirmPassword": confirm_password},
        )

    async def logout(self) -> None:
        """ログアウト

        サーバー呼び出しの成否に関わらずローカルセッションを破棄する。
        """
        try:
            await self._make_request("POST", "/auth/logout")
        finally:
            self.session_store.clear()

    async def get_current_user(self) -> Any:
        """ログイン中のユーザー情報を取得

        Raises:
            NotAuthenticatedError: トークンが無い（リクエストは送信しない）
        """
        if not self.session_store.is_authenticated():
            raise NotAuthenticatedError()

        return await self._make_request("GET", "/auth/me")

    # ========================================================================
    # ダッシュボード
    # ========================================================================

    async def get_dashboard_overview(self) -> Any:
        return await self._make_request("GET", "/dashboard/overview")

    async def get_monthly_trend(self, months: int = 6) -> Any:
        return await self._make_request("GET", f"/dashboard/monthly-trend?months={months}")

    # ========================================================================
    # 取引
    # ========================================================================

    async def get_transactions(self, page: int = 1, limit: int = 10, sort: str = "date:desc") -> Any:
        """取引一覧

        Args:
            page: ページ番号
            limit: 1ページあたりの件数
            sort: "field:direction" 形式のソート指定
        """
        return await self._make_request(
            "GET", f"/transactions?page={page}&limit={limit}&sort={sort}"
        )

    async def get_transaction(self, transaction_id: Any) -> Any:
        return await self._make_request("GET", f"/transactions/{transaction_id}")

    async def create_transaction(self, transaction_data: Dict[str, Any]) -> Any:
        return await self._make_request("POST", "/transactions", data=transaction_data)

    async def update_transaction(self, transaction_id: Any, transaction_data: Dict[str, Any]) -> Any:
        return await self._make_request(
            "PUT", f"/transactions/{transaction_id}", data=transaction_data
        )

    async def delete_transaction(self, transaction_id: Any) -> Any:
        return await self._make_request("DELETE", f"/transactions/{transaction_id}")

    # ========================================================================
    # 予算
    # ========================================================================

    async def get_budgets(self) -> Any:
        return await self._make_request("GET", "/budgets")

    async def get_budget(self, budget_id: Any) -> Any:
        return await self._make_request("GET", f"/budgets/{budget_id}")

    async def create_budget(self, budget_data: Dict[str, Any]) -> Any:
        return await self._make_request("POST", "/budgets", data=budget_data)

    async def update_budget(self, budget_id: Any, budget_data: Dict[str, Any]) -> Any:
        return await self._make_request("PUT", f"/budgets/{budget_id}", data=budget_data)

    async def delete_budget(self, budget_id: Any) -> Any:
        return await self._make_request("DELETE", f"/budgets/{budget_id}")

    # ========================================================================
    # 目標
    # ========================================================================

    async def get_goals(self) -> Any:
        return await self._make_request("GET", "/goals")

    async def get_goal(self, goal_id: Any) -> Any:
        return await self._make_request("GET", f"/goals/{goal_id}")

    async def create_goal(self, goal_data: Dict[str, Any]) -> Any:
        return await self._make_request("POST", "/goals", data=goal_data)

    async def update_goal(self, goal_id: Any, goal_data: Dict[str, Any]) -> Any:
        return await self._make_request("PUT", f"/goals/{goal_id}", data=goal_data)

    async def delete_goal(self, goal_id: Any) -> Any:
        return await self._make_request("DELETE", f"/goals/{goal_id}")

    # ========================================================================
    # ユーティリティ（同期、通信なし）
    # ========================================================================

    def get_base_url(self) -> str:
        """解決済みのベースURL（デバッグ用）"""
        return self.base_url

    def is_authenticated(self) -> bool:
        return self.session_store.is_authenticated()

    def get_stored_user(self) -> Optional[Any]:
        return self.session_store.user

    def clear_session(self) -> None:
        self.session_store.clear()
