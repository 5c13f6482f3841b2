"""クライアント設定と接続先URLの解決

ClientConfigは起動時に一度だけ構築され、クライアントに注入される。
接続先URLの解決順序:
    1. override_url（STONKY_API_URL）
    2. 本番フラグ（STONKY_ENV=production）→ 本番URL
    3. ローカル開発URL
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from stonky.configuration.settings import (
    ENV_API_TIMEOUT,
    ENV_API_URL,
    LOCAL_API_URL,
    PRODUCTION_API_URL,
    is_production_env,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientConfig:
    """APIクライアントの接続設定

    Attributes:
        override_url: 明示的に指定された接続先（最優先）
        is_production: 本番ビルドフラグ
        timeout: リクエスト全体のタイムアウト（秒）。Noneなら無制限
    """

    override_url: Optional[str] = None
    is_production: bool = False
    timeout: Optional[float] = None

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """環境変数から設定を構築"""
        timeout_value = os.getenv(ENV_API_TIMEOUT)
        timeout = None
        if timeout_value:
            try:
                timeout = float(timeout_value)
            except ValueError:
                logger.warning(f"Ignoring invalid {ENV_API_TIMEOUT}: {timeout_value!r}")

        return cls(
            override_url=os.getenv(ENV_API_URL) or None,
            is_production=is_production_env(),
            timeout=timeout,
        )

    @property
    def mode(self) -> str:
        """ログ表示用のモード名"""
        if self.override_url:
            return "override"
        return "production" if self.is_production else "development"


def resolve_base_url(config: ClientConfig) -> str:
    """接続先のベースURLを解決

    失敗することはなく、常に文字列を返す。
    overrideは前後の空白と末尾のスラッシュを除いて使う。
    そのため正規化済みのoverrideはそのまま返る。
    空白だけ、または文字列でないoverrideは未指定として扱う。

    Args:
        config: クライアント設定

    Returns:
        str: 末尾のスラッシュを除いたベースURL
    """
    override = config.override_url if isinstance(config.override_url, str) else None

    if override and override.strip():
        url = override.strip()
    elif config.is_production:
        url = PRODUCTION_API_URL
    else:
        url = LOCAL_API_URL

    return url.rstrip("/")


@lru_cache(maxsize=None)
def get_default_base_url() -> str:
    """環境変数から解決したベースURL（プロセス内で一度だけ評価）"""
    config = ClientConfig.from_env()
    url = resolve_base_url(config)
    logger.info(
        f"API configuration resolved: {url}",
        extra={"api_url": url, "mode": config.mode, "is_production": config.is_production},
    )
    return url
