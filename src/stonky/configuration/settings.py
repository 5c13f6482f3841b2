"""
Stonky クライアント 環境設定と定数定義

接続先URL、APIプレフィックス、環境変数名、既定パスなど
クライアント全体で使用する定数を管理する。
"""

import os
from pathlib import Path
from typing import Optional

# ============================================================================
# バージョン情報
# ============================================================================

VERSION = "0.2.0"

# ============================================================================
# 接続先定義
# ============================================================================

# 本番環境（Azure Container Apps）
PRODUCTION_API_URL = "https://stonky-backend.blackdune-587dd75b.westus3.azurecontainerapps.io"

# ローカル開発環境
LOCAL_API_URL = "http://localhost:3000"

# すべてのエンドポイントに付与されるプレフィックス
API_PREFIX = "/api"

USER_AGENT = f"Stonky-Client/{VERSION}"

# ============================================================================
# パス定義
# ============================================================================

USER_HOME_DIR = Path.home() / ".stonky"
DEFAULT_CONFIG_PATH = USER_HOME_DIR / "config.yaml"
DEFAULT_SESSION_PATH = USER_HOME_DIR / "session.yaml"
DEFAULT_LOG_DIR = USER_HOME_DIR / "logs"

# ============================================================================
# 環境変数名
# ============================================================================

ENV_API_URL = "STONKY_API_URL"
ENV_MODE = "STONKY_ENV"
ENV_API_TIMEOUT = "STONKY_API_TIMEOUT"
ENV_SESSION_PATH = "STONKY_SESSION_PATH"
ENV_CONFIG_PATH = "STONKY_CONFIG_PATH"
ENV_LOG_LEVEL = "STONKY_LOG_LEVEL"
ENV_LOG_DIR = "STONKY_LOG_DIR"

PRODUCTION_MODE = "production"

# ============================================================================
# セッション
# ============================================================================

# セッションストレージのキー
TOKEN_KEY = "token"
USER_KEY = "user"

SESSION_STORAGE_TYPES = ["memory", "file"]

# ファイル権限（Unix系）
SENSITIVE_FILE_PERMISSIONS = 0o600  # トークンを含むファイル

# ============================================================================
# ログ設定
# ============================================================================

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# ============================================================================
# ヘルパー関数
# ============================================================================


def is_production_env() -> bool:
    """STONKY_ENV が本番モードを指しているか"""
    return os.getenv(ENV_MODE, "").strip().lower() == PRODUCTION_MODE


def mask_token(token: Optional[str]) -> str:
    """トークンをログ表示用にマスク

    Args:
        token: マスクするトークン

    Returns:
        str: マスクされたトークン（例: "eyJ...a1b2"）
    """
    if not token or len(token) < 8:
        return "***"

    return f"{token[:3]}...{token[-4:]}"
