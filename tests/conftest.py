"""pytest共通設定ファイル"""

import logging
import os
import sys
from pathlib import Path

import pytest

# プロジェクトルートをPythonパスに追加
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from stonky.configuration.client_config import ClientConfig, get_default_base_url  # noqa: E402
from stonky.core.session import MemorySessionStorage, SessionStore  # noqa: E402

TEST_BASE_URL = "https://api.example.com"


# =============================================================================
# ログ設定
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """テスト実行時のログ設定"""
    logging.basicConfig(
        level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)


# =============================================================================
# 環境変数
# =============================================================================


@pytest.fixture(autouse=True)
def clean_environment():
    """STONKY_* 環境変数とURLキャッシュをテストごとにリセット

    実環境の設定がテストに影響しないようにする。
    """
    original_env = os.environ.copy()
    for key in list(os.environ):
        if key.startswith("STONKY_"):
            os.environ.pop(key)
    get_default_base_url.cache_clear()

    yield

    os.environ.clear()
    os.environ.update(original_env)
    get_default_base_url.cache_clear()


# =============================================================================
# クライアント用フィクスチャ
# =============================================================================


@pytest.fixture
def test_config() -> ClientConfig:
    """テスト用の接続設定"""
    return ClientConfig(override_url=TEST_BASE_URL)


@pytest.fixture
def session_store() -> SessionStore:
    """空のメモリセッション"""
    return SessionStore(MemorySessionStorage())


@pytest.fixture
def authenticated_store() -> SessionStore:
    """ログイン済みのメモリセッション"""
    return SessionStore(MemorySessionStorage({"token": "T1", "user": '{"id": 7}'}))
