"""LoggerManagerの単体テスト

ログ管理機能の動作を検証。
"""

import json
import logging
import os
import sys
from datetime import datetime
from unittest.mock import patch

import pytest

from stonky.utils.logger_manager import JSONLogFormatter, LoggerManager

# ============================================================================
# LoggerManagerのテスト
# ============================================================================


@pytest.mark.unit
class TestLoggerManager:
    """LoggerManagerクラスのテスト"""

    @pytest.fixture(autouse=True)
    def reset_singleton(self):
        """各テストの前後でシングルトンとハンドラーをリセット"""
        LoggerManager.reset()
        yield
        LoggerManager.reset()

    def test_singleton_pattern(self, tmp_path):
        manager1 = LoggerManager(log_dir=tmp_path)
        manager2 = LoggerManager(log_dir=tmp_path)

        assert manager1 is manager2

    def test_singleton_initialization_once(self, tmp_path):
        """2回目以降の引数は無視される"""
        LoggerManager(log_dir=tmp_path, log_level="INFO")
        manager = LoggerManager(log_dir=tmp_path / "other", log_level="DEBUG", debug_mode=True)

        assert manager.log_dir == tmp_path
        assert manager.log_level == "INFO"
        assert manager.debug_mode is False

    def test_environment_variable_config(self, tmp_path):
        with patch.dict(
            os.environ,
            {
                "STONKY_ENV": "production",
                "STONKY_LOG_LEVEL": "ERROR",
                "STONKY_LOG_DIR": str(tmp_path),
            },
        ):
            manager = LoggerManager()

        assert manager.env == "production"
        assert manager.log_level == "ERROR"
        assert manager.log_dir == tmp_path

    @pytest.mark.parametrize(
        "env,expected",
        [("development", "DEBUG"), ("test", "INFO"), ("production", "WARNING")],
    )
    def test_default_log_level_by_environment(self, tmp_path, env, expected):
        with patch.dict(os.environ, {"STONKY_ENV": env}):
            manager = LoggerManager(log_dir=tmp_path)

        assert manager.log_level == expected

    def test_debug_mode_forces_debug(self, tmp_path):
        manager = LoggerManager(log_dir=tmp_path, log_level="ERROR", debug_mode=True)
        assert manager.log_level == "DEBUG"

    def test_log_directory_creation(self, tmp_path):
        log_dir = tmp_path / "nested" / "log" / "dir"

        LoggerManager(log_dir=log_dir)

        assert log_dir.is_dir()

    def test_get_logger_with_prefix(self):
        assert LoggerManager.get_logger("module.sub").name == "stonky.module.sub"
        assert LoggerManager.get_logger("stonky.core.session").name == "stonky.core.session"
        assert LoggerManager.get_logger("stonky").name == "stonky"

    def test_handlers_are_configured(self, tmp_path):
        LoggerManager(log_dir=tmp_path)

        handler_types = [type(h).__name__ for h in logging.getLogger("stonky").handlers]

        assert handler_types.count("StreamHandler") == 1
        assert handler_types.count("RotatingFileHandler") == 2

    def test_module_loggers_reach_files(self, tmp_path):
        """logging.getLogger(__name__) のログがファイルに出力される"""
        LoggerManager(log_dir=tmp_path)

        logger = logging.getLogger("stonky.core.api.client")
        logger.info("Session cleared", extra={"endpoint": "/auth/logout"})
        logger.error("Error in /auth/me: [E2003] Expired")

        for handler in logging.getLogger("stonky").handlers:
            handler.flush()

        lines = (tmp_path / "stonky.log").read_text(encoding="utf-8").splitlines()
        records = [json.loads(line) for line in lines]
        assert any(r["message"] == "Session cleared" and r["endpoint"] == "/auth/logout" for r in records)

        errors = (tmp_path / "errors.log").read_text(encoding="utf-8")
        assert "Session cleared" not in errors
        assert "E2003" in errors

    def test_reset_method(self, tmp_path):
        manager1 = LoggerManager(log_dir=tmp_path)
        LoggerManager.reset()

        assert LoggerManager._instance is None
        assert LoggerManager._initialized is False
        assert logging.getLogger("stonky").handlers == []

        manager2 = LoggerManager(log_dir=tmp_path / "second")
        assert manager1 is not manager2
        assert manager2.log_dir == tmp_path / "second"


# ============================================================================
# JSONLogFormatterのテスト
# ============================================================================


@pytest.mark.unit
class TestJSONLogFormatter:
    """JSONLogFormatterクラスのテスト"""

    @pytest.fixture
    def formatter(self):
        return JSONLogFormatter()

    @pytest.fixture
    def log_record(self):
        return logging.LogRecord(
            name="stonky.core.api.base",
            level=logging.INFO,
            pathname="/path/to/base.py",
            lineno=42,
            msg="GET %s",
            args=("https://x.test/api/budgets",),
            exc_info=None,
        )

    def test_basic_json_format(self, formatter, log_record):
        data = json.loads(formatter.format(log_record))

        assert data["level"] == "INFO"
        assert data["logger"] == "stonky.core.api.base"
        assert data["message"] == "GET https://x.test/api/budgets"
        assert data["line"] == 42
        assert {"timestamp", "module", "function"} <= set(data)

    def test_extra_fields_included(self, formatter, log_record):
        log_record.endpoint = "/budgets"
        log_record.status_code = 404

        data = json.loads(formatter.format(log_record))

        assert data["endpoint"] == "/budgets"
        assert data["status_code"] == 404

    def test_exception_formatting(self, formatter):
        try:
            raise ValueError("Test exception")
        except ValueError:
            record = logging.LogRecord(
                name="test",
                level=logging.ERROR,
                pathname="",
                lineno=0,
                msg="Error occurred",
                args=(),
                exc_info=sys.exc_info(),
            )

        data = json.loads(formatter.format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "Test exception"
        assert isinstance(data["exception"]["traceback"], list)

    def test_timestamp_is_utc_iso(self, formatter, log_record):
        data = json.loads(formatter.format(log_record))

        timestamp = datetime.fromisoformat(data["timestamp"])
        assert timestamp.utcoffset().total_seconds() == 0

    def test_unicode_handling(self, formatter):
        record = logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname="",
            lineno=0,
            msg="日本語メッセージ: %s",
            args=("テスト",),
            exc_info=None,
        )

        formatted = formatter.format(record)

        assert json.loads(formatted)["message"] == "日本語メッセージ: テスト"
        assert "\\u" not in formatted

    def test_unserializable_extra(self, formatter, log_record):
        """JSON化できない値は文字列に変換"""
        log_record.path = object()

        data = json.loads(formatter.format(log_record))
        assert data["path"].startswith("<object object")
