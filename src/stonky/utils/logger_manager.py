"""
ログ管理モジュール

Stonkyクライアント全体で統一されたログ出力を提供する。
シングルトンパターンで実装され、環境変数による設定が可能。

各モジュールは logging.getLogger(__name__) でロガーを取得し、
LoggerManagerは "stonky" ルートロガーにハンドラーを設定する。
"""

import json
import logging
import logging.handlers
import os
import tempfile
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from stonky.configuration.settings import (
    DEFAULT_LOG_DIR,
    ENV_LOG_DIR,
    ENV_LOG_LEVEL,
    ENV_MODE,
)

ROOT_LOGGER_NAME = "stonky"


class LoggerManager:
    """
    統一されたログ管理クラス（シングルトン）

    環境変数:
        STONKY_ENV: 実行環境 (development/test/production)
        STONKY_LOG_LEVEL: コンソールのログレベル
        STONKY_LOG_DIR: ログ出力先ディレクトリ

    Attributes:
        log_dir: ログファイルの出力ディレクトリ
        log_level: コンソールのログレベル
        debug_mode: デバッグモードフラグ
        env: 実行環境
    """

    _instance: Optional["LoggerManager"] = None
    _initialized: bool = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        log_level: Optional[str] = None,
        debug_mode: bool = False,
    ):
        """
        LoggerManagerの初期化

        Args:
            log_dir: ログディレクトリ（None時は環境変数から取得）
            log_level: ログレベル（None時は環境変数から取得）
            debug_mode: デバッグモードフラグ
        """
        # 既に初期化済みなら何もしない
        if LoggerManager._initialized:
            return

        env = os.getenv(ENV_MODE, "development")

        if log_dir is None:
            log_dir = self._get_default_log_dir(env)
        self.log_dir = Path(log_dir)

        if log_level is None:
            log_level = self._get_default_log_level(env)

        self.log_level = "DEBUG" if debug_mode else log_level.upper()
        self.debug_mode = debug_mode
        self.env = env

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._setup_root_logger()

        LoggerManager._initialized = True

        self.get_logger("LoggerManager").info(
            "LoggerManager initialized",
            extra={"env": self.env, "log_dir": str(self.log_dir), "log_level": self.log_level},
        )

    def _get_default_log_dir(self, env: str) -> Path:
        """環境に応じたデフォルトログディレクトリ"""
        if env_dir := os.getenv(ENV_LOG_DIR):
            return Path(env_dir)

        if env == "production":
            return DEFAULT_LOG_DIR
        elif env == "test":
            return Path(tempfile.gettempdir()) / "stonky_test_logs"
        else:
            return Path("logs")

    def _get_default_log_level(self, env: str) -> str:
        """環境に応じたデフォルトログレベル"""
        if env_level := os.getenv(ENV_LOG_LEVEL):
            return env_level

        if env == "production":
            return "WARNING"
        elif env == "test":
            return "INFO"
        else:
            return "DEBUG"

    def _setup_root_logger(self):
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.setLevel(logging.DEBUG)  # ハンドラーで制御

        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

        root_logger.addHandler(self._create_console_handler())
        root_logger.addHandler(self._create_file_handler("stonky.log", logging.DEBUG))
        root_logger.addHandler(self._create_file_handler("errors.log", logging.ERROR))

    def _create_console_handler(self) -> logging.StreamHandler:
        handler = logging.StreamHandler()
        handler.setLevel(getattr(logging, self.log_level, logging.INFO))

        # 開発環境では詳細フォーマット、本番環境では簡潔フォーマット
        if self.env == "development" or self.debug_mode:
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        else:
            formatter = logging.Formatter("%(levelname)s - %(message)s")

        handler.setFormatter(formatter)
        return handler

    def _create_file_handler(
        self, filename: str, level: int
    ) -> logging.handlers.RotatingFileHandler:
        """JSON形式のローテーション付きファイルハンドラー（10MB x 5）"""
        handler = logging.handlers.RotatingFileHandler(
            self.log_dir / filename, maxBytes=10_485_760, backupCount=5, encoding="utf-8"
        )
        handler.setLevel(level)
        handler.setFormatter(JSONLogFormatter())
        return handler

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        指定された名前のロガーを取得

        Args:
            name: ロガー名（通常は__name__を使用）

        Returns:
            "stonky" 配下のLogger
        """
        if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
            return logging.getLogger(name)
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    @classmethod
    def reset(cls):
        """シングルトンをリセット（テスト用）"""
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()
        cls._instance = None
        cls._initialized = False


class JSONLogFormatter(logging.Formatter):
    """
    JSON形式でログを出力するフォーマッター

    extraで渡されたフィールドもそのまま出力する。
    """

    # LogRecordの標準属性（extraと区別するため）
    STANDARD_FIELDS = {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key not in self.STANDARD_FIELDS and not key.startswith("_"):
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)
