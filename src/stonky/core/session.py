"""ローカルセッション管理

認証トークンとユーザー情報をキーバリューストレージに保持する。
値はすべて文字列として保存される（userはJSON文字列）。

ライフサイクル:
    - ログイン成功時に作成
    - ログアウト時、または401レスポンス受信時に破棄
    - それ以外は読み取り専用

ストレージ:
    - MemorySessionStorage: プロセスメモリ（デフォルト）
    - FileSessionStorage: YAMLファイル（パーミッション0o600）
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from stonky.configuration.settings import (
    SENSITIVE_FILE_PERMISSIONS,
    TOKEN_KEY,
    USER_KEY,
    mask_token,
)
from stonky.core.exceptions import SessionStorageError

logger = logging.getLogger(__name__)


class SessionStorage(ABC):
    """文字列キーバリューストレージのインターフェース"""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """値を取得（存在しない場合None）"""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """値を保存"""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """値を削除（存在しなくてもエラーにしない）"""


class MemorySessionStorage(SessionStorage):
    """プロセスメモリ上のストレージ"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __len__(self) -> int:
        return len(self._items)


class FileSessionStorage(SessionStorage):
    """YAMLファイルに永続化するストレージ

    書き込みのたびにファイル全体を保存する。
    トークンを含むためパーミッションは所有者のみ読み書き可。

    Attributes:
        path: セッションファイルのパス
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        self._items: Dict[str, str] = self._load()
        logger.debug(f"FileSessionStorage opened: {self.path} ({len(self._items)} entries)")

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise SessionStorageError(
                f"Failed to parse session file: {e}", path=str(self.path), cause=e
            ) from e
        except OSError as e:
            raise SessionStorageError(
                f"Failed to read session file: {e}", path=str(self.path), cause=e
            ) from e

        if not isinstance(data, dict):
            logger.warning(f"Session file has unexpected format, ignoring: {self.path}")
            return {}

        # 文字列以外の値は無視
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # 新規作成時から所有者のみ。既存ファイルは書き込み前に権限を絞る
            fd = os.open(
                self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SENSITIVE_FILE_PERMISSIONS
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                os.chmod(self.path, SENSITIVE_FILE_PERMISSIONS)
                yaml.safe_dump(self._items, f, default_flow_style=False, allow_unicode=True)
        except OSError as e:
            raise SessionStorageError(
                f"Failed to write session file: {e}", path=str(self.path), cause=e
            ) from e

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._save()

    def remove_item(self, key: str) -> None:
        if key in self._items:
            del self._items[key]
            self._save()


class SessionStore:
    """クライアントが所有するセッションコンテキスト

    token と user の2エントリだけを読み書きする。

    Attributes:
        storage: 実際の保存先
    """

    def __init__(self, storage: Optional[SessionStorage] = None):
        self.storage = storage if storage is not None else MemorySessionStorage()

    @property
    def token(self) -> Optional[str]:
        """キャッシュ済みのトークン（空文字列はNone扱い）"""
        return self.storage.get_item(TOKEN_KEY) or None

    @property
    def user(self) -> Optional[Any]:
        """キャッシュ済みのユーザー情報

        Returns:
            パース済みのユーザー情報。未保存または壊れている場合None
        """
        raw = self.storage.get_item(USER_KEY)
        if not raw:
            return None

        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored user entry is not valid JSON, treating as absent")
            return None

    def is_authenticated(self) -> bool:
        return self.token is not None

    def save(self, token: Optional[str] = None, user: Optional[Any] = None) -> None:
        """ログイン結果を保存

        指定された値のみ上書きする。

        Args:
            token: Bearerトークン
            user: ユーザー情報（JSONシリアライズ可能な値）
        """
        if token:
            self.storage.set_item(TOKEN_KEY, token)
        if user is not None:
            self.storage.set_item(USER_KEY, json.dumps(user, ensure_ascii=False))

        logger.info(
            "Session saved",
            extra={"token": mask_token(token) if token else None, "has_user": user is not None},
        )

    def clear(self) -> None:
        """トークンとユーザー情報を破棄"""
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        logger.info("Session cleared")

    def __repr__(self) -> str:
        return (
            f"<SessionStore storage={self.storage.__class__.__name__} "
            f"authenticated={self.is_authenticated()}>"
        )
