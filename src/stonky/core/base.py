"""Stonky コンポーネント基底クラス

HTTPセッションなどのリソースを持つコンポーネントの
状態管理を提供する。

状態遷移:
    NOT_INITIALIZED → READY → TERMINATED
                       ↓ ↑
                      ERROR
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class ComponentState(Enum):
    """コンポーネントの状態"""

    NOT_INITIALIZED = "not_initialized"  # 作成直後
    READY = "ready"  # リソース確保済み
    ERROR = "error"
    TERMINATED = "terminated"  # リソース解放済み

    @classmethod
    def is_operational(cls, state: "ComponentState") -> bool:
        return state == cls.READY


class StonkyComponent:
    """リソースを持つコンポーネントの基底クラス

    Attributes:
        _state: 現在の状態
        _logger: コンポーネント専用のロガー
        _initialized_at: READYになった時刻
        _error: 直近のエラー
    """

    def __init__(self):
        self._state: ComponentState = ComponentState.NOT_INITIALIZED
        self._logger: logging.Logger = logging.getLogger(self.__class__.__module__)
        self._initialized_at: Optional[datetime] = None
        self._error: Optional[Exception] = None

    @property
    def state(self) -> ComponentState:
        return self._state

    def is_available(self) -> bool:
        """利用可能状態の確認

        Returns:
            bool: READY状態の場合True
        """
        return ComponentState.is_operational(self._state)

    def get_status(self) -> Dict[str, Any]:
        """コンポーネントの詳細ステータス取得

        Note:
            サブクラスはsuper().get_status()に情報を追加して返す
        """
        return {
            "component": self.__class__.__name__,
            "state": self._state.value,
            "is_available": self.is_available(),
            "initialized_at": self._initialized_at.isoformat() if self._initialized_at else None,
            "error": str(self._error) if self._error else None,
        }

    def _set_state(self, new_state: ComponentState) -> None:
        """状態を変更してログに記録"""
        old_state = self._state
        self._state = new_state

        if new_state == ComponentState.READY and not self._initialized_at:
            self._initialized_at = datetime.now()

        self._logger.debug(
            f"State transition: {old_state.value} -> {new_state.value}",
            extra={
                "component": self.__class__.__name__,
                "old_state": old_state.value,
                "new_state": new_state.value,
            },
        )

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self._state.value})"
