"""StonkyComponent基底クラスのテスト

ComponentStateの状態遷移とステータス取得を検証。
"""

import pytest

from stonky.core.base import ComponentState, StonkyComponent


class ConcreteComponent(StonkyComponent):
    """テスト用の具象コンポーネント"""


@pytest.mark.unit
class TestComponentState:
    """ComponentState Enumのテスト"""

    def test_state_values(self):
        assert ComponentState.NOT_INITIALIZED.value == "not_initialized"
        assert ComponentState.READY.value == "ready"
        assert ComponentState.ERROR.value == "error"
        assert ComponentState.TERMINATED.value == "terminated"

    @pytest.mark.parametrize(
        "state,expected",
        [
            (ComponentState.NOT_INITIALIZED, False),
            (ComponentState.READY, True),
            (ComponentState.ERROR, False),
            (ComponentState.TERMINATED, False),
        ],
    )
    def test_is_operational(self, state, expected):
        assert ComponentState.is_operational(state) is expected


@pytest.mark.unit
class TestStonkyComponent:
    """StonkyComponentのテスト"""

    def test_initial_state(self):
        component = ConcreteComponent()

        assert component.state == ComponentState.NOT_INITIALIZED
        assert not component.is_available()
        assert str(component) == "ConcreteComponent(not_initialized)"

    def test_ready_records_time(self):
        component = ConcreteComponent()
        component._set_state(ComponentState.READY)

        status = component.get_status()
        assert status["state"] == "ready"
        assert status["is_available"] is True
        assert status["initialized_at"] is not None

    def test_initialized_at_kept(self):
        """再度READYになっても初回時刻を保持"""
        component = ConcreteComponent()
        component._set_state(ComponentState.READY)
        first = component._initialized_at

        component._set_state(ComponentState.ERROR)
        component._set_state(ComponentState.READY)

        assert component._initialized_at == first

    def test_status_error(self):
        component = ConcreteComponent()
        component._error = RuntimeError("broken")
        component._set_state(ComponentState.ERROR)

        status = component.get_status()
        assert status["component"] == "ConcreteComponent"
        assert status["error"] == "broken"
