"""例外クラス階層のテスト

エラーコード、詳細情報、文字列表現を検証。
"""

import pytest

from stonky.core.exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    NotAuthenticatedError,
    ResponseValidationError,
    SessionStorageError,
    StonkyError,
)

# ============================================================================
# 基底例外のテスト
# ============================================================================


@pytest.mark.unit
class TestStonkyError:
    """StonkyError基底クラスのテスト"""

    def test_basic_attributes(self):
        cause = ValueError("boom")
        error = StonkyError("Something failed", error_code="E9999", details={"a": 1}, cause=cause)

        assert error.message == "Something failed"
        assert error.error_code == "E9999"
        assert error.details == {"a": 1}
        assert error.cause is cause

    def test_str_with_code(self):
        assert str(StonkyError("Oops", error_code="E0001")) == "[E0001] Oops"

    def test_str_without_code(self):
        assert str(StonkyError("Oops")) == "Oops"

    def test_to_dict(self):
        error = StonkyError("Oops", error_code="E0001", cause=RuntimeError("inner"))
        data = error.to_dict()

        assert data["error_type"] == "StonkyError"
        assert data["error_code"] == "E0001"
        assert data["message"] == "Oops"
        assert data["cause"] == "inner"
        assert "timestamp" in data


# ============================================================================
# サブクラスのテスト
# ============================================================================


@pytest.mark.unit
class TestErrorSubclasses:
    """各例外クラスのテスト"""

    @pytest.mark.parametrize(
        "error,code",
        [
            (ConfigurationError("x"), "E0001"),
            (APIError("x"), "E2000"),
            (AuthenticationError("x"), "E2003"),
            (NotAuthenticatedError(), "E2004"),
            (ResponseValidationError("x"), "E2100"),
            (SessionStorageError("x"), "E5100"),
            (NetworkError("x"), "E5200"),
        ],
    )
    def test_default_codes(self, error, code):
        assert error.error_code == code
        assert isinstance(error, StonkyError)

    def test_api_error_fields(self):
        payload = {"message": "Budget not found"}
        error = APIError("Budget not found", status_code=404, payload=payload, endpoint="/budgets/9")

        assert error.status_code == 404
        assert error.payload is payload
        assert error.details == {"status_code": 404, "endpoint": "/budgets/9"}

    def test_authentication_error_is_api_error(self):
        error = AuthenticationError("Expired", endpoint="/auth/me")

        assert isinstance(error, APIError)
        assert error.status_code == 401
        assert error.details["endpoint"] == "/auth/me"

    def test_not_authenticated_default_message(self):
        error = NotAuthenticatedError()

        assert error.message == "No authentication token available"
        assert not isinstance(error, APIError)

    def test_network_error_code_override(self):
        error = NetworkError("Request timed out", url="https://x.test/api", error_code="E5205")

        assert error.error_code == "E5205"
        assert error.details["url"] == "https://x.test/api"

    def test_configuration_error_file(self):
        error = ConfigurationError("bad", config_file="/tmp/config.yaml")
        assert error.details["config_file"] == "/tmp/config.yaml"

    def test_response_validation_field(self):
        error = ResponseValidationError("bad token", field="token")
        assert error.details["field"] == "token"
