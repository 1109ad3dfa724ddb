"""Tests for wr.core.errors module."""

from wr.core.errors import ErrorCode


class TestErrorCode:
    def test_values_are_stable(self) -> None:
        assert ErrorCode.OK == 0
        assert ErrorCode.ENV_ERROR == 2
        assert ErrorCode.DEPLOY_ERROR == 3
        assert ErrorCode.NETWORK_ERROR == 4
        assert ErrorCode.CANCELLED == 6

    def test_str(self) -> None:
        assert str(ErrorCode.ENV_ERROR) == "env error"
        assert str(ErrorCode.CANCELLED) == "cancelled"

    def test_is_success(self) -> None:
        assert ErrorCode.OK.is_success is True
        assert ErrorCode.DEPLOY_ERROR.is_success is False

    def test_usable_as_exit_code(self) -> None:
        assert int(ErrorCode.NETWORK_ERROR) == 4

    def test_only_produced_codes_exist(self) -> None:
        assert sorted(int(code) for code in ErrorCode) == [0, 2, 3, 4, 6]
