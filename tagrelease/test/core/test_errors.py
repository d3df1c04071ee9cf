from __future__ import annotations

from tagrelease.core.errors import ErrorCode


def test_values_are_stable() -> None:
    assert int(ErrorCode.OK) == 0
    assert int(ErrorCode.USER_ERROR) == 1
    assert int(ErrorCode.ENV_ERROR) == 2
    assert int(ErrorCode.NETWORK_ERROR) == 4
    assert int(ErrorCode.IO_ERROR) == 5


def test_str_is_human_readable() -> None:
    assert str(ErrorCode.NETWORK_ERROR) == "network error"


def test_success_flags() -> None:
    assert ErrorCode.OK.is_success
    assert ErrorCode.IO_ERROR.is_error
