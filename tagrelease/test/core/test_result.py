"""Tests for core/result.py."""

from __future__ import annotations

import pytest

from tagrelease.core.result import Err, Ok, Result


def _tag(value: str) -> Result[str, str]:
    if not value:
        return Err("empty tag")
    return Ok(value)


class TestOk:
    def test_equality(self) -> None:
        assert Ok("v1.0.0") == Ok("v1.0.0")
        assert Ok(1) != Err(1)

    def test_frozen(self) -> None:
        ok = Ok(1)
        with pytest.raises(AttributeError):
            ok.value = 2  # type: ignore[misc]

    def test_repr(self) -> None:
        assert repr(Ok("v1")) == "Ok('v1')"


class TestErr:
    def test_equality(self) -> None:
        assert Err("boom") == Err("boom")
        assert Err("boom") != Err("bang")

    def test_repr(self) -> None:
        assert repr(Err("x")) == "Err('x')"


def test_pattern_matching() -> None:
    match _tag("v2.0.0"):
        case Ok(value):
            assert value == "v2.0.0"
        case Err(_):
            pytest.fail("expected Ok")

    match _tag(""):
        case Err(error):
            assert error == "empty tag"
        case Ok(_):
            pytest.fail("expected Err")
