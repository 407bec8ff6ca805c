"""Error model tests."""

from __future__ import annotations

from surfacectl.errors import (
    CommandError,
    CommandUnknownError,
    ExitCode,
    SurfaceCtlError,
    TargetUnresolvedError,
    user_facing_error,
)


def test_user_facing_error_without_hint() -> None:
    assert user_facing_error("something went wrong") == "error: something went wrong"


def test_user_facing_error_with_hint() -> None:
    assert user_facing_error("unknown command 'x'", hint="run help") == "error: unknown command 'x'; run help"


def test_user_facing_error_is_always_one_line() -> None:
    text = user_facing_error("line one\nline two", hint="a\nb")
    assert "\n" not in text


def test_exit_code_values() -> None:
    assert int(ExitCode.SUCCESS) == 0
    assert int(ExitCode.FAILURE) == 1


def test_error_classes_share_base_and_failure_code() -> None:
    for cls in (CommandError, CommandUnknownError, TargetUnresolvedError):
        error = cls("msg")
        assert isinstance(error, SurfaceCtlError)
        assert error.code == ExitCode.FAILURE


def test_error_str_with_and_without_hint() -> None:
    assert str(SurfaceCtlError("msg")) == "msg"
    assert "hint" in str(SurfaceCtlError("msg", hint="hint"))
