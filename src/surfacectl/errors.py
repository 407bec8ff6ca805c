"""Deterministic error model and exit code contract."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    FAILURE = 1


@dataclass
class SurfaceCtlError(Exception):
    message: str
    code: ExitCode = ExitCode.FAILURE
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


class CommandError(SurfaceCtlError):
    """Classified failure raised while a command runs (transport, server, usage)."""


class CommandUnknownError(SurfaceCtlError):
    """The first CLI argument names no registered command or alias."""


class TargetUnresolvedError(SurfaceCtlError):
    """A ``-t`` target matched no terminal by id, title, or id prefix."""


def user_facing_error(message: str, *, hint: str = "") -> str:
    text = " ".join(message.split())
    if hint:
        return f"error: {text}; {' '.join(hint.split())}"
    return f"error: {text}"
