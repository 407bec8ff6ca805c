"""Transport-agnostic request/response values for the control API."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any


@dataclass(frozen=True)
class APIRequest:
    """One inbound request. ``path`` is the raw, still percent-encoded path with
    no query string; ``query`` carries the already-parsed parameters."""

    method: str
    path: str
    query: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None


@dataclass(frozen=True)
class APIResponse:
    status: HTTPStatus
    body: Any = None
    allow: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return 200 <= int(self.status) < 300

    @classmethod
    def json(cls, body: Any, status: HTTPStatus = HTTPStatus.OK) -> APIResponse:
        return cls(status=status, body=body)

    @classmethod
    def error(cls, status: HTTPStatus, message: str) -> APIResponse:
        return cls(status=status, body={"error": message})

    @classmethod
    def not_found(cls, message: str) -> APIResponse:
        return cls.error(HTTPStatus.NOT_FOUND, message)

    @classmethod
    def method_not_allowed(cls, allow: tuple[str, ...]) -> APIResponse:
        if not allow:
            raise ValueError("method_not_allowed requires a non-empty allow-set")
        return cls(
            status=HTTPStatus.METHOD_NOT_ALLOWED,
            body={"error": "Method not allowed", "allow": list(allow)},
            allow=allow,
        )
