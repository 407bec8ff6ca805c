"""Versioned request router for the surface control API."""

from __future__ import annotations

import logging as py_logging
from urllib.parse import unquote

from surfacectl.api.handlers import SurfaceHandlers
from surfacectl.api.messages import APIRequest, APIResponse
from surfacectl.api.routes import GET, MethodMismatch, RouteTable, build_v1_routes, build_v2_routes

logger = py_logging.getLogger(__name__)

INVALID_PREFIX_MESSAGE = "Invalid API path. Expected /api/v1/... or /api/v2/..."


def split_path(path: str) -> list[str]:
    """Split a raw request path on ``/`` ignoring outer separators.

    Interior empty segments are kept. Each segment is percent-decoded after the
    split, so an encoded ``%2F`` stays inside its segment. Query strings are the
    transport's concern and must already be removed.
    """
    stripped = path.strip("/")
    if not stripped:
        return []
    return [unquote(segment) for segment in stripped.split("/")]


class Router:
    """Maps a request onto one handler call, a 404, or a 405.

    Holds no per-request state; every call is a single synchronous pass over
    the route table of the selected generation.
    """

    def __init__(
        self,
        handlers: SurfaceHandlers,
        *,
        tables: dict[str, RouteTable] | None = None,
    ) -> None:
        self._handlers = handlers
        self._tables = tables or {"v1": build_v1_routes(), "v2": build_v2_routes()}

    @property
    def versions(self) -> tuple[str, ...]:
        return tuple(self._tables)

    def route(self, request: APIRequest) -> APIResponse:
        segments = split_path(request.path)
        if not segments:
            if request.method != GET:
                return APIResponse.method_not_allowed((GET,))
            return self._handlers.api_info()

        if len(segments) < 2 or segments[0] != "api" or segments[1] not in self._tables:
            logger.info("route-miss method=%s path=%s reason=prefix", request.method, request.path)
            return APIResponse.not_found(INVALID_PREFIX_MESSAGE)

        version = segments[1]
        rest = segments[2:]
        outcome = self._tables[version].lookup(request.method, rest)
        if outcome is None:
            logger.info("route-miss method=%s path=%s reason=shape", request.method, request.path)
            return APIResponse.not_found(f"Endpoint not found: {request.method} {request.path}")
        if isinstance(outcome, MethodMismatch):
            logger.info(
                "route-miss method=%s path=%s reason=method allow=%s",
                request.method,
                request.path,
                ",".join(outcome.allow),
            )
            return APIResponse.method_not_allowed(outcome.allow)

        route = outcome.route
        # generation one ignores query parameters entirely
        query = request.query if version != "v1" else {}
        kwargs = route.arguments(outcome.segments, query, request.body)
        logger.debug(
            "route method=%s path=%s version=%s handler=%s",
            request.method,
            request.path,
            version,
            route.handler,
        )
        handler = getattr(self._handlers, route.handler)
        return handler(**kwargs)
