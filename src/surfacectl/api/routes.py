"""Declarative route tables for both API generations."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Union

from surfacectl.api.handlers import parse_query_bool

GET = "GET"
POST = "POST"
DELETE = "DELETE"


@dataclass(frozen=True)
class Literal:
    value: str

    def matches(self, segment: str) -> bool:
        return segment == self.value


@dataclass(frozen=True)
class Param:
    name: str

    def matches(self, segment: str) -> bool:
        return True


Segment = Union[Literal, Param]


@dataclass(frozen=True)
class QueryValue:
    """Pass ``query[key]`` (or ``None``) as keyword ``name``."""

    key: str
    name: str

    def read(self, query: Mapping[str, str]) -> object:
        return query.get(self.key)


@dataclass(frozen=True)
class QueryFlag:
    """Pass ``parse_query_bool(query[key])`` as keyword ``name``."""

    key: str
    name: str

    def read(self, query: Mapping[str, str]) -> object:
        return parse_query_bool(query.get(self.key))


QueryBinding = Union[QueryValue, QueryFlag]


@dataclass(frozen=True)
class Route:
    method: str
    segments: tuple[Segment, ...]
    handler: str
    body: bool = False
    query: tuple[QueryBinding, ...] = ()

    @property
    def shape(self) -> tuple[str | None, ...]:
        return tuple(item.value if isinstance(item, Literal) else None for item in self.segments)

    @property
    def specificity(self) -> tuple[bool, ...]:
        return tuple(isinstance(item, Literal) for item in self.segments)

    def matches(self, segments: list[str]) -> bool:
        if len(segments) != len(self.segments):
            return False
        return all(matcher.matches(value) for matcher, value in zip(self.segments, segments))

    def arguments(
        self,
        segments: list[str],
        query: Mapping[str, str],
        body: bytes | None,
    ) -> dict[str, object]:
        kwargs: dict[str, object] = {
            matcher.name: value
            for matcher, value in zip(self.segments, segments)
            if isinstance(matcher, Param)
        }
        for binding in self.query:
            kwargs[binding.name] = binding.read(query)
        if self.body:
            kwargs["body"] = body
        return kwargs


@dataclass(frozen=True)
class RouteMatch:
    route: Route
    segments: list[str]


@dataclass(frozen=True)
class MethodMismatch:
    allow: tuple[str, ...]


@dataclass
class RouteTable:
    """Routes of one API generation.

    ``lookup`` picks the most specific shape matching the path first and only
    then looks at the method, so a literal keyword at a position always beats
    a parameter there regardless of method.
    """

    version: str
    routes: tuple[Route, ...]
    _shapes: dict[tuple[str | None, ...], list[Route]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._shapes = {}
        seen: set[tuple[str, tuple[str | None, ...]]] = set()
        for route in self.routes:
            key = (route.method, route.shape)
            if key in seen:
                raise ValueError(
                    f"Duplicate route in {self.version}: {route.method} {_describe(route.segments)}"
                )
            seen.add(key)
            self._shapes.setdefault(route.shape, []).append(route)

    def lookup(self, method: str, segments: list[str]) -> RouteMatch | MethodMismatch | None:
        best: list[Route] | None = None
        best_rank: tuple[bool, ...] = ()
        for routes in self._shapes.values():
            candidate = routes[0]
            if not candidate.matches(segments):
                continue
            if best is None or candidate.specificity > best_rank:
                best = routes
                best_rank = candidate.specificity
        if best is None:
            return None
        for route in best:
            if route.method == method:
                return RouteMatch(route=route, segments=segments)
        allow = tuple(dict.fromkeys(route.method for route in best))
        return MethodMismatch(allow=allow)


def _describe(segments: Iterable[Segment]) -> str:
    parts = [item.value if isinstance(item, Literal) else "{" + item.name + "}" for item in segments]
    return "/" + "/".join(parts)


def _path(*parts: str) -> tuple[Segment, ...]:
    """``"{name}"`` parts become parameters, everything else is a literal."""
    segments: list[Segment] = []
    for part in parts:
        if part.startswith("{") and part.endswith("}"):
            segments.append(Param(part[1:-1]))
        else:
            segments.append(Literal(part))
    return tuple(segments)


def build_v1_routes() -> RouteTable:
    sid = "{surface_id}"
    return RouteTable(
        version="v1",
        routes=(
            Route(GET, _path(), "api_info"),
            Route(GET, _path("surfaces"), "list_surfaces"),
            Route(GET, _path("surfaces", "focused"), "get_focused_surface"),
            Route(GET, _path("surfaces", sid), "get_surface"),
            Route(GET, _path("surfaces", sid, "commands"), "list_commands"),
            Route(POST, _path("surfaces", sid, "actions"), "execute_action", body=True),
            Route(GET, _path("surfaces", sid, "screen"), "get_screen_contents"),
        ),
    )


def build_v2_routes() -> RouteTable:
    tid = "{terminal_id}"
    return RouteTable(
        version="v2",
        routes=(
            Route(GET, _path(), "api_info_v2"),
            Route(GET, _path("terminals"), "list_terminals"),
            Route(POST, _path("terminals"), "create_terminal", body=True),
            Route(POST, _path("quick-terminal"), "open_quick_terminal"),
            Route(
                GET,
                _path("commands"),
                "list_commands_v2",
                query=(QueryValue("terminal", "terminal_id"),),
            ),
            Route(GET, _path("terminals", "focused"), "get_focused_terminal"),
            Route(GET, _path("terminals", tid), "get_terminal"),
            Route(
                DELETE,
                _path("terminals", tid),
                "close_terminal",
                query=(QueryFlag("confirm", "confirm"),),
            ),
            Route(POST, _path("terminals", tid, "focus"), "focus_terminal"),
            Route(POST, _path("terminals", tid, "input"), "input_terminal", body=True),
            Route(POST, _path("terminals", tid, "action"), "action_terminal", body=True),
            Route(POST, _path("terminals", tid, "key"), "key_terminal", body=True),
            Route(GET, _path("terminals", tid, "screen"), "get_screen_contents_v2"),
            Route(GET, _path("terminals", tid, "details", "{detail}"), "get_terminal_details"),
            Route(POST, _path("terminals", tid, "mouse", "button"), "mouse_button", body=True),
            Route(POST, _path("terminals", tid, "mouse", "position"), "mouse_position", body=True),
            Route(POST, _path("terminals", tid, "mouse", "scroll"), "mouse_scroll", body=True),
        ),
    )
