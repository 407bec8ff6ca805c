"""Contract of the handler facade the router dispatches to."""

from __future__ import annotations

from typing import Protocol

from surfacectl.api.messages import APIResponse

_TRUE_VALUES = {"true", "1", "yes", "on"}


def parse_query_bool(value: str | None) -> bool:
    """Permissive boolean for query flags; absence and unknown values are false."""
    if value is None:
        return False
    return value.strip().lower() in _TRUE_VALUES


class SurfaceHandlers(Protocol):
    """Operations backing each route.

    Implementations own the terminal set and its confinement; the router only
    chooses which method to call and with which arguments.
    """

    # shared
    def api_info(self) -> APIResponse: ...

    # generation one
    def list_surfaces(self) -> APIResponse: ...

    def get_focused_surface(self) -> APIResponse: ...

    def get_surface(self, surface_id: str) -> APIResponse: ...

    def list_commands(self, surface_id: str) -> APIResponse: ...

    def execute_action(self, surface_id: str, body: bytes | None) -> APIResponse: ...

    def get_screen_contents(self, surface_id: str) -> APIResponse: ...

    # generation two
    def api_info_v2(self) -> APIResponse: ...

    def list_terminals(self) -> APIResponse: ...

    def create_terminal(self, body: bytes | None) -> APIResponse: ...

    def open_quick_terminal(self) -> APIResponse: ...

    def list_commands_v2(self, terminal_id: str | None) -> APIResponse: ...

    def get_focused_terminal(self) -> APIResponse: ...

    def get_terminal(self, terminal_id: str) -> APIResponse: ...

    def close_terminal(self, terminal_id: str, confirm: bool) -> APIResponse: ...

    def focus_terminal(self, terminal_id: str) -> APIResponse: ...

    def input_terminal(self, terminal_id: str, body: bytes | None) -> APIResponse: ...

    def action_terminal(self, terminal_id: str, body: bytes | None) -> APIResponse: ...

    def key_terminal(self, terminal_id: str, body: bytes | None) -> APIResponse: ...

    def get_screen_contents_v2(self, terminal_id: str) -> APIResponse: ...

    def get_terminal_details(self, terminal_id: str, detail: str) -> APIResponse: ...

    def mouse_button(self, terminal_id: str, body: bytes | None) -> APIResponse: ...

    def mouse_position(self, terminal_id: str, body: bytes | None) -> APIResponse: ...

    def mouse_scroll(self, terminal_id: str, body: bytes | None) -> APIResponse: ...
