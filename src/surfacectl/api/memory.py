"""In-memory handler facade used for development servers and tests."""

from __future__ import annotations

import json
import logging as py_logging
import threading
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from http import HTTPStatus
from typing import Any

from surfacectl.api.messages import APIResponse
from surfacectl.models import KeyStroke, Terminal, parse_keystroke

logger = py_logging.getLogger(__name__)

TITLE_ACTION = "set_surface_title"
ACTIONS: tuple[tuple[str, str], ...] = (
    (TITLE_ACTION, "Set the terminal title (set_surface_title:<title>)"),
    ("clear_screen", "Clear the screen contents"),
    ("reset", "Reset the terminal"),
)
DETAILS = ("title", "working_directory", "size")
QUICK_TERMINAL_TITLE = "quick terminal"


@dataclass
class HostedTerminal:
    terminal: Terminal
    screen: list[str] = field(default_factory=list)
    inputs: list[object] = field(default_factory=list)
    history: list[str] = field(default_factory=list)
    running_process: bool = False


class _BadRequest(Exception):
    pass


def _json_body(body: bytes | None) -> dict[str, Any]:
    if not body:
        return {}
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise _BadRequest(f"Invalid JSON body: {exc}") from exc
    if not isinstance(payload, dict):
        raise _BadRequest("JSON body must be an object")
    return payload


class InMemorySurfaceHost:
    """Owns an ordered terminal set behind a single lock."""

    def __init__(
        self,
        terminals: Iterable[Terminal] = (),
        *,
        screens: Mapping[str, str] | None = None,
        busy: Iterable[str] = (),
    ) -> None:
        self._lock = threading.Lock()
        self._terminals: dict[str, HostedTerminal] = {}
        self._focused: str | None = None
        busy_ids = set(busy)
        for terminal in terminals:
            if terminal.focused and self._focused is None:
                self._focused = terminal.id
            contents = (screens or {}).get(terminal.id, "")
            self._terminals[terminal.id] = HostedTerminal(
                terminal=replace(terminal, focused=False),
                screen=contents.splitlines(),
                running_process=terminal.id in busy_ids,
            )

    # inspection helpers

    def hosted(self, terminal_id: str) -> HostedTerminal | None:
        with self._lock:
            return self._terminals.get(terminal_id)

    def snapshot(self) -> list[Terminal]:
        with self._lock:
            return [self._view(item) for item in self._terminals.values()]

    def _view(self, item: HostedTerminal) -> Terminal:
        return replace(item.terminal, focused=item.terminal.id == self._focused)

    def _find(self, terminal_id: str) -> HostedTerminal | None:
        return self._terminals.get(terminal_id)

    def _missing(self, terminal_id: str) -> APIResponse:
        return APIResponse.not_found(f"Terminal not found: {terminal_id}")

    def _create(self, title: str, working_directory: str | None) -> HostedTerminal:
        terminal = Terminal(id=str(uuid.uuid4()), title=title, working_directory=working_directory)
        hosted = HostedTerminal(terminal=terminal)
        self._terminals[terminal.id] = hosted
        logger.info("host-event terminal=%s step=create title=%s", terminal.id, title)
        return hosted

    def _apply_action(self, item: HostedTerminal, body: bytes | None) -> APIResponse:
        try:
            payload = _json_body(body)
        except _BadRequest as exc:
            return APIResponse.error(HTTPStatus.BAD_REQUEST, str(exc))
        action = payload.get("action")
        if not isinstance(action, str) or not action:
            return APIResponse.error(HTTPStatus.BAD_REQUEST, "Missing action")
        name, _, param = action.partition(":")
        if name == TITLE_ACTION:
            item.terminal = replace(item.terminal, title=param)
        elif name == "clear_screen":
            item.screen.clear()
        elif name == "reset":
            item.screen.clear()
            item.inputs.clear()
        else:
            return APIResponse.error(HTTPStatus.BAD_REQUEST, f"Unknown action: {name}")
        item.history.append(action)
        logger.info("host-event terminal=%s step=action action=%s", item.terminal.id, name)
        return APIResponse.json({"ok": True, "action": action})

    def _record_body(self, terminal_id: str, body: bytes | None, kind: str) -> APIResponse:
        with self._lock:
            item = self._find(terminal_id)
            if item is None:
                return self._missing(terminal_id)
            try:
                payload = _json_body(body)
            except _BadRequest as exc:
                return APIResponse.error(HTTPStatus.BAD_REQUEST, str(exc))
            item.inputs.append({kind: payload})
            return APIResponse.json({"ok": True})

    # shared

    def api_info(self) -> APIResponse:
        return APIResponse.json({"name": "surfacectl", "versions": ["v1", "v2"]})

    # generation one

    def list_surfaces(self) -> APIResponse:
        return APIResponse.json({"surfaces": [item.to_dict() for item in self.snapshot()]})

    def get_focused_surface(self) -> APIResponse:
        with self._lock:
            item = self._find(self._focused) if self._focused else None
            if item is None:
                return APIResponse.not_found("No focused surface")
            return APIResponse.json({"surface": self._view(item).to_dict()})

    def get_surface(self, surface_id: str) -> APIResponse:
        with self._lock:
            item = self._find(surface_id)
            if item is None:
                return self._missing(surface_id)
            return APIResponse.json({"surface": self._view(item).to_dict()})

    def list_commands(self, surface_id: str) -> APIResponse:
        with self._lock:
            item = self._find(surface_id)
            if item is None:
                return self._missing(surface_id)
            return APIResponse.json({"commands": list(item.history)})

    def execute_action(self, surface_id: str, body: bytes | None) -> APIResponse:
        with self._lock:
            item = self._find(surface_id)
            if item is None:
                return self._missing(surface_id)
            return self._apply_action(item, body)

    def get_screen_contents(self, surface_id: str) -> APIResponse:
        with self._lock:
            item = self._find(surface_id)
            if item is None:
                return self._missing(surface_id)
            return APIResponse.json({"contents": "\n".join(item.screen)})

    # generation two

    def api_info_v2(self) -> APIResponse:
        return APIResponse.json(
            {
                "name": "surfacectl",
                "version": "v2",
                "resources": ["terminals", "quick-terminal", "commands"],
            }
        )

    def list_terminals(self) -> APIResponse:
        return APIResponse.json({"terminals": [item.to_dict() for item in self.snapshot()]})

    def create_terminal(self, body: bytes | None) -> APIResponse:
        try:
            payload = _json_body(body)
        except _BadRequest as exc:
            return APIResponse.error(HTTPStatus.BAD_REQUEST, str(exc))
        title = payload.get("title", "")
        working_directory = payload.get("working_directory")
        with self._lock:
            hosted = self._create(
                title if isinstance(title, str) else "",
                working_directory if isinstance(working_directory, str) else None,
            )
            return APIResponse.json({"terminal": self._view(hosted).to_dict()}, HTTPStatus.CREATED)

    def open_quick_terminal(self) -> APIResponse:
        with self._lock:
            hosted = self._create(QUICK_TERMINAL_TITLE, None)
            self._focused = hosted.terminal.id
            return APIResponse.json({"terminal": self._view(hosted).to_dict()}, HTTPStatus.CREATED)

    def list_commands_v2(self, terminal_id: str | None) -> APIResponse:
        with self._lock:
            if terminal_id is not None and self._find(terminal_id) is None:
                return self._missing(terminal_id)
            commands = [{"action": name, "description": text} for name, text in ACTIONS]
            return APIResponse.json({"commands": commands, "terminal": terminal_id})

    def get_focused_terminal(self) -> APIResponse:
        with self._lock:
            item = self._find(self._focused) if self._focused else None
            if item is None:
                return APIResponse.not_found("No focused terminal")
            return APIResponse.json({"terminal": self._view(item).to_dict()})

    def get_terminal(self, terminal_id: str) -> APIResponse:
        with self._lock:
            item = self._find(terminal_id)
            if item is None:
                return self._missing(terminal_id)
            return APIResponse.json({"terminal": self._view(item).to_dict()})

    def close_terminal(self, terminal_id: str, confirm: bool) -> APIResponse:
        with self._lock:
            item = self._find(terminal_id)
            if item is None:
                return self._missing(terminal_id)
            if item.running_process and not confirm:
                return APIResponse.error(
                    HTTPStatus.CONFLICT,
                    "Terminal has a running process; retry with confirm=true",
                )
            del self._terminals[terminal_id]
            if self._focused == terminal_id:
                self._focused = None
            logger.info("host-event terminal=%s step=close confirm=%s", terminal_id, confirm)
            return APIResponse.json({"closed": terminal_id})

    def focus_terminal(self, terminal_id: str) -> APIResponse:
        with self._lock:
            item = self._find(terminal_id)
            if item is None:
                return self._missing(terminal_id)
            self._focused = terminal_id
            return APIResponse.json({"terminal": self._view(item).to_dict()})

    def input_terminal(self, terminal_id: str, body: bytes | None) -> APIResponse:
        with self._lock:
            item = self._find(terminal_id)
            if item is None:
                return self._missing(terminal_id)
            try:
                payload = _json_body(body)
            except _BadRequest as exc:
                return APIResponse.error(HTTPStatus.BAD_REQUEST, str(exc))
            text = payload.get("text")
            if not isinstance(text, str):
                return APIResponse.error(HTTPStatus.BAD_REQUEST, "Missing text")
            item.inputs.append(text)
            return APIResponse.json({"ok": True})

    def action_terminal(self, terminal_id: str, body: bytes | None) -> APIResponse:
        with self._lock:
            item = self._find(terminal_id)
            if item is None:
                return self._missing(terminal_id)
            return self._apply_action(item, body)

    def key_terminal(self, terminal_id: str, body: bytes | None) -> APIResponse:
        with self._lock:
            item = self._find(terminal_id)
            if item is None:
                return self._missing(terminal_id)
            try:
                stroke: KeyStroke | None = parse_keystroke(_json_body(body))
            except _BadRequest as exc:
                return APIResponse.error(HTTPStatus.BAD_REQUEST, str(exc))
            if stroke is None:
                return APIResponse.error(HTTPStatus.BAD_REQUEST, "Invalid key stroke")
            item.inputs.append(stroke)
            return APIResponse.json({"ok": True})

    def get_screen_contents_v2(self, terminal_id: str) -> APIResponse:
        return self.get_screen_contents(terminal_id)

    def get_terminal_details(self, terminal_id: str, detail: str) -> APIResponse:
        with self._lock:
            item = self._find(terminal_id)
            if item is None:
                return self._missing(terminal_id)
            terminal = item.terminal
            value: object
            if detail == "title":
                value = terminal.title
            elif detail == "working_directory":
                value = terminal.working_directory
            elif detail == "size":
                value = {
                    "columns": terminal.columns,
                    "rows": terminal.rows,
                    "cell_width": terminal.cell_width,
                    "cell_height": terminal.cell_height,
                }
            else:
                return APIResponse.not_found(
                    f"Unknown detail: {detail}. Expected one of: {', '.join(DETAILS)}"
                )
            return APIResponse.json({"detail": detail, "value": value})

    def mouse_button(self, terminal_id: str, body: bytes | None) -> APIResponse:
        return self._record_body(terminal_id, body, "mouse_button")

    def mouse_position(self, terminal_id: str, body: bytes | None) -> APIResponse:
        return self._record_body(terminal_id, body, "mouse_position")

    def mouse_scroll(self, terminal_id: str, body: bytes | None) -> APIResponse:
        return self._record_body(terminal_id, body, "mouse_scroll")
