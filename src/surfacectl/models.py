"""Control-plane views of terminal surfaces and key events."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from typing_extensions import TypedDict


class TerminalPayload(TypedDict):
    id: str
    title: str
    working_directory: str | None
    focused: bool
    columns: int | None
    rows: int | None
    cell_width: int | None
    cell_height: int | None


@dataclass(frozen=True)
class Terminal:
    id: str
    title: str
    working_directory: str | None = None
    focused: bool = False
    columns: int | None = None
    rows: int | None = None
    cell_width: int | None = None
    cell_height: int | None = None

    def to_dict(self) -> TerminalPayload:
        return {
            "id": self.id,
            "title": self.title,
            "working_directory": self.working_directory,
            "focused": self.focused,
            "columns": self.columns,
            "rows": self.rows,
            "cell_width": self.cell_width,
            "cell_height": self.cell_height,
        }


@dataclass(frozen=True)
class KeyStroke:
    """Layout-independent key event.

    ``unshifted_codepoint`` is the codepoint the physical key produces without
    shift or layout translation. When ``text`` is set the other fields are
    advisory and receivers send the text as-is.
    """

    key: str
    mods: frozenset[str] = field(default_factory=frozenset)
    text: str | None = None
    unshifted_codepoint: int = 0

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "key": self.key,
            "mods": sorted(self.mods),
            "unshifted_codepoint": self.unshifted_codepoint,
        }
        if self.text is not None:
            payload["text"] = self.text
        return payload


def _optional_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    return value


def parse_terminal(raw: Any) -> Terminal | None:
    if not isinstance(raw, dict):
        return None
    terminal_id = raw.get("id", raw.get("uuid"))
    if not isinstance(terminal_id, str) or not terminal_id:
        return None
    title = raw.get("title", "")
    return Terminal(
        id=terminal_id,
        title=title if isinstance(title, str) else str(title),
        working_directory=_optional_str(raw.get("working_directory", raw.get("pwd"))),
        focused=raw.get("focused") is True,
        columns=_optional_int(raw.get("columns")),
        rows=_optional_int(raw.get("rows")),
        cell_width=_optional_int(raw.get("cell_width")),
        cell_height=_optional_int(raw.get("cell_height")),
    )


def parse_terminals(raw: Iterable[Any]) -> list[Terminal]:
    terminals: list[Terminal] = []
    for item in raw:
        terminal = parse_terminal(item)
        if terminal is not None:
            terminals.append(terminal)
    return terminals


def parse_keystroke(raw: Any) -> KeyStroke | None:
    if not isinstance(raw, dict):
        return None
    key = raw.get("key")
    if not isinstance(key, str) or not key:
        return None
    mods_raw = raw.get("mods", [])
    if not isinstance(mods_raw, list) or not all(isinstance(item, str) for item in mods_raw):
        return None
    text = raw.get("text")
    codepoint = _optional_int(raw.get("unshifted_codepoint"))
    return KeyStroke(
        key=key,
        mods=frozenset(mods_raw),
        text=text if isinstance(text, str) else None,
        unshifted_codepoint=codepoint if codepoint is not None and codepoint >= 0 else 0,
    )
