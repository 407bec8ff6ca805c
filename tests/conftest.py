from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from surfacectl.api.messages import APIResponse
from surfacectl.models import KeyStroke, Terminal


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    del config
    for item in items:
        path = Path(str(getattr(item, "path", item.fspath)))
        if "integration" in path.parts:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)


class RecordingHandlers:
    """Handler facade double: every call is recorded and echoed back."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        def handler(**kwargs: Any) -> APIResponse:
            self.calls.append((name, kwargs))
            return APIResponse.json({"handler": name})

        return handler


class FakeClient:
    def __init__(
        self,
        terminals: list[Terminal] | None = None,
        *,
        screen: str = "",
    ) -> None:
        self.terminals = list(terminals or [])
        self.screen = screen
        self.calls: list[tuple[Any, ...]] = []

    def list_terminals(self) -> list[Terminal]:
        self.calls.append(("list_terminals",))
        return list(self.terminals)

    def send_text(self, terminal_id: str, text: str) -> None:
        self.calls.append(("send_text", terminal_id, text))

    def send_key(self, terminal_id: str, stroke: KeyStroke) -> None:
        self.calls.append(("send_key", terminal_id, stroke))

    def perform_action(self, terminal_id: str, action: str) -> None:
        self.calls.append(("perform_action", terminal_id, action))

    def read_screen(self, terminal_id: str) -> str:
        self.calls.append(("read_screen", terminal_id))
        return self.screen


@pytest.fixture
def handlers() -> RecordingHandlers:
    return RecordingHandlers()


@pytest.fixture
def make_client() -> type[FakeClient]:
    return FakeClient


@pytest.fixture
def sample_terminals() -> list[Terminal]:
    return [
        Terminal(id="abc-1", title="build", focused=True, columns=80, rows=24),
        Terminal(id="abc-2", title="Build Server", working_directory="/srv"),
    ]
