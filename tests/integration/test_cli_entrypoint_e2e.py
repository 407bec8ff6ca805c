from __future__ import annotations

import io
import os
import subprocess
import sys
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import pytest

from surfacectl import cli
from surfacectl.api import Router
from surfacectl.api.memory import InMemorySurfaceHost
from surfacectl.api.server import UnixAPIServer
from surfacectl.client import SurfaceClient
from surfacectl.errors import CommandError
from surfacectl.keys import ENTER
from surfacectl.models import Terminal


@pytest.fixture
def short_dir() -> Iterator[Path]:
    # AF_UNIX paths are limited to ~100 bytes; pytest tmp paths can exceed that.
    with tempfile.TemporaryDirectory(prefix="sctl-") as raw:
        yield Path(raw)


@contextmanager
def _serving(host: InMemorySurfaceHost, socket_path: Path) -> Iterator[Path]:
    server = UnixAPIServer(socket_path, Router(host))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield socket_path
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=2)


@pytest.fixture
def live_host(short_dir: Path) -> Iterator[tuple[InMemorySurfaceHost, Path]]:
    host = InMemorySurfaceHost(
        [
            Terminal(id="550e8400-aaaa", title="workspace", focused=True, columns=100, rows=30),
            Terminal(id="6ba7b810-bbbb", title="Build Server", working_directory="/srv"),
        ],
        screens={"550e8400-aaaa": "line0\nline1\nline2"},
    )
    with _serving(host, short_dir / "api.sock") as socket_path:
        yield host, socket_path


def _run(argv: list[str], socket_path: Path, home: Path) -> tuple[int, str, str]:
    stdout = io.StringIO()
    stderr = io.StringIO()
    code = cli.main(
        argv,
        environ={"SURFACECTL_SOCKET": str(socket_path)},
        home=home,
        stdout=stdout,
        stderr=stderr,
    )
    return code, stdout.getvalue(), stderr.getvalue()


def test_list_surfaces_over_socket(live_host, tmp_path: Path) -> None:
    _, socket_path = live_host
    code, out, err = _run(["list-surfaces"], socket_path, tmp_path)
    assert (code, err) == (0, "")
    assert out.splitlines() == [
        "550e8400-aaaa: workspace [100x30] (focused)",
        "6ba7b810-bbbb: Build Server /srv",
    ]


def test_send_keys_over_socket(live_host, tmp_path: Path) -> None:
    host, socket_path = live_host
    code, _, err = _run(["send-keys", "-t", "workspace", "ls -la", "--enter"], socket_path, tmp_path)
    assert (code, err) == (0, "")
    hosted = host.hosted("550e8400-aaaa")
    assert hosted is not None
    assert hosted.inputs == ["ls -la", ENTER]


def test_set_title_by_prefix_over_socket(live_host, tmp_path: Path) -> None:
    host, socket_path = live_host
    code, _, _ = _run(["set-title", "-t", "6ba7", "deploy"], socket_path, tmp_path)
    assert code == 0
    assert [item.title for item in host.snapshot()] == ["workspace", "deploy"]


def test_capture_pane_over_socket(live_host, tmp_path: Path) -> None:
    _, socket_path = live_host
    code, out, _ = _run(["capturep", "-t", "550e8400", "-S", "1", "-E", "2"], socket_path, tmp_path)
    assert code == 0
    assert out == "line1\nline2\n"


def test_unresolved_target_over_socket(live_host, tmp_path: Path) -> None:
    _, socket_path = live_host
    code, out, err = _run(["send-keys", "-t", "nowhere", "ls"], socket_path, tmp_path)
    assert code == 1
    assert out == ""
    assert err.startswith("error: no terminal matches target 'nowhere'")


def test_client_surfaces_routing_errors(live_host) -> None:
    _, socket_path = live_host
    client = SurfaceClient(socket_path, timeout=2)
    with pytest.raises(CommandError, match="405"):
        client.request("DELETE", "/api/v1/surfaces")
    with pytest.raises(CommandError, match="Endpoint not found"):
        client.request("GET", "/api/v2/nothing")
    assert client.request("GET", "/api/v2/commands", query={"terminal": "550e8400-aaaa"})["terminal"] == (
        "550e8400-aaaa"
    )


@pytest.mark.parametrize("terminal_id", ["a/b", "c?d", "50% done"])
def test_reserved_characters_in_identifier_round_trip(short_dir: Path, terminal_id: str) -> None:
    host = InMemorySurfaceHost(
        [Terminal(id=terminal_id, title="odd")],
        screens={terminal_id: "hello"},
    )
    with _serving(host, short_dir / "api.sock") as socket_path:
        client = SurfaceClient(socket_path, timeout=2)
        assert client.read_screen(terminal_id) == "hello"
        client.send_text(terminal_id, "pwd")
    hosted = host.hosted(terminal_id)
    assert hosted is not None
    assert hosted.inputs == ["pwd"]


def _env_with_pythonpath() -> dict[str, str]:
    env = dict(os.environ)
    existing = env.get("PYTHONPATH", "")
    src_path = str(Path(__file__).resolve().parents[2] / "src")
    env["PYTHONPATH"] = f"{src_path}{os.pathsep}{existing}" if existing else src_path
    return env


def test_module_reports_unknown_command_via_exit_code(tmp_path: Path) -> None:
    env = _env_with_pythonpath()
    env["HOME"] = str(tmp_path)
    completed = subprocess.run(
        [sys.executable, "-m", "surfacectl", "frobnicate"],
        capture_output=True,
        text=True,
        check=False,
        env=env,
    )

    assert completed.returncode == 1
    assert completed.stderr.startswith("error: unknown command 'frobnicate'")


def test_module_prints_usage_without_arguments() -> None:
    completed = subprocess.run(
        [sys.executable, "-m", "surfacectl"],
        capture_output=True,
        text=True,
        check=False,
        env=_env_with_pythonpath(),
    )

    assert completed.returncode == 0
    assert "Usage:" in completed.stdout
