"""Synchronous client for the control API over a Unix socket."""

from __future__ import annotations

import http.client
import json
import logging as py_logging
import socket
from pathlib import Path
from typing import Any
from urllib.parse import quote, urlencode

from surfacectl.errors import CommandError
from surfacectl.models import KeyStroke, Terminal, parse_terminals

logger = py_logging.getLogger(__name__)

API_PREFIX = "/api/v2"


class UnixHTTPConnection(http.client.HTTPConnection):
    def __init__(self, socket_path: str, *, timeout: float) -> None:
        super().__init__("localhost", timeout=timeout)
        self.socket_path = socket_path

    def connect(self) -> None:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(self.timeout)
        try:
            sock.connect(self.socket_path)
        except OSError:
            sock.close()
            raise
        self.sock = sock


class SurfaceClient:
    """One request/response exchange per call; no retries."""

    def __init__(self, socket_path: str | Path, *, timeout: float = 5.0) -> None:
        self.socket_path = Path(socket_path)
        self.timeout = timeout

    def request(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        target = path if not query else f"{path}?{urlencode(query)}"
        body = None
        headers = {"Accept": "application/json", "Connection": "close"}
        if payload is not None:
            body = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"

        logger.debug("request method=%s target=%s socket=%s", method, target, self.socket_path)
        connection = UnixHTTPConnection(str(self.socket_path), timeout=self.timeout)
        try:
            connection.request(method, target, body=body, headers=headers)
            response = connection.getresponse()
            status = response.status
            raw = response.read()
        except FileNotFoundError as exc:
            raise CommandError(
                f"cannot connect to {self.socket_path}: socket not found",
                hint="is the terminal application running with its control API enabled?",
            ) from exc
        except (OSError, http.client.HTTPException) as exc:
            raise CommandError(f"cannot connect to {self.socket_path}: {exc}") from exc
        finally:
            connection.close()

        data = self._decode(raw)
        if not 200 <= status < 300:
            message = data.get("error") if isinstance(data, dict) else None
            raise CommandError(f"server returned {status}: {message or 'request failed'}")
        return data

    def _decode(self, raw: bytes) -> Any:
        if not raw:
            return None
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CommandError(f"invalid response from server: {exc}") from exc

    def _terminal_path(self, terminal_id: str, *parts: str) -> str:
        segments = [quote(terminal_id, safe=""), *parts]
        return f"{API_PREFIX}/terminals/" + "/".join(segments)

    def list_terminals(self) -> list[Terminal]:
        data = self.request("GET", f"{API_PREFIX}/terminals")
        items = data.get("terminals") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise CommandError("invalid response from server: missing terminal list")
        return parse_terminals(items)

    def send_text(self, terminal_id: str, text: str) -> None:
        self.request("POST", self._terminal_path(terminal_id, "input"), payload={"text": text})

    def send_key(self, terminal_id: str, stroke: KeyStroke) -> None:
        self.request("POST", self._terminal_path(terminal_id, "key"), payload=stroke.to_dict())

    def perform_action(self, terminal_id: str, action: str) -> None:
        self.request("POST", self._terminal_path(terminal_id, "action"), payload={"action": action})

    def read_screen(self, terminal_id: str) -> str:
        data = self.request("GET", self._terminal_path(terminal_id, "screen"))
        contents = data.get("contents") if isinstance(data, dict) else None
        if not isinstance(contents, str):
            raise CommandError("invalid response from server: missing screen contents")
        return contents
