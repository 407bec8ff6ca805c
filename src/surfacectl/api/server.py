"""HTTP/1.1 over a Unix socket in front of the router."""

from __future__ import annotations

import argparse
import json
import logging as py_logging
import os
import socketserver
import uuid
from collections.abc import Sequence
from contextlib import suppress
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler
from pathlib import Path
from urllib.parse import parse_qsl, urlsplit

from surfacectl.api.memory import InMemorySurfaceHost
from surfacectl.api.messages import APIRequest, APIResponse
from surfacectl.api.router import Router
from surfacectl.config import resolve_socket_path
from surfacectl.logging import configure_logging
from surfacectl.models import Terminal

logger = py_logging.getLogger(__name__)

_MAX_BODY_BYTES = 1 << 20


class UnixAPIServer(socketserver.UnixStreamServer):
    """Serial server: one request is routed and handled at a time."""

    def __init__(self, socket_path: str | Path, router: Router) -> None:
        self.socket_path = Path(socket_path)
        self.router = router
        self.socket_path.parent.mkdir(parents=True, exist_ok=True)
        with suppress(FileNotFoundError):
            self.socket_path.unlink()
        super().__init__(str(self.socket_path), _RequestHandler)
        with suppress(OSError):
            os.chmod(self.socket_path, 0o600)

    def server_close(self) -> None:
        super().server_close()
        with suppress(FileNotFoundError):
            self.socket_path.unlink()


class _RequestHandler(BaseHTTPRequestHandler):
    server: UnixAPIServer
    protocol_version = "HTTP/1.1"

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        logger.debug("http " + format, *args)

    def _read_body(self) -> bytes | None:
        length_header = self.headers.get("Content-Length")
        if not length_header:
            return None
        try:
            length = int(length_header)
        except ValueError:
            return None
        if length <= 0:
            return None
        return self.rfile.read(min(length, _MAX_BODY_BYTES))

    def _write(self, response: APIResponse) -> None:
        data = b""
        if response.body is not None:
            data = json.dumps(response.body, ensure_ascii=False).encode("utf-8")
        self.send_response(int(response.status))
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        if response.allow:
            self.send_header("Allow", ", ".join(response.allow))
        self.send_header("Connection", "close")
        self.end_headers()
        if data:
            self.wfile.write(data)
        self.close_connection = True

    def _dispatch(self) -> None:
        parsed = urlsplit(self.path)
        request = APIRequest(
            method=self.command,
            path=parsed.path,
            query=dict(parse_qsl(parsed.query, keep_blank_values=True)),
            body=self._read_body(),
        )
        try:
            response = self.server.router.route(request)
        except Exception:
            logger.exception("Handler failed for %s %s", request.method, request.path)
            response = APIResponse.error(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error")
        self._write(response)

    do_GET = _dispatch  # noqa: N815
    do_POST = _dispatch  # noqa: N815
    do_DELETE = _dispatch  # noqa: N815
    do_PUT = _dispatch  # noqa: N815
    do_PATCH = _dispatch  # noqa: N815


def serve(socket_path: str | Path, router: Router) -> None:
    with UnixAPIServer(socket_path, router) as server:
        logger.info("Serving control API on %s", server.socket_path)
        server.serve_forever()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="surfacectl-dev-server")
    parser.add_argument("--socket", type=Path, default=None)
    parser.add_argument("--terminals", type=int, default=2)
    parser.add_argument("--log-level", default="INFO")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Serve the in-memory host so the CLI can be exercised without a terminal app."""
    namespace = build_parser().parse_args(argv)
    configure_logging(namespace.log_level)
    socket_path = namespace.socket or resolve_socket_path(os.environ, Path.home())
    terminals = [
        Terminal(id=str(uuid.uuid4()), title=f"shell {index}", focused=index == 1, columns=80, rows=24)
        for index in range(1, max(namespace.terminals, 0) + 1)
    ]
    try:
        serve(socket_path, Router(InMemorySurfaceHost(terminals)))
    except KeyboardInterrupt:
        logger.info("Control API server stopped")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
