"""server.py — Local HTTP server for the taskboard API.

Wraps each incoming request in an API Gateway v2 event and hands it to the
same router the Lambda entry point uses, so local runs and deployed runs
share one code path.

    python -m taskboard.server --port 5000
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from logging.handlers import RotatingFileHandler
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import parse_qsl, urlsplit

from taskboard.config import HOST, LOG_FILE, LOG_LEVEL, MAX_REQUEST_BODY_BYTES, PORT, logger
from taskboard.http_utils import _error
from taskboard.lambda_function import build_handler
from taskboard.store import DocumentStore, build_store

__all__ = [
    "configure_logging",
    "create_server",
    "main",
    "serve",
]

Handler = Callable[[Dict[str, Any]], Dict[str, Any]]

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_LOG_MAX_BYTES = 5 * 1024 * 1024
_LOG_BACKUPS = 3


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def configure_logging(log_file: Optional[str] = LOG_FILE, level: str = LOG_LEVEL) -> None:
    """Attach console and rotating file handlers to the root logger.

    An empty ``log_file`` disables file output. Calling this twice does not
    duplicate handlers.
    """
    root = logging.getLogger()
    if getattr(root, "_taskboard_configured", False):
        return

    formatter = logging.Formatter(_LOG_FORMAT)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=_LOG_MAX_BYTES, backupCount=_LOG_BACKUPS, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root._taskboard_configured = True  # type: ignore[attr-defined]
    logger.info("logging initialized at %s; file: %s", level.upper(), log_file or "<none>")


# ---------------------------------------------------------------------------
# Request adapter
# ---------------------------------------------------------------------------


def _make_handler_class(handler: Handler) -> type:
    """Create a request handler class bound to ``handler``."""

    class TaskboardRequestHandler(BaseHTTPRequestHandler):
        protocol_version = "HTTP/1.1"

        def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
            logger.debug("%s - %s", self.address_string(), format % args)

        def do_GET(self) -> None:  # noqa: N802
            self._handle()

        def do_POST(self) -> None:  # noqa: N802
            self._handle()

        def do_PUT(self) -> None:  # noqa: N802
            self._handle()

        def do_DELETE(self) -> None:  # noqa: N802
            self._handle()

        def do_OPTIONS(self) -> None:  # noqa: N802
            self._handle()

        def _read_body(self) -> Optional[str]:
            """Return the request body, or None after answering 413/400."""
            try:
                content_length = int(self.headers.get("Content-Length") or 0)
            except (TypeError, ValueError):
                self.close_connection = True
                self._send(_error(400, "Invalid Content-Length"))
                return None
            if content_length > MAX_REQUEST_BODY_BYTES:
                self.close_connection = True
                self._send(_error(413, f"Request body exceeds {MAX_REQUEST_BODY_BYTES} bytes"))
                return None
            if content_length <= 0:
                return ""
            raw = self.rfile.read(content_length)
            try:
                return raw.decode("utf-8")
            except UnicodeDecodeError:
                self._send(_error(400, "Invalid JSON body"))
                return None

        def _to_event(self, body: str) -> Dict[str, Any]:
            parts = urlsplit(self.path)
            return {
                "version": "2.0",
                "rawPath": parts.path or "/",
                "rawQueryString": parts.query,
                "queryStringParameters": dict(parse_qsl(parts.query)) or None,
                "headers": {k.lower(): v for k, v in self.headers.items()},
                "requestContext": {
                    "http": {
                        "method": self.command,
                        "path": parts.path or "/",
                        "sourceIp": self.client_address[0],
                    },
                },
                "body": body,
                "isBase64Encoded": False,
            }

        def _handle(self) -> None:
            body = self._read_body()
            if body is None:
                return
            self._send(handler(self._to_event(body)))

        def _send(self, response: Dict[str, Any]) -> None:
            data = (response.get("body") or "").encode("utf-8")
            self.send_response(int(response.get("statusCode", 200)))
            for name, value in (response.get("headers") or {}).items():
                self.send_header(name, value)
            self.send_header("Content-Length", str(len(data)))
            if self.close_connection:
                self.send_header("Connection", "close")
            self.end_headers()
            if data and self.command != "HEAD":
                self.wfile.write(data)

    return TaskboardRequestHandler


def create_server(
    host: str = HOST,
    port: int = PORT,
    store: Optional[DocumentStore] = None,
) -> ThreadingHTTPServer:
    """Create a threaded HTTP server bound to *host*:*port*.

    ``store`` defaults to one built from configuration.
    """
    handler = build_handler(store if store is not None else build_store())
    return ThreadingHTTPServer((host, port), _make_handler_class(handler))


def serve(host: str = HOST, port: int = PORT, store: Optional[DocumentStore] = None) -> None:
    server = create_server(host, port, store)
    logger.info("Server running on port %d", port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("shutting down")
    finally:
        server.server_close()


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the taskboard API locally.")
    parser.add_argument("--host", default=HOST, help=f"Bind address (default: {HOST}).")
    parser.add_argument("--port", type=int, default=PORT, help=f"TCP port (default: {PORT}).")
    parser.add_argument(
        "--log-file",
        default=LOG_FILE,
        help="Rotating log file path; pass an empty string to log to the console only.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file)
    serve(args.host, args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
