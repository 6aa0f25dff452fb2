"""HTTP server that hands out the keyword data file, with permissive CORS."""

from __future__ import annotations

import argparse
import json
import math
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

from .datastore import build_dataset
from .models import Settings

_ALLOWED_METHODS = frozenset({"GET", "POST", "HEAD"})
_ALLOWED_HEADERS = frozenset({"accept", "content-type", "x-requested-with", "origin"})
_EMPTY_MESSAGE = {"Message": "wompedy womp"}

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

Response = tuple[int, dict[str, str], bytes]


def _normalise(value: Any) -> Any:
    """Write integral numbers without a fractional part, as a float64 encoder does."""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    if isinstance(value, list):
        return [_normalise(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalise(item) for key, item in value.items()}
    return value


def _encode(value: Any) -> bytes:
    text = json.dumps(
        _normalise(value), separators=(",", ":"), sort_keys=True, ensure_ascii=False
    )
    for raw, escaped in _HTML_ESCAPES.items():
        text = text.replace(raw, escaped)
    return text.encode("utf-8")


def _error(message: str) -> Response:
    print(message)
    body = (message + "\n").encode("utf-8")
    headers = {
        "Content-Type": "text/plain; charset=utf-8",
        "X-Content-Type-Options": "nosniff",
        "Content-Length": str(len(body)),
    }
    return HTTPStatus.INTERNAL_SERVER_ERROR, headers, body


def render_response(data_file: str) -> Response:
    """Return status, headers and body answering any request from ``data_file``."""
    try:
        with open(data_file, "rb") as handle:
            raw = handle.read()
    except OSError as exc:
        return _error(f"Failed to read the local JSON file: {exc}")
    try:
        data = json.loads(raw)
    except ValueError as exc:
        return _error(f"Failed to parse JSON: {exc}")
    try:
        body = _encode(_EMPTY_MESSAGE if data is None else data)
    except ValueError as exc:
        return _error(f"Failed to marshal JSON: {exc}")
    headers = {"Content-Type": "application/json", "Content-Length": str(len(body))}
    return HTTPStatus.OK, headers, body


def make_handler(data_file: str) -> type[BaseHTTPRequestHandler]:
    """Build a request handler class that serves ``data_file`` on every path."""

    class DataHandler(BaseHTTPRequestHandler):
        def log_message(self, format: str, *args: Any) -> None:
            return

        def _origin(self) -> str | None:
            return self.headers.get("Origin")

        def _answer(self, include_body: bool = True) -> None:
            status, headers, body = render_response(data_file)
            self.send_response(status)
            self.send_header("Vary", "Origin")
            if self._origin() is not None and self.command in _ALLOWED_METHODS:
                self.send_header("Access-Control-Allow-Origin", "*")
            for name, value in headers.items():
                self.send_header(name, value)
            self.end_headers()
            if include_body:
                self.wfile.write(body)

        def _preflight(self) -> None:
            self.send_response(HTTPStatus.NO_CONTENT)
            self.send_header("Vary", "Origin")
            self.send_header("Vary", "Access-Control-Request-Method")
            self.send_header("Vary", "Access-Control-Request-Headers")
            method = self.headers.get("Access-Control-Request-Method", "").upper()
            requested = [
                name.strip()
                for name in self.headers.get("Access-Control-Request-Headers", "").split(",")
                if name.strip()
            ]
            allowed = (
                self._origin() is not None
                and method in _ALLOWED_METHODS
                and all(name.lower() in _ALLOWED_HEADERS for name in requested)
            )
            if allowed:
                self.send_header("Access-Control-Allow-Origin", "*")
                self.send_header("Access-Control-Allow-Methods", method)
                if requested:
                    self.send_header("Access-Control-Allow-Headers", ", ".join(requested))
            self.send_header("Content-Length", "0")
            self.end_headers()

        def do_GET(self) -> None:
            self._answer()

        def do_POST(self) -> None:
            self._answer()

        def do_PUT(self) -> None:
            self._answer()

        def do_PATCH(self) -> None:
            self._answer()

        def do_DELETE(self) -> None:
            self._answer()

        def do_HEAD(self) -> None:
            self._answer(include_body=False)

        def do_OPTIONS(self) -> None:
            if self.headers.get("Access-Control-Request-Method") is not None:
                self._preflight()
            else:
                self._answer()

    return DataHandler


def serve(settings: Settings, host: str = "", port: int | None = None) -> None:
    """Serve the data file named by ``settings`` until interrupted."""
    address = (host, settings.port if port is None else port)
    with ThreadingHTTPServer(address, make_handler(settings.data_file)) as server:
        server.serve_forever()


def main(argv: list[str] | None = None) -> int:
    """Index the given repositories, then serve the resulting data file."""
    defaults = Settings()
    parser = argparse.ArgumentParser(
        prog="repokeywords",
        description="Extract keywords from repository markdown files and serve them.",
    )
    parser.add_argument("repo_urls", nargs="*", help="repositories to clone and index")
    parser.add_argument("--host", default="", help="address to listen on")
    parser.add_argument("--port", type=int, default=defaults.port, help="port to listen on")
    parser.add_argument("--data-file", default=defaults.data_file)
    parser.add_argument("--stopwords-file", default=defaults.stopwords_file)
    parser.add_argument("--num-keywords", type=int, default=defaults.num_keywords)
    parser.add_argument("--serve-only", action="store_true", help="skip indexing")
    args = parser.parse_args(argv)

    settings = Settings(
        repo_urls=tuple(args.repo_urls),
        data_file=args.data_file,
        stopwords_file=args.stopwords_file,
        num_keywords=args.num_keywords,
        port=args.port,
    )
    if not args.serve_only:
        try:
            build_dataset(settings)
        except (OSError, ValueError) as exc:
            print("Failed to build data:", exc)
    try:
        serve(settings, args.host, args.port)
    except KeyboardInterrupt:
        return 0
    return 0