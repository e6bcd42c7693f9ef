"""Shared HTTP helpers for serve.py and the Vercel serverless API handlers.

Bridges BaseHTTPRequestHandler to the endpoint functions in polishai.endpoints:
bounded raw body reading, JSON response writing, and method dispatch.
"""

from __future__ import annotations

import json
import logging
from http.server import BaseHTTPRequestHandler
from typing import Any

from polishai.config import MAX_BODY_SIZE
from polishai.endpoints import ApiRequest, ApiResponse

logger = logging.getLogger("polishai.server")


# ---------------------------------------------------------------------------
# HTTP helpers (work with any BaseHTTPRequestHandler subclass)
# ---------------------------------------------------------------------------


def json_response(
    handler: BaseHTTPRequestHandler,
    data: Any,
    status: int = 200,
    headers: dict[str, str] | None = None,
) -> None:
    """Send a JSON response with optional extra headers."""
    body = json.dumps(data).encode("utf-8")
    handler.send_response(status)
    handler.send_header("Content-Type", "application/json")
    handler.send_header("Content-Length", str(len(body)))
    if headers:
        for k, v in headers.items():
            handler.send_header(k, v)
    handler.end_headers()
    handler.wfile.write(body)


def empty_response(handler: BaseHTTPRequestHandler, status: int = 200) -> None:
    handler.send_response(status)
    handler.send_header("Content-Length", "0")
    handler.end_headers()


def json_error(handler: BaseHTTPRequestHandler, message: str, status: int = 400) -> None:
    """Send a JSON error response."""
    json_response(handler, {"error": message}, status)


def read_raw_body(handler: BaseHTTPRequestHandler, max_size: int = MAX_BODY_SIZE) -> bytes | None:
    """Read the unparsed request body.

    Returns the bytes on success, or None if an error response was already
    sent to the client. The webhook needs the exact bytes for signature
    verification, so nothing is decoded here.
    """
    try:
        length = int(handler.headers.get("Content-Length", 0))
    except ValueError:
        json_error(handler, "Invalid Content-Length", 400)
        return None
    if length > max_size or length < 0:
        logger.warning(
            "Rejected request from %s: payload too large (%d bytes)",
            handler.client_address[0],
            length,
        )
        json_error(handler, "Payload too large", 413)
        return None
    return handler.rfile.read(length) if length else b""


def send_api_response(handler: BaseHTTPRequestHandler, response: ApiResponse) -> None:
    if response.payload is None:
        empty_response(handler, response.status)
    else:
        json_response(handler, response.payload, response.status)


class EndpointHandler(BaseHTTPRequestHandler):
    """Funnels every HTTP method into handle_api().

    Subclasses define handle_api(request: ApiRequest) -> ApiResponse, one per
    route. Method checks (405, OPTIONS preflight) belong to the endpoint so that
    Vercel and the dev server answer identically.
    """

    def do_GET(self):
        self._dispatch()

    def do_POST(self):
        self._dispatch()

    def do_PUT(self):
        self._dispatch()

    def do_PATCH(self):
        self._dispatch()

    def do_DELETE(self):
        self._dispatch()

    def do_OPTIONS(self):
        self._dispatch()

    def _dispatch(self):
        body = read_raw_body(self)
        if body is None:
            return

        request = ApiRequest(method=self.command, body=body, headers=dict(self.headers.items()))
        try:
            response = self.handle_api(request)
        except Exception:
            logger.exception("Unhandled error for %s %s", self.command, self.path)
            json_error(self, "Internal server error", 500)
            return
        send_api_response(self, response)

    def log_message(self, fmt, *args):
        logger.info("%s - %s", self.address_string(), fmt % args)
