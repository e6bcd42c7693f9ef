"""Shared fixtures for PolishAI tests."""

import hashlib
import hmac
import io
import json
import time
from types import SimpleNamespace

import httpx
import pytest
from postgrest.exceptions import APIError

from polishai.config import PRODUCT, Settings
from polishai.endpoints import ApiRequest
from polishai.services import Services

WEBHOOK_SECRET = "whsec_test_secret"


# -- Supabase ----------------------------------------------------------------


class FakeQuery:
    """Mimics the PostgREST builder chain used by LicenseStore."""

    def __init__(self, db, table):
        self._db = db
        self._table = table
        self._op = "select"
        self._values = None
        self._filters = []
        self._limit = None

    def select(self, *columns):
        self._op = "select"
        return self

    def insert(self, values):
        self._op = "insert"
        self._values = values
        return self

    def update(self, values):
        self._op = "update"
        self._values = values
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self):
        self._db.calls.append((self._table, self._op, list(self._filters), self._values))
        if self._op in self._db.errors:
            raise self._db.errors.pop(self._op)
        rows = self._db.tables.setdefault(self._table, [])
        return SimpleNamespace(data=getattr(self, f"_{self._op}")(rows))

    def _matches(self, row):
        return all(row.get(column) == value for column, value in self._filters)

    def _select(self, rows):
        if self._db.stale_reads:
            self._db.stale_reads -= 1
            return []
        found = [dict(row) for row in rows if self._matches(row)]
        return found[: self._limit] if self._limit is not None else found

    def _insert(self, rows):
        for row in rows:
            if (row["email"], row["product"]) == (self._values["email"], self._values["product"]):
                raise api_error("23505", "duplicate key value violates unique constraint")
        self._db.next_id += 1
        row = {"id": self._db.next_id, "last_verified": None, **self._values}
        rows.append(row)
        return [dict(row)]

    def _update(self, rows):
        updated = []
        for row in rows:
            if self._matches(row):
                row.update(self._values)
                updated.append(dict(row))
        return updated


class FakeSupabase:
    """In-memory stand-in for supabase.Client with a unique (email, product) index."""

    def __init__(self):
        self.tables = {}
        self.calls = []
        self.errors = {}  # op -> APIError raised by the next execute() of that op
        self.stale_reads = 0  # selects that return nothing, to simulate a race
        self.next_id = 0

    def table(self, name):
        return FakeQuery(self, name)

    def rows(self, table="licenses"):
        return self.tables.get(table, [])

    def add_license(self, email, *, active=True, table="licenses", **extra):
        self.next_id += 1
        row = {
            "id": self.next_id,
            "email": email,
            "product": PRODUCT,
            "active": active,
            "created_at": "2024-05-01T12:00:00+00:00",
            "updated_at": None,
            "last_verified": None,
            "stripe_session_id": None,
            **extra,
        }
        self.tables.setdefault(table, []).append(row)
        return row

    def fail(self, op, code="XX000", message="database unavailable"):
        self.errors[op] = api_error(code, message)

    def ops(self):
        return [op for _, op, _, _ in self.calls]


def api_error(code, message):
    return APIError({"message": message, "code": code, "hint": None, "details": None})


# -- Anthropic ---------------------------------------------------------------


class FakeMessages:
    def __init__(self):
        self.calls = []
        self.reply = "I went to the store."
        self.error = None
        self.content = None

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        content = self.content
        if content is None:
            content = [SimpleNamespace(type="text", text=self.reply)]
        return SimpleNamespace(content=content)


class FakeAnthropic:
    def __init__(self):
        self.messages = FakeMessages()


def anthropic_error(error_cls, status, message="upstream error"):
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    response = httpx.Response(status, request=request)
    return error_cls(message, response=response, body=None)


# -- Stripe ------------------------------------------------------------------


def stripe_signature(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp=None) -> str:
    """Build a Stripe-Signature header value (scheme v1) for ``payload``."""
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.{payload.decode('utf-8')}".encode()
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def checkout_event(
    email="buyer@example.com",
    *,
    session_id="cs_test_001",
    in_details=True,
    event_type="checkout.session.completed",
):
    session = {
        "id": session_id,
        "object": "checkout.session",
        "customer": "cus_123",
        "amount_total": 999,
        "currency": "usd",
        "customer_details": {"email": email if in_details else None},
        "customer_email": None if in_details else email,
    }
    return {"id": "evt_test_001", "type": event_type, "data": {"object": session}}


def signed_request(event, secret=WEBHOOK_SECRET, method="POST"):
    payload = json.dumps(event).encode()
    return ApiRequest(
        method=method,
        body=payload,
        headers={"Stripe-Signature": stripe_signature(payload, secret)},
    )


def json_request(data, method="POST"):
    return ApiRequest(method=method, body=json.dumps(data).encode())


# -- HTTP --------------------------------------------------------------------


class FakeSocket:
    """Feeds a raw request to a BaseHTTPRequestHandler and captures its reply."""

    def __init__(self, raw: bytes):
        self._rfile = io.BytesIO(raw)
        self.sent = bytearray()

    def makefile(self, mode, *args, **kwargs):
        return self._rfile

    def sendall(self, data):
        self.sent += data


def send_raw(handler_cls, method, path="/", body=b"", headers=None):
    """Run one request through ``handler_cls``; returns (status, headers, body)."""
    lines = [f"{method} {path} HTTP/1.1", "Host: localhost"]
    all_headers = {"Content-Length": str(len(body)), **(headers or {})}
    lines += [f"{k}: {v}" for k, v in all_headers.items()]
    raw = ("\r\n".join(lines) + "\r\n\r\n").encode() + body

    sock = FakeSocket(raw)
    handler_cls(sock, ("127.0.0.1", 50000), None)

    head, _, reply_body = bytes(sock.sent).partition(b"\r\n\r\n")
    status_line, *header_lines = head.decode("latin-1").split("\r\n")
    reply_headers = dict(line.split(": ", 1) for line in header_lines)
    return int(status_line.split()[1]), reply_headers, reply_body


# -- Fixtures ----------------------------------------------------------------


@pytest.fixture()
def fake_supabase():
    return FakeSupabase()


@pytest.fixture()
def fake_anthropic():
    return FakeAnthropic()


@pytest.fixture()
def settings():
    return Settings(stripe_webhook_secret=WEBHOOK_SECRET)


@pytest.fixture()
def services(settings, fake_supabase, fake_anthropic):
    return Services(settings, supabase_client=fake_supabase, anthropic_client=fake_anthropic)
