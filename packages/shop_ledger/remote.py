"""Thin client for the spreadsheet-backed web endpoint.

The endpoint is a deployed spreadsheet script exposing one URL:

- ``GET``  returns the sheet as a JSON array of raw rows.
- ``POST`` accepts one JSON object: either a full transaction record (insert
  or update by ``id``) or a deletion marker ``{"id", "date", "action": "delete"}``.

Pushes are fire-and-forget: the response body is not inspected, only transport
failures are reported. This client never retries; failures surface as
:class:`RemoteSyncError` so the caller can keep working on its local snapshot.
"""

from __future__ import annotations

import json
import os
import urllib.error
import urllib.request
from collections.abc import Mapping
from typing import Any

from .ingest import epoch_ms, ingest_records
from .logging_setup import get_logger
from .models import Transaction

REMOTE_URL_ENV = "LEDGER_REMOTE_URL"
REMOTE_TIMEOUT_ENV = "LEDGER_REMOTE_TIMEOUT"
DEFAULT_TIMEOUT = 15.0

_logger = get_logger("shop_ledger.remote")


class RemoteSyncError(RuntimeError):
    """The remote endpoint could not be read from or written to."""


def deletion_marker(tx: Transaction) -> dict[str, Any]:
    return {"id": tx.id, "date": tx.date, "action": "delete"}


class RemoteClient:
    def __init__(self, url: str, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        if not url or not url.strip():
            raise ValueError("remote url must be non-empty")
        self.url = url.strip()
        self.timeout = timeout

    def fetch(self) -> list[Transaction]:
        """Download the sheet and normalize its rows.

        Raises :class:`RemoteSyncError` on transport errors and on bodies that
        are not JSON (the script host answers errors with an HTML page). A JSON
        body that is not an array yields ``[]``.
        """

        req = urllib.request.Request(self.url, method="GET")
        req.add_header("Accept", "application/json")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as e:
            raise RemoteSyncError(f"remote fetch failed: {e.code} {e.reason}") from e
        except (urllib.error.URLError, OSError) as e:
            raise RemoteSyncError(f"remote fetch failed: {e}") from e

        text = body.decode("utf-8", errors="replace")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            _logger.error("remote:non_json_response excerpt=%r", text[:100])
            raise RemoteSyncError("Invalid server response") from e

        if not isinstance(data, list):
            _logger.warning("remote:unexpected_shape type=%s", type(data).__name__)
            return []
        transactions = ingest_records(data, now_ms=epoch_ms())
        _logger.info("remote:fetched rows=%d kept=%d", len(data), len(transactions))
        return transactions

    def push(self, change: Mapping[str, Any]) -> None:
        """POST one record or deletion marker; a missing id gets a timestamp id."""

        payload = dict(change)
        if not payload.get("id"):
            payload["id"] = epoch_ms()
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        req = urllib.request.Request(self.url, data=data, method="POST")
        req.add_header("Content-Type", "application/json")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                resp.read()
        except urllib.error.HTTPError as e:
            raise RemoteSyncError(f"remote push failed: {e.code} {e.reason}") from e
        except (urllib.error.URLError, OSError) as e:
            raise RemoteSyncError(f"remote push failed: {e}") from e
        _logger.debug("remote:pushed id=%s action=%s", payload["id"], payload.get("action", "upsert"))


def remote_from_env() -> RemoteClient | None:
    """Build a client from ``LEDGER_REMOTE_URL``; ``None`` when sync is not configured."""

    url = os.getenv(REMOTE_URL_ENV)
    if not url or not url.strip():
        return None
    timeout_raw = os.getenv(REMOTE_TIMEOUT_ENV)
    try:
        timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT
    except ValueError:
        _logger.warning("remote:bad_timeout value=%r; using %s", timeout_raw, DEFAULT_TIMEOUT)
        timeout = DEFAULT_TIMEOUT
    return RemoteClient(url, timeout=timeout)


__all__ = [
    "RemoteClient",
    "RemoteSyncError",
    "deletion_marker",
    "remote_from_env",
]
