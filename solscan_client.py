"""
Solscan Pro API session and request helpers.

Implements:
- Session configuration (API key, base URL) loaded from the environment
- Runtime API key replacement
- GET dispatch with repeated-key query serialization and error mapping
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Any, Literal, Mapping

import requests
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://pro-api.solscan.io/v2.0"
MIN_API_KEY_LENGTH = 10
ACCEPT_HEADER = "application/json, text/csv"

Expect = Literal["json", "text"]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class SolscanError(RuntimeError):
    """Base class for Solscan client failures."""


class MissingCredentialError(SolscanError):
    def __init__(self) -> None:
        super().__init__("Missing Solscan API key. Use set_api_key or SOLSCAN_API_KEY.")


class InvalidCredentialError(SolscanError, ValueError):
    pass


class UpstreamError(SolscanError):
    """Solscan answered with an HTTP status >= 400."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Solscan error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@dataclass
class SolscanSession:
    """Credential and endpoint shared by every tool call in this process."""

    base_url: str = DEFAULT_BASE_URL
    api_key: str | None = None
    timeout: float | None = None

    @classmethod
    def from_env(cls) -> SolscanSession:
        """Build SolscanSession from environment variables."""
        raw_timeout = os.getenv("SOLSCAN_TIMEOUT", "").strip()
        try:
            timeout = float(raw_timeout) if raw_timeout else None
        except ValueError as exc:
            raise RuntimeError(
                f"SOLSCAN_TIMEOUT must be a number of seconds, got {raw_timeout!r}."
            ) from exc

        return cls(
            base_url=os.getenv("SOLSCAN_BASE") or DEFAULT_BASE_URL,
            api_key=os.getenv("SOLSCAN_API_KEY") or None,
            timeout=timeout,
        )

    def set_api_key(self, api_key: Any) -> None:
        if not isinstance(api_key, str) or len(api_key) < MIN_API_KEY_LENGTH:
            raise InvalidCredentialError(
                f"Invalid api_key. Must be at least {MIN_API_KEY_LENGTH} characters."
            )
        self.api_key = api_key
        logger.info("solscan_api_key_set", key_length=len(api_key))


# ---------------------------------------------------------------------------
# Query building
# ---------------------------------------------------------------------------


def _stringify(value: Any) -> str:
    # Booleans go out lowercase, as in JSON
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_query(params: Mapping[str, Any] | None) -> list[tuple[str, str]]:
    """
    Flatten a parameter mapping into ordered query pairs.

    None values are dropped, lists/tuples become one pair per element and
    everything else becomes a single pair.
    """
    query: list[tuple[str, str]] = []
    if not params:
        return query
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            query.extend((key, _stringify(item)) for item in value)
        else:
            query.append((key, _stringify(value)))
    return query


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def solscan_get(
    session: SolscanSession,
    path: str,
    params: Mapping[str, Any] | None = None,
    expect: Expect = "json",
) -> Any:
    """GET request to the Solscan Pro API."""
    api_key = session.api_key
    if not api_key:
        raise MissingCredentialError()

    url = f"{session.base_url.rstrip('/')}{path}"
    headers = {"accept": ACCEPT_HEADER, "token": api_key}

    t0 = time.perf_counter()
    resp = requests.get(
        url,
        params=build_query(params),
        headers=headers,
        timeout=session.timeout,
    )
    ms = int((time.perf_counter() - t0) * 1000)

    if resp.status_code >= 400:
        logger.warning(
            "solscan_request_failed",
            method="GET",
            path=path,
            status=resp.status_code,
            ms=ms,
        )
        raise UpstreamError(resp.status_code, resp.text)

    logger.debug("solscan_request", method="GET", path=path, status=resp.status_code, ms=ms)
    if expect == "text":
        return resp.text
    return resp.json()
