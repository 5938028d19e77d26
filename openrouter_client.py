#!/usr/bin/env python3
"""
OpenRouter HTTP client
======================

One JSON GET with a whole-attempt deadline (connect, headers and body) and a
capped, deterministic exponential backoff. This is the only place the harvest
touches the network.

Secrets (optional)
------------------
export OPENROUTER_API_KEY=...
"""

import json
import os
import time
from typing import Any, Dict
from urllib.parse import quote

import requests
import urllib3

from pricing_types import FetchError

API_BASE = "https://openrouter.ai/api/v1"
MODELS_URL = f"{API_BASE}/models"

USER_AGENT = "openrouter-provider-pricing/1.0"

BACKOFF_BASE_S = 0.3
ERROR_BODY_LIMIT = 300
READ_CHUNK_SIZE = 64 * 1024


def model_endpoints_url(model_id: str) -> str:
    return f"{API_BASE}/models/{quote(model_id, safe='/:')}/endpoints"


def _headers() -> Dict[str, str]:
    headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
    api_key = os.getenv("OPENROUTER_API_KEY")
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def _read_body(resp, url: str, timeout_ms: int, deadline: float) -> bytes:
    """Read the body chunk by chunk, giving up once the attempt's deadline passes."""
    chunks = []
    while True:
        if time.monotonic() > deadline:
            raise FetchError(f"timed out after {timeout_ms}ms: {url}", url=url, status=resp.status_code)
        try:
            chunk = resp.raw.read1(READ_CHUNK_SIZE, decode_content=True)
        except (urllib3.exceptions.HTTPError, OSError) as e:
            raise FetchError(f"read failed: {e}", url=url, status=resp.status_code) from e
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


def _attempt(url: str, timeout_ms: int) -> Any:
    deadline = time.monotonic() + timeout_ms / 1000
    try:
        resp = requests.get(url, headers=_headers(), timeout=timeout_ms / 1000, stream=True)
    except requests.Timeout as e:
        raise FetchError(f"timed out after {timeout_ms}ms: {url}", url=url) from e
    except requests.RequestException as e:
        raise FetchError(f"request failed: {e}", url=url) from e

    try:
        content = _read_body(resp, url, timeout_ms, deadline)
    finally:
        resp.close()

    if not 200 <= resp.status_code < 300:
        body = content.decode(resp.encoding or "utf-8", errors="replace")[:ERROR_BODY_LIMIT]
        msg = f"HTTP {resp.status_code} {resp.reason or ''}".rstrip()
        if body:
            msg += f" :: {body}"
        raise FetchError(msg, url=url, status=resp.status_code, body=body)

    try:
        return json.loads(content)
    except ValueError as e:
        raise FetchError(f"invalid JSON from {url}: {e}", url=url, status=resp.status_code) from e


def fetch_json(url: str, timeout_ms: int, max_retries: int) -> Any:
    """
    GET `url` and return the decoded JSON body.

    Makes up to `max_retries + 1` attempts, sleeping 0.3s * 2**attempt between
    them. Raises the last FetchError once attempts are exhausted.
    """
    last_error = None
    for attempt in range(max_retries + 1):
        try:
            return _attempt(url, timeout_ms)
        except FetchError as e:
            last_error = e
            if attempt < max_retries:
                time.sleep(BACKOFF_BASE_S * (2 ** attempt))
    raise last_error
