#!/usr/bin/env python3
"""
Catalog loading and per-model endpoint harvesting.

- load_catalog(): one fetch of /models (fatal on failure)
- select_model_ids(): limit, then dry-run cap
- harvest(): /models/{id}/endpoints for every id through the worker pool;
  per-model failures are recorded, never raised
"""

import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

from openrouter_client import MODELS_URL, fetch_json, model_endpoints_url
from pricing_types import CatalogLoadError, FetchError, TaskError, TaskResult
from worker_pool import run_pool

DRY_RUN_MODEL_CAP = 15

ProgressCallback = Callable[[int, int], None]


# ------------------------------------------------------------------------------
# CATALOG
# ------------------------------------------------------------------------------
def load_catalog(timeout_ms: int, max_retries: int) -> List[Any]:
    """Raw catalog `data` list, malformed entries included so they still count."""
    try:
        payload = fetch_json(MODELS_URL, timeout_ms, max_retries)
    except FetchError as e:
        raise CatalogLoadError(f"could not load model catalog: {e}") from e

    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list):
        return []
    return data


def _model_id(entry: Any) -> str:
    if not isinstance(entry, dict):
        return ""
    raw = entry.get("id")
    return "" if raw is None else str(raw)


def catalog_model_ids(entries: Sequence[Any]) -> List[str]:
    return [mid for mid in (_model_id(m) for m in entries) if mid]


def build_catalog_index(entries: Sequence[Any]) -> Dict[str, dict]:
    """model id -> catalog entry, skipping entries without an id; read-only once built."""
    index = {}
    for m in entries:
        mid = _model_id(m)
        if mid:
            index[mid] = m
    return index


def select_model_ids(model_ids: Sequence[str], limit: Optional[int] = None,
                     dry_run: bool = False) -> List[str]:
    """Apply the numeric limit first, then the dry-run cap."""
    ids = list(model_ids)
    if limit:
        ids = ids[:limit]
    if dry_run:
        ids = ids[:DRY_RUN_MODEL_CAP]
    return ids


# ------------------------------------------------------------------------------
# ENDPOINTS
# ------------------------------------------------------------------------------
def progress_interval(total: int) -> int:
    return max(10, total // 20)


def print_progress(completed: int, total: int):
    print(f"Progress: {completed}/{total}")


def fetch_model_endpoints(model_id: str, timeout_ms: int, max_retries: int):
    try:
        return fetch_json(model_endpoints_url(model_id), timeout_ms, max_retries)
    except FetchError as e:
        raise TaskError(model_id, str(e)) from e


def harvest(model_ids: Sequence[str], concurrency: int, timeout_ms: int, max_retries: int,
            on_progress: Optional[ProgressCallback] = print_progress) -> List[TaskResult]:
    """
    Fetch endpoint payloads for every model id.

    Returns one TaskResult per id, in input order. `on_progress(completed,
    total)` is called every progress_interval(total) completions and on the
    last one.
    """
    total = len(model_ids)
    every = progress_interval(total)
    completed = 0
    lock = threading.Lock()

    def _tick():
        nonlocal completed
        with lock:
            completed += 1
            n = completed
        if on_progress and (n % every == 0 or n == total):
            on_progress(n, total)

    def _worker(model_id: str, _index: int) -> TaskResult:
        try:
            payload = fetch_model_endpoints(model_id, timeout_ms, max_retries)
            result = TaskResult(model_id=model_id, ok=True, payload=payload)
        except TaskError as e:
            result = TaskResult(model_id=model_id, ok=False, error=str(e))
        except Exception as e:
            # anything else is still this model's failure, not the run's
            result = TaskResult(model_id=model_id, ok=False, error=f"{type(e).__name__}: {e}")
        _tick()
        return result

    return run_pool(list(model_ids), _worker, concurrency)
