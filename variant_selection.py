#!/usr/bin/env python3
"""
Variant Selection & Snapshot Grouping
=====================================

Turns extracted endpoint rows into per-provider snapshots.

Selection (select_best):
    1) Active variants (status == 0) if any, otherwise all variants
    2) Drop variants without both prompt and completion cost
    3) Cheapest prompt+completion wins; ties -> lower prompt, lower completion,
       then tag, endpoint name and quantization so input order never matters.
       Rows equal on all of these are the same variant; either may be returned.

Presentation order (variant_sort_key):
    active first, then summed cost (missing cost -> 1e9 per field), then tag
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from pricing_types import EndpointRow, ProviderSnapshot, RunSummary, TaskResult

# Stand-in cost for a missing price field when ordering variants for display
MISSING_COST_SENTINEL = 1e9


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================
# SELECTION
# ============================================================

def _selection_key(row: EndpointRow):
    p, c = row.prompt_cost_per_token, row.completion_cost_per_token
    return (p + c, p, c, row.tag or "", row.endpoint_name or "", row.quantization or "")


def select_best(variants: Iterable[EndpointRow]) -> Optional[EndpointRow]:
    variants = list(variants)
    active = [v for v in variants if v.is_active]
    candidates = [v for v in (active or variants) if v.has_pricing]
    if not candidates:
        return None
    return min(candidates, key=_selection_key)


# ============================================================
# GROUPING
# ============================================================

def variant_sort_key(row: EndpointRow):
    p = row.prompt_cost_per_token
    c = row.completion_cost_per_token
    total = (MISSING_COST_SENTINEL if p is None else p) + (MISSING_COST_SENTINEL if c is None else c)
    return (0 if row.is_active else 1, total, row.tag or "")


def group_and_sort(rows: Iterable[EndpointRow], providers: Sequence[str]) -> Dict[str, Dict[str, dict]]:
    """
    provider -> model_id -> {"selected": row | None, "variants": [rows]}

    Every configured provider is present even when it collected no rows.
    """
    grouped: Dict[str, Dict[str, List[EndpointRow]]] = {p.lower(): {} for p in providers}
    for row in rows:
        bucket = grouped.setdefault(row.provider_name.lower(), {})
        bucket.setdefault(row.model_id, []).append(row)

    out: Dict[str, Dict[str, dict]] = {}
    for provider, models in grouped.items():
        out[provider] = {
            model_id: {
                "selected": select_best(variants),
                "variants": sorted(variants, key=variant_sort_key),
            }
            for model_id, variants in models.items()
        }
    return out


def build_provider_snapshots(rows: Iterable[EndpointRow], providers: Sequence[str]) -> Dict[str, ProviderSnapshot]:
    snapshots = {}
    for provider, models in group_and_sort(rows, providers).items():
        snapshots[provider] = ProviderSnapshot(
            provider_name=provider,
            generated_at=_now_iso(),
            model_count=len(models),
            variant_count=sum(len(m["variants"]) for m in models.values()),
            models=models,
        )
    return snapshots


def build_run_summary(settings: dict, catalog: Sequence, model_ids: Sequence[str],
                      results: Sequence[TaskResult], rows: Sequence[EndpointRow],
                      started_at: str) -> RunSummary:
    errors = [{"model_id": r.model_id, "error": r.error} for r in results if not r.ok]
    return RunSummary(
        generated_at=_now_iso(),
        started_at=started_at,
        settings=settings,
        catalog_model_count=len(catalog),
        scanned_model_count=len(model_ids),
        successful_endpoint_requests=sum(1 for r in results if r.ok),
        failed_endpoint_requests=len(errors),
        extracted_endpoint_rows=len(rows),
        errors=errors,
        rows=list(rows),
    )
