"""
Flatten endpoint payloads into EndpointRow records for the target providers.
"""

import math
from typing import Any, Dict, Iterable, List, Optional

from pricing_types import EndpointRow, TaskResult

PER_MILLION = 1_000_000


def to_number(value: Any) -> Optional[float]:
    """
    Permissive numeric parse. None, '', whitespace, non-numeric strings,
    non-finite values and containers all become None (unknown), never 0.
    """
    if value is None or isinstance(value, (dict, list, tuple)):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        n = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(n):
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return n


def per_million(cost_per_token: Optional[float]) -> Optional[float]:
    return None if cost_per_token is None else cost_per_token * PER_MILLION


def _text(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "") else None


def _endpoints(payload: Any) -> List[Any]:
    data = payload.get("data") if isinstance(payload, dict) else None
    endpoints = data.get("endpoints") if isinstance(data, dict) else None
    return endpoints if isinstance(endpoints, list) else []


def _payload_model_id(payload: Any, fallback: str) -> str:
    data = payload.get("data") if isinstance(payload, dict) else None
    mid = data.get("id") if isinstance(data, dict) else None
    return str(mid) if mid else fallback


def build_row(endpoint: Dict[str, Any], model_id: str, provider_name: str,
              model_info: Dict[str, Any], extracted_at: str) -> EndpointRow:
    pricing = endpoint.get("pricing") if isinstance(endpoint.get("pricing"), dict) else {}
    catalog_pricing = model_info.get("pricing") if isinstance(model_info.get("pricing"), dict) else {}

    prompt = to_number(pricing.get("prompt"))
    completion = to_number(pricing.get("completion"))

    return EndpointRow(
        model_id=model_id,
        provider_name=provider_name,
        endpoint_name=_text(endpoint.get("name")),
        tag=_text(endpoint.get("tag")),
        status=to_number(endpoint.get("status")),
        quantization=_text(endpoint.get("quantization")),
        context_length=to_number(endpoint.get("context_length")),
        max_completion_tokens=to_number(endpoint.get("max_completion_tokens")),
        max_prompt_tokens=to_number(endpoint.get("max_prompt_tokens")),
        prompt_cost_per_token=prompt,
        completion_cost_per_token=completion,
        prompt_cost_per_1m=per_million(prompt),
        completion_cost_per_1m=per_million(completion),
        supports_implicit_caching=bool(endpoint.get("supports_implicit_caching")),
        uptime_last_30m=to_number(endpoint.get("uptime_last_30m")),
        source_model_pricing_prompt=to_number(catalog_pricing.get("prompt")),
        source_model_pricing_completion=to_number(catalog_pricing.get("completion")),
        extracted_at=extracted_at,
    )


def extract_rows(results: Iterable[TaskResult], target_providers: Iterable[str],
                 catalog_index: Dict[str, dict], extracted_at: str) -> List[EndpointRow]:
    """
    One row per endpoint whose provider (case-insensitive) is targeted.
    Failed results contribute nothing. Every row gets the same `extracted_at`.
    """
    targets = {p.lower() for p in target_providers}
    rows: List[EndpointRow] = []

    for result in results:
        if not result.ok:
            continue
        model_id = _payload_model_id(result.payload, result.model_id)
        model_info = catalog_index.get(model_id) or {}

        for endpoint in _endpoints(result.payload):
            if not isinstance(endpoint, dict):
                continue
            provider_name = str(endpoint.get("provider_name") or "").strip()
            if not provider_name or provider_name.lower() not in targets:
                continue
            rows.append(build_row(endpoint, model_id, provider_name, model_info, extracted_at))

    return rows
