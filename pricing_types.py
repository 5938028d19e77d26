"""
Record and error types shared across the harvest pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

SOURCE_NAME = "openrouter-provider-endpoints"


# ============================================================
# ERRORS
# ============================================================

class ConfigError(ValueError):
    """Invalid run configuration (raised before any network activity)."""


class FetchError(Exception):
    """One HTTP request failed: network error, timeout, non-2xx or bad JSON."""

    def __init__(self, message: str, url: Optional[str] = None,
                 status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.url = url
        self.status = status
        self.body = body


class CatalogLoadError(Exception):
    """The model catalog could not be fetched; nothing to harvest."""


class TaskError(Exception):
    """Endpoint lookup for a single model failed."""

    def __init__(self, model_id: str, message: str):
        super().__init__(message)
        self.model_id = model_id


# ============================================================
# RECORDS
# ============================================================

@dataclass(frozen=True)
class TaskResult:
    model_id: str
    ok: bool
    payload: Any = None
    error: Optional[str] = None


@dataclass
class EndpointRow:
    model_id: str
    provider_name: str
    endpoint_name: Optional[str]
    tag: Optional[str]
    status: Optional[float]
    quantization: Optional[str]
    context_length: Optional[float]
    max_completion_tokens: Optional[float]
    max_prompt_tokens: Optional[float]
    prompt_cost_per_token: Optional[float]
    completion_cost_per_token: Optional[float]
    prompt_cost_per_1m: Optional[float]
    completion_cost_per_1m: Optional[float]
    supports_implicit_caching: bool
    uptime_last_30m: Optional[float]
    source_model_pricing_prompt: Optional[float]
    source_model_pricing_completion: Optional[float]
    extracted_at: str

    @property
    def is_active(self) -> bool:
        return self.status == 0

    @property
    def has_pricing(self) -> bool:
        return self.prompt_cost_per_token is not None and self.completion_cost_per_token is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ProviderSnapshot:
    provider_name: str
    generated_at: str
    model_count: int
    variant_count: int
    # model_id -> {"selected": EndpointRow | None, "variants": [EndpointRow]}
    models: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    source: str = SOURCE_NAME

    def to_dict(self) -> Dict[str, Any]:
        models = {}
        for model_id, entry in self.models.items():
            selected = entry["selected"]
            models[model_id] = {
                "selected": selected.to_dict() if selected is not None else None,
                "variants": [v.to_dict() for v in entry["variants"]],
            }
        return {
            "generated_at": self.generated_at,
            "source": self.source,
            "provider_name": self.provider_name,
            "model_count": self.model_count,
            "variant_count": self.variant_count,
            "models": models,
        }


@dataclass
class RunSummary:
    generated_at: str
    started_at: str
    settings: Dict[str, Any]
    catalog_model_count: int
    scanned_model_count: int
    successful_endpoint_requests: int
    failed_endpoint_requests: int
    extracted_endpoint_rows: int
    errors: List[Dict[str, str]] = field(default_factory=list)
    rows: List[EndpointRow] = field(default_factory=list)
    source: str = SOURCE_NAME

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "catalog_model_count": self.catalog_model_count,
            "scanned_model_count": self.scanned_model_count,
            "successful_endpoint_requests": self.successful_endpoint_requests,
            "failed_endpoint_requests": self.failed_endpoint_requests,
            "extracted_endpoint_rows": self.extracted_endpoint_rows,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "started_at": self.started_at,
            "source": self.source,
            "settings": dict(self.settings),
            "summary": self.summary,
            "errors": list(self.errors),
            "rows": [r.to_dict() for r in self.rows],
        }
