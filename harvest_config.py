"""
Harvest Configuration
=====================

Run settings for the OpenRouter provider pricing harvest. Defaults are read
from the environment; the runner's CLI flags override them.

Environment
-----------
OPENROUTER_PROVIDERS    comma-separated provider names (default: mistral,nebius)
OPENROUTER_CONCURRENCY  concurrent endpoint lookups (default: 8)
OPENROUTER_RETRIES      extra attempts per request (default: 3)
OPENROUTER_TIMEOUT_MS   per-attempt timeout in ms (default: 20000)
OPENROUTER_OUT_DIR      output directory (default: data)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

from pricing_types import ConfigError

DEFAULT_PROVIDERS = os.getenv("OPENROUTER_PROVIDERS", "mistral,nebius")
DEFAULT_CONCURRENCY = int(os.getenv("OPENROUTER_CONCURRENCY", "8"))
DEFAULT_RETRIES = int(os.getenv("OPENROUTER_RETRIES", "3"))
DEFAULT_TIMEOUT_MS = int(os.getenv("OPENROUTER_TIMEOUT_MS", "20000"))
DEFAULT_OUT_DIR = Path(os.getenv("OPENROUTER_OUT_DIR", "data"))

MIN_TIMEOUT_MS = 1000


def parse_providers(raw: Optional[str]) -> Tuple[str, ...]:
    """'Mistral, nebius,,' -> ('mistral', 'nebius'), first occurrence wins."""
    out = []
    for part in str(raw or "").split(","):
        name = part.strip().lower()
        if name and name not in out:
            out.append(name)
    return tuple(out)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class HarvestConfig:
    providers: Tuple[str, ...] = parse_providers(DEFAULT_PROVIDERS)
    concurrency: int = DEFAULT_CONCURRENCY
    max_retries: int = DEFAULT_RETRIES
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    limit: Optional[int] = None
    dry_run: bool = False
    out_dir: Path = DEFAULT_OUT_DIR

    def validate(self) -> "HarvestConfig":
        if not _is_int(self.concurrency) or self.concurrency < 1:
            raise ConfigError("concurrency must be an integer >= 1")
        if not _is_int(self.max_retries) or self.max_retries < 0:
            raise ConfigError("retries must be an integer >= 0")
        if not _is_int(self.timeout_ms) or self.timeout_ms < MIN_TIMEOUT_MS:
            raise ConfigError(f"timeout-ms must be an integer >= {MIN_TIMEOUT_MS}")
        if self.limit is not None and (not _is_int(self.limit) or self.limit < 1):
            raise ConfigError("limit must be an integer >= 1")
        if not self.providers:
            raise ConfigError("providers must include at least one provider name")
        return self

    def settings(self) -> Dict[str, Any]:
        """Settings echoed into the raw run output."""
        return {
            "providers": list(self.providers),
            "concurrency": self.concurrency,
            "retries": self.max_retries,
            "timeout_ms": self.timeout_ms,
            "dry_run": self.dry_run,
            "limit": self.limit,
        }


def build_config(providers: Optional[Iterable[str]] = None, **overrides) -> HarvestConfig:
    """
    Build and validate a config. `providers` may be a comma-separated string
    or an iterable of names; either way names are trimmed and lower-cased.
    """
    kwargs = {k: v for k, v in overrides.items() if v is not None}
    if providers is not None:
        raw = providers if isinstance(providers, str) else ",".join(str(p) for p in providers)
        kwargs["providers"] = parse_providers(raw)
    if "out_dir" in kwargs:
        kwargs["out_dir"] = Path(kwargs["out_dir"])
    return HarvestConfig(**kwargs).validate()
