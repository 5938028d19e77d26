"""
Snapshot Writer
===============

File sink for a finished harvest:

- openrouter-provider-endpoints.raw.json   run summary (settings, counts, errors, rows)
- <provider>-provider-pricing.json         one per configured provider
- openrouter-provider-endpoints.rows.csv   flat row table
"""

import json
from dataclasses import fields
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from pricing_types import EndpointRow, ProviderSnapshot, RunSummary

RAW_FILENAME = "openrouter-provider-endpoints.raw.json"
ROWS_CSV_FILENAME = "openrouter-provider-endpoints.rows.csv"

ROW_COLUMNS = [f.name for f in fields(EndpointRow)]


def provider_filename(provider: str) -> str:
    return f"{provider}-provider-pricing.json"


def rows_to_frame(rows: Sequence[EndpointRow]) -> pd.DataFrame:
    """Rows as a DataFrame with a stable column order (empty frame keeps the columns)."""
    return pd.DataFrame([r.to_dict() for r in rows], columns=ROW_COLUMNS)


def _write_json(path: Path, obj) -> None:
    path.write_text(json.dumps(obj, indent=2))


def write_outputs(summary: RunSummary, snapshots: Dict[str, ProviderSnapshot],
                  providers: Sequence[str], out_dir: Path) -> Tuple[Path, List[Path]]:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    raw_path = out_dir / RAW_FILENAME
    _write_json(raw_path, summary.to_dict())

    rows_to_frame(summary.rows).to_csv(out_dir / ROWS_CSV_FILENAME, index=False)

    provider_paths = []
    for provider in providers:
        snapshot = snapshots.get(provider) or ProviderSnapshot(
            provider_name=provider,
            generated_at=summary.generated_at,
            model_count=0,
            variant_count=0,
        )
        path = out_dir / provider_filename(provider)
        _write_json(path, snapshot.to_dict())
        provider_paths.append(path)

    return raw_path, provider_paths


def print_summary(df: pd.DataFrame):
    if df.empty:
        print("No endpoint rows extracted"); return
    print("Provider Summary:")
    print("-" * 70)
    for provider in sorted(df["provider_name"].str.lower().unique()):
        pdf = df[df["provider_name"].str.lower() == provider]
        priced = pdf.dropna(subset=["prompt_cost_per_1m", "completion_cost_per_1m"])
        print(f"  {provider:18} {pdf['model_id'].nunique()} models | {len(pdf)} variants")
        if not priced.empty:
            print(f"  {'':18} prompt ${priced['prompt_cost_per_1m'].min():.4f}-${priced['prompt_cost_per_1m'].max():.4f}/1M"
                  f" | completion ${priced['completion_cost_per_1m'].min():.4f}-${priced['completion_cost_per_1m'].max():.4f}/1M")
