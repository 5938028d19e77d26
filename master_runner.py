#!/usr/bin/env python3
import os
import sys
import argparse
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from harvest_config import (
    DEFAULT_CONCURRENCY, DEFAULT_OUT_DIR, DEFAULT_PROVIDERS, DEFAULT_RETRIES,
    DEFAULT_TIMEOUT_MS, HarvestConfig, build_config,
)
from endpoint_harvester import (
    build_catalog_index, catalog_model_ids, harvest, load_catalog, print_progress,
    select_model_ids,
)
from row_extractor import extract_rows
from variant_selection import build_provider_snapshots, build_run_summary
from snapshot_writer import print_summary, rows_to_frame, write_outputs
from database_integration import save_to_database
from pricing_types import CatalogLoadError, ConfigError, ProviderSnapshot, RunSummary


# ──────────────────────────────────────────────────────────────────────────────
def run_single_harvest(config: HarvestConfig, database_url: Optional[str] = None,
                       verbose: bool = True) -> Tuple[RunSummary, Dict[str, ProviderSnapshot]]:
    """
    Catalog -> endpoints -> rows -> snapshots -> files (-> database).

    Raises CatalogLoadError when the catalog is unreachable; per-model
    failures only show up in the summary's error list.
    """
    config.validate()
    start_dt = datetime.now(timezone.utc)
    started_at = start_dt.isoformat()

    if verbose:
        print("\n" + "=" * 70)
        print(f"START {started_at}")
        print("=" * 70 + "\n")
        print(f"Providers: {', '.join(config.providers)}")
        print(f"Concurrency: {config.concurrency}, Retries: {config.max_retries}, Timeout: {config.timeout_ms}ms")
        print("\nSTEP 1: load catalog")
        print("-" * 70 + "\n")

    catalog = load_catalog(config.timeout_ms, config.max_retries)
    catalog_index = build_catalog_index(catalog)
    model_ids = select_model_ids(catalog_model_ids(catalog), config.limit, config.dry_run)

    if verbose:
        print(f"Catalog size: {len(catalog)} models")
        print(f"Fetching endpoints for: {len(model_ids)} models")
        print("\nSTEP 2: harvest endpoints")
        print("-" * 70 + "\n")

    results = harvest(model_ids, config.concurrency, config.timeout_ms, config.max_retries,
                      on_progress=print_progress if verbose else None)

    rows = extract_rows(results, config.providers, catalog_index, started_at)
    snapshots = build_provider_snapshots(rows, config.providers)
    summary = build_run_summary(config.settings(), catalog, model_ids, results, rows, started_at)

    if verbose:
        print("\nSTEP 3: write snapshots")
        print("-" * 70 + "\n")

    df_rows = rows_to_frame(rows)
    raw_path, provider_paths = write_outputs(summary, snapshots, config.providers, config.out_dir)
    if verbose:
        print(f"Raw output: {raw_path}")
        for path in provider_paths:
            print(f"Provider output: {path}")
        print()
        print_summary(df_rows)

    # ── Persist to DB (non-blocking)
    if database_url:
        if verbose:
            print("\n" + "=" * 70)
            print("STEP 4: persist to DB")
            print("-" * 70 + "\n")
        try:
            save_to_database(df_rows, summary, database_url=database_url)
        except Exception as e:
            print(f"db persistence failed: {e}")

    end_dt = datetime.now(timezone.utc)
    if verbose:
        print(f"\nExtracted rows: {summary.extracted_endpoint_rows}, Errors: {summary.failed_endpoint_requests}")
        print(f"DONE in {(end_dt - start_dt).total_seconds():.1f}s")
        print("=" * 70 + "\n")

    return summary, snapshots


def run_scheduled_cron(config: HarvestConfig, database_url: Optional[str] = None,
                       verbose: bool = True) -> int:
    try:
        run_single_harvest(config, database_url=database_url, verbose=verbose)
        return 0
    except CatalogLoadError as e:
        print(f"fatal error: {e}")
        return 1
    except Exception as e:
        print(f"fatal error: {type(e).__name__}: {e}")
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Harvest OpenRouter provider endpoint pricing")
    parser.add_argument("--providers", type=str, default=DEFAULT_PROVIDERS,
                        help="comma-separated provider names")
    parser.add_argument("--concurrency", type=int, default=DEFAULT_CONCURRENCY)
    parser.add_argument("--retries", type=int, default=DEFAULT_RETRIES)
    parser.add_argument("--timeout-ms", type=int, default=DEFAULT_TIMEOUT_MS)
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument("--out-dir", type=str, default=str(DEFAULT_OUT_DIR))
    parser.add_argument("--db", type=str, default=None)
    parser.add_argument("--quiet", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    verbose = not args.quiet

    try:
        config = build_config(
            providers=args.providers,
            concurrency=args.concurrency,
            max_retries=args.retries,
            timeout_ms=args.timeout_ms,
            limit=args.limit,
            dry_run=args.dry_run,
            out_dir=args.out_dir,
        )
    except ConfigError as e:
        print(f"config error: {e}")
        return 1

    database_url = args.db or os.getenv("OPENROUTER_PRICING_DATABASE_URL")
    if verbose and database_url:
        print(f"DB URL: {database_url}")

    return run_scheduled_cron(config, database_url=database_url, verbose=verbose)


if __name__ == "__main__":
    sys.exit(main())
