"""Cron entry point for purging stale staged uploads."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

from imagecast.media.upload_store import UploadStore


@dataclass(slots=True)
class CleanupSummary:
    removed: int
    dry_run: bool


def perform_cleanup(
    *,
    upload_dir: Path,
    max_age: timedelta,
    dry_run: bool,
    reference_time: datetime | None = None,
) -> CleanupSummary:
    """Execute cleanup logic and return summary counters."""
    store = UploadStore(root=upload_dir)
    if dry_run:
        return CleanupSummary(removed=len(store.list_stale(max_age, reference_time)), dry_run=True)
    return CleanupSummary(removed=store.purge_stale(max_age, reference_time), dry_run=False)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remove staged uploads older than a cutoff.")
    parser.add_argument("--upload-dir", type=Path, default=None, help="Staging directory (defaults to config).")
    parser.add_argument("--max-age-hours", type=float, default=24.0, help="Delete files older than this.")
    parser.add_argument("--dry-run", action="store_true", help="Only report counts without deleting files.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    try:
        upload_dir = args.upload_dir
        if upload_dir is None:
            from imagecast.config import load_config

            upload_dir = load_config().upload_dir
        summary = perform_cleanup(
            upload_dir=upload_dir,
            max_age=timedelta(hours=args.max_age_hours),
            dry_run=args.dry_run,
        )
    except Exception as exc:
        print(f"cleanup failed: {exc}", file=sys.stderr)
        return 2

    if summary.dry_run:
        print(f"cleanup dry-run, uploads_stale={summary.removed}", file=sys.stdout)
    else:
        print(f"cleanup done, uploads_removed={summary.removed}", file=sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
