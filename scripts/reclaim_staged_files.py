#!/usr/bin/env python3
"""Reclaim staged video/audio files whose record is gone or has moved past them."""

from __future__ import annotations

import argparse
import asyncio

from redis.asyncio import Redis

from vidsum.config import Settings
from vidsum.pipeline.factory import create_video_store
from vidsum.pipeline.reclaim import reclaim_staged_files
from vidsum.storage import get_staging_area


async def _run(*, dry_run: bool, min_age_s: float) -> int:
    settings = Settings()
    redis = Redis.from_url(settings.redis_url, decode_responses=True)
    try:
        store = create_video_store(settings, redis)
        staging = get_staging_area(settings)
        report = await reclaim_staged_files(store, staging, dry_run=dry_run, min_age_s=min_age_s)

        print(f"Staged files: {report.scanned}")
        print(f"Kept: {report.kept}")
        if not report.reclaimed:
            print("No staged files to reclaim.")
        for staged in report.reclaimed:
            prefix = "[DRY-RUN] Would delete" if dry_run else "Deleted"
            print(f"{prefix}: {staged.path} ({staged.kind}, {staged.video_id})")
        for err in report.errors:
            print(f"Error: {err}")
        return 1 if report.errors else 0
    finally:
        await redis.aclose()


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--dry-run", action="store_true", help="Only list, don't delete")
    parser.add_argument(
        "--min-age-s",
        type=float,
        default=3600.0,
        help="Skip files modified more recently than this (protects in-flight transitions)",
    )
    args = parser.parse_args()
    raise SystemExit(asyncio.run(_run(dry_run=bool(args.dry_run), min_age_s=float(args.min_age_s))))


if __name__ == "__main__":
    main()
