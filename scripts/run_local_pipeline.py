from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from redis.asyncio import Redis

from vidsum.config import Settings
from vidsum.exceptions import TransitionError, UploadRejectedError
from vidsum.pipeline.factory import create_video_pipeline
from vidsum.utils.logging_setup import setup_logging


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the vidsum pipeline on a local video file.")
    parser.add_argument("--media", default=None, help="Path to local video file")
    parser.add_argument("--url", default=None, help="YouTube URL to ingest instead of a local file")
    parser.add_argument("--title", default=None, help="Record title (defaults to file name / remote title)")
    parser.add_argument(
        "--video-id",
        default=None,
        help="Resume an existing record instead of creating a new one",
    )
    parser.add_argument(
        "--stop-after",
        choices=["extract_audio", "transcribe", "summarize"],
        default="summarize",
        help="Last transition to run",
    )
    return parser.parse_args()


async def _run() -> int:
    args = _parse_args()
    if sum(bool(x) for x in (args.media, args.url, args.video_id)) != 1:
        raise SystemExit("Provide exactly one of --media, --url or --video-id")

    settings = Settings()
    setup_logging(settings)
    redis = Redis.from_url(settings.redis_url, decode_responses=True)
    pipeline, service = create_video_pipeline(settings, redis)
    try:
        if args.media:
            media_path = Path(args.media)
            if not media_path.exists():
                raise SystemExit(f"Media not found: {media_path}")
            record = await service.import_file(str(media_path), title=args.title)
        elif args.url:
            record = (await pipeline.ingest_from_url(str(args.url), args.title)).record
        else:
            found = await service.get(str(args.video_id))
            if found is None:
                raise SystemExit(f"Video not found: {args.video_id}")
            record = found
        print(f"video_id={record.id} stage={record.stage.value}")

        for name in ("extract_audio", "transcribe", "summarize"):
            result = await getattr(pipeline, name)(record.id)
            print(f"{name}: stage={result.stage.value} already_done={result.already_done}")
            if name == args.stop_after:
                break

        final = await service.get(record.id)
        if final is not None:
            print(json.dumps(final.to_public_dict(), ensure_ascii=False, indent=2))
        return 0
    except (TransitionError, UploadRejectedError) as exc:
        print(f"failed: {exc.error_code.value}: {exc}")
        return 1
    finally:
        await pipeline.close()
        await redis.aclose()


def main() -> None:
    raise SystemExit(asyncio.run(_run()))


if __name__ == "__main__":
    main()
