"""
Quick local helper: runs a JSON batch of product events through the pipeline.

By default this uses the configured object store, catalog and notification
endpoint. With --dry-run it only fetches and renders thumbnails, writing them
to --output-dir instead.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

# Ensure project root is importable when running from scripts/
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from thumbnail_service import config
from thumbnail_service.fetcher import ImageFetcher
from thumbnail_service.imaging import detect_format, resize
from thumbnail_service.models import InboundEvent
from thumbnail_service.queue_worker import process_batch, summarize


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run product events through the thumbnail pipeline")
    parser.add_argument("--input", required=True, help="Path to a JSON array of events")
    parser.add_argument("--dry-run", action="store_true", help="Only fetch and resize; skip store/catalog/notify")
    parser.add_argument("--output-dir", default="thumbnails", help="Where --dry-run writes thumbnails")
    parser.add_argument("--workers", type=int, default=None, help="Override MAX_CONCURRENCY")
    return parser.parse_args()


def dry_run(events: list, output_dir: Path, settings: config.Settings) -> None:
    fetcher = ImageFetcher(timeout=settings.timeout, max_bytes=settings.max_image_bytes)
    output_dir.mkdir(parents=True, exist_ok=True)
    for raw in events:
        event = InboundEvent.model_validate(raw)
        if not event.blob_url:
            print(f"{event.identity}: skipped (no blobUrl)")
            continue
        payload = fetcher.fetch(event.blob_url)
        if detect_format(payload) is None:
            print(f"{event.identity}: skipped (unsupported format)")
            continue
        thumb = resize(payload, settings.thumbnail_width, settings.thumbnail_height, settings.jpeg_quality)
        target = output_dir / f"{event.brand}-{event.name}.jpg"
        target.write_bytes(thumb)
        print(f"{event.identity}: wrote {target}")


def main() -> None:
    args = parse_args()
    settings = config.get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")
    events = json.loads(input_path.read_text())

    if args.dry_run:
        dry_run(events, Path(args.output_dir), settings)
        return

    outcomes = process_batch(events, max_workers=args.workers)
    for outcome in outcomes:
        reason = outcome.reason.value if outcome.reason else "-"
        print(f"{outcome.identity}: {outcome.status.value} {reason} {outcome.image_url or ''}")
    print(json.dumps(summarize(outcomes), indent=2))


if __name__ == "__main__":
    main()
