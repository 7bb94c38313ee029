import argparse
import asyncio
import dataclasses
import json
import sys
from pathlib import Path

from docingest.config.settings import Settings
from docingest.logging.logger import Log
from docingest.processor.exceptions import FileReadError
from docingest.processor.file_loader import FileLoader
from docingest.processor.models import IngestionResult, ProgressEvent
from docingest.processor.processor import build_processor
from docingest.storage.factory import ChunkStoreFactory


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="docingest",
        description="Extract, chunk, embed and store a single document.",
    )
    parser.add_argument("path", type=Path, help="document to ingest")
    parser.add_argument("--document-id", required=True, help="id stored with every chunk")
    parser.add_argument("--mime-type", default=None, help="override the guessed mime type")
    parser.add_argument("--ocr", action="store_true", help="allow OCR for scanned pages")
    parser.add_argument(
        "--background",
        action="store_true",
        help="lift the sync OCR page limit up to the background one",
    )
    return parser.parse_args(argv)


def _log_progress(event: ProgressEvent) -> None:
    Log.debug(f"Progress: {event.phase} {event.current}/{event.total}")


def to_json(result: IngestionResult) -> str:
    return json.dumps(dataclasses.asdict(result), indent=2, ensure_ascii=False)


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> build dependencies -> ingest one file."""
    args = parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    try:
        document = FileLoader().load(args.path, args.mime_type)
    except FileReadError as exc:
        Log.error(str(exc))
        return 1

    store = ChunkStoreFactory.create(settings)
    try:
        processor = build_processor(settings, store=store)
        config = dataclasses.replace(
            processor.default_config,
            ocr_enabled=args.ocr or settings.ocr_enabled,
            background=args.background,
        )
        result = asyncio.run(
            processor.ingest(document, args.document_id, config, on_progress=_log_progress)
        )
    finally:
        store.close()

    print(to_json(result))
    return 0 if result.extracted.success else 2


if __name__ == "__main__":
    sys.exit(main())
