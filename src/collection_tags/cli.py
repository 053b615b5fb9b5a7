"""
Command-line interface for collection tags.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from collection_tags.clients import MemoryLibrary, create_library
from collection_tags.config import Config, get_config
from collection_tags.models import ReconcileSummary
from collection_tags.services.common.operation_result import (
    operation_error,
    operation_success,
)
from collection_tags.services.scheduler import TagScheduler
from collection_tags.services.task import CollectionTagTask
from collection_tags.settings import TaggingSettings
from collection_tags.utils.errors import CollectionTagsError
from collection_tags.utils.logging_config import get_log_level, initialize_logging

logger = logging.getLogger(__name__)


def obfuscate_sensitive_value(value: str | None, keep_chars: int = 4) -> str | None:
    """Obfuscate sensitive values by showing only the first few characters."""
    if not value or not isinstance(value, str):
        return value
    if len(value) <= keep_chars:
        return "*" * len(value)
    return value[:keep_chars] + "*" * (len(value) - keep_chars)


def add_output_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)",
    )


def add_library_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--library-file", help="JSON library snapshot (memory backend)")
    parser.add_argument("--prefix", help="Override the tag prefix")
    parser.add_argument("--collections", help="Override the comma-separated names")
    parser.add_argument(
        "--all-collections",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Tag members of every collection",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="collection-tags",
        description="Mirror collection membership into prefixed item tags",
    )
    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Also write logs to a dated file under ~/.cache/collection-tags/logs",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_cmd = subparsers.add_parser("run", help="Run one reconciliation")
    run_cmd.add_argument(
        "--dry-run",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Preview changes without updating (default: disabled)",
    )
    add_library_args(run_cmd)
    add_output_arg(run_cmd)

    plan_cmd = subparsers.add_parser("plan", help="List the updates a run would make")
    add_library_args(plan_cmd)
    add_output_arg(plan_cmd)

    post_scan = subparsers.add_parser(
        "post-scan", help="Fire the post-library-scan trigger once"
    )
    add_library_args(post_scan)
    add_output_arg(post_scan)

    schedule = subparsers.add_parser("schedule", help="Run on the interval trigger")
    schedule.add_argument(
        "--run-now", action="store_true", help="Run once before the first interval"
    )
    add_library_args(schedule)

    config_cmd = subparsers.add_parser("config", help="Show effective settings")
    add_output_arg(config_cmd)

    return parser


# -------------------- Helpers --------------------


def _load(args: argparse.Namespace) -> tuple[Config, TaggingSettings]:
    config = get_config()
    if getattr(args, "library_file", None):
        config = config.model_copy(
            update={"library_backend": "memory", "library_file": args.library_file}
        )

    overrides: dict[str, Any] = {}
    if getattr(args, "prefix", None) is not None:
        overrides["tag_prefix"] = args.prefix
    if getattr(args, "collections", None) is not None:
        overrides["collections_to_tag"] = args.collections
    if getattr(args, "all_collections", None) is not None:
        overrides["tag_all_collections"] = args.all_collections
    return config, TaggingSettings(**overrides)


def _summary_payload(
    operation: str, summary: ReconcileSummary | None
) -> dict[str, Any]:
    if summary is None:
        return operation_success(
            operation,
            {},
            message="Task not run",
        )
    message = None
    if summary.skipped_reason:
        message = f"Skipped: {summary.skipped_reason}"
    return operation_success(
        operation,
        summary.metrics(),
        message=message,
        dry_run=summary.dry_run,
        extra={
            "updates": [u.model_dump(mode="json") for u in summary.updates],
            "failures": [f.model_dump(mode="json") for f in summary.failures],
        },
    )


def emit(args: argparse.Namespace, payload: dict[str, Any]) -> None:
    if getattr(args, "output", "text") == "json":
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    if payload.get("error"):
        print(f"Error: {payload['error']}")
        return

    status = payload.get("status")
    if payload.get("message"):
        print(payload["message"])
    metrics = payload.get("metrics") or {}
    if metrics:
        print(
            f"{status}: "
            + ", ".join(f"{key}={value}" for key, value in metrics.items())
        )
    for update in payload.get("updates", []):
        changes = [f"+{t}" for t in update["added"]] + [
            f"-{t}" for t in update["removed"]
        ]
        print(f"  {update['item_id']} {update['item_name']}: {' '.join(changes)}")
    for failure in payload.get("failures", []):
        print(f"  FAILED {failure['item_id']}: {failure['error']}")
    if "settings" in payload:
        for key, value in payload["settings"].items():
            print(f"{key}: {value}")


def _exit_code(payload: dict[str, Any]) -> int:
    if payload.get("error"):
        return 1
    if payload.get("success") is False:
        return 1
    return 0


# -------------------- Commands --------------------


async def _run_once(
    args: argparse.Namespace, *, dry_run: bool, post_scan: bool = False
) -> ReconcileSummary | None:
    config, settings = _load(args)
    library = create_library(config)
    task = CollectionTagTask(library, settings)

    if post_scan:
        summary = await TagScheduler(task).on_library_scan_completed()
    else:
        summary = await task.run(dry_run=dry_run)

    if (
        isinstance(library, MemoryLibrary)
        and summary is not None
        and summary.updated
    ):
        path = library.save()
        logger.info(f"Saved library snapshot to {path}")
    return summary


async def _schedule(args: argparse.Namespace) -> None:
    config, settings = _load(args)
    task = CollectionTagTask(create_library(config), settings)
    before_run = after_run = None

    if isinstance(task.library, MemoryLibrary) and task.library.path is not None:
        path = task.library.path

        def before_run() -> None:
            # Pick up edits made to the snapshot between runs
            task.library = MemoryLibrary.load(path)

        def after_run(summary: ReconcileSummary) -> None:
            if summary.updated:
                task.library.save()
                logger.info(f"Saved library snapshot to {path}")

    scheduler = TagScheduler(task, before_run=before_run, after_run=after_run)
    try:
        await scheduler.run_forever(run_immediately=args.run_now)
    finally:
        await scheduler.stop()


def _show_config(args: argparse.Namespace) -> dict[str, Any]:
    config, settings = _load(args)
    shown = config.model_dump()
    shown["zotero_api_key"] = obfuscate_sensitive_value(shown["zotero_api_key"])
    shown["zotero_library_id"] = obfuscate_sensitive_value(
        shown["zotero_library_id"]
    )
    return operation_success(
        "config",
        {},
        extra={"settings": {**settings.model_dump(), **shown}},
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_config()
    initialize_logging(
        get_log_level(config.log_level, config.debug), log_file=args.log_file
    )

    operation = args.command
    try:
        if args.command == "config":
            payload = _show_config(args)
        elif args.command == "schedule":
            asyncio.run(_schedule(args))
            return 0
        else:
            summary = asyncio.run(
                _run_once(
                    args,
                    dry_run=args.command == "plan" or getattr(args, "dry_run", False),
                    post_scan=args.command == "post-scan",
                )
            )
            payload = _summary_payload(operation, summary)
    except CollectionTagsError as e:
        payload = operation_error(operation, str(e))
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130

    emit(args, payload)
    return _exit_code(payload)
