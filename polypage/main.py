"""
polypage - command-line entry point.

    polypage run                         # configured filter, all languages
    polypage run --languages fr es       # subset of languages
    polypage run --ids 5b44... 9f01...   # fixed allow-list
    polypage run --limit 10              # first 10 published rows
    polypage serve                       # HTTP API
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from polypage.config import configure_logging, get_settings
from polypage.config_loader import load_pipeline_config
from polypage.core.errors import PolypageError
from polypage.core.models import RunReport
from polypage.pipeline import create_pipeline
from polypage.services.orchestrator import AllowListFilter, PublishedFilter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polypage",
        description="Translate Notion database pages into per-language databases.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run the batch translation")
    run.add_argument("--config", help="Pipeline YAML (default: PIPELINE_CONFIG_PATH)")
    run.add_argument("--languages", nargs="+", help="Target language codes")
    selection = run.add_mutually_exclusive_group()
    selection.add_argument("--ids", nargs="+", help="Translate only these page ids")
    selection.add_argument("--limit", type=int, help="First N published pages")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Bind address (default: API_HOST)")
    serve.add_argument("--port", type=int, help="Port (default: API_PORT)")
    return parser


def print_report(report: RunReport) -> None:
    print("=" * 60)
    print(f"Run started: {report.started_at}")
    print(f"Succeeded: {len(report.success_messages)}")
    for message in report.success_messages:
        print(f"  ✓ {message}")
    print(f"Failed: {len(report.error_messages)}")
    for message in report.error_messages:
        print(f"  ✗ {message}")
    if report.skipped:
        print(f"Skipped (already recorded): {len(report.skipped)}")
        for document_id in report.skipped:
            print(f"  • {document_id}")
    print("=" * 60)


async def run_batch(args: argparse.Namespace) -> int:
    settings = get_settings()
    config = load_pipeline_config(args.config or settings.pipeline_config_path)

    filter_policy = config.filter
    if args.ids:
        filter_policy = AllowListFilter(ids=args.ids)
    elif args.limit is not None:
        filter_policy = PublishedFilter(limit=args.limit)

    async with create_pipeline(config, settings) as pipeline:
        report = await pipeline.run(filter_policy, args.languages)

    print_report(report)
    return 1 if report.has_failures else 0


def serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "polypage.api.app:app",
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging()

    if args.command == "serve":
        return serve(args)

    try:
        return asyncio.run(run_batch(args))
    except PolypageError as e:
        logger.error(f"Critical error: {e}")
        return 2
    except Exception as e:
        logger.exception(f"Critical error: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
