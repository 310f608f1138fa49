"""Command line entry point printing the mood calendar."""

from __future__ import annotations

import argparse
import asyncio
from datetime import date
from pathlib import Path
import sys
from typing import Sequence

from moodcal.client import CalendarApiClient
from moodcal.config import AppConfig, load_config
from moodcal.errors import UploadFailed
from moodcal.logging import configure_logging, get_logger
from moodcal.models import ViewedMonth
from moodcal.pipeline import CalendarPipeline
from moodcal.render import render_calendar, render_detail
from moodcal.session import FsTokenStore, SessionStore
from moodcal.sources import CalendarDataSource, DemoDataSource, RemoteDataSource

logger = get_logger(__name__)

EX_USAGE = 64
EX_UNAVAILABLE = 69


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="moodcal", description="Mood calendar")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command")

    show = subparsers.add_parser("show", help="Print the calendar for a month")
    show.add_argument("--month", type=ViewedMonth.parse, default=None, help="YYYY-MM")
    show.add_argument("--day", type=date.fromisoformat, default=None, help="YYYY-MM-DD")
    show.add_argument("--demo", action="store_true", help="Use synthetic data")
    show.add_argument("--token", default=None, help="Store this access token first")
    show.add_argument("--upload", type=Path, default=None, help="Upload a history file first")

    callback = subparsers.add_parser("callback", help="Serve the OAuth callback endpoint")
    callback.add_argument("--port", type=int, default=None)
    return parser


def _build_source(config: AppConfig, *, demo: bool) -> CalendarDataSource:
    if demo or config.demo_mode:
        return DemoDataSource()
    return RemoteDataSource(CalendarApiClient.from_config(config.api))


async def _show(args: argparse.Namespace, config: AppConfig) -> int:
    store = SessionStore(FsTokenStore(config.session.token_file))
    pipeline = CalendarPipeline(
        _build_source(config, demo=args.demo),
        session_store=store,
        month=args.month,
    )
    await pipeline.start()
    try:
        if args.token:
            pipeline.authenticate(args.token)
        if args.upload is not None:
            try:
                await pipeline.upload(args.upload.name, args.upload.read_bytes())
            except (OSError, UploadFailed) as exc:
                print(f"Upload failed: {exc}", file=sys.stderr)
                return EX_UNAVAILABLE
        if args.day is not None:
            pipeline.show_month(ViewedMonth.from_date(args.day))
            pipeline.select_day(args.day)
        await pipeline.settle()

        print(render_calendar(pipeline.viewed_month, pipeline.calendar_view))
        if pipeline.recently_played:
            print(f"\nRecently played: {pipeline.recently_played}")
        if args.day is not None:
            print()
            print(render_detail(pipeline.day_detail))
        if not pipeline.session.is_authenticated and not (args.demo or config.demo_mode):
            print("\nNot signed in; run `moodcal callback` and complete the sign-in.")
    finally:
        await pipeline.aclose()
    return 0


def _serve_callback(args: argparse.Namespace, config: AppConfig) -> int:
    import uvicorn

    from moodcal.oauth_callback import create_callback_app

    port = args.port or config.oauth.callback_port
    store = SessionStore(FsTokenStore(config.session.token_file))
    app = create_callback_app(store, callback_url=f"http://127.0.0.1:{port}/callback")
    logger.info("Serving OAuth callback on port %s", port)
    uvicorn.run(app, host="127.0.0.1", port=port, log_level="warning")
    return 0


def _cli(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    config = load_config()
    configure_logging(config.logging, level=args.log_level)

    if args.command == "callback":
        return _serve_callback(args, config)
    if args.command == "show":
        return asyncio.run(_show(args, config))
    parser.print_help()
    return EX_USAGE


def main() -> None:
    raise SystemExit(_cli())


if __name__ == "__main__":  # pragma: no cover
    main()
