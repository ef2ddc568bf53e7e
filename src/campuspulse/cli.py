"""CLI entry point."""

from __future__ import annotations

import argparse
import os
from typing import List, Optional

from .app import PulseApp
from .config import PulseConfig, load_config
from .errors import SessionNotFoundError, ValidationError
from .metrics import format_summary_line
from .storage import parse_timestamp

DEFAULT_TAKE = 12
MAX_TAKE = 50


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="campuspulse")
    parser.add_argument(
        "--config", default="campuspulse_config.yml", help="Config file."
    )
    parser.add_argument("--data-file", help="Override the snapshot path.")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("sessions", help="List sessions by start time.")

    create_cmd = sub.add_parser("create", help="Create a session.")
    create_cmd.add_argument("--title", required=True, help="Session title.")
    create_cmd.add_argument("--speaker", help="Speaker name.")
    create_cmd.add_argument(
        "--start", help="Start time (ISO 8601). Defaults to one hour from now."
    )

    feedback_cmd = sub.add_parser("feedback", help="Submit feedback.")
    feedback_cmd.add_argument("code", help="Session code.")
    feedback_cmd.add_argument("--rating", type=int, required=True, help="1-5.")
    feedback_cmd.add_argument("--comment", help="Optional comment.")
    feedback_cmd.add_argument("--by", dest="submitted_by", help="Submitted by.")

    summary_cmd = sub.add_parser("summary", help="Print session summaries.")
    summary_cmd.add_argument("code", nargs="?", help="Only this session.")

    recent_cmd = sub.add_parser("recent", help="Show recent feedback.")
    recent_cmd.add_argument("code", help="Session code.")
    recent_cmd.add_argument("--take", type=int, default=DEFAULT_TAKE)

    watch_cmd = sub.add_parser("watch", help="Log summaries on a timer.")
    watch_cmd.add_argument("--interval", type=float, help="Seconds between ticks.")

    return parser


def _load(args: argparse.Namespace) -> PulseConfig:
    if os.path.exists(args.config):
        config = load_config(args.config)
    else:
        config = PulseConfig()
    if args.data_file:
        config.storage.data_file = os.path.abspath(args.data_file)
    return config


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    config = _load(args)
    if args.command == "watch" and args.interval:
        config.metrics.interval_seconds = args.interval
    app = PulseApp.create(config)
    repository = app.repository

    if args.command == "sessions":
        for session in repository.list_sessions():
            print(
                f"[{session.code}] {session.title} - {session.speaker} "
                f"({session.start_time.isoformat()})"
            )
        return 0

    if args.command == "create":
        start_time = parse_timestamp(args.start) if args.start else None
        try:
            session = repository.create_session(args.title, args.speaker, start_time)
        except ValidationError as exc:
            print(str(exc))
            return 1
        print(f"Created {session.code}: {session.title}")
        return 0

    if args.command == "feedback":
        if not args.code.strip():
            print("Session code is required.")
            return 1
        if not 1 <= args.rating <= 5:
            print("Rating must be between 1 and 5.")
            return 1
        try:
            feedback = app.submit_feedback(
                args.code, args.rating, args.comment, args.submitted_by
            )
        except SessionNotFoundError:
            print("Session code not found.")
            return 1
        print(f"Recorded {feedback.id} (sentiment {feedback.sentiment_score:+d})")
        return 0

    if args.command == "summary":
        if args.code:
            summary = repository.get_summary(args.code)
            if summary is None:
                print("Session code not found.")
                return 1
            summaries = [summary]
        else:
            summaries = repository.list_summaries()
        for summary in summaries:
            print(format_summary_line(summary))
        return 0

    if args.command == "recent":
        if repository.get_session(args.code) is None:
            print("Session code not found.")
            return 1
        take = min(max(args.take, 1), MAX_TAKE)
        for entry in repository.list_feedback(args.code, take):
            comment = entry.comment or ""
            print(f"{entry.created_time.isoformat()} {entry.rating}/5 {comment}")
        return 0

    if args.command == "watch":
        app.metrics.start()
        print(f"Logging summaries every {config.metrics.interval_seconds:g}s. Ctrl+C to stop.")
        try:
            while not app.metrics.wait(1.0):
                pass
        except KeyboardInterrupt:
            pass
        finally:
            app.stop()
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
