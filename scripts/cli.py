"""Minimal CLI entry point for manual testing of the Gmail OTP reader."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from gmail_otp.config.settings import GmailOtpSettings
from gmail_otp.core.exceptions import AttemptsExhaustedError, SessionInvalidError
from gmail_otp.core.models import AcquisitionProgress
from gmail_otp.pipeline.reader import GmailOtpReader


def setup_logging(level: str) -> None:
    """Configure logging with timestamp and module info."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def on_progress(progress: AcquisitionProgress) -> None:
    """Print progress updates to stdout."""
    print(
        f"[{progress.state.value}] "
        f"attempt={progress.attempt}/{progress.max_attempts} "
        f"candidates={progress.candidates_seen} "
        f"fetched={progress.messages_fetched}",
        end="\r",
        flush=True,
    )


def _add_acquisition_args(subparser: argparse.ArgumentParser) -> None:
    """Add the per-call acquisition overrides to a subparser."""
    subparser.add_argument("--query", "-q", help="Gmail search filter (default: from settings)")
    subparser.add_argument(
        "--max-age",
        type=float,
        default=None,
        dest="max_age_minutes",
        help="Only consider messages received within this many minutes",
    )
    subparser.add_argument(
        "--attempts",
        type=int,
        default=None,
        dest="max_attempts",
        help="Maximum polling rounds",
    )
    subparser.add_argument(
        "--delay",
        type=float,
        default=None,
        dest="attempt_delay_seconds",
        help="Seconds to wait between rounds",
    )
    subparser.add_argument("--pattern", help="Regex for the code; group 1 is returned")
    subparser.add_argument(
        "--header",
        default=None,
        dest="match_header",
        help="Match against this header (e.g. Subject) instead of the body",
    )
    subparser.add_argument(
        "--no-mark",
        action="store_false",
        default=None,
        dest="mark_consumed",
        help="Leave matched messages unread",
    )


def _validate_acquisition_args(args: argparse.Namespace) -> None:
    """Reject non-positive budgets and negative windows."""
    if args.max_attempts is not None and args.max_attempts <= 0:
        print("Error: --attempts must be positive", file=sys.stderr)
        sys.exit(1)
    if args.attempt_delay_seconds is not None and args.attempt_delay_seconds < 0:
        print("Error: --delay must be non-negative", file=sys.stderr)
        sys.exit(1)
    if args.max_age_minutes is not None and args.max_age_minutes < 0:
        print("Error: --max-age must be non-negative", file=sys.stderr)
        sys.exit(1)


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Collect acquisition overrides given on the command line."""
    return {
        "query": args.query,
        "max_age_minutes": args.max_age_minutes,
        "max_attempts": args.max_attempts,
        "attempt_delay_seconds": args.attempt_delay_seconds,
        "pattern": args.pattern,
        "match_header": args.match_header,
        "mark_consumed": args.mark_consumed,
    }


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        description="Gmail OTP Reader - Poll a Gmail inbox for one-time passcodes"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    get_code_parser = subparsers.add_parser("get-code", help="Wait for a code and print it")
    _add_acquisition_args(get_code_parser)

    check_parser = subparsers.add_parser(
        "check", help="Verify the Gmail connection with a short acquisition"
    )
    _add_acquisition_args(check_parser)
    check_parser.set_defaults(max_attempts=3, attempt_delay_seconds=2.0, max_age_minutes=5.0)

    search_parser = subparsers.add_parser("search", help="List messages matching a query")
    search_parser.add_argument("--query", "-q", default="", help="Gmail search query")
    search_parser.add_argument("--limit", type=int, default=10, help="Maximum messages to list")

    return parser


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command in ("get-code", "check"):
        _validate_acquisition_args(args)
    if args.command == "search" and args.limit <= 0:
        print("Error: --limit must be positive", file=sys.stderr)
        sys.exit(1)

    settings = GmailOtpSettings()
    setup_logging(settings.log_level)

    reader = GmailOtpReader(settings=settings, on_progress=on_progress)

    try:
        if args.command == "get-code":
            code = reader.get_code(**_overrides(args))
            print(f"\n{code}")

        elif args.command == "check":
            try:
                code = reader.get_code(**_overrides(args))
            except AttemptsExhaustedError:
                print("\n\nConnection works (no matching code in the window - this is normal)")
            else:
                print(f"\n\nConnection works, found code: {code}")

        elif args.command == "search":
            messages = reader.list_candidates(args.query, args.limit)
            print(f"\nFound {len(messages)} messages:\n")
            for msg in messages:
                date = msg.internal_date.strftime("%Y-%m-%d %H:%M:%S") if msg.internal_date else "?"
                print(f"  {msg.message_id:20s} {date}  {msg.subject}")

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
    except SessionInvalidError as e:
        print(f"\nError: {e}", file=sys.stderr)
        print(
            "Re-authorise the Gmail account and update the token file "
            f"({settings.token_path}).",
            file=sys.stderr,
        )
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
