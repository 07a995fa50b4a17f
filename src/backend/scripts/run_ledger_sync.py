from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date, timedelta
from pathlib import Path


DEFAULT_LOOKBACK_DAYS = 365


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


def _setup_logging(verbose: bool) -> None:
    level = "INFO" if verbose else os.getenv("LEDGER_SYNC_LOG_LEVEL", "WARNING").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r} (expected YYYY-MM-DD)") from exc


def build_parser() -> argparse.ArgumentParser:
    _ensure_backend_on_path()
    from connectors.toshl.config import rules_path_from_env, state_path_from_env

    parser = argparse.ArgumentParser(
        description="Apply categorization and transfer rules to Toshl entries."
    )
    parser.add_argument(
        "--config",
        default=rules_path_from_env(),
        help="Rules file (YAML). Defaults to $TOSHL_RULES_PATH or rules.yaml.",
    )
    parser.add_argument(
        "--state",
        default=state_path_from_env(),
        help="Sync state file. Defaults to $TOSHL_STATE_PATH or .toshl_sync_state.json.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print pending changes without updating Toshl or the state file.",
    )
    parser.add_argument(
        "--from",
        dest="start",
        type=_parse_date,
        default=None,
        help=f"First entry date (YYYY-MM-DD). Defaults to {DEFAULT_LOOKBACK_DAYS} days ago.",
    )
    parser.add_argument(
        "--to",
        dest="end",
        type=_parse_date,
        default=None,
        help="Last entry date (YYYY-MM-DD). Defaults to today.",
    )
    parser.add_argument(
        "--full",
        action="store_true",
        help="Ignore the stored cursor and re-check the whole date range.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress at INFO level.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    from adapters.toshl.records import ToshlRecordError
    from common.rules_engine.errors import ConfigurationError, ReferenceResolutionError
    from connectors.toshl.client import TransportError
    from connectors.toshl.service import ToshlLedgerService
    from pipelines.ledger_sync import run_ledger_sync

    end = args.end or date.today()
    start = args.start or end - timedelta(days=DEFAULT_LOOKBACK_DAYS)
    if start > end:
        print(f"error: --from {start} is after --to {end}", file=sys.stderr)
        return 2

    try:
        report = run_ledger_sync(
            ToshlLedgerService(),
            rules_path=args.config,
            state_path=args.state,
            start=start,
            end=end,
            dry_run=args.dry_run,
            full=args.full,
        )
    except (ConfigurationError, ReferenceResolutionError, TransportError, ToshlRecordError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(report.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
