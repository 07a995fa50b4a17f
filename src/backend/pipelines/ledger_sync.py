from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Protocol

from adapters.toshl.records import (
    accounts_from_records,
    categories_from_records,
    entries_from_records,
    entry_to_record,
    tags_from_records,
)
from common.rules_engine.config import load_rule_set
from common.rules_engine.context import LedgerContext
from common.rules_engine.models import DiffScalar, FieldChange
from common.rules_engine.runner import EntryChange, RulesRunner, apply_diff
from connectors.toshl.client import FetchResult

from .sync_state import SyncState, advance_state, load_state, resolve_state, save_state


logger = logging.getLogger(__name__)


class LedgerService(Protocol):
    def fetch_all(self, resource: str, query: dict[str, Any] | None = None) -> FetchResult:
        """Return every record of a resource across all pages plus the final watermark."""
        ...

    def replace(self, resource: str, record_id: str, record: dict[str, Any]) -> dict[str, Any]:
        """Overwrite one record in full."""
        ...


@dataclass
class SyncReport:
    fetched: int = 0
    changes: list[EntryChange] = field(default_factory=list)
    applied: int = 0
    dry_run: bool = False
    state: SyncState = field(default_factory=SyncState)
    state_saved: bool = False

    def summary(self) -> str:
        if not self.changes:
            return "No changes."
        if self.dry_run:
            return f"{len(self.changes)} change(s) pending (dry run)."
        return f"{self.applied} change(s) applied."


def run_ledger_sync(
    service: LedgerService,
    *,
    rules_path: str | Path,
    state_path: str | Path,
    start: date,
    end: date,
    dry_run: bool = False,
    full: bool = False,
    echo: Callable[[str], None] = print,
) -> SyncReport:
    """
    Fetch entries changed since the stored cursor, diff them against the rule set,
    and print (dry run) or apply the changes.

    The cursor is only advanced and saved after every change was applied, so a
    failed run re-fetches the same range next time.
    """
    rule_set = load_rule_set(rules_path)
    state = resolve_state(load_state(state_path), rule_set.rules_hash)
    report = SyncReport(dry_run=dry_run, state=state)

    query = {
        "from": start.isoformat(),
        "to": end.isoformat(),
        "since": None if full else state.since,
    }
    fetched = service.fetch_all("entries", query)
    entries = entries_from_records(fetched.records)
    report.fetched = len(entries)
    if not entries:
        logger.info("No entries changed since %s", state.since or start.isoformat())
        return report

    ctx = LedgerContext.build(
        accounts=accounts_from_records(service.fetch_all("accounts").records),
        categories=categories_from_records(service.fetch_all("categories").records),
        tags=tags_from_records(service.fetch_all("tags").records),
    )

    report.changes = RulesRunner(rule_set.rules).run(entries, ctx)
    logger.info("%d of %d entries need changes", len(report.changes), len(entries))

    for change in report.changes:
        echo(format_change(change))
        if dry_run:
            continue
        apply_diff(change.entry, change.diff)
        service.replace("entries", change.entry.id, entry_to_record(change.entry))
        report.applied += 1
        logger.debug("Updated entry %s", change.entry.id)

    if dry_run:
        return report

    report.state = advance_state(state, fetched.watermark)
    save_state(state_path, report.state)
    report.state_saved = True
    logger.info("Saved sync state to %s (since=%s)", state_path, report.state.since)
    return report


def format_change(change: EntryChange) -> str:
    entry = change.entry
    lines = [f"{entry.date.isoformat()}  {entry.amount:.2f} {entry.currency.code}  {entry.normalized_description}"]
    for field_name, field_change in change.diff.changes.items():
        lines.append(f"  {field_name}: {_format_side(field_change, 'old')} -> {_format_side(field_change, 'new')}")
    return "\n".join(lines)


def _format_side(change: FieldChange, side: str) -> str:
    value: DiffScalar = getattr(change, side).value
    if value is None:
        return "(none)"
    if isinstance(value, list):
        return "[" + ", ".join(value) + "]"
    return repr(value)
