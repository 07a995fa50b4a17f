from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .context import LedgerContext
from .models import Currency, Entry, EntryDiff, LinkedTransaction
from .rule import Rule


@dataclass(frozen=True)
class EntryChange:
    entry: Entry
    rule: Rule
    diff: EntryDiff


def first_match(rules: Sequence[Rule], entry: Entry, ctx: LedgerContext) -> Optional[Rule]:
    for rule in rules:
        if rule.matches(entry, ctx):
            return rule
    return None


class RulesRunner:
    def __init__(self, rules: Iterable[Rule]):
        self._rules = tuple(rules)

    def diff_entry(self, entry: Entry, ctx: LedgerContext) -> Optional[EntryChange]:
        rule = first_match(self._rules, entry, ctx)
        if rule is None:
            return None
        diff = rule.diff(entry, ctx)
        if not diff:
            return None
        return EntryChange(entry=entry, rule=rule, diff=diff)

    def run(self, entries: Iterable[Entry], ctx: LedgerContext) -> List[EntryChange]:
        changes = []
        for entry in entries:
            change = self.diff_entry(entry, ctx)
            if change is not None:
                changes.append(change)
        return changes


def apply_diff(entry: Entry, diff: EntryDiff) -> Entry:
    """Overwrite the entry's fields in place with the diff's new values."""
    description = diff.get("description")
    if description is not None:
        entry.description = description.new.value

    category = diff.get("category")
    if category is not None:
        entry.category = category.new.id

    tags = diff.get("tags")
    if tags is not None:
        entry.tags = list(tags.new.id or [])

    account = diff.get("account")
    if account is not None:
        if entry.transaction is None:
            entry.transaction = LinkedTransaction()
        entry.transaction.account = account.new.id
        if entry.transaction.currency is None:
            entry.transaction.currency = Currency.model_validate(entry.currency.model_dump())
        # Transfers carry neither category nor tags.
        entry.category = None
        entry.tags = None
    return entry
