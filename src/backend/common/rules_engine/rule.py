from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .context import LedgerContext
from .matcher import Matcher
from .models import DiffValue, Entry, EntryDiff, FieldChange, normalize_description


def _description_diff(replacement: Optional[str], entry: Entry) -> EntryDiff:
    current = entry.normalized_description
    if replacement is None or normalize_description(replacement) == current:
        return EntryDiff()
    return EntryDiff(
        changes={
            "description": FieldChange(
                old=DiffValue(value=current),
                new=DiffValue(value=replacement),
            )
        }
    )


def _category_diff(name: Optional[str], entry: Entry, ctx: LedgerContext) -> EntryDiff:
    if name is None:
        return EntryDiff()
    target_id = ctx.categories.resolve(name, entry.kind)
    if target_id == entry.category:
        return EntryDiff()
    return EntryDiff(
        changes={
            "category": FieldChange(
                old=DiffValue(id=entry.category, value=ctx.categories.name_for(entry.category)),
                new=DiffValue(id=target_id, value=name),
            )
        }
    )


def _tags_diff(names: Optional[Tuple[str, ...]], entry: Entry, ctx: LedgerContext) -> EntryDiff:
    if names is None:
        return EntryDiff()
    target_ids = [ctx.tags.resolve(name, entry.kind) for name in names]
    current_ids = list(entry.tags or [])
    if set(target_ids) == set(current_ids):
        return EntryDiff()
    return EntryDiff(
        changes={
            "tags": FieldChange(
                old=DiffValue(id=current_ids, value=[ctx.tags.name_for(tag_id) for tag_id in current_ids]),
                new=DiffValue(id=target_ids, value=list(names)),
            )
        }
    )


def _account_diff(name: Optional[str], entry: Entry, ctx: LedgerContext) -> EntryDiff:
    if name is None:
        return EntryDiff()
    target_id = ctx.accounts.resolve(name)
    linked_account = entry.transaction.account if entry.transaction is not None else None
    # Either leg of the transfer already on the target account counts as compliant.
    if target_id == linked_account or target_id == entry.account:
        return EntryDiff()
    return EntryDiff(
        changes={
            "account": FieldChange(
                old=DiffValue(id=linked_account, value=ctx.accounts.name_for(linked_account)),
                new=DiffValue(id=target_id, value=name),
            )
        }
    )


@dataclass(frozen=True)
class EntryRule:
    """Recategorize and retag matching entries."""

    matcher: Matcher
    description: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[Tuple[str, ...]] = None
    position: int = 0

    def matches(self, entry: Entry, ctx: LedgerContext) -> bool:
        return self.matcher.matches(entry, ctx)

    def diff(self, entry: Entry, ctx: LedgerContext) -> EntryDiff:
        return (
            _description_diff(self.description, entry)
            .merge(_category_diff(self.category, entry, ctx))
            .merge(_tags_diff(self.tags, entry, ctx))
        )


@dataclass(frozen=True)
class TransferRule:
    """Turn matching entries into transfers to the named account."""

    matcher: Matcher
    account: str
    description: Optional[str] = None
    position: int = 0

    def matches(self, entry: Entry, ctx: LedgerContext) -> bool:
        return self.matcher.matches(entry, ctx)

    def diff(self, entry: Entry, ctx: LedgerContext) -> EntryDiff:
        return _description_diff(self.description, entry).merge(_account_diff(self.account, entry, ctx))


Rule = Union[EntryRule, TransferRule]
