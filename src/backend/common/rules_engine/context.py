from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Generic, Hashable, Iterable, List, Optional, Tuple, TypeVar, Union

from .errors import ReferenceResolutionError
from .models import Account, Category, EntryKind, Tag


T = TypeVar("T", Account, Category, Tag)


def _kind_value(kind: Optional[Union[EntryKind, str]]) -> Optional[str]:
    if isinstance(kind, EntryKind):
        return kind.value
    return kind


@dataclass(frozen=True)
class Catalog(Generic[T]):
    """Read-only name -> identifier lookup for one reference resource.

    Accounts are keyed by name; categories and tags by (name, kind) since the
    same name may exist once for expenses and once for income.
    """

    label: str
    items: Tuple[T, ...] = ()
    keyed_by_kind: bool = False
    _by_key: Dict[Hashable, List[str]] = field(init=False, repr=False, compare=False)
    _by_id: Dict[str, T] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_key: Dict[Hashable, List[str]] = {}
        by_id: Dict[str, T] = {}
        for item in self.items:
            by_key.setdefault(self._key(item.name, getattr(item, "type", None)), []).append(item.id)
            by_id[item.id] = item
        object.__setattr__(self, "_by_key", by_key)
        object.__setattr__(self, "_by_id", by_id)

    def _key(self, name: str, kind: Optional[str]) -> Hashable:
        return (name, kind) if self.keyed_by_kind else name

    def resolve(self, name: str, kind: Optional[Union[EntryKind, str]] = None) -> str:
        kind_value = _kind_value(kind) if self.keyed_by_kind else None
        ids = self._by_key.get(self._key(name, kind_value), [])
        if not ids:
            raise ReferenceResolutionError(self.label, name, kind_value)
        if len(ids) > 1:
            raise ReferenceResolutionError(self.label, name, kind_value, reason="is ambiguous")
        return ids[0]

    def name_for(self, item_id: Optional[str]) -> Optional[str]:
        if item_id is None:
            return None
        item = self._by_id.get(item_id)
        return item.name if item is not None else item_id


def account_catalog(accounts: Iterable[Account]) -> Catalog[Account]:
    return Catalog(label="account", items=tuple(accounts))


def category_catalog(categories: Iterable[Category]) -> Catalog[Category]:
    return Catalog(label="category", items=tuple(categories), keyed_by_kind=True)


def tag_catalog(tags: Iterable[Tag]) -> Catalog[Tag]:
    return Catalog(label="tag", items=tuple(tags), keyed_by_kind=True)


@dataclass(frozen=True)
class LedgerContext:
    accounts: Catalog[Account] = field(default_factory=lambda: account_catalog(()))
    categories: Catalog[Category] = field(default_factory=lambda: category_catalog(()))
    tags: Catalog[Tag] = field(default_factory=lambda: tag_catalog(()))

    @classmethod
    def build(
        cls,
        *,
        accounts: Iterable[Account] = (),
        categories: Iterable[Category] = (),
        tags: Iterable[Tag] = (),
    ) -> "LedgerContext":
        return cls(
            accounts=account_catalog(accounts),
            categories=category_catalog(categories),
            tags=tag_catalog(tags),
        )
