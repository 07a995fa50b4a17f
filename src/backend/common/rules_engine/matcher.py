from __future__ import annotations

import math
import operator
import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .context import LedgerContext
from .errors import ConfigurationError
from .models import Entry, EntryKind


COMPARATORS: Dict[str, Callable[[float, float], bool]] = {
    "=": operator.eq,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}

_COMPARATOR_ALIASES = {"≥": ">=", "≤": "<=", "==": "="}

_AMOUNT_FILTER = re.compile(r"^\s*(?P<comparator>[^\d\s.+-]+)\s*(?P<magnitude>\S+)\s*$")


@dataclass(frozen=True)
class AmountFilter:
    comparator: str
    magnitude: float

    @classmethod
    def parse(cls, raw: str) -> "AmountFilter":
        """Parse ``"<comparator> <magnitude>"``, e.g. ``"< 50"`` or ``">= 12.5"``."""
        m = _AMOUNT_FILTER.match(str(raw))
        if m is None:
            raise ConfigurationError(f"Invalid amount filter {raw!r}; expected '<comparator> <magnitude>'.")
        comparator = m.group("comparator")
        comparator = _COMPARATOR_ALIASES.get(comparator, comparator)
        if comparator not in COMPARATORS:
            raise ConfigurationError(
                f"Unknown amount comparator {comparator!r}; expected one of {', '.join(COMPARATORS)}."
            )
        try:
            magnitude = float(m.group("magnitude"))
        except ValueError as exc:
            raise ConfigurationError(f"Invalid amount magnitude in {raw!r}.") from exc
        if math.isnan(magnitude) or magnitude < 0:
            raise ConfigurationError(f"Amount magnitude in {raw!r} must be a non-negative number.")
        return cls(comparator=comparator, magnitude=magnitude)

    def accepts(self, amount: float) -> bool:
        return COMPARATORS[self.comparator](abs(amount), self.magnitude)


@dataclass(frozen=True)
class Matcher:
    pattern: re.Pattern
    kind: Optional[EntryKind] = None
    account: Optional[str] = None
    amount: Optional[AmountFilter] = None

    @classmethod
    def compile(
        cls,
        pattern: str,
        *,
        kind: Optional[EntryKind] = None,
        account: Optional[str] = None,
        amount: Optional[AmountFilter] = None,
    ) -> "Matcher":
        try:
            compiled = re.compile(pattern, re.IGNORECASE | re.MULTILINE)
        except re.error as exc:
            raise ConfigurationError(f"Invalid match pattern {pattern!r}: {exc}") from exc
        return cls(pattern=compiled, kind=kind, account=account, amount=amount)

    def matches(self, entry: Entry, ctx: LedgerContext) -> bool:
        if not self.pattern.search(entry.normalized_description):
            return False
        if self.kind is not None and entry.kind != self.kind:
            return False
        # An unknown account name raises rather than silently never matching.
        if self.account is not None and entry.account != ctx.accounts.resolve(self.account):
            return False
        if self.amount is not None and not self.amount.accepts(entry.amount):
            return False
        return True
