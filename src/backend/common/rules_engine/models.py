from __future__ import annotations

import datetime as dt
import re
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


_LINE_BREAKS = re.compile(r"\r\n|\r|\n")


def normalize_description(value: Optional[str]) -> str:
    return _LINE_BREAKS.sub(" ", value or "")


class EntryKind(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


class Currency(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: str


class LinkedTransaction(BaseModel):
    """Counterpart leg of a transfer between two accounts."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Optional[str] = None
    account: Optional[str] = None
    currency: Optional[Currency] = None


class Entry(BaseModel):
    # Unknown service fields are kept so the full record can be written back.
    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    description: Optional[str] = Field(default=None, alias="desc")
    amount: float
    currency: Currency
    date: dt.date
    account: str
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    transaction: Optional[LinkedTransaction] = None

    @property
    def kind(self) -> EntryKind:
        return EntryKind.EXPENSE if self.amount < 0 else EntryKind.INCOME

    @property
    def normalized_description(self) -> str:
        return normalize_description(self.description)


class Account(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str


class Category(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str
    type: str


class Tag(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str
    type: str


DiffScalar = Optional[Union[str, List[str]]]


class DiffValue(BaseModel):
    value: DiffScalar = None
    id: DiffScalar = None


class FieldChange(BaseModel):
    old: DiffValue
    new: DiffValue


class EntryDiff(BaseModel):
    """Field-level changes that bring an entry in line with its matched rule.

    An empty diff means the entry is already compliant and must not be applied.
    """

    changes: Dict[str, FieldChange] = Field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.changes)

    def merge(self, other: "EntryDiff") -> "EntryDiff":
        merged = dict(self.changes)
        for key, change in other.changes.items():
            merged.setdefault(key, change)
        return EntryDiff(changes=merged)

    def get(self, field_name: str) -> Optional[FieldChange]:
        return self.changes.get(field_name)

    def as_dict(self) -> Dict[str, Dict[str, Dict[str, DiffScalar]]]:
        return self.model_dump()["changes"]
