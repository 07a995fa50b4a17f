import datetime as dt

import pytest

from adapters.toshl.records import (
    ToshlRecordError,
    accounts_from_records,
    categories_from_records,
    entries_from_records,
    entry_from_record,
    entry_to_record,
    tags_from_records,
)
from common.rules_engine.models import EntryKind


def _record(**overrides):
    record = {
        "id": "42",
        "amount": -12.3,
        "currency": {"code": "EUR", "rate": 1, "fixed": False},
        "date": "2024-03-05",
        "desc": "Lunch\nwith team",
        "account": "A1",
        "category": "7",
        "tags": ["1", "3"],
        "modified": "2024-03-05 12:00:00.000",
        "completed": True,
    }
    record.update(overrides)
    return record


def test_entry_from_record():
    entry = entry_from_record(_record())
    assert entry.id == "42"
    assert entry.description == "Lunch\nwith team"
    assert entry.normalized_description == "Lunch with team"
    assert entry.date == dt.date(2024, 3, 5)
    assert entry.kind == EntryKind.EXPENSE
    assert entry.tags == ["1", "3"]
    assert entry.transaction is None


def test_numeric_ids_are_coerced_to_strings():
    entry = entry_from_record(_record(id=42, account=5, category=7, tags=[1, 3]))
    assert (entry.id, entry.account, entry.category, entry.tags) == ("42", "5", "7", ["1", "3"])


def test_round_trip_preserves_unknown_fields():
    record = _record(transaction={"id": "T9", "account": "A2", "amount": 12.3, "currency": {"code": "EUR"}})
    assert entry_to_record(entry_from_record(record)) == record


def test_cleared_optional_fields_are_omitted():
    entry = entry_from_record(_record())
    entry.category = None
    entry.tags = None
    out = entry_to_record(entry)
    assert "category" not in out
    assert "tags" not in out
    assert out["modified"] == "2024-03-05 12:00:00.000"


def test_malformed_entry_names_record():
    with pytest.raises(ToshlRecordError, match="entry record 42"):
        entries_from_records([_record(amount="lots")])
    with pytest.raises(ToshlRecordError, match="JSON object"):
        entry_from_record(["not", "a", "record"])


def test_catalog_records():
    accounts = accounts_from_records([{"id": "A1", "name": "Checking", "balance": 10}])
    categories = categories_from_records([{"id": 7, "name": "Dining", "type": "expense"}])
    tags = tags_from_records([{"id": "1", "name": "coffee", "type": "expense", "category": "7"}])
    assert accounts[0].name == "Checking"
    assert categories[0].id == "7"
    assert tags[0].type == "expense"


def test_catalog_record_missing_name():
    with pytest.raises(ToshlRecordError, match="category"):
        categories_from_records([{"id": "7", "type": "expense"}])
