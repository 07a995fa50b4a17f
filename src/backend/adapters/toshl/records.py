from __future__ import annotations

from typing import Any, Iterable, Type, TypeVar

from pydantic import BaseModel, ValidationError

from common.rules_engine.models import Account, Category, Entry, Tag


M = TypeVar("M", bound=BaseModel)


class ToshlRecordError(ValueError):
    pass


def _validate(model: Type[M], resource: str, record: Any) -> M:
    if not isinstance(record, dict):
        raise ToshlRecordError(f"Toshl {resource} record must be a JSON object, got {type(record).__name__}.")
    try:
        return model.model_validate(record)
    except ValidationError as exc:
        record_id = record.get("id", "?")
        raise ToshlRecordError(f"Malformed Toshl {resource} record {record_id}: {exc}") from exc


def entry_from_record(record: Any) -> Entry:
    return _validate(Entry, "entry", record)


def entries_from_records(records: Iterable[Any]) -> list[Entry]:
    return [entry_from_record(r) for r in records]


def accounts_from_records(records: Iterable[Any]) -> list[Account]:
    return [_validate(Account, "account", r) for r in records]


def categories_from_records(records: Iterable[Any]) -> list[Category]:
    return [_validate(Category, "category", r) for r in records]


def tags_from_records(records: Iterable[Any]) -> list[Tag]:
    return [_validate(Tag, "tag", r) for r in records]


def entry_to_record(entry: Entry) -> dict[str, Any]:
    """
    Serialize an entry back to the full Toshl JSON record.

    Unknown fields captured at fetch time are written back untouched; cleared
    optional fields (category/tags on transfers) are omitted.
    """
    record = entry.model_dump(mode="json", by_alias=True)
    for key in ("category", "tags", "transaction", "desc"):
        if record.get(key) is None:
            record.pop(key, None)
    if isinstance(record.get("transaction"), dict):
        record["transaction"] = {k: v for k, v in record["transaction"].items() if v is not None}
    return record
