import pytest

from common.rules_engine.context import LedgerContext
from common.rules_engine.models import Account, Category, Entry, Tag


@pytest.fixture
def make_entry():
    def _make(
        *,
        desc: str | None = "Coffee shop",
        amount: float = -4.5,
        account: str = "A1",
        category: str | None = None,
        tags: list[str] | None = None,
        transaction: dict | None = None,
        entry_id: str = "E1",
        currency: str = "EUR",
    ) -> Entry:
        record = {
            "id": entry_id,
            "desc": desc,
            "amount": amount,
            "currency": {"code": currency},
            "date": "2024-05-01",
            "account": account,
            "modified": "2024-05-01 10:00:00.000",
        }
        if category is not None:
            record["category"] = category
        if tags is not None:
            record["tags"] = tags
        if transaction is not None:
            record["transaction"] = transaction
        return Entry.model_validate(record)

    return _make


@pytest.fixture
def ctx() -> LedgerContext:
    return LedgerContext.build(
        accounts=[
            Account(id="A1", name="Checking"),
            Account(id="A2", name="Savings"),
            Account(id="A3", name="Cash"),
        ],
        categories=[
            Category(id="7", name="Dining", type="expense"),
            Category(id="8", name="Groceries", type="expense"),
            Category(id="9", name="Dining", type="income"),
            Category(id="10", name="Salary", type="income"),
        ],
        tags=[
            Tag(id="1", name="coffee", type="expense"),
            Tag(id="3", name="work", type="expense"),
            Tag(id="4", name="work", type="income"),
        ],
    )
