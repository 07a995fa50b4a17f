import pytest

from common.rules_engine.context import LedgerContext, account_catalog, category_catalog
from common.rules_engine.errors import ReferenceResolutionError
from common.rules_engine.models import Account, Category, EntryKind


def test_category_lookup_is_keyed_by_kind(ctx):
    assert ctx.categories.resolve("Dining", EntryKind.EXPENSE) == "7"
    assert ctx.categories.resolve("Dining", "income") == "9"


def test_missing_name_raises_with_name_and_kind(ctx):
    with pytest.raises(ReferenceResolutionError) as excinfo:
        ctx.categories.resolve("Salary", EntryKind.EXPENSE)
    assert excinfo.value.name == "Salary"
    assert excinfo.value.kind == "expense"
    assert excinfo.value.catalog == "category"


def test_account_lookup_ignores_kind(ctx):
    assert ctx.accounts.resolve("Savings") == "A2"
    assert ctx.accounts.resolve("Savings", EntryKind.INCOME) == "A2"


def test_duplicate_names_are_ambiguous():
    accounts = account_catalog([Account(id="1", name="Cash"), Account(id="2", name="Cash")])
    with pytest.raises(ReferenceResolutionError, match="ambiguous"):
        accounts.resolve("Cash")


def test_same_name_different_kind_is_not_ambiguous():
    categories = category_catalog(
        [Category(id="1", name="Gifts", type="expense"), Category(id="2", name="Gifts", type="income")]
    )
    assert categories.resolve("Gifts", EntryKind.INCOME) == "2"


def test_name_for_falls_back_to_id(ctx):
    assert ctx.accounts.name_for("A3") == "Cash"
    assert ctx.accounts.name_for("A99") == "A99"
    assert ctx.accounts.name_for(None) is None


def test_empty_context():
    ctx = LedgerContext()
    assert ctx.accounts.items == ()
    with pytest.raises(ReferenceResolutionError):
        ctx.tags.resolve("work", EntryKind.EXPENSE)
