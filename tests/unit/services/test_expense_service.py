# tests/unit/services/test_expense_service.py
from __future__ import annotations

import datetime as dt

import pytest
from expense_api.core.cache import InMemoryTTLCache
from expense_api.services._shared.errors import NotFoundError
from expense_api.services.auth.service import SessionManager
from expense_api.services.expenses.dto import ExpenseCreateIn, ExpenseListIn
from expense_api.services.expenses.reports import ExpenseReportService, yearly_cache_key
from expense_api.services.expenses.service import ExpenseService
from tests.factories.expense import ExpenseFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def cache() -> InMemoryTTLCache:
    return InMemoryTTLCache(default_ttl=60)


@pytest.fixture()
def service(cache) -> ExpenseService:
    return ExpenseService(cache=cache)


@pytest.fixture()
def owner():
    return UserFactory()


# ------------------------------ Create ------------------------------------ #
def test_create_defaults_date_to_today(service, owner):
    out = service.create(owner.id, ExpenseCreateIn(amount=12.5, category="Food"))
    assert out.id is not None
    assert out.amount == 12.5
    assert out.date == dt.date.today()
    assert out.description is None


def test_create_invalidates_yearly_summary(service, cache, owner):
    key = yearly_cache_key(owner.id, 2024)
    cache.set(key, [{"month": 1, "total": 1.0}])
    service.create(owner.id, ExpenseCreateIn(amount=5, category="Food", date=dt.date(2024, 1, 2)))
    assert cache.get(key) is None


# ------------------------------- List ------------------------------------- #
def test_list_is_owner_scoped_and_newest_first(service, owner):
    other = UserFactory()
    ExpenseFactory(user=owner, date=dt.date(2024, 1, 1))
    newest = ExpenseFactory(user=owner, date=dt.date(2024, 6, 1))
    ExpenseFactory(user=other, date=dt.date(2024, 7, 1))

    result = service.list(owner.id, ExpenseListIn())

    assert [item.date for item in result.items] == [dt.date(2024, 6, 1), dt.date(2024, 1, 1)]
    assert result.items[0].id == newest.id
    assert result.meta.total == 2


def test_list_same_date_breaks_ties_by_id_desc(service, owner):
    first = ExpenseFactory(user=owner, date=dt.date(2024, 2, 2))
    second = ExpenseFactory(user=owner, date=dt.date(2024, 2, 2))
    result = service.list(owner.id, ExpenseListIn())
    assert [item.id for item in result.items] == [second.id, first.id]


def test_list_pagination_metadata(service, owner):
    for day in range(1, 26):
        ExpenseFactory(user=owner, date=dt.date(2024, 1, day))

    page = service.list(owner.id, ExpenseListIn(page=3, limit=10))

    assert len(page.items) == 5
    assert page.meta.total == 25
    assert page.meta.total_pages == 3
    assert page.meta.has_prev is True
    assert page.meta.has_next is False
    assert page.items[0].date == dt.date(2024, 1, 5)


def test_list_filters_by_category(service, owner):
    ExpenseFactory(user=owner, category="Food")
    ExpenseFactory(user=owner, category="Transport")
    result = service.list(owner.id, ExpenseListIn(category="Transport"))
    assert [item.category for item in result.items] == ["Transport"]


# ------------------------------ Update ------------------------------------ #
def test_update_changes_whitelisted_fields(service, owner):
    expense = ExpenseFactory(user=owner, amount=10.0, category="Food")
    out = service.update(owner.id, expense.id, {"amount": 20.0, "description": "lunch"})
    assert out.amount == 20.0
    assert out.description == "lunch"
    assert out.category == "Food"


def test_update_moving_year_invalidates_both_years(service, cache, owner):
    expense = ExpenseFactory(user=owner, date=dt.date(2023, 12, 31))
    old_key, new_key = yearly_cache_key(owner.id, 2023), yearly_cache_key(owner.id, 2024)
    cache.set(old_key, [])
    cache.set(new_key, [])

    service.update(owner.id, expense.id, {"date": dt.date(2024, 1, 1)})

    assert cache.get(old_key) is None
    assert cache.get(new_key) is None


def test_update_foreign_expense_is_not_found(service, owner):
    foreign = ExpenseFactory(user=UserFactory(), amount=10.0)
    with pytest.raises(NotFoundError, match="Expense not found"):
        service.update(owner.id, foreign.id, {"amount": 1.0})
    assert foreign.amount == 10.0


def test_update_rejects_non_whitelisted_fields(service, owner):
    expense = ExpenseFactory(user=owner)
    with pytest.raises(ValueError):
        service.update(owner.id, expense.id, {"user_id": 999})


# ------------------------------ Delete ------------------------------------ #
def test_delete_removes_own_expense(service, owner):
    expense = ExpenseFactory(user=owner)
    service.delete(owner.id, expense.id)
    assert service.list(owner.id, ExpenseListIn()).meta.total == 0


def test_delete_foreign_or_missing_expense_is_not_found(service, owner):
    foreign = ExpenseFactory(user=UserFactory())
    with pytest.raises(NotFoundError):
        service.delete(owner.id, foreign.id)
    with pytest.raises(NotFoundError):
        service.delete(owner.id, 999_999)


@pytest.mark.parametrize("service_cls", [SessionManager, ExpenseService, ExpenseReportService])
def test_services_build_from_app_config_alone(service_cls):
    built = service_cls()

    assert not hasattr(built, "ctx")
    with pytest.raises(TypeError):
        service_cls(ctx=None)
