"""Unit tests for ExpenseRepository."""

import datetime as dt

import pytest
from expense_api.repositories.base import Pagination
from expense_api.repositories.expense import ExpenseRepository, month_bounds
from tests.factories.expense import ExpenseFactory
from tests.factories.user import UserFactory


@pytest.mark.parametrize(
    ("year", "month", "start", "end"),
    [
        (2024, 1, dt.date(2024, 1, 1), dt.date(2024, 2, 1)),
        (2024, 12, dt.date(2024, 12, 1), dt.date(2025, 1, 1)),
        (9999, 12, dt.date(9999, 12, 1), None),
    ],
)
def test_month_bounds(year, month, start, end):
    assert month_bounds(year, month) == (start, end)


class TestExpenseRepository:
    @pytest.fixture()
    def repo(self):
        return ExpenseRepository()

    @pytest.fixture()
    def owner(self):
        return UserFactory()

    def test_create_for_owner_sets_owner(self, repo, owner):
        expense = repo.create_for_owner(owner.id, amount=3.0, category="Food")
        assert expense.id is not None
        assert expense.user_id == owner.id

    def test_create_for_owner_rejects_unknown_fields(self, repo, owner):
        with pytest.raises(ValueError):
            repo.create_for_owner(owner.id, amount=3.0, category="Food", user_id=999)

    def test_get_owned_hides_foreign_rows(self, repo, owner):
        mine = ExpenseFactory(user=owner)
        theirs = ExpenseFactory(user=UserFactory())

        assert repo.get_owned(owner.id, mine.id) is mine
        assert repo.get_owned(owner.id, theirs.id) is None

    def test_paginate_owned_filters_and_counts(self, repo, owner):
        for day in (1, 2, 3):
            ExpenseFactory(user=owner, category="Food", date=dt.date(2024, 5, day))
        ExpenseFactory(user=owner, category="Rent", date=dt.date(2024, 5, 4))
        ExpenseFactory(user=UserFactory(), category="Food")

        page = repo.paginate_owned(
            owner.id, Pagination(page=1, limit=2, sort=["-date"]), filters={"category": "Food"}
        )

        assert page.total == 3
        assert page.total_pages == 2
        assert page.has_next and not page.has_prev
        assert [e.date.day for e in page.items] == [3, 2]

    def test_paginate_owned_ignores_unknown_filters(self, repo, owner):
        ExpenseFactory(user=owner)
        page = repo.paginate_owned(owner.id, Pagination(page=1, limit=10), filters={"user_id": 0})
        assert page.total == 1

    def test_aggregates_respect_half_open_window(self, repo, owner):
        ExpenseFactory(user=owner, amount=1.0, category="A", date=dt.date(2024, 1, 31))
        ExpenseFactory(user=owner, amount=2.0, category="B", date=dt.date(2024, 2, 1))
        ExpenseFactory(user=owner, amount=4.0, category="B", date=dt.date(2024, 2, 29))
        ExpenseFactory(user=owner, amount=8.0, category="C", date=dt.date(2024, 3, 1))

        start, end = month_bounds(2024, 2)
        assert repo.sum_and_count(owner.id, start, end) == (6.0, 2)
        assert repo.totals_by_category(owner.id, start, end) == [("B", 6.0)]
        assert repo.counts_by_category(owner.id, start, end) == [("B", 2)]
        assert repo.totals_by_month(owner.id, 2024) == [(1, 1.0), (2, 6.0), (3, 8.0)]

    def test_counts_by_category_breaks_ties_alphabetically(self, repo, owner):
        ExpenseFactory(user=owner, category="Zoo", date=dt.date(2024, 6, 1))
        ExpenseFactory(user=owner, category="Art", date=dt.date(2024, 6, 2))
        start, end = month_bounds(2024, 6)
        assert repo.counts_by_category(owner.id, start, end) == [("Art", 1), ("Zoo", 1)]

    def test_last_representable_year_is_open_ended(self, repo, owner):
        ExpenseFactory(user=owner, amount=5.0, date=dt.date(9999, 12, 31))

        assert repo.totals_by_month(owner.id, 9999) == [(12, 5.0)]
        assert repo.sum_and_count(owner.id, dt.date(9999, 1, 1), None) == (5.0, 1)
