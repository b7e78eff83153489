"""Expense endpoints: owner-scoped CRUD and monthly/yearly reports."""

from __future__ import annotations

from dataclasses import asdict

from flask import Blueprint

from expense_api.api.deps import current_user, json_response, load_json, load_query, require_auth, timing
from expense_api.schemas import (
    DateRangeQuerySchema,
    ExpenseCreateSchema,
    ExpenseListQuerySchema,
    ExpenseSchema,
    ExpenseUpdateSchema,
    MetaSchema,
    MonthYearQuerySchema,
    YearQuerySchema,
)
from expense_api.services.expenses.dto import ExpenseCreateIn, ExpenseListIn
from expense_api.services.expenses.reports import ExpenseReportService
from expense_api.services.expenses.service import ExpenseService

bp = Blueprint("expenses", __name__)

expense_schema = ExpenseSchema()
expenses_schema = ExpenseSchema(many=True)
expense_create_schema = ExpenseCreateSchema()
expense_update_schema = ExpenseUpdateSchema()
expense_list_schema = ExpenseListQuerySchema()
meta_schema = MetaSchema()
month_year_schema = MonthYearQuerySchema()
year_schema = YearQuerySchema()
date_range_schema = DateRangeQuerySchema()


# ------------------------------------------------------------------ #
# CRUD
# ------------------------------------------------------------------ #


@bp.post("")
@require_auth
@timing
def create_expense():
    """Record an expense for the authenticated user."""

    data = load_json(expense_create_schema)
    expense = ExpenseService().create(current_user().id, ExpenseCreateIn(**data))
    return json_response(expense_schema.dump(expense), status=201)


@bp.get("")
@require_auth
@timing
def list_expenses():
    """Return a page of the user's expenses, newest first."""

    query = load_query(expense_list_schema)
    result = ExpenseService().list(current_user().id, ExpenseListIn(**query))
    body = {
        "data": expenses_schema.dump(result.items),
        "meta": meta_schema.dump(asdict(result.meta)),
    }
    return json_response(body)


@bp.put("/<int:expense_id>")
@require_auth
@timing
def update_expense(expense_id: int):
    """Apply a partial update to one of the user's expenses."""

    changes = load_json(expense_update_schema)
    expense = ExpenseService().update(current_user().id, expense_id, changes)
    return json_response(expense_schema.dump(expense))


@bp.delete("/<int:expense_id>")
@require_auth
@timing
def delete_expense(expense_id: int):
    """Delete one of the user's expenses."""

    ExpenseService().delete(current_user().id, expense_id)
    return json_response({"message": "Expense deleted successfully"})


# ------------------------------------------------------------------ #
# Reports
# ------------------------------------------------------------------ #


@bp.get("/summary")
@require_auth
@timing
def monthly_summary():
    query = load_query(month_year_schema)
    summary = ExpenseReportService().monthly_summary(
        current_user().id, query["month"], query["year"]
    )
    return json_response(asdict(summary))


@bp.get("/category-breakdown")
@require_auth
@timing
def category_breakdown():
    query = load_query(month_year_schema)
    rows = ExpenseReportService().category_breakdown(
        current_user().id, query["month"], query["year"]
    )
    return json_response([asdict(row) for row in rows])


@bp.get("/range-total")
@require_auth
@timing
def range_total():
    """Sum of expenses between ``start`` and ``end`` inclusive."""

    query = load_query(date_range_schema)
    total = ExpenseReportService().range_total(current_user().id, query["start"], query["end"])
    return json_response({"total": total})


@bp.get("/yearly-summary")
@require_auth
@timing
def yearly_summary():
    """Per-month totals for ``year``; served from cache when warm."""

    query = load_query(year_schema)
    rows = ExpenseReportService().yearly_summary(current_user().id, query["year"])
    return json_response([row.to_dict() for row in rows])


@bp.get("/average-daily")
@require_auth
@timing
def average_daily():
    query = load_query(month_year_schema)
    result = ExpenseReportService().average_daily(
        current_user().id, query["month"], query["year"]
    )
    return json_response({"total": result.total, "average_daily": result.average_daily})


@bp.get("/top-category")
@require_auth
@timing
def top_category():
    query = load_query(month_year_schema)
    result = ExpenseReportService().top_category(
        current_user().id, query["month"], query["year"]
    )
    return json_response(asdict(result))
