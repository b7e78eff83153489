"""Tests for the ``flask seed`` command group."""

from __future__ import annotations

import datetime as dt

from expense_api.models import Expense, User
from expense_api.seeds.seed_data import CATEGORIES, DEMO_EMAIL, demo_expenses, seed_demo


def test_demo_expenses_stay_within_the_year():
    today = dt.date(2024, 2, 10)
    rows = demo_expenses(10, today=today)

    assert len(rows) == 10
    assert all(dt.date(2024, 1, 1) <= row["date"] <= today for row in rows)
    assert {row["category"] for row in rows} <= set(CATEGORIES)
    assert rows == demo_expenses(10, today=today)


def test_seed_demo_is_idempotent(session):
    today = dt.date(2024, 6, 30)

    first = seed_demo(count=4, today=today)
    second = seed_demo(count=6, today=today)

    assert first == {
        "users": {"created": 1, "existing": 0},
        "expenses": {"created": 4, "existing": 0},
    }
    assert second == {
        "users": {"created": 0, "existing": 1},
        "expenses": {"created": 2, "existing": 4},
    }
    user = session.query(User).filter_by(email=DEMO_EMAIL).one()
    assert user.verify_password("demoPass123")
    assert session.query(Expense).filter_by(user_id=user.id).count() == 6


def test_seed_demo_command_prints_summary(app, session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed", "demo", "--email", "cli@example.com", "--count", "3"])

    assert result.exit_code == 0, result.output
    assert "Seed summary:" in result.output
    assert "created= 3" in result.output
    assert session.query(User).filter_by(email="cli@example.com").count() == 1


def test_seed_demo_command_refuses_production(app, session, monkeypatch):
    monkeypatch.setitem(app.config, "TESTING", False)
    monkeypatch.setitem(app.config, "DEBUG", False)

    result = app.test_cli_runner().invoke(args=["seed", "demo"])

    assert result.exit_code != 0
    assert "non-production" in result.output
    assert session.query(User).filter_by(email=DEMO_EMAIL).count() == 0


def test_seed_demo_command_rejects_negative_count(app, session):
    result = app.test_cli_runner().invoke(args=["seed", "demo", "--count", "-1"])
    assert result.exit_code == 2
