from datetime import date

import pytest

from finance_tracker.errors import NotFoundError, ValidationError
from finance_tracker.models.budget import compute_end_date
from finance_tracker.schemas import BudgetCreate, BudgetUpdate, ExpenseCreate, ExpenseUpdate
from finance_tracker.services import budget_service, category_service, expense_service

from conftest import ADMIN, OTHER_USER, USER

TODAY = date(2024, 1, 20)


@pytest.fixture()
def food(db):
    return category_service.create_category(db, ADMIN, "Food", "#FF6B6B")


@pytest.fixture()
def travel(db):
    return category_service.create_category(db, ADMIN, "Travel", "#F7DC6F")


def _budget(db, category, amount=500, period="monthly", start=date(2024, 1, 1), identity=USER):
    return budget_service.create_budget(db, identity, BudgetCreate(
        name=f"{category.name} budget",
        amount=amount,
        period=period,
        category_id=category.id,
        start_date=start
    ))


def _expense(db, category, amount, on, identity=USER):
    return expense_service.create_expense(db, identity, ExpenseCreate(
        category_id=category.id,
        amount=amount,
        description="Groceries",
        date=on
    ), today=TODAY)


@pytest.mark.parametrize("period,expected", [
    ("daily", date(2024, 1, 2)),
    ("weekly", date(2024, 1, 8)),
    ("monthly", date(2024, 2, 1)),
    ("yearly", date(2025, 1, 1)),
])
def test_end_date_from_period(period, expected):
    assert compute_end_date(date(2024, 1, 1), period) == expected


def test_monthly_end_date_clamps_to_month_end():
    assert compute_end_date(date(2024, 1, 31), "monthly") == date(2024, 2, 29)
    assert compute_end_date(date(2024, 2, 29), "yearly") == date(2025, 2, 28)


def test_end_date_rederived_on_update(db, food):
    budget = _budget(db, food)
    assert budget.end_date == date(2024, 2, 1)

    budget = budget_service.update_budget(db, USER, budget.id, BudgetUpdate(period="weekly"))
    assert budget.end_date == date(2024, 1, 8)

    budget = budget_service.update_budget(db, USER, budget.id, BudgetUpdate(start_date=date(2024, 3, 10)))
    assert budget.end_date == date(2024, 3, 17)


def test_expense_over_budget_marks_exceeded(db, food):
    budget = _budget(db, food)

    _expense(db, food, 600, date(2024, 1, 15))
    db.refresh(budget)

    assert float(budget.spent) == 600
    assert budget.status == "exceeded"
    assert budget.remaining == 0


def test_status_thresholds(db, food):
    budget = _budget(db, food, amount=100)
    assert budget.status == "good"

    _expense(db, food, 80, date(2024, 1, 5))
    db.refresh(budget)
    assert budget.status == "warning"
    assert budget.spent_percentage == pytest.approx(80)
    assert budget.threshold_reached is True


def test_spent_only_counts_window_category_and_owner(db, food, travel):
    budget = _budget(db, food)

    _expense(db, food, 50, date(2024, 1, 10))
    _expense(db, food, 70, date(2023, 12, 31))  # before window
    _expense(db, travel, 30, date(2024, 1, 10))  # other category
    _expense(db, food, 90, date(2024, 1, 10), identity=OTHER_USER)  # other user
    db.refresh(budget)

    assert float(budget.spent) == 50


def test_window_is_evaluated_at_reconciliation_time(db, food):
    # A budget whose window does not contain "today" is left alone
    budget = _budget(db, food, start=date(2023, 1, 1))

    _expense(db, food, 40, date(2023, 1, 10))
    db.refresh(budget)

    assert float(budget.spent) == 0


def test_no_budget_is_a_noop(db, food):
    expense = _expense(db, food, 25, date(2024, 1, 10))
    assert expense.id is not None
    assert budget_service.reconcile_budgets(db, USER.user_id, [food.id], TODAY) == []


def test_update_amount_recomputes(db, food):
    budget = _budget(db, food)
    expense = _expense(db, food, 100, date(2024, 1, 10))

    expense_service.update_expense(db, USER, expense.id, ExpenseUpdate(amount=40), today=TODAY)
    db.refresh(budget)

    assert float(budget.spent) == 40


def test_moving_expense_between_categories_reconciles_both(db, food, travel):
    food_budget = _budget(db, food)
    travel_budget = _budget(db, travel)
    expense = _expense(db, food, 100, date(2024, 1, 10))

    expense_service.update_expense(db, USER, expense.id, ExpenseUpdate(category_id=travel.id), today=TODAY)
    db.refresh(food_budget)
    db.refresh(travel_budget)

    assert float(food_budget.spent) == 0
    assert float(travel_budget.spent) == 100


def test_moving_expense_out_of_window_recomputes(db, food):
    budget = _budget(db, food)
    expense = _expense(db, food, 100, date(2024, 1, 10))
    db.refresh(budget)
    assert float(budget.spent) == 100

    expense_service.update_expense(db, USER, expense.id, ExpenseUpdate(date=date(2023, 12, 28)), today=TODAY)
    db.refresh(budget)

    assert float(budget.spent) == 0


def test_delete_expense_recomputes(db, food):
    budget = _budget(db, food)
    keep = _expense(db, food, 100, date(2024, 1, 10))
    drop = _expense(db, food, 60, date(2024, 1, 11))
    db.refresh(budget)
    assert float(budget.spent) == 160

    expense_service.delete_expense(db, USER, drop.id, today=TODAY)
    db.refresh(budget)

    assert float(budget.spent) == 100
    assert keep.id is not None


def test_reconciliation_is_idempotent(db, food):
    budget = _budget(db, food)
    _expense(db, food, 100, date(2024, 1, 10))

    budget_service.reconcile_budgets(db, USER.user_id, [food.id], TODAY)
    budget_service.reconcile_budgets(db, USER.user_id, [food.id], TODAY)
    db.refresh(budget)

    assert float(budget.spent) == 100


def test_general_budget_sums_all_categories(db, food, travel):
    _expense(db, food, 10, date(2024, 1, 3))
    _expense(db, travel, 15, date(2024, 1, 4))

    budget = budget_service.create_budget(db, USER, BudgetCreate(
        name="Everything", amount=100, period="monthly", start_date=date(2024, 1, 1)
    ))

    assert float(budget.spent) == 25


def test_general_budget_tracks_later_expense_writes(db, food, travel):
    budget = budget_service.create_budget(db, USER, BudgetCreate(
        name="Everything", amount=100, period="monthly", start_date=date(2024, 1, 1)
    ))
    food_budget = _budget(db, food)
    assert float(budget.spent) == 0

    lunch = _expense(db, food, 60, date(2024, 1, 10))
    _expense(db, travel, 15, date(2024, 1, 12))
    db.refresh(budget)
    db.refresh(food_budget)
    assert float(budget.spent) == 75
    assert float(food_budget.spent) == 60

    expense_service.update_expense(db, USER, lunch.id, ExpenseUpdate(category_id=travel.id), today=TODAY)
    db.refresh(budget)
    db.refresh(food_budget)
    assert float(budget.spent) == 75
    assert float(food_budget.spent) == 0

    expense_service.delete_expense(db, USER, lunch.id, today=TODAY)
    db.refresh(budget)
    assert float(budget.spent) == 15


def test_general_budget_is_reconciled_once_per_write(db, food, travel):
    budget = budget_service.create_budget(db, USER, BudgetCreate(
        name="Everything", amount=100, period="monthly", start_date=date(2024, 1, 1)
    ))

    reconciled = budget_service.reconcile_budgets(db, USER.user_id, [food.id, travel.id], TODAY)

    assert [b.id for b in reconciled] == [budget.id]


@pytest.mark.parametrize("field", ["is_active", "notifications_enabled", "notification_threshold", "amount"])
def test_update_cannot_clear_required_fields(db, food, field):
    budget = _budget(db, food)

    with pytest.raises(ValidationError):
        budget_service.update_budget(db, USER, budget.id, BudgetUpdate(**{field: None}))

    db.refresh(budget)
    assert budget.is_active is True
    assert budget.notifications_enabled is True
    assert budget.notification_threshold == 80


def test_reset_moves_window_to_today(db, food):
    budget = _budget(db, food)
    _expense(db, food, 100, date(2024, 1, 10))
    _expense(db, food, 20, date(2024, 1, 20))

    budget = budget_service.reset_budget(db, USER, budget.id, today=TODAY)

    assert budget.start_date == TODAY
    assert budget.end_date == date(2024, 2, 20)
    assert float(budget.spent) == 20


def test_budget_requires_active_category(db):
    pending = category_service.create_category(db, USER, "Games", "#FF0000")

    with pytest.raises(ValidationError):
        _budget(db, pending)


def test_budgets_are_owner_scoped(db, food):
    budget = _budget(db, food)

    with pytest.raises(NotFoundError):
        budget_service.get_budget(db, OTHER_USER, budget.id)
    assert budget_service.list_budgets(db, OTHER_USER) == []

    budget_service.delete_budget(db, USER, budget.id)
    assert budget_service.list_budgets(db, USER) == []
