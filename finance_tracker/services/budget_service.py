"""
Budget ledger and spend reconciliation.

A budget's ``spent`` is never adjusted incrementally: every reconciliation
re-aggregates the matching expenses inside the budget window, so edits and
deletes converge on the right total regardless of write order.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..errors import NotFoundError, ValidationError
from ..identity import Identity
from ..models.budget import Budget, compute_end_date
from ..models.category import Category, CategoryState
from ..models.expense import Expense
from ..schemas import BudgetCreate, BudgetUpdate

logger = logging.getLogger(__name__)

# Columns that can never be cleared by an update
REQUIRED_FIELDS = {
    "name", "amount", "period", "start_date",
    "is_active", "notifications_enabled", "notification_threshold",
}


def _check_category(db: Session, category_id: Optional[int]) -> None:
    if category_id is None:
        return
    category = db.query(Category).filter(
        Category.id == category_id,
        Category.state == CategoryState.ACTIVE.value
    ).first()
    if not category:
        raise ValidationError("Invalid category")


def calculate_spent(db: Session, budget: Budget) -> Decimal:
    """Sum of the owner's expenses inside [start_date, end_date]"""
    query = db.query(func.coalesce(func.sum(Expense.amount), 0)).filter(
        Expense.user_id == budget.user_id,
        Expense.date >= budget.start_date,
        Expense.date <= budget.end_date
    )
    if budget.category_id is not None:
        query = query.filter(Expense.category_id == budget.category_id)
    total = query.scalar()
    return Decimal(str(total or 0))


def recalculate_budget(db: Session, budget: Budget) -> Budget:
    budget.end_date = compute_end_date(budget.start_date, budget.period)
    budget.spent = calculate_spent(db, budget)
    db.commit()
    db.refresh(budget)
    return budget


def find_active_budgets(db: Session, user_id: str, category_id: int, today: date) -> List[Budget]:
    """
    Active budgets for (user, category) whose window contains ``today``.

    General budgets (no category) cover every category, so they match too.
    """
    return db.query(Budget).filter(
        Budget.user_id == user_id,
        or_(Budget.category_id == category_id, Budget.category_id.is_(None)),
        Budget.is_active == True,
        Budget.start_date <= today,
        Budget.end_date >= today
    ).order_by(Budget.id.asc()).all()


def reconcile_budgets(
    db: Session,
    user_id: str,
    category_ids: Iterable[int],
    today: Optional[date] = None
) -> List[Budget]:
    """
    Recompute spend for the budgets an expense write may have touched.

    The window is evaluated at reconciliation time, not at the expense date.
    Having no active budget is fine: the expense simply isn't tracked.
    A general budget matched through several categories is recomputed once.
    """
    today = today or date.today()
    reconciled = []
    seen = set()
    for category_id in sorted(set(c for c in category_ids if c is not None)):
        budgets = find_active_budgets(db, user_id, category_id, today)
        if not budgets:
            logger.debug("No active budget for user %s, category %s", user_id, category_id)
            continue
        for budget in budgets:
            if budget.id in seen:
                continue
            seen.add(budget.id)
            recalculate_budget(db, budget)
            logger.info(
                "Budget %s reconciled: spent %s of %s (%s)",
                budget.id, budget.spent, budget.amount, budget.status
            )
            reconciled.append(budget)
    return reconciled


def get_budget(db: Session, identity: Identity, budget_id: int) -> Budget:
    budget = db.query(Budget).filter(
        Budget.id == budget_id,
        Budget.user_id == identity.user_id
    ).first()
    if not budget:
        raise NotFoundError("Budget not found")
    return budget


def list_budgets(db: Session, identity: Identity, active_only: bool = False) -> List[Budget]:
    query = db.query(Budget).filter(Budget.user_id == identity.user_id)
    if active_only:
        query = query.filter(Budget.is_active == True)
    return query.order_by(Budget.start_date.desc(), Budget.id.desc()).all()


def create_budget(db: Session, identity: Identity, data: BudgetCreate, today: Optional[date] = None) -> Budget:
    _check_category(db, data.category_id)

    start_date = data.start_date or today or date.today()
    budget = Budget(
        user_id=identity.user_id,
        name=data.name,
        amount=Decimal(str(data.amount)),
        spent=Decimal("0"),
        period=data.period,
        category_id=data.category_id,
        start_date=start_date,
        end_date=compute_end_date(start_date, data.period),
        is_active=data.is_active,
        notifications_enabled=data.notifications_enabled,
        notification_threshold=data.notification_threshold
    )
    db.add(budget)
    db.commit()
    db.refresh(budget)

    logger.info("Budget %s created for user %s (%s to %s)",
                budget.id, budget.user_id, budget.start_date, budget.end_date)
    return recalculate_budget(db, budget)


def update_budget(db: Session, identity: Identity, budget_id: int, data: BudgetUpdate) -> Budget:
    budget = get_budget(db, identity, budget_id)

    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("category_id") is not None:
        _check_category(db, update_data["category_id"])
    # Required columns cannot be cleared
    for field in REQUIRED_FIELDS & update_data.keys():
        if update_data[field] is None:
            raise ValidationError(f"{field} cannot be empty")
    if "amount" in update_data:
        update_data["amount"] = Decimal(str(update_data["amount"]))

    for field, value in update_data.items():
        setattr(budget, field, value)

    return recalculate_budget(db, budget)


def reset_budget(db: Session, identity: Identity, budget_id: int, today: Optional[date] = None) -> Budget:
    """Start a fresh window from today and recompute spend for it"""
    budget = get_budget(db, identity, budget_id)
    budget.start_date = today or date.today()
    budget.spent = Decimal("0")
    return recalculate_budget(db, budget)


def delete_budget(db: Session, identity: Identity, budget_id: int) -> None:
    budget = get_budget(db, identity, budget_id)
    db.delete(budget)
    db.commit()


def get_today() -> date:
    """Reconciliation clock; a FastAPI dependency so tests can pin it"""
    return date.today()
