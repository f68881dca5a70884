"""
Expense ledger and the reconciliation orchestrator.

Every write that can change a budget's spend (create, amount/category/date
edits, delete) is followed by a budget reconciliation for the affected
categories. The expense write and the budget write are separate commits.
"""
import logging
import math
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple, List

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ..config import settings
from ..errors import NotFoundError, ValidationError
from ..identity import Identity
from ..models.category import Category, CategoryState
from ..models.expense import ApprovalStatus, Expense
from ..schemas import ExpenseCreate, ExpenseUpdate
from .budget_service import reconcile_budgets

logger = logging.getLogger(__name__)

# Fields whose change can move spend between budget windows or totals
RECONCILE_FIELDS = {"amount", "category_id", "date"}

# Columns that can never be cleared by an update
REQUIRED_FIELDS = {
    "category_id", "amount", "description", "date", "payment_method",
    "tags", "is_recurring", "attachments",
}

SORT_COLUMNS = {
    "date": Expense.date,
    "amount": Expense.amount,
    "description": Expense.description,
    "created_at": Expense.created_at,
}


def _check_category(db: Session, category_id: int) -> Category:
    """An expense may only reference an active category"""
    category = db.query(Category).filter(
        Category.id == category_id,
        Category.state == CategoryState.ACTIVE.value
    ).first()
    if not category:
        raise ValidationError("Invalid category")
    return category


def _check_amount(amount) -> Decimal:
    amount = Decimal(str(amount))
    if amount < 0:
        raise ValidationError("Amount cannot be negative")
    return amount


def get_expense(db: Session, identity: Identity, expense_id: int) -> Expense:
    expense = db.query(Expense).options(joinedload(Expense.category)).filter(
        Expense.id == expense_id,
        Expense.user_id == identity.user_id
    ).first()
    if not expense:
        raise NotFoundError("Expense not found")
    return expense


def list_expenses(
    db: Session,
    identity: Identity,
    page: int = 1,
    limit: int = settings.PAGE_SIZE,
    category_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
    payment_method: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = "date",
    sort_order: str = "desc"
) -> Tuple[List[Expense], dict]:
    """Filtered, paginated listing of the caller's expenses"""
    query = db.query(Expense).filter(Expense.user_id == identity.user_id)

    # Apply filters
    if category_id:
        query = query.filter(Expense.category_id == category_id)

    if start_date:
        query = query.filter(Expense.date >= start_date)

    if end_date:
        query = query.filter(Expense.date <= end_date)

    if min_amount is not None:
        query = query.filter(Expense.amount >= min_amount)

    if max_amount is not None:
        query = query.filter(Expense.amount <= max_amount)

    if payment_method:
        query = query.filter(Expense.payment_method == payment_method)

    if search:
        # Escape SQL wildcards
        escaped_search = search.replace("%", r"\%").replace("_", r"\_")
        pattern = f"%{escaped_search}%"
        query = query.filter(or_(
            Expense.description.ilike(pattern, escape="\\"),
            Expense.location.ilike(pattern, escape="\\")
        ))

    if sort_by not in SORT_COLUMNS:
        raise ValidationError(f"Cannot sort by {sort_by}")
    column = SORT_COLUMNS[sort_by]
    order = column.asc() if sort_order == "asc" else column.desc()

    total = query.count()
    expenses = query.options(joinedload(Expense.category)).order_by(
        order, Expense.id.desc()
    ).offset((page - 1) * limit).limit(limit).all()

    total_pages = math.ceil(total / limit) if limit else 0
    pagination = {
        "current_page": page,
        "total_pages": total_pages,
        "total_items": total,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
        "items_per_page": limit,
    }
    return expenses, pagination


def create_expense(
    db: Session,
    identity: Identity,
    data: ExpenseCreate,
    today: Optional[date] = None
) -> Expense:
    _check_category(db, data.category_id)

    expense = Expense(
        user_id=identity.user_id,
        category_id=data.category_id,
        amount=_check_amount(data.amount),
        description=data.description,
        date=data.date or today or date.today(),
        payment_method=data.payment_method,
        location=data.location,
        tags=data.tags,
        is_recurring=data.is_recurring,
        recurring_frequency=data.recurring_frequency,
        attachments=data.attachments,
        approval_status=ApprovalStatus.REQUESTED.value if data.request_approval else None,
        approval_description=data.approval_message if data.request_approval else None
    )
    db.add(expense)
    db.commit()
    db.refresh(expense)

    logger.info("Expense %s created by %s: %s on %s",
                expense.id, identity.user_id, expense.amount, expense.date)

    reconcile_budgets(db, identity.user_id, [expense.category_id], today)
    return get_expense(db, identity, expense.id)


def update_expense(
    db: Session,
    identity: Identity,
    expense_id: int,
    data: ExpenseUpdate,
    today: Optional[date] = None
) -> Expense:
    expense = get_expense(db, identity, expense_id)
    previous_category_id = expense.category_id

    update_data = data.model_dump(exclude_unset=True)
    for field in REQUIRED_FIELDS & update_data.keys():
        if update_data[field] is None:
            raise ValidationError(f"{field} cannot be empty")

    if "category_id" in update_data and update_data["category_id"] != expense.category_id:
        _check_category(db, update_data["category_id"])
    if "amount" in update_data:
        update_data["amount"] = _check_amount(update_data["amount"])

    # Update only provided fields
    for field, value in update_data.items():
        setattr(expense, field, value)

    db.commit()
    db.refresh(expense)

    if RECONCILE_FIELDS & update_data.keys():
        reconcile_budgets(db, identity.user_id, [previous_category_id, expense.category_id], today)
    return get_expense(db, identity, expense.id)


def delete_expense(
    db: Session,
    identity: Identity,
    expense_id: int,
    today: Optional[date] = None
) -> None:
    expense = get_expense(db, identity, expense_id)
    category_id = expense.category_id

    db.delete(expense)
    db.commit()

    logger.info("Expense %s deleted by %s", expense_id, identity.user_id)
    reconcile_budgets(db, identity.user_id, [category_id], today)
