"""
Read-only spending aggregates for users and admins.
"""
from collections import OrderedDict
from datetime import date
from typing import Optional, List

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..errors import ForbiddenError, ValidationError
from ..identity import Identity, Policy, can_administer
from ..models.category import Category
from ..models.expense import ApprovalStatus, Expense


def _monthly_trend(rows) -> List[dict]:
    """Group (date, amount) rows into ascending YYYY-MM buckets"""
    buckets = OrderedDict()
    for expense_date, amount in sorted(rows, key=lambda row: row[0]):
        key = expense_date.strftime("%Y-%m")
        bucket = buckets.setdefault(key, {"period": key, "total": 0.0, "count": 0})
        bucket["total"] += float(amount)
        bucket["count"] += 1
    return list(buckets.values())


def _average_daily(rows) -> float:
    """Mean of the daily totals over days that have expenses"""
    daily = {}
    for expense_date, amount in rows:
        daily[expense_date] = daily.get(expense_date, 0.0) + float(amount)
    return sum(daily.values()) / len(daily) if daily else 0.0


def expense_analytics(
    db: Session,
    identity: Identity,
    start: Optional[date] = None,
    end: Optional[date] = None,
    today: Optional[date] = None
) -> dict:
    today = today or date.today()
    start = start or date(today.year, 1, 1)
    end = end or today
    if start > end:
        raise ValidationError("start_date must be before end_date")

    in_window = (
        Expense.user_id == identity.user_id,
        Expense.date >= start,
        Expense.date <= end,
    )

    total, count = db.query(
        func.coalesce(func.sum(Expense.amount), 0),
        func.count(Expense.id)
    ).filter(*in_window).one()

    by_category = db.query(
        Category.id,
        Category.name,
        Category.color,
        func.sum(Expense.amount).label("total"),
        func.count(Expense.id).label("count")
    ).join(Category, Expense.category_id == Category.id).filter(
        *in_window
    ).group_by(Category.id, Category.name, Category.color).order_by(
        func.sum(Expense.amount).desc()
    ).all()

    by_payment_method = db.query(
        Expense.payment_method,
        func.sum(Expense.amount).label("total"),
        func.count(Expense.id).label("count")
    ).filter(*in_window).group_by(Expense.payment_method).order_by(
        func.sum(Expense.amount).desc()
    ).all()

    rows = db.query(Expense.date, Expense.amount).filter(*in_window).all()

    return {
        "period": {"start": start, "end": end},
        "summary": {
            "total_spending": float(total or 0),
            "total_expenses": count or 0,
            "average_daily_spending": _average_daily(rows),
        },
        "by_category": [
            {
                "category_id": row.id,
                "category_name": row.name,
                "category_color": row.color,
                "total": float(row.total),
                "count": row.count,
            } for row in by_category
        ],
        "by_payment_method": [
            {"payment_method": row.payment_method, "total": float(row.total), "count": row.count}
            for row in by_payment_method
        ],
        "monthly_trend": _monthly_trend(rows),
    }


def _require_admin(identity: Identity, policy: Policy) -> None:
    if not policy(identity):
        raise ForbiddenError("Admin access required")


def admin_analytics(
    db: Session,
    identity: Identity,
    today: Optional[date] = None,
    policy: Policy = can_administer
) -> dict:
    """Totals across all users plus the last six months of spending"""
    _require_admin(identity, policy)
    today = today or date.today()

    total_spent = db.query(func.coalesce(func.sum(Expense.amount), 0)).scalar()
    user_count = db.query(func.count(func.distinct(Expense.user_id))).scalar()

    top_categories = db.query(
        Category.name,
        func.sum(Expense.amount).label("total"),
        func.count(Expense.id).label("count")
    ).join(Category, Expense.category_id == Category.id).group_by(
        Category.id, Category.name
    ).order_by(func.sum(Expense.amount).desc()).limit(5).all()

    six_months_ago = date(today.year, today.month, 1) - relativedelta(months=5)
    rows = db.query(Expense.date, Expense.amount).filter(Expense.date >= six_months_ago).all()

    return {
        "total_spent": float(total_spent or 0),
        "user_count": user_count or 0,
        "top_categories": [
            {"category": row.name, "total": float(row.total), "count": row.count}
            for row in top_categories
        ],
        "monthly_trend": _monthly_trend(rows),
    }


def recent_expenses(db: Session, identity: Identity, limit: int = 5,
                    policy: Policy = can_administer) -> List[Expense]:
    _require_admin(identity, policy)
    return db.query(Expense).options(joinedload(Expense.category)).order_by(
        Expense.date.desc(), Expense.id.desc()
    ).limit(limit).all()


def pending_approvals(db: Session, identity: Identity, policy: Policy = can_administer) -> List[Expense]:
    """Expenses whose approval is still requested, newest first"""
    _require_admin(identity, policy)
    return db.query(Expense).options(joinedload(Expense.category)).filter(
        Expense.approval_status == ApprovalStatus.REQUESTED.value
    ).order_by(Expense.date.desc(), Expense.id.desc()).all()
