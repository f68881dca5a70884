from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from ..config import settings
from ..database import get_db
from ..identity import Identity, get_identity
from ..models.notification import NotificationType
from ..schemas import (
    ExpenseCreate,
    ExpenseUpdate,
    ExpenseResponse,
    ExpenseCreateResponse,
    ExpenseListResponse,
    ExpenseAnalyticsResponse,
    DeleteResponse,
)
from ..services import analytics_service, expense_service, notification_service
from ..services.budget_service import get_today

router = APIRouter()

@router.get("", response_model=ExpenseListResponse)
async def get_expenses(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.PAGE_SIZE, ge=1, le=settings.MAX_LIMIT, description="Number of records per page"),
    category_id: Optional[int] = Query(None, ge=1, description="Filter by category ID"),
    start_date: Optional[date] = Query(None, description="Start date (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="End date (YYYY-MM-DD)"),
    min_amount: Optional[float] = Query(None, ge=0),
    max_amount: Optional[float] = Query(None, ge=0),
    payment_method: Optional[str] = Query(None, pattern=r"^(cash|card|bank_transfer|digital_wallet|other)$"),
    search: Optional[str] = Query(None, max_length=255, description="Search in description/location"),
    sort_by: str = Query("date", pattern=r"^(date|amount|description|created_at)$"),
    sort_order: str = Query("desc", pattern=r"^(asc|desc)$"),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    """Get the caller's expenses with optional filters."""
    expenses, pagination = expense_service.list_expenses(
        db, identity,
        page=page, limit=limit, category_id=category_id,
        start_date=start_date, end_date=end_date,
        min_amount=min_amount, max_amount=max_amount,
        payment_method=payment_method, search=search,
        sort_by=sort_by, sort_order=sort_order
    )
    return {"expenses": expenses, "pagination": pagination}

@router.post("", response_model=ExpenseCreateResponse, status_code=201)
async def create_expense(
    data: ExpenseCreate,
    identity: Identity = Depends(get_identity),
    today: date = Depends(get_today),
    db: Session = Depends(get_db)
):
    """Record an expense and reconcile the matching budget"""
    expense = expense_service.create_expense(db, identity, data, today=today)

    notification_id = None
    if data.request_approval:
        notification = notification_service.create_notification(
            db,
            identity,
            NotificationType.EXPENSE.value,
            data.approval_message or f"Please approve expense #{expense.id}: {expense.description}"
        )
        notification_id = notification.id

    return {
        "message": "Expense created successfully",
        "expense": expense,
        "notification_id": notification_id
    }

@router.get("/analytics", response_model=ExpenseAnalyticsResponse)
async def get_expense_analytics(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    identity: Identity = Depends(get_identity),
    today: date = Depends(get_today),
    db: Session = Depends(get_db)
):
    """Spending totals, breakdowns and monthly trend for the caller"""
    return analytics_service.expense_analytics(db, identity, start_date, end_date, today=today)

@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    return expense_service.get_expense(db, identity, expense_id)

@router.put("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: int,
    data: ExpenseUpdate,
    identity: Identity = Depends(get_identity),
    today: date = Depends(get_today),
    db: Session = Depends(get_db)
):
    """Update an expense"""
    return expense_service.update_expense(db, identity, expense_id, data, today=today)

@router.delete("/{expense_id}", response_model=DeleteResponse)
async def delete_expense(
    expense_id: int,
    identity: Identity = Depends(get_identity),
    today: date = Depends(get_today),
    db: Session = Depends(get_db)
):
    """Delete an expense"""
    expense_service.delete_expense(db, identity, expense_id, today=today)
    return {"message": "Expense deleted successfully"}
