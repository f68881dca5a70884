from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from ..database import get_db
from ..identity import Identity, Policy, get_identity, get_policy
from ..schemas import AdminAnalyticsResponse, ExpenseApprovalUpdate, ExpenseResponse
from ..services import analytics_service, notification_service
from ..services.budget_service import get_today

router = APIRouter()

@router.get("/analytics", response_model=AdminAnalyticsResponse)
async def get_admin_analytics(
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    today: date = Depends(get_today),
    db: Session = Depends(get_db)
):
    return analytics_service.admin_analytics(db, identity, today=today, policy=policy)

@router.get("/recent-expenses", response_model=List[ExpenseResponse])
async def get_recent_expenses(
    limit: int = Query(5, ge=1, le=100),
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    return analytics_service.recent_expenses(db, identity, limit, policy)

@router.get("/pending-approvals", response_model=List[ExpenseResponse])
async def get_pending_approvals(
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    """Expenses waiting for an admin decision"""
    return analytics_service.pending_approvals(db, identity, policy)

@router.put("/expenses/{expense_id}/approval", response_model=ExpenseResponse)
async def set_expense_approval(
    expense_id: int,
    data: ExpenseApprovalUpdate,
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    """Approve or deny an expense (admin only)"""
    return notification_service.set_expense_approval(
        db, identity, expense_id, data.status, data.description, policy
    )
