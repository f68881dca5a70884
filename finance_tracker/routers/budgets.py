from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from ..database import get_db
from ..identity import Identity, get_identity
from ..schemas import BudgetCreate, BudgetUpdate, BudgetResponse, DeleteResponse
from ..services import budget_service
from ..services.budget_service import get_today

router = APIRouter()

@router.get("", response_model=List[BudgetResponse])
async def get_budgets(
    active_only: bool = Query(False, description="Only return active budgets"),
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    return budget_service.list_budgets(db, identity, active_only)

@router.post("", response_model=BudgetResponse, status_code=201)
async def create_budget(
    data: BudgetCreate,
    identity: Identity = Depends(get_identity),
    today: date = Depends(get_today),
    db: Session = Depends(get_db)
):
    """Create a budget; end date and spend are derived"""
    return budget_service.create_budget(db, identity, data, today=today)

@router.get("/{budget_id}", response_model=BudgetResponse)
async def get_budget(
    budget_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    return budget_service.get_budget(db, identity, budget_id)

@router.put("/{budget_id}", response_model=BudgetResponse)
async def update_budget(
    budget_id: int,
    data: BudgetUpdate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    return budget_service.update_budget(db, identity, budget_id, data)

@router.post("/{budget_id}/reset", response_model=BudgetResponse)
async def reset_budget(
    budget_id: int,
    identity: Identity = Depends(get_identity),
    today: date = Depends(get_today),
    db: Session = Depends(get_db)
):
    """Restart the budget window from today"""
    return budget_service.reset_budget(db, identity, budget_id, today=today)

@router.post("/{budget_id}/recalculate", response_model=BudgetResponse)
async def recalculate_budget(
    budget_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    budget = budget_service.get_budget(db, identity, budget_id)
    return budget_service.recalculate_budget(db, budget)

@router.delete("/{budget_id}", response_model=DeleteResponse)
async def delete_budget(
    budget_id: int,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    budget_service.delete_budget(db, identity, budget_id)
    return {"message": "Budget deleted successfully"}
