from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from ..database import get_db
from ..identity import Identity, Policy, get_identity, get_policy
from ..models.notification import NotificationType
from ..schemas import (
    CategoryCreate,
    CategoryUpdate,
    CategoryActiveUpdate,
    CategoryResponse,
    CategoryCreateResponse,
    DeleteResponse,
)
from ..services import category_service, notification_service

router = APIRouter()

@router.get("/", response_model=List[CategoryResponse])
async def get_categories(
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    """Get categories: all for admins, active ones for everyone else"""
    return category_service.list_categories(db, identity, policy)

@router.post("/", response_model=CategoryCreateResponse, status_code=201)
async def create_category(
    data: CategoryCreate,
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    """
    Create a new category.
    Non-admin requests create an inactive category and open an approval thread.
    """
    category = category_service.create_category(
        db, identity, data.name, data.color, data.icon, policy=policy
    )

    if category.is_active:
        return {"message": "Category created successfully", "category": category}

    notification = notification_service.create_notification(
        db,
        identity,
        NotificationType.CATEGORY.value,
        data.message or f"Please approve the new category '{category.name}'"
    )
    return {
        "message": "Category submitted for approval",
        "category": category,
        "notification_id": notification.id
    }

@router.post("/defaults", response_model=List[CategoryResponse], status_code=201)
async def create_default_categories(
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    """Create the default category set (admin only)"""
    return category_service.create_default_categories(db, identity, policy)

@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    return category_service.get_visible_category(db, identity, category_id, policy)

@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    """Update a category"""
    return category_service.update_category(
        db, identity, category_id,
        name=data.name, color=data.color, icon=data.icon, policy=policy
    )

@router.put("/{category_id}/active", response_model=CategoryResponse)
async def set_category_active(
    category_id: int,
    data: CategoryActiveUpdate,
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    """Activate or deactivate a category (admin only)"""
    return category_service.set_category_active(db, identity, category_id, data.active, policy)

@router.delete("/{category_id}", response_model=DeleteResponse)
async def delete_category(
    category_id: int,
    identity: Identity = Depends(get_identity),
    policy: Policy = Depends(get_policy),
    db: Session = Depends(get_db)
):
    """Soft delete a category"""
    category_service.soft_delete_category(db, identity, category_id, policy)
    return {"message": "Category deleted successfully"}
