"""
Category store: creation, edits, soft delete and the active/inactive
lifecycle that decides which categories a caller can see.
"""
import logging
import re
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..identity import Identity, Policy, can_administer
from ..models.category import Category, CategoryState

logger = logging.getLogger(__name__)

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")

DEFAULT_CATEGORIES = [
    {"name": "Food & Dining", "color": "#FF6B6B", "icon": "pi pi-utensils"},
    {"name": "Transportation", "color": "#4ECDC4", "icon": "pi pi-car"},
    {"name": "Shopping", "color": "#45B7D1", "icon": "pi pi-shopping-bag"},
    {"name": "Entertainment", "color": "#96CEB4", "icon": "pi pi-gamepad"},
    {"name": "Bills & Utilities", "color": "#FFEAA7", "icon": "pi pi-bolt"},
    {"name": "Healthcare", "color": "#DDA0DD", "icon": "pi pi-heart"},
    {"name": "Education", "color": "#98D8C8", "icon": "pi pi-book"},
    {"name": "Travel", "color": "#F7DC6F", "icon": "pi pi-globe"},
]


def _validate_color(color: str) -> None:
    if not HEX_COLOR.match(color):
        raise ValidationError("Color must be a valid hex color code")


def _active_name_taken(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Category).filter(
        Category.name == name,
        Category.state == CategoryState.ACTIVE.value
    )
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first() is not None


def _commit(db: Session) -> None:
    """Commit, turning a race on the active-name index into a conflict"""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Category name already exists")


def get_visible_category(db: Session, identity: Identity, category_id: int,
                         policy: Policy = can_administer) -> Category:
    """Admins can see every category; everyone else only active ones"""
    query = db.query(Category).filter(Category.id == category_id)
    if not policy(identity):
        query = query.filter(Category.state == CategoryState.ACTIVE.value)
    category = query.first()
    if not category:
        raise NotFoundError("Category not found")
    return category


def list_categories(db: Session, identity: Identity, policy: Policy = can_administer) -> List[Category]:
    query = db.query(Category)
    if not policy(identity):
        query = query.filter(Category.state == CategoryState.ACTIVE.value)
    return query.order_by(Category.name.asc(), Category.id.asc()).all()


def create_category(
    db: Session,
    identity: Identity,
    name: Optional[str],
    color: Optional[str],
    icon: Optional[str] = None,
    policy: Policy = can_administer
) -> Category:
    """
    Create a category.

    Admins create active categories directly. Anyone else gets an inactive
    category; the caller is expected to open a ``category`` notification so
    an admin can review and activate it.
    """
    name = name.strip() if name else name
    if not name or not color:
        raise ValidationError("Name and color are required")
    _validate_color(color)

    if _active_name_taken(db, name):
        raise ConflictError("Category name already exists")

    is_admin = policy(identity)
    category = Category(
        name=name,
        color=color,
        icon=icon or settings.DEFAULT_CATEGORY_ICON,
        state=CategoryState.ACTIVE.value if is_admin else CategoryState.INACTIVE.value
    )
    db.add(category)
    _commit(db)
    db.refresh(category)

    logger.info(
        "Category %s '%s' created by %s (%s)",
        category.id, category.name, identity.user_id, category.state
    )
    return category


def update_category(
    db: Session,
    identity: Identity,
    category_id: int,
    name: Optional[str] = None,
    color: Optional[str] = None,
    icon: Optional[str] = None,
    policy: Policy = can_administer
) -> Category:
    category = get_visible_category(db, identity, category_id, policy)

    if name is not None:
        name = name.strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        if name != category.name and _active_name_taken(db, name, exclude_id=category.id):
            raise ConflictError("Category name already exists")
        category.name = name

    if color is not None:
        _validate_color(color)
        category.color = color

    if icon is not None:
        category.icon = icon

    _commit(db)
    db.refresh(category)
    return category


def soft_delete_category(db: Session, identity: Identity, category_id: int,
                         policy: Policy = can_administer) -> Category:
    """Mark a category inactive; the row stays so expenses keep their reference"""
    category = get_visible_category(db, identity, category_id, policy)
    category.state = CategoryState.INACTIVE.value
    db.commit()
    db.refresh(category)

    logger.info("Category %s soft-deleted by %s", category.id, identity.user_id)
    return category


def set_category_active(
    db: Session,
    identity: Identity,
    category_id: int,
    active: bool,
    policy: Policy = can_administer
) -> Category:
    if not policy(identity):
        raise ForbiddenError("Admin access required")

    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Category not found")

    if active and not category.is_active and _active_name_taken(db, category.name, exclude_id=category.id):
        raise ConflictError("Category name already exists")

    category.state = CategoryState.ACTIVE.value if active else CategoryState.INACTIVE.value
    _commit(db)
    db.refresh(category)

    logger.info("Category %s set %s by %s", category.id, category.state, identity.user_id)
    return category


def create_default_categories(db: Session, identity: Identity, policy: Policy = can_administer) -> List[Category]:
    """Create the standard category set, skipping names already active"""
    if not policy(identity):
        raise ForbiddenError("Admin access required")

    created = []
    for cat_data in DEFAULT_CATEGORIES:
        if _active_name_taken(db, cat_data["name"]):
            continue
        category = Category(state=CategoryState.ACTIVE.value, **cat_data)
        db.add(category)
        created.append(category)

    _commit(db)
    for category in created:
        db.refresh(category)
    return created
