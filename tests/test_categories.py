import pytest

from finance_tracker.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from finance_tracker.models import Category, CategoryState
from finance_tracker.services import category_service

from conftest import ADMIN, USER


def _active_count(db, name):
    return db.query(Category).filter(
        Category.name == name,
        Category.state == CategoryState.ACTIVE.value
    ).count()


def test_non_admin_category_is_created_inactive(db):
    category = category_service.create_category(db, USER, "Food", "#FF0000")

    assert category.is_active is False
    assert category.state == "inactive"
    assert category.icon == "pi pi-tag"


def test_admin_category_is_created_active(db):
    category = category_service.create_category(db, ADMIN, "Food", "#FF0000", "pi pi-utensils")

    assert category.is_active is True
    assert category.icon == "pi pi-utensils"


def test_duplicate_active_name_conflicts(db):
    category_service.create_category(db, ADMIN, "Food", "#FF0000")

    with pytest.raises(ConflictError):
        category_service.create_category(db, ADMIN, "Food", "#00FF00")

    assert _active_count(db, "Food") == 1


def test_non_admin_duplicate_of_active_name_conflicts(db):
    category_service.create_category(db, ADMIN, "Food", "#FF0000")

    with pytest.raises(ConflictError):
        category_service.create_category(db, USER, "Food", "#00FF00")

    assert _active_count(db, "Food") == 1


def test_inactive_duplicates_are_allowed(db):
    first = category_service.create_category(db, ADMIN, "Food", "#FF0000")
    category_service.soft_delete_category(db, ADMIN, first.id)

    pending = category_service.create_category(db, USER, "Food", "#00FF00")
    replacement = category_service.create_category(db, ADMIN, "Food", "#0000FF")

    assert pending.is_active is False
    assert replacement.is_active is True
    assert _active_count(db, "Food") == 1
    assert db.query(Category).filter(Category.name == "Food").count() == 3


@pytest.mark.parametrize("name,color", [(None, "#FF0000"), ("", "#FF0000"), ("Food", None), ("Food", "red")])
def test_create_requires_name_and_valid_color(db, name, color):
    with pytest.raises(ValidationError):
        category_service.create_category(db, ADMIN, name, color)


def test_update_rechecks_name_uniqueness_excluding_self(db):
    food = category_service.create_category(db, ADMIN, "Food", "#FF0000")
    category_service.create_category(db, ADMIN, "Travel", "#00FF00")

    with pytest.raises(ConflictError):
        category_service.update_category(db, ADMIN, food.id, name="Travel")

    # Same name as itself is not a conflict
    updated = category_service.update_category(db, ADMIN, food.id, name="Food", color="#123456")
    assert updated.color == "#123456"


def test_update_missing_category(db):
    with pytest.raises(NotFoundError):
        category_service.update_category(db, ADMIN, 999, name="Anything")


def test_soft_delete_keeps_row(db):
    food = category_service.create_category(db, ADMIN, "Food", "#FF0000")

    category_service.soft_delete_category(db, ADMIN, food.id)

    row = db.query(Category).filter(Category.id == food.id).first()
    assert row is not None
    assert row.is_active is False


def test_soft_deleted_name_can_be_reused(db):
    food = category_service.create_category(db, ADMIN, "Food", "#FF0000")
    category_service.soft_delete_category(db, ADMIN, food.id)

    again = category_service.create_category(db, ADMIN, "Food", "#00FF00")
    assert again.is_active is True
    assert again.id != food.id


def test_set_active_requires_admin(db):
    pending = category_service.create_category(db, USER, "Food", "#FF0000")

    with pytest.raises(ForbiddenError):
        category_service.set_category_active(db, USER, pending.id, True)

    activated = category_service.set_category_active(db, ADMIN, pending.id, True)
    assert activated.is_active is True


def test_activation_cannot_create_second_active_name(db):
    pending = category_service.create_category(db, USER, "Food", "#FF0000")
    category_service.create_category(db, ADMIN, "Food", "#00FF00")

    with pytest.raises(ConflictError):
        category_service.set_category_active(db, ADMIN, pending.id, True)
    assert _active_count(db, "Food") == 1


def test_listing_visibility_and_order(db):
    category_service.create_category(db, ADMIN, "Travel", "#00FF00")
    category_service.create_category(db, ADMIN, "Bills", "#0000FF")
    category_service.create_category(db, USER, "Games", "#FF0000")

    user_names = [c.name for c in category_service.list_categories(db, USER)]
    admin_names = [c.name for c in category_service.list_categories(db, ADMIN)]

    assert user_names == ["Bills", "Travel"]
    assert admin_names == ["Bills", "Games", "Travel"]


def test_inactive_category_hidden_from_users(db):
    pending = category_service.create_category(db, USER, "Games", "#FF0000")

    with pytest.raises(NotFoundError):
        category_service.get_visible_category(db, USER, pending.id)
    assert category_service.get_visible_category(db, ADMIN, pending.id).name == "Games"


def test_policy_is_injectable(db):
    # A policy that trusts everyone makes a plain user's category active
    category = category_service.create_category(db, USER, "Food", "#FF0000", policy=lambda identity: True)
    assert category.is_active is True


def test_default_categories_skip_existing(db):
    category_service.create_category(db, ADMIN, "Travel", "#00FF00")

    created = category_service.create_default_categories(db, ADMIN)

    assert len(created) == len(category_service.DEFAULT_CATEGORIES) - 1
    assert _active_count(db, "Travel") == 1
    with pytest.raises(ForbiddenError):
        category_service.create_default_categories(db, USER)
