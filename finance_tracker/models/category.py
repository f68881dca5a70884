from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, Index, text
from sqlalchemy.sql import func
from ..database import Base


class CategoryState(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"  # soft-deleted or awaiting admin approval


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), index=True, nullable=False)
    color = Column(String(7), nullable=False)  # hex color for UI
    icon = Column(String(100), nullable=False)  # icon identifier, e.g. "pi pi-tag"
    state = Column(String, nullable=False, default=CategoryState.ACTIVE.value, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # At most one active category per name
    __table_args__ = (
        Index(
            "uix_categories_active_name",
            "name",
            unique=True,
            sqlite_where=text("state = 'active'"),
            postgresql_where=text("state = 'active'"),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.state == CategoryState.ACTIVE.value
