from enum import Enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Date, Boolean, JSON, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    DIGITAL_WALLET = "digital_wallet"
    OTHER = "other"


class ApprovalStatus(str, Enum):
    REQUESTED = "requested"
    APPROVED = "approved"
    DENIED = "denied"


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)  # owner, from the identity context
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    description = Column(String(500), nullable=False)
    date = Column(Date, nullable=False, index=True)
    payment_method = Column(String, nullable=False, default=PaymentMethod.CASH.value)
    location = Column(String(200))
    tags = Column(JSON, default=list)
    is_recurring = Column(Boolean, default=False)
    recurring_frequency = Column(String, nullable=True)  # 'daily', 'weekly', 'monthly' or 'yearly'
    attachments = Column(JSON, default=list)  # URLs to uploaded files

    # Approval sub-record; null status means no approval was requested
    approval_status = Column(String, nullable=True, index=True)
    approval_description = Column(String(1000), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_expenses_amount_non_negative"),
    )

    # Relationships
    category = relationship("Category")

    @property
    def approval(self):
        if self.approval_status is None:
            return None
        return {"status": self.approval_status, "description": self.approval_description}
