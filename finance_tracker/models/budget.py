from datetime import date
from enum import Enum

from dateutil.relativedelta import relativedelta
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Date, Boolean, event
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..config import settings
from ..database import Base


class BudgetPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


PERIOD_LENGTHS = {
    BudgetPeriod.DAILY.value: relativedelta(days=+1),
    BudgetPeriod.WEEKLY.value: relativedelta(weeks=+1),
    BudgetPeriod.MONTHLY.value: relativedelta(months=+1),
    BudgetPeriod.YEARLY.value: relativedelta(years=+1),
}


def compute_end_date(start_date: date, period: str) -> date:
    """End of the budget window: start plus one period (month ends are clamped)"""
    try:
        return start_date + PERIOD_LENGTHS[period]
    except KeyError:
        raise ValueError(f"Unknown budget period: {period}")


class Budget(Base):
    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    spent = Column(Numeric(10, 2), nullable=False, default=0)
    period = Column(String, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)  # null = general budget
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_active = Column(Boolean, default=True, index=True)
    notifications_enabled = Column(Boolean, default=True)
    notification_threshold = Column(Integer, default=settings.DEFAULT_NOTIFICATION_THRESHOLD)  # percent
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    category = relationship("Category")

    @property
    def remaining(self) -> float:
        return max(0.0, float(self.amount) - float(self.spent or 0))

    @property
    def spent_percentage(self) -> float:
        amount = float(self.amount)
        return float(self.spent or 0) / amount * 100 if amount > 0 else 0.0

    @property
    def status(self) -> str:
        percentage = self.spent_percentage
        if percentage >= 100:
            return "exceeded"
        if percentage >= settings.BUDGET_WARNING_PERCENT:
            return "warning"
        return "good"

    @property
    def threshold_reached(self) -> bool:
        if not self.notifications_enabled:
            return False
        threshold = self.notification_threshold
        if threshold is None:
            threshold = settings.DEFAULT_NOTIFICATION_THRESHOLD
        return self.spent_percentage >= threshold


@event.listens_for(Budget, "before_insert")
@event.listens_for(Budget, "before_update")
def derive_end_date(mapper, connection, target):
    """Keep end_date derived from start_date and period on every save"""
    target.end_date = compute_end_date(target.start_date, target.period)
