"""
Pydantic schemas for request/response validation.
All API endpoints should use these schemas instead of raw dicts.

Required workflow fields (category name/color, notification type/message,
status/message) are Optional here on purpose: the services validate them and
report a 400 with a workflow message rather than a schema 422.
"""
from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, field_validator


# Alias so fields named "date" can still be annotated with the date type
DateType = date

FREQUENCY_PATTERN = r"^(daily|weekly|monthly|yearly)$"
PAYMENT_METHOD_PATTERN = r"^(cash|card|bank_transfer|digital_wallet|other)$"


# =============================================================================
# Category Schemas
# =============================================================================

class CategoryCreate(BaseModel):
    """Schema for creating a category"""
    name: Optional[str] = Field(None, max_length=50, description="Category name")
    color: Optional[str] = Field(None, max_length=7, description="Hex color code")
    icon: Optional[str] = Field(None, max_length=100, description="Icon identifier")
    message: Optional[str] = Field(None, max_length=1000, description="Note for the admin when approval is needed")


class CategoryUpdate(BaseModel):
    """Schema for updating a category"""
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    color: Optional[str] = Field(None, max_length=7)
    icon: Optional[str] = Field(None, max_length=100)


class CategoryActiveUpdate(BaseModel):
    """Schema for activating/deactivating a category"""
    active: bool


class CategoryResponse(BaseModel):
    """Schema for category response"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    icon: str
    state: str
    is_active: bool


class CategoryCreateResponse(BaseModel):
    """Category plus the approval thread raised for it, if any"""
    message: str
    category: CategoryResponse
    notification_id: Optional[int] = None


class CategoryInfo(BaseModel):
    """Category info for expense response"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    icon: str


# =============================================================================
# Expense Schemas
# =============================================================================

class ExpenseCreate(BaseModel):
    """Schema for creating an expense"""
    category_id: int = Field(..., ge=1, description="Category ID")
    amount: float = Field(..., ge=0, description="Expense amount")
    description: str = Field(..., min_length=1, max_length=500)
    date: Optional[DateType] = Field(None, description="Expense date, defaults to today")
    payment_method: str = Field("cash", pattern=PAYMENT_METHOD_PATTERN)
    location: Optional[str] = Field(None, max_length=200)
    tags: List[str] = Field(default_factory=list)
    is_recurring: bool = False
    recurring_frequency: Optional[str] = Field(None, pattern=FREQUENCY_PATTERN)
    attachments: List[str] = Field(default_factory=list, description="Attachment URLs")
    request_approval: bool = Field(False, description="Open an approval request for this expense")
    approval_message: Optional[str] = Field(None, max_length=1000)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        """Validate tag names"""
        validated = []
        for tag in v:
            if not tag or len(tag) > 50:
                raise ValueError("Tag name must be between 1 and 50 characters")
            validated.append(tag.strip())
        return validated


class ExpenseUpdate(BaseModel):
    """Schema for updating an expense - only allows specific fields"""
    category_id: Optional[int] = Field(None, ge=1)
    amount: Optional[float] = Field(None, ge=0)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    date: Optional[DateType] = None
    payment_method: Optional[str] = Field(None, pattern=PAYMENT_METHOD_PATTERN)
    location: Optional[str] = Field(None, max_length=200)
    tags: Optional[List[str]] = None
    is_recurring: Optional[bool] = None
    recurring_frequency: Optional[str] = Field(None, pattern=FREQUENCY_PATTERN)
    attachments: Optional[List[str]] = None
    # Explicitly NOT allowing: id, user_id, approval_status, created_at, etc.


class ApprovalInfo(BaseModel):
    status: str
    description: Optional[str] = None


class ExpenseResponse(BaseModel):
    """Schema for expense response"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    category_id: int
    amount: float
    description: str
    date: DateType
    payment_method: str
    location: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_recurring: bool = False
    recurring_frequency: Optional[str] = None
    attachments: List[str] = Field(default_factory=list)
    approval: Optional[ApprovalInfo] = None
    category: Optional[CategoryInfo] = None


class ExpenseCreateResponse(BaseModel):
    message: str
    expense: ExpenseResponse
    notification_id: Optional[int] = None


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool
    items_per_page: int


class ExpenseListResponse(BaseModel):
    expenses: List[ExpenseResponse]
    pagination: Pagination


class ExpenseApprovalUpdate(BaseModel):
    """Schema for an admin resolving an expense approval"""
    status: Optional[str] = None
    description: Optional[str] = Field(None, max_length=1000)


# =============================================================================
# Budget Schemas
# =============================================================================

class BudgetCreate(BaseModel):
    """Schema for creating a budget"""
    name: str = Field(..., min_length=1, max_length=100)
    amount: float = Field(..., ge=0)
    period: str = Field(..., pattern=FREQUENCY_PATTERN)
    category_id: Optional[int] = Field(None, ge=1, description="Omit for a general budget")
    start_date: Optional[date] = Field(None, description="Defaults to today")
    is_active: bool = True
    notifications_enabled: bool = True
    notification_threshold: int = Field(80, ge=0, le=100, description="Percent of amount")


class BudgetUpdate(BaseModel):
    """Schema for updating a budget"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    amount: Optional[float] = Field(None, ge=0)
    period: Optional[str] = Field(None, pattern=FREQUENCY_PATTERN)
    category_id: Optional[int] = Field(None, ge=1)
    start_date: Optional[date] = None
    is_active: Optional[bool] = None
    notifications_enabled: Optional[bool] = None
    notification_threshold: Optional[int] = Field(None, ge=0, le=100)


class BudgetResponse(BaseModel):
    """Schema for budget response, including derived spend figures"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    name: str
    amount: float
    spent: float
    period: str
    category_id: Optional[int] = None
    start_date: date
    end_date: date
    is_active: bool
    notifications_enabled: bool
    notification_threshold: int
    remaining: float
    spent_percentage: float
    status: str
    threshold_reached: bool


# =============================================================================
# Notification Schemas
# =============================================================================

class NotificationCreate(BaseModel):
    type: Optional[str] = None
    message: Optional[str] = Field(None, max_length=1000)


class NotificationReply(BaseModel):
    message: Optional[str] = Field(None, max_length=1000)


class NotificationStatusUpdate(BaseModel):
    status: Optional[str] = None
    message: Optional[str] = Field(None, max_length=1000)


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sender: str
    message: str
    timestamp: datetime


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    type: str
    status: str
    messages: List[MessageResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# Analytics Schemas
# =============================================================================

class AnalyticsPeriod(BaseModel):
    start: date
    end: date


class AnalyticsSummary(BaseModel):
    total_spending: float
    total_expenses: int
    average_daily_spending: float


class CategorySpending(BaseModel):
    category_id: int
    category_name: str
    category_color: Optional[str] = None
    total: float
    count: int


class PaymentMethodSpending(BaseModel):
    payment_method: str
    total: float
    count: int


class TrendPoint(BaseModel):
    period: str
    total: float
    count: int


class ExpenseAnalyticsResponse(BaseModel):
    period: AnalyticsPeriod
    summary: AnalyticsSummary
    by_category: List[CategorySpending]
    by_payment_method: List[PaymentMethodSpending]
    monthly_trend: List[TrendPoint]


class TopCategory(BaseModel):
    category: str
    total: float
    count: int


class AdminAnalyticsResponse(BaseModel):
    total_spent: float
    user_count: int
    top_categories: List[TopCategory]
    monthly_trend: List[TrendPoint]


# =============================================================================
# Common Response Schemas
# =============================================================================

class DeleteResponse(BaseModel):
    """Response for delete operations"""
    message: str
