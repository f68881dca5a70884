from .category import Category, CategoryState
from .expense import Expense, PaymentMethod, ApprovalStatus
from .budget import Budget, BudgetPeriod
from .notification import Notification, NotificationMessage, NotificationType, NotificationStatus, MessageSender

__all__ = [
    "Category",
    "CategoryState",
    "Expense",
    "PaymentMethod",
    "ApprovalStatus",
    "Budget",
    "BudgetPeriod",
    "Notification",
    "NotificationMessage",
    "NotificationType",
    "NotificationStatus",
    "MessageSender"
]
