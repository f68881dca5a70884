"""
Approval threads.

A notification starts ``requested`` with the user's message and is resolved
once by an admin, either ``approved`` or ``denied``. Replies can be appended
by the owner or an admin at any time, including after resolution.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from ..errors import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from ..identity import Identity, Policy, can_administer
from ..models.expense import ApprovalStatus, Expense
from ..models.notification import (
    MessageSender,
    Notification,
    NotificationMessage,
    NotificationStatus,
    NotificationType,
)

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = {t.value for t in NotificationType}
RESOLVED_STATUSES = {NotificationStatus.APPROVED.value, NotificationStatus.DENIED.value}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _append_message(notification: Notification, sender: MessageSender, message: str) -> None:
    notification.messages.append(
        NotificationMessage(sender=sender.value, message=message, timestamp=_now())
    )


def _get(db: Session, notification_id: int) -> Optional[Notification]:
    return db.query(Notification).options(
        selectinload(Notification.messages)
    ).filter(Notification.id == notification_id).first()


def check_resolution(status: Optional[str], message: Optional[str]) -> None:
    """Validate an admin resolution: approved/denied plus a note"""
    if not status or not message or not message.strip():
        raise ValidationError("Status and message are required")
    if status not in RESOLVED_STATUSES:
        raise ValidationError("Status must be approved or denied")


def create_notification(
    db: Session,
    identity: Identity,
    type: Optional[str],
    message: Optional[str]
) -> Notification:
    if not type or not message or not message.strip():
        raise ValidationError("Type and message are required")
    if type not in NOTIFICATION_TYPES:
        raise ValidationError("Type must be category or expense")

    notification = Notification(
        user_id=identity.user_id,
        type=type,
        status=NotificationStatus.REQUESTED.value
    )
    _append_message(notification, MessageSender.USER, message)
    db.add(notification)
    db.commit()
    db.refresh(notification)

    logger.info("Notification %s (%s) requested by %s", notification.id, type, identity.user_id)
    return notification


def get_notification(db: Session, identity: Identity, notification_id: int,
                     policy: Policy = can_administer) -> Notification:
    notification = _get(db, notification_id)
    if not notification or (notification.user_id != identity.user_id and not policy(identity)):
        raise NotFoundError("Notification not found")
    return notification


def list_notifications(db: Session, identity: Identity) -> List[Notification]:
    """The caller's own notifications, newest first"""
    return db.query(Notification).options(
        selectinload(Notification.messages)
    ).filter(
        Notification.user_id == identity.user_id
    ).order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def get_all_notifications(db: Session, identity: Identity, policy: Policy = can_administer) -> List[Notification]:
    """Every notification regardless of owner, newest first (admin only)"""
    if not policy(identity):
        raise ForbiddenError("Admin access required")
    return db.query(Notification).options(
        selectinload(Notification.messages)
    ).order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def add_reply(
    db: Session,
    identity: Identity,
    notification_id: int,
    message: Optional[str],
    policy: Policy = can_administer
) -> Notification:
    if not message or not message.strip():
        raise ValidationError("Message is required")

    notification = _get(db, notification_id)
    if not notification:
        raise NotFoundError("Notification not found")

    is_admin = policy(identity)
    if notification.user_id != identity.user_id and not is_admin:
        raise ForbiddenError("Forbidden")

    sender = MessageSender.ADMIN if is_admin else MessageSender.USER
    _append_message(notification, sender, message)
    db.commit()
    db.refresh(notification)
    return notification


def update_status(
    db: Session,
    identity: Identity,
    notification_id: int,
    status: Optional[str],
    message: Optional[str],
    policy: Policy = can_administer
) -> Notification:
    """Resolve a requested notification; approved and denied are terminal"""
    if not policy(identity):
        raise ForbiddenError("Admin access required")
    check_resolution(status, message)

    notification = _get(db, notification_id)
    if not notification:
        raise NotFoundError("Notification not found")

    if notification.status != NotificationStatus.REQUESTED.value:
        raise InvalidStateError(f"Notification is already {notification.status}")

    notification.status = status
    _append_message(notification, MessageSender.ADMIN, message)
    db.commit()
    db.refresh(notification)

    logger.info("Notification %s %s by %s", notification.id, status, identity.user_id)
    return notification


def set_expense_approval(
    db: Session,
    identity: Identity,
    expense_id: int,
    status: Optional[str],
    description: Optional[str],
    policy: Policy = can_administer
) -> Expense:
    """Resolve an expense's approval sub-record with the same rules as a thread"""
    if not policy(identity):
        raise ForbiddenError("Admin access required")
    check_resolution(status, description)

    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if not expense:
        raise NotFoundError("Expense not found")

    if expense.approval_status != ApprovalStatus.REQUESTED.value:
        raise InvalidStateError(
            f"Expense approval is {expense.approval_status or 'not requested'}"
        )

    expense.approval_status = status
    expense.approval_description = description
    db.commit()
    db.refresh(expense)

    logger.info("Expense %s approval %s by %s", expense.id, status, identity.user_id)
    return expense
