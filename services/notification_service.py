"""
Best-effort notification sink.

A failure to notify is logged and swallowed: it must never fail the
operation that triggered it.
"""

import logging

from repositories.interfaces import INotificationRepository

logger = logging.getLogger("bolao.services.notification")

ROLE_ADMIN = "admin"

WITHDRAWAL_REQUESTED = "withdrawal_requested"
WITHDRAWAL_APPROVED = "withdrawal_approved"
WITHDRAWAL_REJECTED = "withdrawal_rejected"
DEPOSIT_CONFIRMED = "deposit_confirmed"
PRIZE_PAID = "prize_paid"


class NotificationService:
    def __init__(self, notification_repo: INotificationRepository):
        self.notification_repo = notification_repo

    def notify_user(
        self, user_id: int, type: str, title: str, message: str, data: dict | None = None
    ) -> int | None:
        """Returns the notification id, or None if it could not be stored."""
        try:
            return self.notification_repo.create(
                type=type, title=title, message=message, user_id=user_id, data=data
            )
        except Exception:
            logger.exception(f"Failed to store {type} notification for user {user_id}")
            return None

    def notify_admins(self, type: str, title: str, message: str, data: dict | None = None) -> int | None:
        try:
            return self.notification_repo.create(
                type=type, title=title, message=message, target_role=ROLE_ADMIN, data=data
            )
        except Exception:
            logger.exception(f"Failed to store {type} admin notification")
            return None

    def get_notifications(self, user_id: int, unread_only: bool = False, limit: int = 20) -> list[dict]:
        return self.notification_repo.get_for_user(user_id, unread_only=unread_only, limit=limit)
