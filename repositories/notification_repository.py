"""
Repository for in-app notifications.
"""

import json

from repositories.base_repository import BaseRepository
from repositories.interfaces import INotificationRepository


class NotificationRepository(BaseRepository, INotificationRepository):
    """
    Notifications target either one user (user_id) or a role ("admin").
    """

    def create(
        self,
        type: str,
        title: str,
        message: str,
        user_id: int | None = None,
        target_role: str | None = None,
        data: dict | None = None,
    ) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO notifications (user_id, target_role, type, title, message, data, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    target_role,
                    type,
                    title,
                    message,
                    json.dumps(data) if data is not None else None,
                    self.now(),
                ),
            )
            return cursor.lastrowid

    def get_for_user(self, user_id: int, unread_only: bool = False, limit: int = 20) -> list[dict]:
        query = "SELECT * FROM notifications WHERE user_id = ?"
        if unread_only:
            query += " AND read = 0"
        query += " ORDER BY id DESC LIMIT ?"
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, (user_id, limit))
            rows = []
            for row in cursor.fetchall():
                item = dict(row)
                item["data"] = json.loads(item["data"]) if item["data"] else None
                item["read"] = bool(item["read"])
                rows.append(item)
            return rows

    def mark_read(self, notification_id: int, user_id: int) -> bool:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE notifications SET read = 1 WHERE id = ? AND user_id = ? AND read = 0",
                (notification_id, user_id),
            )
            return cursor.rowcount > 0
