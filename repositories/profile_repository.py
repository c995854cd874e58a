"""
Repository for user payout profiles.
"""

from repositories.base_repository import BaseRepository
from repositories.interfaces import IProfileRepository


class ProfileRepository(BaseRepository, IProfileRepository):
    def get_pix_key(self, user_id: int) -> str | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT pix_key FROM profiles WHERE user_id = ?", (user_id,))
            row = cursor.fetchone()
            return row["pix_key"] if row else None

    def set_pix_key(self, user_id: int, pix_key: str, username: str | None = None) -> None:
        with self.connection() as conn:
            conn.execute(
                """
                INSERT INTO profiles (user_id, username, pix_key, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    pix_key = excluded.pix_key,
                    username = COALESCE(excluded.username, profiles.username),
                    updated_at = excluded.updated_at
                """,
                (user_id, username, pix_key, self.now()),
            )
