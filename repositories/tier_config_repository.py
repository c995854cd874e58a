"""
Repository for the prize tier configuration.
"""

from repositories.base_repository import BaseRepository
from repositories.interfaces import ITierConfigRepository


class TierConfigRepository(BaseRepository, ITierConfigRepository):
    """Single-row store; shares are kept as decimal strings."""

    def get(self) -> dict | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT house_share, six_hits_share, five_hits_share, updated_by, updated_at
                FROM tier_config WHERE id = 1
                """
            )
            row = cursor.fetchone()
            return dict(row) if row else None

    def save(
        self, house_share: str, six_hits_share: str, five_hits_share: str, updated_by: int | None
    ) -> None:
        with self.connection() as conn:
            conn.execute(
                """
                INSERT INTO tier_config (id, house_share, six_hits_share, five_hits_share, updated_by, updated_at)
                VALUES (1, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    house_share = excluded.house_share,
                    six_hits_share = excluded.six_hits_share,
                    five_hits_share = excluded.five_hits_share,
                    updated_by = excluded.updated_by,
                    updated_at = excluded.updated_at
                """,
                (house_share, six_hits_share, five_hits_share, updated_by, self.now()),
            )
