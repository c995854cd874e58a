"""
Caller identity domain model.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Caller:
    """
    Who is invoking an operation, as reported by the identity provider.

    The Discord interaction supplies the user id; the admin flag comes from
    ADMIN_USER_IDS or guild permissions (see services/permissions.py).
    """

    user_id: int | None
    is_admin: bool = False
    display_name: str | None = None

    @property
    def label(self) -> str:
        return self.display_name or str(self.user_id)
