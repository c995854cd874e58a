"""
Tests for ProfileService (PIX keys) and NotificationService.
"""

from unittest.mock import MagicMock

import pytest

from domain.models.caller import Caller
from services import error_codes
from services.notification_service import PRIZE_PAID, WITHDRAWAL_REQUESTED, NotificationService
from services.profile_service import PIX_KEY_MAX_LENGTH


class TestPixKey:
    def test_set_and_get(self, profile_service, user):
        result = profile_service.set_pix_key(user, "  +5511999990000 ")

        assert result.success
        assert result.value == "+5511999990000"
        assert profile_service.get_pix_key(user.user_id) == "+5511999990000"

    def test_overwrite(self, profile_service, user):
        profile_service.set_pix_key(user, "old@example.com")
        profile_service.set_pix_key(user, "new@example.com")

        assert profile_service.get_pix_key(user.user_id) == "new@example.com"

    def test_unknown_user_has_no_key(self, profile_service):
        assert profile_service.get_pix_key(424242) is None

    @pytest.mark.parametrize("key", ["", "   ", None, "x" * (PIX_KEY_MAX_LENGTH + 1)])
    def test_invalid_keys(self, profile_service, user, key):
        result = profile_service.set_pix_key(user, key)

        assert not result.success
        assert result.error_code == error_codes.VALIDATION_ERROR

    def test_anonymous_caller(self, profile_service):
        result = profile_service.set_pix_key(Caller(user_id=None), "ana@example.com")

        assert result.error_code == error_codes.AUTH_ERROR


class TestNotifications:
    def test_user_notifications_round_trip(self, notification_service, user):
        notification_id = notification_service.notify_user(
            user.user_id, PRIZE_PAID, "Prize paid", "You won R$ 6.40", data={"contest_id": 3}
        )

        items = notification_service.get_notifications(user.user_id)

        assert notification_id is not None
        assert len(items) == 1
        assert items[0]["data"] == {"contest_id": 3}
        assert items[0]["read"] is False

    def test_admin_notifications_not_in_user_feed(self, notification_service, user):
        assert notification_service.notify_admins(WITHDRAWAL_REQUESTED, "Withdrawal", "R$ 40.00") is not None

        assert notification_service.get_notifications(user.user_id) == []

    def test_unread_filter(self, notification_service, notification_repository, user):
        first = notification_service.notify_user(user.user_id, PRIZE_PAID, "a", "a")
        notification_service.notify_user(user.user_id, PRIZE_PAID, "b", "b")

        assert notification_repository.mark_read(first, user.user_id) is True
        assert notification_repository.mark_read(first, user.user_id) is False

        unread = notification_service.get_notifications(user.user_id, unread_only=True)
        assert [item["title"] for item in unread] == ["b"]

    def test_storage_failure_is_swallowed(self):
        repo = MagicMock()
        repo.create.side_effect = RuntimeError("disk full")
        service = NotificationService(repo)

        assert service.notify_user(1, PRIZE_PAID, "t", "m") is None
        assert service.notify_admins(WITHDRAWAL_REQUESTED, "t", "m") is None
