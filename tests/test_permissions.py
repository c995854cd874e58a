"""
Tests for permission helpers.
"""

from types import SimpleNamespace

import pytest

from domain.models.caller import Caller
from services.errors import AuthError, AuthorizationError
from services.permissions import (
    caller_from_interaction,
    has_admin_permission,
    has_allowlisted_admin,
    require_admin,
    require_caller,
)


def test_has_allowlisted_admin(monkeypatch):
    monkeypatch.setattr("services.permissions.ADMIN_USER_IDS", [101])
    interaction = SimpleNamespace(user=SimpleNamespace(id=101))

    assert has_allowlisted_admin(interaction) is True


def test_has_admin_permission_allowlist(monkeypatch):
    monkeypatch.setattr("services.permissions.ADMIN_USER_IDS", [202])
    interaction = SimpleNamespace(user=SimpleNamespace(id=202), guild=None)

    assert has_admin_permission(interaction) is True


def test_has_admin_permission_guild_member_permissions(monkeypatch):
    monkeypatch.setattr("services.permissions.ADMIN_USER_IDS", [])

    perms = SimpleNamespace(administrator=True, manage_guild=False)
    member = SimpleNamespace(guild_permissions=perms)
    guild = SimpleNamespace(get_member=lambda _uid: member)
    interaction = SimpleNamespace(user=SimpleNamespace(id=303), guild=guild)

    assert has_admin_permission(interaction) is True


def test_has_admin_permission_user_permissions_fallback(monkeypatch):
    monkeypatch.setattr("services.permissions.ADMIN_USER_IDS", [])

    perms = SimpleNamespace(administrator=False, manage_guild=True)
    interaction = SimpleNamespace(user=SimpleNamespace(id=404, guild_permissions=perms), guild=None)

    assert has_admin_permission(interaction) is True


def test_has_admin_permission_false(monkeypatch):
    monkeypatch.setattr("services.permissions.ADMIN_USER_IDS", [])
    interaction = SimpleNamespace(user=SimpleNamespace(id=505), guild=None)

    assert has_admin_permission(interaction) is False


class TestCallerFromInteraction:
    def test_regular_user(self, monkeypatch):
        monkeypatch.setattr("services.permissions.ADMIN_USER_IDS", [])
        user = SimpleNamespace(id=606, display_name="Ana", name="ana")
        interaction = SimpleNamespace(user=user, guild=None)

        caller = caller_from_interaction(interaction)

        assert caller == Caller(user_id=606, is_admin=False, display_name="Ana")

    def test_admin_user_falls_back_to_name(self, monkeypatch):
        monkeypatch.setattr("services.permissions.ADMIN_USER_IDS", [707])
        user = SimpleNamespace(id=707, display_name=None, name="boss")
        interaction = SimpleNamespace(user=user, guild=None)

        caller = caller_from_interaction(interaction)

        assert caller.is_admin is True
        assert caller.label == "boss"

    def test_missing_user(self):
        caller = caller_from_interaction(SimpleNamespace(user=None))

        assert caller.user_id is None


class TestRequireCaller:
    def test_returns_user_id(self):
        assert require_caller(Caller(user_id=5)) == 5

    @pytest.mark.parametrize("caller", [None, Caller(user_id=None)])
    def test_anonymous_rejected(self, caller):
        with pytest.raises(AuthError):
            require_caller(caller)


class TestRequireAdmin:
    def test_admin_allowed(self):
        assert require_admin(Caller(user_id=1, is_admin=True)) == 1

    def test_non_admin_rejected(self):
        with pytest.raises(AuthorizationError):
            require_admin(Caller(user_id=2))

    def test_anonymous_is_auth_error(self):
        with pytest.raises(AuthError):
            require_admin(Caller(user_id=None, is_admin=True))
