"""
Permission checking utilities for the bot.
"""

import discord

from config import ADMIN_USER_IDS
from domain.models.caller import Caller
from services.errors import AuthError, AuthorizationError


def has_allowlisted_admin(interaction: discord.Interaction) -> bool:
    """
    Check if the user is explicitly allowlisted via ADMIN_USER_IDS.
    If ADMIN_USER_IDS is empty/unset, nobody is considered admin by this check.
    """
    return interaction.user.id in ADMIN_USER_IDS


def has_admin_permission(interaction: discord.Interaction) -> bool:
    """
    Check if user has admin permissions.

    First checks ADMIN_USER_IDS list, then falls back to Discord permissions.

    Args:
        interaction: Discord interaction object

    Returns:
        True if user has admin permissions, False otherwise
    """
    if ADMIN_USER_IDS and interaction.user.id in ADMIN_USER_IDS:
        return True

    # Administrator or Manage Server in the guild
    if interaction.guild:
        get_member = getattr(interaction.guild, "get_member", None)
        if callable(get_member):
            member = get_member(interaction.user.id)
            if member and getattr(member, "guild_permissions", None):
                return (
                    member.guild_permissions.administrator
                    or member.guild_permissions.manage_guild
                )

    # interaction.user may already be a Member-like object
    perms = getattr(interaction.user, "guild_permissions", None)
    if perms:
        return bool(getattr(perms, "administrator", False) or getattr(perms, "manage_guild", False))

    return False


def caller_from_interaction(interaction: discord.Interaction) -> Caller:
    """Build the service-layer identity for whoever triggered the interaction."""
    user = getattr(interaction, "user", None)
    if user is None:
        return Caller(user_id=None)
    return Caller(
        user_id=user.id,
        is_admin=has_admin_permission(interaction),
        display_name=getattr(user, "display_name", None) or getattr(user, "name", None),
    )


def require_caller(caller: Caller | None) -> int:
    """
    Raises:
        AuthError: if there is no authenticated caller

    Returns:
        The caller's user id
    """
    if caller is None or caller.user_id is None:
        raise AuthError("You must be signed in to do that.")
    return caller.user_id


def require_admin(caller: Caller | None) -> int:
    """
    Raises:
        AuthError: if there is no authenticated caller
        AuthorizationError: if the caller is not an admin
    """
    user_id = require_caller(caller)
    if not caller.is_admin:
        raise AuthorizationError("Only administrators can do that.")
    return user_id
