"""
Helpers that keep slash-command handlers alive when Discord misbehaves.

Interactions expire after 3 seconds unless deferred, and followups can fail
with transient HTTP errors. These wrappers log instead of raising, so a
handler that already moved money never crashes while replying about it.
"""

import logging

import discord

logger = logging.getLogger("bolao.interaction_safety")

# Discord error code for "Interaction has already been acknowledged"
ALREADY_ACKNOWLEDGED = 40060


async def safe_defer(interaction: discord.Interaction, ephemeral: bool = False) -> bool:
    """
    Defer the interaction response.

    Returns:
        True if the interaction is (now) acknowledged, False if it expired
    """
    if interaction.response.is_done():
        return True
    try:
        await interaction.response.defer(ephemeral=ephemeral)
        return True
    except discord.NotFound:
        logger.warning(f"Interaction {interaction.id} expired before it could be deferred")
        return False
    except discord.HTTPException as exc:
        if getattr(exc, "code", None) == ALREADY_ACKNOWLEDGED:
            return True
        logger.warning(f"Failed to defer interaction {interaction.id}: {exc}")
        return False


async def safe_followup(
    interaction: discord.Interaction,
    content: str | None = None,
    embed: discord.Embed | None = None,
    ephemeral: bool = False,
    **kwargs,
):
    """
    Send a followup message, falling back to the channel for public
    messages if the webhook token is gone.

    Returns:
        The sent message, or None if nothing could be delivered
    """
    send_kwargs = dict(kwargs)
    if content is not None:
        send_kwargs["content"] = content
    if embed is not None:
        send_kwargs["embed"] = embed
    send_kwargs["ephemeral"] = ephemeral

    try:
        return await interaction.followup.send(**send_kwargs)
    except discord.HTTPException as exc:
        logger.warning(f"Followup for interaction {interaction.id} failed: {exc}")

    channel = getattr(interaction, "channel", None)
    if ephemeral or channel is None:
        return None
    send_kwargs.pop("ephemeral", None)
    try:
        return await channel.send(**send_kwargs)
    except discord.HTTPException as exc:
        logger.warning(f"Channel fallback for interaction {interaction.id} failed: {exc}")
        return None
