"""
Command helper utilities for Discord slash commands.

Turns service Results into Discord replies so every command reports
failures the same way: a short, ephemeral message with the error code.
"""

from typing import TYPE_CHECKING

import discord

from services import error_codes
from utils.interaction_safety import safe_followup

if TYPE_CHECKING:
    from services.result import Result

# Codes worth a friendlier lead-in than the raw service message
_ERROR_PREFIXES = {
    error_codes.INSUFFICIENT_FUNDS: "💸",
    error_codes.PERMISSION_DENIED: "🔒",
    error_codes.CONTEST_CLOSED: "⛔",
    error_codes.EXTERNAL_API_ERROR: "🌐",
    error_codes.PERSISTENCE_ERROR: "⚠️",
}


def format_result_error(result: "Result") -> str:
    """
    Format a failed Result for display.

    Returns an empty string for successful results.
    """
    if result.success:
        return ""
    message = result.error or "Unknown error"
    if not result.error_code:
        return message
    prefix = _ERROR_PREFIXES.get(result.error_code, "❌")
    return f"{prefix} {message} (`{result.error_code}`)"


async def handle_result(
    interaction: discord.Interaction,
    result: "Result",
    success_msg: str | None = None,
    ephemeral: bool = True,
) -> bool:
    """
    Report a failed Result, or send ``success_msg`` when given.

    Returns:
        True if the result was successful

    Usage:
        result = await asyncio.to_thread(service.do_something, caller)
        if not await handle_result(interaction, result):
            return
    """
    if not result.success:
        await safe_followup(interaction, content=format_result_error(result), ephemeral=True)
        return False

    if success_msg:
        await safe_followup(interaction, content=success_msg, ephemeral=ephemeral)
    return True


async def handle_result_with_embed(
    interaction: discord.Interaction,
    result: "Result",
    success_embed: discord.Embed | None = None,
    ephemeral: bool = False,
) -> bool:
    """Like handle_result, but replies with an embed on success."""
    if not result.success:
        await safe_followup(interaction, content=format_result_error(result), ephemeral=True)
        return False

    if success_embed:
        await safe_followup(interaction, embed=success_embed, ephemeral=ephemeral)
    return True
