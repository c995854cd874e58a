"""
Pool commands: /contest, /bet, /mybets
"""

import asyncio
import logging

import discord
from discord import app_commands
from discord.ext import commands

from domain.services.number_validation import parse_numbers
from services.bet_service import BetService
from services.contest_service import ContestService
from services.permissions import caller_from_interaction
from utils.command_helpers import handle_result
from utils.formatting import format_contest_summary, format_numbers
from utils.interaction_safety import safe_defer, safe_followup
from utils.money import format_brl
from utils.rate_limiter import GLOBAL_RATE_LIMITER

logger = logging.getLogger("bolao.commands.lottery")


class LotteryCommands(commands.Cog):
    """Slash commands for viewing the open contest and placing bets."""

    def __init__(self, bot: commands.Bot, contest_service: ContestService, bet_service: BetService):
        self.bot = bot
        self.contest_service = contest_service
        self.bet_service = bet_service

    @app_commands.command(name="contest", description="Show the open contest")
    async def contest(self, interaction: discord.Interaction):
        if not await safe_defer(interaction, ephemeral=False):
            return

        contest = await asyncio.to_thread(self.contest_service.get_open_contest)
        if contest is None:
            await safe_followup(interaction, content="No contest is open right now.", ephemeral=True)
            return

        embed = discord.Embed(
            title="🎱 Bolão",
            description=format_contest_summary(contest),
            color=0x2ECC71,
        )
        embed.set_footer(text="Pick 6 numbers from 00 to 99 with /bet")
        await safe_followup(interaction, embed=embed)

    @app_commands.command(name="bet", description="Bet on 6 numbers (00-99) in the open contest")
    @app_commands.describe(numbers="Six different numbers from 0 to 99, e.g. 3 14 15 92 65 35")
    async def bet(self, interaction: discord.Interaction, numbers: str):
        rl = GLOBAL_RATE_LIMITER.check(
            scope="bet",
            user_id=interaction.user.id,
            limit=3,
            per_seconds=30,
        )
        if not rl.allowed:
            await interaction.response.send_message(
                f"Easy there. Try again in {rl.retry_after_seconds}s.",
                ephemeral=True,
            )
            return

        try:
            picks = parse_numbers(numbers)
        except ValueError as exc:
            await interaction.response.send_message(str(exc), ephemeral=True)
            return

        if not await safe_defer(interaction, ephemeral=True):
            return

        contest = await asyncio.to_thread(self.contest_service.get_open_contest)
        if contest is None:
            await safe_followup(interaction, content="No contest is open right now.", ephemeral=True)
            return

        caller = caller_from_interaction(interaction)
        result = await asyncio.to_thread(self.bet_service.place_bet, caller, contest.id, picks)
        if not await handle_result(interaction, result):
            return

        receipt = result.value
        await safe_followup(
            interaction,
            content=(
                f"🎟️ Bet #{receipt.bet_id} placed on **{contest.month_year}**: "
                f"`{format_numbers(receipt.chosen_numbers)}`\n"
                f"Charged {format_brl(receipt.amount)} · balance {format_brl(receipt.new_balance)}"
            ),
            ephemeral=True,
        )

    @app_commands.command(name="mybets", description="Show your recent bets")
    async def mybets(self, interaction: discord.Interaction):
        if not await safe_defer(interaction, ephemeral=True):
            return

        bets = await asyncio.to_thread(self.bet_service.get_user_bets, interaction.user.id, 10)
        if not bets:
            await safe_followup(interaction, content="You have no bets yet.", ephemeral=True)
            return

        lines = []
        for bet in bets:
            line = f"#{bet.id} · contest {bet.contest_id} · `{format_numbers(bet.chosen_numbers)}`"
            if bet.hits is not None:
                line += f" · {bet.hits} hit(s)"
            if bet.is_winner:
                line += f" · won {format_brl(bet.prize_amount)}" + ("" if bet.prize_paid else " (payout pending)")
            lines.append(line)
        await safe_followup(interaction, content="\n".join(lines), ephemeral=True)


async def setup(bot: commands.Bot):
    contest_service = getattr(bot, "contest_service", None)
    bet_service = getattr(bot, "bet_service", None)
    if contest_service is None or bet_service is None:
        raise RuntimeError("Contest/bet services not registered on bot.")

    await bot.add_cog(LotteryCommands(bot, contest_service, bet_service))
