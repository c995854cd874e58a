"""
Admin commands: contest lifecycle, prize tiers, withdrawals and payout recovery.
"""

import asyncio
import logging

import discord
from discord import app_commands
from discord.ext import commands

from domain.services.number_validation import parse_numbers
from services.permissions import caller_from_interaction, has_admin_permission, has_allowlisted_admin
from utils.command_helpers import handle_result
from utils.formatting import format_numbers, format_timestamp, format_transaction_line, parse_closing_datetime
from utils.interaction_safety import safe_defer, safe_followup
from utils.money import format_brl

logger = logging.getLogger("bolao.commands.admin")


def _settlement_lines(settlement) -> list[str]:
    lines = [
        f"Prize pool: {format_brl(settlement.prize_value)}",
        f"6 hits: {settlement.winners6_count} winner(s) · {format_brl(settlement.prize6)} each",
        f"5 hits: {settlement.winners5_count} winner(s) · {format_brl(settlement.prize5)} each",
        f"Paid out: {format_brl(settlement.total_paid)}",
    ]
    if not settlement.had_winners:
        lines.append(f"No winners; {format_brl(settlement.carryover_amount)} carries over to the next contest.")
    if settlement.failed_payouts:
        lines.append(f"⚠️ {len(settlement.failed_payouts)} payout(s) failed. Run /reconcilepayouts.")
        for failed in settlement.failed_payouts[:10]:
            lines.append(f"• bet #{failed.bet_id} <@{failed.user_id}> {format_brl(failed.amount)}: {failed.reason}")
    return lines


class AdminCommands(commands.Cog):
    """Admin-only slash commands."""

    def __init__(
        self,
        bot: commands.Bot,
        contest_service,
        settlement_service,
        tier_config_service,
        withdrawal_service,
    ):
        self.bot = bot
        self.contest_service = contest_service
        self.settlement_service = settlement_service
        self.tier_config_service = tier_config_service
        self.withdrawal_service = withdrawal_service

    async def _admin_only(self, interaction: discord.Interaction) -> bool:
        if has_admin_permission(interaction):
            return True
        await interaction.response.send_message("❌ Admin only!", ephemeral=True)
        return False

    @app_commands.command(name="isadmin", description="Check whether you have admin rights here")
    async def isadmin(self, interaction: discord.Interaction):
        if has_allowlisted_admin(interaction):
            source = "allowlisted in ADMIN_USER_IDS"
        elif has_admin_permission(interaction):
            source = "via server permissions"
        else:
            await interaction.response.send_message("You are not an admin.", ephemeral=True)
            return
        await interaction.response.send_message(f"✅ You are an admin ({source}).", ephemeral=True)

    @app_commands.command(name="opencontest", description="Open a new contest (Admin only)")
    @app_commands.describe(
        month_year="Contest label, e.g. 11/2026",
        closing="Closing date and time, e.g. 2026-11-30 20:00 (UTC)",
        bet_price="Price of one bet in BRL (defaults to the configured price)",
        draw_date="Draw date shown to players",
    )
    async def opencontest(
        self,
        interaction: discord.Interaction,
        month_year: str,
        closing: str,
        bet_price: str | None = None,
        draw_date: str | None = None,
    ):
        if not await self._admin_only(interaction):
            return
        try:
            closing_at = parse_closing_datetime(closing)
        except ValueError as exc:
            await interaction.response.send_message(f"❌ {exc}", ephemeral=True)
            return
        if not await safe_defer(interaction, ephemeral=False):
            return

        caller = caller_from_interaction(interaction)
        result = await asyncio.to_thread(
            self.contest_service.open_contest,
            caller,
            month_year,
            closing_at,
            bet_price,
            draw_date,
        )
        if not await handle_result(interaction, result):
            return

        contest = result.value
        seeded = ""
        if contest.total_collected > 0:
            seeded = f"\nCarryover seed: {format_brl(contest.total_collected)}"
        await safe_followup(
            interaction,
            content=(
                f"🎱 Contest **{contest.month_year}** is open! "
                f"{format_brl(contest.bet_price)} per bet, closes {format_timestamp(contest.closing_at, 'F')}."
                f"{seeded}"
            ),
        )

    @app_commands.command(name="closecontest", description="Close the contest and pay winners (Admin only)")
    @app_commands.describe(
        contest_id="Contest to close",
        numbers="The 20 drawn numbers (0-99), separated by spaces or commas",
    )
    async def closecontest(self, interaction: discord.Interaction, contest_id: int, numbers: str):
        if not await self._admin_only(interaction):
            return
        try:
            drawn = parse_numbers(numbers)
        except ValueError as exc:
            await interaction.response.send_message(f"❌ {exc}", ephemeral=True)
            return
        if not await safe_defer(interaction, ephemeral=False):
            return

        caller = caller_from_interaction(interaction)
        result = await asyncio.to_thread(self.settlement_service.close_contest, caller, contest_id, drawn)
        if not await handle_result(interaction, result):
            return

        settlement = result.value
        embed = discord.Embed(
            title=f"🏁 Contest #{contest_id} closed",
            description=f"Drawn: `{format_numbers(drawn)}`",
            color=0xF1C40F if settlement.fully_paid else 0xE67E22,
        )
        embed.add_field(name="Settlement", value="\n".join(_settlement_lines(settlement))[:1024], inline=False)
        await safe_followup(interaction, embed=embed)

    @app_commands.command(name="reconcilepayouts", description="Retry unpaid prizes of a closed contest (Admin only)")
    @app_commands.describe(contest_id="Closed contest to reconcile")
    async def reconcilepayouts(self, interaction: discord.Interaction, contest_id: int):
        if not await self._admin_only(interaction):
            return
        if not await safe_defer(interaction, ephemeral=True):
            return

        caller = caller_from_interaction(interaction)
        result = await asyncio.to_thread(self.settlement_service.reconcile_payouts, caller, contest_id)
        if not await handle_result(interaction, result):
            return

        settlement = result.value
        header = (
            f"✅ Contest #{contest_id} fully paid."
            if settlement.fully_paid
            else f"⚠️ Contest #{contest_id} still has unpaid prizes."
        )
        await safe_followup(
            interaction,
            content="\n".join([header, *_settlement_lines(settlement)]),
            ephemeral=True,
        )

    @app_commands.command(name="settiers", description="Set house and prize tier shares in percent (Admin only)")
    @app_commands.describe(
        house="House share taken from each prize (0-100)",
        six_hits="Share of the pool for 6 hits",
        five_hits="Share of the pool for 5 hits",
    )
    async def settiers(self, interaction: discord.Interaction, house: str, six_hits: str, five_hits: str):
        if not await self._admin_only(interaction):
            return
        if not await safe_defer(interaction, ephemeral=True):
            return

        caller = caller_from_interaction(interaction)
        result = await asyncio.to_thread(
            self.tier_config_service.update_config, caller, house, six_hits, five_hits
        )
        if not await handle_result(interaction, result):
            return
        tiers = result.value
        await safe_followup(
            interaction,
            content=(
                f"Tiers updated: house {tiers.house_share}% · "
                f"6 hits {tiers.six_hits_share}% · 5 hits {tiers.five_hits_share}%"
            ),
            ephemeral=True,
        )

    @app_commands.command(name="pendingwithdrawals", description="List pending withdrawals (Admin only)")
    async def pendingwithdrawals(self, interaction: discord.Interaction):
        if not await self._admin_only(interaction):
            return
        if not await safe_defer(interaction, ephemeral=True):
            return

        caller = caller_from_interaction(interaction)
        result = await asyncio.to_thread(self.withdrawal_service.get_pending_withdrawals, caller)
        if not await handle_result(interaction, result):
            return
        if not result.value:
            await safe_followup(interaction, content="No pending withdrawals.", ephemeral=True)
            return
        lines = [f"<@{tx.user_id}> {format_transaction_line(tx)}" for tx in result.value]
        await safe_followup(interaction, content="\n".join(lines), ephemeral=True)

    @app_commands.command(name="approvewithdrawal", description="Approve a pending withdrawal (Admin only)")
    @app_commands.describe(transaction_id="Withdrawal transaction id")
    async def approvewithdrawal(self, interaction: discord.Interaction, transaction_id: int):
        if not await self._admin_only(interaction):
            return
        if not await safe_defer(interaction, ephemeral=True):
            return

        caller = caller_from_interaction(interaction)
        result = await asyncio.to_thread(self.withdrawal_service.approve_withdrawal, caller, transaction_id)
        if not await handle_result(interaction, result):
            return
        approval = result.value
        await safe_followup(
            interaction,
            content=(
                f"✅ Withdrawal #{approval.transaction_id} approved: send {format_brl(approval.amount)} "
                f"to <@{approval.user_id}> at PIX key `{approval.pix_key or 'not set'}`."
            ),
            ephemeral=True,
        )

    @app_commands.command(name="rejectwithdrawal", description="Reject a pending withdrawal (Admin only)")
    @app_commands.describe(transaction_id="Withdrawal transaction id", reason="Shown to the user")
    async def rejectwithdrawal(
        self, interaction: discord.Interaction, transaction_id: int, reason: str | None = None
    ):
        if not await self._admin_only(interaction):
            return
        if not await safe_defer(interaction, ephemeral=True):
            return

        caller = caller_from_interaction(interaction)
        result = await asyncio.to_thread(
            self.withdrawal_service.reject_withdrawal, caller, transaction_id, reason
        )
        if not await handle_result(interaction, result):
            return
        await safe_followup(
            interaction,
            content=f"Withdrawal #{transaction_id} rejected: {result.value.reason}",
            ephemeral=True,
        )


async def setup(bot: commands.Bot):
    contest_service = getattr(bot, "contest_service", None)
    settlement_service = getattr(bot, "settlement_service", None)
    tier_config_service = getattr(bot, "tier_config_service", None)
    withdrawal_service = getattr(bot, "withdrawal_service", None)
    if None in (contest_service, settlement_service, tier_config_service, withdrawal_service):
        raise RuntimeError("Admin services not registered on bot.")

    await bot.add_cog(
        AdminCommands(bot, contest_service, settlement_service, tier_config_service, withdrawal_service)
    )
