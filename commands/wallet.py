"""
Wallet commands: /balance, /deposit, /withdraw, /setpixkey, /transactions
"""

import asyncio
import logging

import discord
from discord import app_commands
from discord.ext import commands

from services.deposit_service import DepositService
from services.permissions import caller_from_interaction
from services.profile_service import ProfileService
from services.wallet_service import WalletService
from services.withdrawal_service import WithdrawalService
from utils.command_helpers import handle_result
from utils.formatting import format_transaction_line
from utils.interaction_safety import safe_defer, safe_followup
from utils.money import format_brl
from utils.rate_limiter import GLOBAL_RATE_LIMITER

logger = logging.getLogger("bolao.commands.wallet")


class WalletCommands(commands.Cog):
    """Balance, PIX deposits and withdrawals."""

    def __init__(
        self,
        bot: commands.Bot,
        wallet_service: WalletService,
        deposit_service: DepositService,
        withdrawal_service: WithdrawalService,
        profile_service: ProfileService,
        transaction_repo=None,
    ):
        self.bot = bot
        self.wallet_service = wallet_service
        self.deposit_service = deposit_service
        self.withdrawal_service = withdrawal_service
        self.profile_service = profile_service
        self.transaction_repo = transaction_repo

    async def _check_rate_limit(self, interaction: discord.Interaction, scope: str, limit: int, per_seconds: int) -> bool:
        rl = GLOBAL_RATE_LIMITER.check(
            scope=scope,
            user_id=interaction.user.id,
            limit=limit,
            per_seconds=per_seconds,
        )
        if not rl.allowed:
            await interaction.response.send_message(
                f"Please wait {rl.retry_after_seconds}s before trying again.",
                ephemeral=True,
            )
        return rl.allowed

    @app_commands.command(name="balance", description="Show your wallet balance")
    async def balance(self, interaction: discord.Interaction):
        if not await safe_defer(interaction, ephemeral=True):
            return
        balance = await asyncio.to_thread(self.wallet_service.get_balance, interaction.user.id)
        await safe_followup(interaction, content=f"💰 Balance: **{format_brl(balance)}**", ephemeral=True)

    @app_commands.command(name="deposit", description="Add funds with PIX")
    @app_commands.describe(amount="Amount in BRL, e.g. 20 or 12,50")
    async def deposit(self, interaction: discord.Interaction, amount: str):
        if not await self._check_rate_limit(interaction, "deposit", limit=3, per_seconds=60):
            return
        if not await safe_defer(interaction, ephemeral=True):
            return

        caller = caller_from_interaction(interaction)
        result = await asyncio.to_thread(self.deposit_service.create_deposit_request, caller, amount)
        if not await handle_result(interaction, result):
            return

        intent = result.value
        embed = discord.Embed(
            title=f"PIX deposit · {format_brl(intent.amount)}",
            description=intent.payout_instructions,
            color=0x32BCAD,
        )
        embed.set_footer(text=f"Reference {intent.payment_reference} · credited automatically once paid")
        await safe_followup(interaction, embed=embed, ephemeral=True)

    @app_commands.command(name="withdraw", description="Request a PIX withdrawal")
    @app_commands.describe(amount="Amount in BRL")
    async def withdraw(self, interaction: discord.Interaction, amount: str):
        if not await self._check_rate_limit(interaction, "withdraw", limit=2, per_seconds=60):
            return
        if not await safe_defer(interaction, ephemeral=True):
            return

        caller = caller_from_interaction(interaction)
        result = await asyncio.to_thread(self.withdrawal_service.request_withdrawal, caller, amount)
        if not await handle_result(interaction, result):
            return

        request = result.value
        await safe_followup(
            interaction,
            content=(
                f"📤 Withdrawal #{request.transaction_id} of {format_brl(request.amount)} requested "
                f"to PIX key `{request.pix_key}`. An admin will review it."
            ),
            ephemeral=True,
        )

    @app_commands.command(name="setpixkey", description="Set the PIX key used for withdrawals")
    @app_commands.describe(key="CPF, e-mail, phone or random key")
    async def setpixkey(self, interaction: discord.Interaction, key: str):
        if not await safe_defer(interaction, ephemeral=True):
            return
        caller = caller_from_interaction(interaction)
        result = await asyncio.to_thread(self.profile_service.set_pix_key, caller, key)
        await handle_result(interaction, result, success_msg=f"PIX key saved: `{result.value}`")

    @app_commands.command(name="transactions", description="Show your recent wallet activity")
    async def transactions(self, interaction: discord.Interaction):
        if not await safe_defer(interaction, ephemeral=True):
            return
        if self.transaction_repo is None:
            await safe_followup(interaction, content="History is unavailable.", ephemeral=True)
            return

        items = await asyncio.to_thread(self.transaction_repo.get_user_transactions, interaction.user.id, 15)
        if not items:
            await safe_followup(interaction, content="No transactions yet.", ephemeral=True)
            return
        await safe_followup(
            interaction,
            content="\n".join(format_transaction_line(tx) for tx in items),
            ephemeral=True,
        )


async def setup(bot: commands.Bot):
    wallet_service = getattr(bot, "wallet_service", None)
    deposit_service = getattr(bot, "deposit_service", None)
    withdrawal_service = getattr(bot, "withdrawal_service", None)
    profile_service = getattr(bot, "profile_service", None)
    if None in (wallet_service, deposit_service, withdrawal_service, profile_service):
        raise RuntimeError("Wallet services not registered on bot.")

    await bot.add_cog(
        WalletCommands(
            bot,
            wallet_service,
            deposit_service,
            withdrawal_service,
            profile_service,
            transaction_repo=getattr(bot, "transaction_repo", None),
        )
    )
