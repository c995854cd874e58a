"""
Main Discord bot entry for the Bolão pool.
"""

import asyncio
import logging
import os

# Configure logging BEFORE importing discord to prevent duplicate handlers
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    force=True,  # Override any existing handlers (e.g., from discord.py)
)
logger = logging.getLogger("bolao")


class _PyNaClFilter(logging.Filter):
    """Filter out the PyNaCl warning from discord.py."""

    def filter(self, record):
        return "PyNaCl is not installed" not in record.getMessage()


logging.getLogger("discord.client").addFilter(_PyNaClFilter())

import discord
from discord.ext import commands

# discord.py adds its own handler to the 'discord' logger on import
_discord_logger = logging.getLogger("discord")
_discord_logger.handlers.clear()
_discord_logger.setLevel(logging.INFO)

import uvicorn

from api.webhook import create_app
from config import (
    MERCADO_PAGO_WEBHOOK_SECRET,
    WEBHOOK_ENABLED,
    WEBHOOK_HOST,
    WEBHOOK_PORT,
)
from infrastructure.service_container import ServiceContainer

intents = discord.Intents.default()

bot = commands.Bot(command_prefix="!", intents=intents)

_container: ServiceContainer | None = None
_webhook_task: asyncio.Task | None = None

EXTENSIONS = [
    "commands.lottery",
    "commands.wallet",
    "commands.admin",
]


def _init_services() -> ServiceContainer:
    """Create the service container once and attach services to the bot."""
    global _container
    if _container is not None:
        return _container

    _container = ServiceContainer()
    _container.initialize_sync()
    _container.expose_to_bot(bot)
    return _container


async def _load_extensions():
    """Load command extensions if not already loaded."""
    _init_services()

    loaded = 0
    failed = 0
    for ext in EXTENSIONS:
        if ext in bot.extensions:
            logger.debug(f"Extension {ext} already loaded, skipping")
            continue
        try:
            await bot.load_extension(ext)
            loaded += 1
            logger.info(f"Loaded extension: {ext}")
        except Exception as exc:
            failed += 1
            logger.error(f"Failed to load extension {ext}: {exc}", exc_info=True)

    logger.info(f"Extension loading complete: {loaded} loaded, {failed} failed")


async def _serve_webhook(container: ServiceContainer):
    """Run the payment webhook in the bot's event loop."""
    app = create_app(container.deposit_service, webhook_secret=MERCADO_PAGO_WEBHOOK_SECRET)
    server = uvicorn.Server(
        uvicorn.Config(app, host=WEBHOOK_HOST, port=WEBHOOK_PORT, log_level="info", loop="asyncio")
    )
    logger.info(f"Payment webhook listening on {WEBHOOK_HOST}:{WEBHOOK_PORT}")
    try:
        await server.serve()
    except asyncio.CancelledError:
        server.should_exit = True
        raise
    except Exception as exc:
        logger.error(f"Payment webhook stopped: {exc}", exc_info=True)


@bot.event
async def setup_hook():
    """Load command cogs and start the payment webhook."""
    global _webhook_task
    container = _init_services()
    await _load_extensions()

    if WEBHOOK_ENABLED and _webhook_task is None:
        if not MERCADO_PAGO_WEBHOOK_SECRET:
            logger.warning("MERCADO_PAGO_WEBHOOK_SECRET not set; webhook signatures will not be verified")
        _webhook_task = asyncio.create_task(_serve_webhook(container))


@bot.event
async def on_ready():
    """Called when bot is ready."""
    logger.info(f"{bot.user} connected. Guilds: {len(bot.guilds)}")
    try:
        synced = await bot.tree.sync()
        logger.info(f"Slash commands synced globally ({len(synced)} commands).")
    except Exception as exc:
        logger.error(f"Failed to sync commands: {exc}", exc_info=True)


@bot.tree.error
async def on_app_command_error(interaction: discord.Interaction, error: discord.app_commands.AppCommandError):
    """Global error handler for app commands - prevents infinite 'thinking...' state."""
    name = interaction.command.name if interaction.command else "unknown"
    logger.error(f"App command error in '{name}': {error}", exc_info=error)

    error_msg = "❌ An error occurred while processing your command. Please try again."
    try:
        if interaction.response.is_done():
            await interaction.followup.send(content=error_msg, ephemeral=True)
        else:
            await interaction.response.send_message(content=error_msg, ephemeral=True)
    except Exception as followup_error:
        logger.error(f"Failed to send error message to user: {followup_error}")


def main():
    """Run the bot."""
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        print("ERROR: DISCORD_BOT_TOKEN not found!")
        return

    try:
        # log_handler=None keeps discord.py from adding a second handler
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Bot stopped by user (Ctrl+C)")
    except Exception as exc:
        logger.error(f"Bot crashed: {exc}", exc_info=True)


if __name__ == "__main__":
    main()
