"""
Entry point for the Auto Voice Channel Status bot.

Run with: python -m avcs.main
"""

import asyncio
import logging
import sys
import traceback
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import discord
from discord.ext import commands
from dotenv import load_dotenv

from avcs.config import BotConfig
from avcs.core.config_system import CogConfigSchema, ConfigManager
from avcs.core.errors import ErrorCategory, ErrorSeverity, error_handler
from avcs.core.system_config import SystemConfig
from avcs.version import VERSION_HISTORY, get_version

logger = logging.getLogger("avcs")

EXTENSIONS = (
    "avcs.cogs.voice.channel_status",
    "avcs.cogs.admin.avcs_commands",
)

LOG_FORMAT = "[%(asctime)s] [%(levelname)-8s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(log_level: str = "INFO", log_dir: str = "data/logs") -> None:
    """
    Configure the avcs and discord loggers once at process start.

    Both write to the console and to a log file rotated at midnight.
    """
    Path(log_dir).mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    file_handler = TimedRotatingFileHandler(
        str(Path(log_dir) / "avcs.log"),
        when="midnight",
        interval=1,
        backupCount=7,
        encoding="utf-8"
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    level = getattr(logging, log_level.upper(), logging.INFO)

    for name in ("avcs", "discord"):
        log = logging.getLogger(name)
        log.handlers.clear()
        log.setLevel(level)
        log.addHandler(console_handler)
        log.addHandler(file_handler)
        log.propagate = False

    # discord.py's gateway chatter is noisy at DEBUG
    logging.getLogger("discord.gateway").setLevel(max(level, logging.INFO))


class AVCSBot(commands.Bot):
    """Discord client that keeps voice channel statuses in sync with member games."""

    def __init__(self, config_manager: ConfigManager, sync_only: bool = False):
        intents = discord.Intents.default()
        intents.guilds = True
        intents.voice_states = True
        intents.presences = True
        intents.members = True
        super().__init__(command_prefix=commands.when_mentioned, intents=intents, help_command=None)

        self.config_manager = config_manager
        self.sync_only = sync_only
        self._commands_synced = False

    async def setup_hook(self) -> None:
        """Called once after login, before the gateway connects."""
        for ext in EXTENSIONS:
            await self.load_extension(ext)
            logger.info(f"Loaded extension: {ext}")

        if self.sync_only:
            await self.sync_app_commands()
            await self.close()

    async def sync_app_commands(self) -> None:
        """Register the slash commands with Discord."""
        try:
            synced = await self.tree.sync()
            self._commands_synced = True
            logger.info(f"✅ Synced {len(synced)} slash commands")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync slash commands: {e}")

    async def on_ready(self):
        version = get_version()
        logger.info(f"🤖 Bot Version: {version}")
        if version in VERSION_HISTORY:
            logger.info(f"   {VERSION_HISTORY[version]}")

        logger.info(f"✅ Logged in as {self.user} (ID: {self.user.id})")

        sys_cfg = self.config_manager.for_cog("System")
        if sys_cfg.sync_app_commands and not self._commands_synced:
            await self.sync_app_commands()

        logger.info("Bot is ready and listening for events.")

    async def on_disconnect(self):
        logger.warning("⚠️ Disconnected from Discord")

    async def on_resumed(self):
        logger.info("✅ Reconnected to Discord (session resumed)")

    async def on_error(self, event_method: str, *args, **kwargs):
        """Log errors escaping event handlers instead of printing them to stderr."""
        error = sys.exc_info()[1]
        error_handler.log_error(
            error,
            context={"event": event_method, "args": str(args)[:200]},
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.INTERNAL
        )
        logger.debug(f"Error in event '{event_method}':\n{traceback.format_exc()}")


def create_config_manager() -> ConfigManager:
    """Create the ConfigManager with the System schema registered."""
    config_manager = ConfigManager()
    config_manager.register_schema("System", CogConfigSchema.from_dataclass("System", SystemConfig))
    return config_manager


async def _start(bot: AVCSBot, token: str) -> None:
    async with bot:
        await bot.start(token)


def run(sync_only: bool = False) -> None:
    """Load configuration, configure logging and run the bot until it exits."""
    load_dotenv()

    try:
        config = BotConfig.from_env()
    except ValueError as e:
        logging.basicConfig(format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        logger.error(str(e))
        sys.exit(1)

    config_manager = create_config_manager()
    configure_logging(config.log_level, config_manager.get("System", "log_dir"))
    logger.info("Bot starting...")

    bot = AVCSBot(config_manager, sync_only=sync_only)

    try:
        asyncio.run(_start(bot, config.token))
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    except discord.LoginFailure as e:
        logger.error(f"Failed to login: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


def main() -> None:
    run()


if __name__ == "__main__":
    main()
