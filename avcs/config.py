# config.py
"""
Bot-level configuration.

Only the settings needed before the ConfigManager exists live here: the
Discord token and the startup log level. Everything else is declared by the
cog config schemas and resolved through avcs.core.config_system.
"""

import os
from dataclasses import dataclass

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class BotConfig:
    """Bootstrap configuration read from the environment."""

    token: str  # REQUIRED: DISCORD_TOKEN in .env
    log_level: str = "INFO"

    @classmethod
    def from_env(cls):
        """Create config from environment variables.

        Raises:
            ValueError: If DISCORD_TOKEN is missing
        """
        token = os.getenv("DISCORD_TOKEN")
        if not token:
            raise ValueError("Set DISCORD_TOKEN environment variable and restart.")

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if log_level not in VALID_LOG_LEVELS:
            log_level = "INFO"

        return cls(token=token, log_level=log_level)
