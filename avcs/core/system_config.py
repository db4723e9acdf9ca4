"""
System-level configuration schema.

Bot-wide settings that are not tied to a single cog: logging and slash
command registration.
"""

from dataclasses import dataclass

from avcs.core.config_base import ConfigBase, config_field


@dataclass
class SystemConfig(ConfigBase):
    """System-level bot configuration (bot owner only)."""

    log_level: str = config_field(
        default="INFO",
        description="Logging level for bot output (set via LOG_LEVEL in .env for startup)",
        category="Admin/System",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        env_only=True  # Must be in .env to take effect at startup
    )

    log_dir: str = config_field(
        default="data/logs",
        description="Directory for log files",
        category="Admin/System"
    )

    sync_app_commands: bool = config_field(
        default=True,
        description="Register the /avcs slash commands with Discord when the bot is ready",
        category="Admin/System"
    )
