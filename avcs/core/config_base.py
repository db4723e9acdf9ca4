"""
Configuration Base Classes and Helpers

Provides helper functions and base classes for cogs to define configuration
schemas with minimal boilerplate.

Example usage:
    @dataclass
    class ChannelStatusConfig(ConfigBase):
        include_counts: bool = config_field(
            default=True,
            description="Show how many members play each game",
            category="Formatting"
        )
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union


def config_field(
    default: Any,
    description: str,
    category: str = "General",
    min_value: Optional[Union[int, float]] = None,
    max_value: Optional[Union[int, float]] = None,
    choices: Optional[List[Any]] = None,
    env_only: bool = False,
) -> Any:
    """
    Helper function to define a config field with metadata.

    Args:
        default: Default value for this field
        description: Human-readable description
        category: Grouping category (e.g., "Formatting", "Admin/System")
        min_value: Minimum value (for numeric types)
        max_value: Maximum value (for numeric types)
        choices: List of valid choices (for enum-like fields)
        env_only: Only read from environment variables, never saved to JSON

    Returns:
        A dataclass field with metadata attached
    """
    metadata = {
        "description": description,
        "category": category,
        "min_value": min_value,
        "max_value": max_value,
        "choices": choices,
        "env_only": env_only,
    }

    return field(default=default, metadata=metadata)


@dataclass
class ConfigBase:
    """
    Base class for cog configuration schemas.

    Cogs inherit from this class, declare fields with `config_field()`, and
    register the schema with the ConfigManager:

        >>> class ChannelStatusCog(BaseCog):
        >>>     def __init__(self, bot):
        >>>         super().__init__(bot)
        >>>         schema = CogConfigSchema.from_dataclass("ChannelStatus", ChannelStatusConfig)
        >>>         bot.config_manager.register_schema("ChannelStatus", schema)
        >>>
        >>>     async def update(self, channel):
        >>>         cfg = self.bot.config_manager.for_cog("ChannelStatus")
        >>>         if cfg.include_counts:
        >>>             ...
    """
