# base_cog.py
"""
Base cog with integrated error handling.
"""

import logging

import discord
from discord import app_commands
from discord.ext import commands

from avcs.core.errors import error_handler

# Shared cog logger
logger = logging.getLogger("avcs.cogs")


class BaseCog(commands.Cog):
    """
    Base Cog class with centralized slash command error handling.
    All cogs should inherit from this class.
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        logger.info(f"Loaded cog: {self.__class__.__name__}")

    async def cog_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        """
        Error handler for all slash commands in this cog.
        Uses centralized error handling system.
        """
        await error_handler.handle_app_command_error(interaction, error)

    async def cog_unload(self):
        """
        Called when cog is unloaded.
        Override this in child classes for cleanup.
        """
        logger.info(f"Unloading cog: {self.__class__.__name__}")
