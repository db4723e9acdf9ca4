"""
/avcs slash commands.
"""

import discord
from discord import app_commands

from avcs.base_cog import BaseCog, logger
from avcs.core.errors import ErrorHandler, VoiceError
from avcs.version import VERSION_HISTORY, get_version


class AvcsCommandsCog(BaseCog):
    """Auto Voice Channel Status commands."""

    avcs = app_commands.Group(name="avcs", description="Auto Voice Channel Status commands")

    @avcs.command(name="version", description="Show the current bot version")
    async def version(self, interaction: discord.Interaction):
        version = get_version()
        message = f"🤖 Auto Voice Channel Status v{version}"
        if version in VERSION_HISTORY:
            message += f"\n{VERSION_HISTORY[version]}"
        await interaction.response.send_message(message, ephemeral=True)

    @avcs.command(name="hello", description="Say hello to everyone on the channel")
    async def hello(self, interaction: discord.Interaction):
        voice = getattr(interaction.user, "voice", None)
        if voice is None or voice.channel is None:
            raise VoiceError(
                ErrorHandler.USER_MESSAGES["user_not_in_voice"],
                f"User {interaction.user.id} used /avcs hello outside voice"
            )

        channel = voice.channel
        mentions = [m.mention for m in channel.members if not m.bot]
        logger.info(f"Saying hello to {len(mentions)} members in {channel.name} ({channel.id})")
        await interaction.response.send_message(f"👋 Hello {', '.join(mentions)}!")


async def setup(bot):
    """Load the /avcs commands."""
    await bot.add_cog(AvcsCommandsCog(bot))
    logger.info("Avcs commands loaded successfully")
