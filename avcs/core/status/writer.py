"""
Writes a computed status onto a voice channel.

Uses discord.py's ``VoiceChannel.edit(status=...)`` and falls back to the
HTTP client's voice-status call for anything the channel edit could not
handle. Callers only learn whether the write succeeded.
"""

import logging

import discord

logger = logging.getLogger("avcs.status_writer")


class ChannelStatusWriter:
    """Applies status strings to voice channels."""

    def __init__(self, http: discord.http.HTTPClient):
        """
        Args:
            http: discord.py HTTP client (``bot.http``), used for the fallback
        """
        self.http = http

    async def apply_channel_status(self, channel: discord.abc.GuildChannel, status: str) -> bool:
        """
        Set the status of a voice channel. An empty status clears it.

        Returns:
            True if any mechanism succeeded, False otherwise
        """
        logger.info(f"Setting status for {channel.name} ({channel.id}) to: {status!r}")

        if isinstance(channel, discord.VoiceChannel):
            try:
                await channel.edit(status=status)
                logger.debug(f"VoiceChannel.edit succeeded for channel {channel.id}")
                return True
            except discord.HTTPException as e:
                logger.error(f"VoiceChannel.edit failed for channel {channel.id}: {e.status} {e.text}")

        logger.debug("Falling back to the voice-status endpoint")
        return await self._put_voice_status(channel.id, status)

    async def _put_voice_status(self, channel_id: int, status: str) -> bool:
        try:
            await self.http.edit_voice_channel_status(status, channel_id=channel_id)
        except discord.HTTPException as e:
            logger.error(f"Voice-status update failed for channel {channel_id}: {e.status} {e.text}")
            return False

        logger.debug(f"Voice-status update succeeded for channel {channel_id}")
        return True
