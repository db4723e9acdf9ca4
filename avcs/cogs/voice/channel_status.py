"""
Voice channel status cog.

Keeps each voice channel's status in sync with what its occupants are
playing. Every voice-state or presence change recomputes the affected
channel(s) from scratch; nothing is remembered between updates.
"""

import asyncio
import weakref
from dataclasses import dataclass
from typing import Optional, Tuple

import discord
from discord.ext import commands

from avcs.base_cog import BaseCog, logger
from avcs.core.config_base import ConfigBase, config_field
from avcs.core.config_system import CogConfigSchema
from avcs.core.errors import ErrorCategory, ErrorSeverity, StatusUpdateError, error_handler
from avcs.core.status import (
    ACTIVITY_PLAYING,
    MAX_STATUS_LENGTH,
    ActivityEntry,
    MemberPresence,
    Participant,
    collect,
    decide,
    truncate_status,
)
from avcs.core.status.writer import ChannelStatusWriter


# -------- Configuration Schema --------

@dataclass
class ChannelStatusConfig(ConfigBase):
    """Voice channel status configuration schema."""

    enabled: bool = config_field(
        default=True,
        description="Update voice channel statuses from member game activity",
        category="General"
    )

    include_counts: bool = config_field(
        default=True,
        description="Show how many members play each game, e.g. 'Chess (2)'",
        category="Formatting"
    )

    list_all_games: bool = config_field(
        default=True,
        description="List every game being played instead of only the most popular one",
        category="Formatting"
    )

    normalize_game_names: bool = config_field(
        default=True,
        description="Strip trailing ®, © and ™ from game names before counting",
        category="Formatting"
    )

    clear_when_empty: bool = config_field(
        default=False,
        description="Explicitly clear the status when the last member leaves (Discord normally does this itself)",
        category="General"
    )

    max_status_length: int = config_field(
        default=MAX_STATUS_LENGTH,
        description="Longest status written to a channel; longer text is cut with an ellipsis",
        category="Formatting",
        min_value=1,
        max_value=MAX_STATUS_LENGTH
    )


def activity_kind(activity) -> int:
    """Numeric Discord activity type of a discord.py activity object."""
    activity_type = getattr(activity, "type", None)
    return int(getattr(activity_type, "value", -1))


def presence_from_member(member: discord.Member) -> MemberPresence:
    """Snapshot a member's presence into the shape the collector reads."""
    participant = Participant(id=member.id, label=str(member))
    activities = getattr(member, "activities", None)
    if not activities:
        return MemberPresence(participant=participant, activities=None)

    entries = tuple(
        ActivityEntry(kind=activity_kind(activity), name=getattr(activity, "name", None))
        for activity in activities
    )
    return MemberPresence(participant=participant, activities=entries)


def playing_names(member: Optional[discord.Member]) -> Tuple[str, ...]:
    """Names of the games a member is playing, in presence order."""
    if member is None:
        return ()
    return tuple(
        activity.name for activity in (member.activities or ())
        if activity_kind(activity) == ACTIVITY_PLAYING and activity.name
    )


class ChannelStatusCog(BaseCog):
    """Writes the games being played in a voice channel onto its status."""

    def __init__(self, bot: commands.Bot, writer: Optional[ChannelStatusWriter] = None):
        super().__init__(bot)
        self.bot = bot

        # Register config schema
        schema = CogConfigSchema.from_dataclass("ChannelStatus", ChannelStatusConfig)
        bot.config_manager.register_schema("ChannelStatus", schema)
        logger.info("Registered ChannelStatus config schema")

        self.writer = writer or ChannelStatusWriter(bot.http)

        # One in-flight update per channel; a lock is dropped once nothing holds or awaits it
        self._channel_locks: weakref.WeakValueDictionary = weakref.WeakValueDictionary()

    # -------- Event listeners --------

    @commands.Cog.listener()
    async def on_voice_state_update(self, member: discord.Member, before: discord.VoiceState,
                                    after: discord.VoiceState):
        """Recompute the channel a member left and the one they joined."""
        old_channel = before.channel
        new_channel = after.channel
        logger.debug(f"{member} changed voice state: {old_channel} -> {new_channel}")

        if isinstance(old_channel, discord.VoiceChannel):
            await self.update_voice_channel_status(old_channel)

        if isinstance(new_channel, discord.VoiceChannel) and new_channel != old_channel:
            await self.update_voice_channel_status(new_channel)

    @commands.Cog.listener()
    async def on_presence_update(self, before: discord.Member, after: discord.Member):
        """Recompute a member's voice channel when their games change."""
        if after is None or after.bot:
            return

        channel = after.voice.channel if after.voice else None
        if not isinstance(channel, discord.VoiceChannel):
            return

        if playing_names(before) == playing_names(after):
            logger.debug(f"Presence update for {after} did not change their games, skipping")
            return

        logger.info(f"{after} changed games in voice channel {channel.name} ({channel.id})")
        await self.update_voice_channel_status(channel)

    # -------- Status update --------

    async def update_voice_channel_status(self, channel) -> Optional[str]:
        """
        Recompute and write the status of a voice channel.

        Failures are logged and swallowed so one channel never blocks the
        processing of others.

        Returns:
            The status that was written, or None if nothing was written
        """
        if not isinstance(channel, discord.VoiceChannel):
            logger.debug(f"Skipping channel {getattr(channel, 'id', 'unknown')}, not a voice channel")
            return None

        cfg = self.bot.config_manager.for_cog("ChannelStatus")
        if not cfg.enabled:
            return None

        lock = self._channel_locks.setdefault(channel.id, asyncio.Lock())
        async with lock:
            try:
                return await self._apply(channel, cfg)
            except Exception as e:
                error_handler.log_error(
                    StatusUpdateError(
                        "Could not update the voice channel status.",
                        f"Status update failed for {channel.name} ({channel.id}): {e}",
                        original_error=e
                    ),
                    context={"channel_id": channel.id, "guild_id": channel.guild.id},
                    severity=ErrorSeverity.MEDIUM,
                    category=ErrorCategory.STATUS_UPDATE
                )
                return None

    async def _apply(self, channel: discord.VoiceChannel, cfg) -> Optional[str]:
        members = [m for m in channel.members if not m.bot]
        logger.debug(f"Channel {channel.name} ({channel.id}) has {len(members)} non-bot members")

        if not members:
            # Discord clears the status of an empty channel on its own
            if not cfg.clear_when_empty:
                return None
            status = ""
        else:
            activities = collect(
                (presence_from_member(m) for m in members),
                normalize=cfg.normalize_game_names
            )
            status = decide(
                activities,
                len(members),
                include_counts=cfg.include_counts,
                list_all_games=cfg.list_all_games
            )
            status = truncate_status(status, cfg.max_status_length)

        if not await self.writer.apply_channel_status(channel, status):
            logger.warning(f"Status for {channel.name} ({channel.id}) was not written")
            return None

        return status


async def setup(bot):
    """Load the channel status cog."""
    await bot.add_cog(ChannelStatusCog(bot))
    logger.info("ChannelStatus cog loaded successfully")
