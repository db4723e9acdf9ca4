"""
Tests for the ChannelStatus cog (event boundary).

Tests:
- Status computed from non-bot members and written through the writer
- Empty channels, disabled config, non-voice channels
- Formatting settings flow from the ConfigManager into the decider
- Voice moves recompute both channels; failures stay isolated per channel
- Presence updates only recompute when a member's games change
"""

import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock

import discord

from avcs.cogs.voice.channel_status import (
    ChannelStatusCog,
    playing_names,
    presence_from_member,
)
from avcs.core.config_system import ConfigManager
from avcs.core.errors import error_handler
from avcs.core.status import ACTIVITY_PLAYING


def make_member(member_id, *activities, bot=False, channel=None):
    member = MagicMock()
    member.id = member_id
    member.bot = bot
    member.activities = tuple(activities)
    member.__str__.return_value = f"user{member_id}#0001"
    member.voice = MagicMock(channel=channel) if channel is not None else None
    return member


def make_channel(channel_id, members=(), cls=discord.VoiceChannel):
    channel = MagicMock(spec=cls)
    channel.id = channel_id
    channel.name = f"voice-{channel_id}"
    channel.members = list(members)
    return channel


def voice_state(channel):
    return MagicMock(channel=channel)


class ChannelStatusTestCase(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.bot = MagicMock()
        self.bot.config_manager = ConfigManager()
        self.writer = MagicMock()
        self.writer.apply_channel_status = AsyncMock(return_value=True)
        self.cog = ChannelStatusCog(self.bot, writer=self.writer)

    def written(self):
        return [(c.args[0], c.args[1]) for c in self.writer.apply_channel_status.await_args_list]


class TestUpdateVoiceChannelStatus(ChannelStatusTestCase):

    async def test_shared_game(self):
        channel = make_channel(1, [
            make_member(1, discord.Game("Chess")),
            make_member(2, discord.Game("Chess")),
        ])

        status = await self.cog.update_voice_channel_status(channel)

        self.assertEqual(status, "Chess (2)")
        self.assertEqual(self.written(), [(channel, "Chess (2)")])

    async def test_bots_excluded(self):
        channel = make_channel(1, [
            make_member(1, discord.Game("Chess")),
            make_member(2, discord.Game("Go"), bot=True),
        ])

        self.assertEqual(await self.cog.update_voice_channel_status(channel), "Chess")

    async def test_non_playing_activities_ignored(self):
        channel = make_channel(1, [
            make_member(1, discord.Activity(type=discord.ActivityType.listening, name="Spotify")),
            make_member(2, discord.CustomActivity(name="brb")),
        ])

        self.assertEqual(await self.cog.update_voice_channel_status(channel), "")
        self.assertEqual(self.written(), [(channel, "")])

    async def test_trademark_glyphs_merged(self):
        channel = make_channel(1, [
            make_member(1, discord.Game("Rocket League®")),
            make_member(2, discord.Game("Rocket League")),
        ])

        self.assertEqual(await self.cog.update_voice_channel_status(channel), "Rocket League (2)")

    async def test_empty_channel_skipped(self):
        channel = make_channel(1, [make_member(1, discord.Game("Go"), bot=True)])

        self.assertIsNone(await self.cog.update_voice_channel_status(channel))
        self.writer.apply_channel_status.assert_not_called()

    async def test_empty_channel_cleared_when_configured(self):
        self.bot.config_manager.set("ChannelStatus", "clear_when_empty", True)
        channel = make_channel(1)

        self.assertEqual(await self.cog.update_voice_channel_status(channel), "")
        self.assertEqual(self.written(), [(channel, "")])

    async def test_formatting_settings_applied(self):
        self.bot.config_manager.set("ChannelStatus", "include_counts", False)
        channel = make_channel(1, [
            make_member(1, discord.Game("Go")),
            make_member(2, discord.Game("Chess")),
        ])

        self.assertEqual(await self.cog.update_voice_channel_status(channel), "Chess, Go")

        self.bot.config_manager.set("ChannelStatus", "list_all_games", False)
        self.assertEqual(await self.cog.update_voice_channel_status(channel), "Chess")

    async def test_invalid_file_values_fall_back_to_defaults(self):
        self.bot.config_manager.global_overrides = {
            "ChannelStatus": {"max_status_length": 0, "include_counts": "false"}
        }
        channel = make_channel(1, [
            make_member(1, discord.Game("Chess")),
            make_member(2, discord.Game("Chess")),
        ])

        status = await self.cog.update_voice_channel_status(channel)

        self.assertEqual(status, "Chess")
        self.assertEqual(self.written(), [(channel, "Chess")])

    async def test_status_truncated(self):
        self.bot.config_manager.set("ChannelStatus", "max_status_length", 5)
        channel = make_channel(1, [
            make_member(1, discord.Game("Chess")),
            make_member(2, discord.Game("Chess")),
        ])

        self.assertEqual(await self.cog.update_voice_channel_status(channel), "Ches…")

    async def test_disabled(self):
        self.bot.config_manager.set("ChannelStatus", "enabled", False)
        channel = make_channel(1, [make_member(1, discord.Game("Chess"))])

        self.assertIsNone(await self.cog.update_voice_channel_status(channel))
        self.writer.apply_channel_status.assert_not_called()

    async def test_stage_channel_ignored(self):
        channel = make_channel(1, [make_member(1, discord.Game("Chess"))], cls=discord.StageChannel)

        self.assertIsNone(await self.cog.update_voice_channel_status(channel))
        self.writer.apply_channel_status.assert_not_called()

    async def test_failed_write_returns_none(self):
        self.writer.apply_channel_status.return_value = False
        channel = make_channel(1, [make_member(1, discord.Game("Chess"))])

        self.assertIsNone(await self.cog.update_voice_channel_status(channel))

    async def test_channel_lock_released_after_update(self):
        channel = make_channel(1, [make_member(1, discord.Game("Chess"))])

        await self.cog.update_voice_channel_status(channel)

        self.assertNotIn(1, self.cog._channel_locks)

    async def test_concurrent_updates_share_channel_lock(self):
        channel = make_channel(1, [make_member(1, discord.Game("Chess"))])
        active = []
        overlaps = []

        async def slow_write(target, status):
            overlaps.append(bool(active))
            active.append(target)
            await asyncio.sleep(0)
            active.pop()
            return True

        self.writer.apply_channel_status.side_effect = slow_write

        await asyncio.gather(
            self.cog.update_voice_channel_status(channel),
            self.cog.update_voice_channel_status(channel),
        )

        self.assertEqual(overlaps, [False, False])
        self.assertNotIn(1, self.cog._channel_locks)

    async def test_writer_exception_swallowed(self):
        self.writer.apply_channel_status.side_effect = RuntimeError("gateway gone")
        channel = make_channel(1, [make_member(1, discord.Game("Chess"))])
        errors_before = error_handler.error_count

        self.assertIsNone(await self.cog.update_voice_channel_status(channel))
        self.assertEqual(error_handler.error_count, errors_before + 1)


class TestVoiceStateUpdate(ChannelStatusTestCase):

    async def test_move_recomputes_both_channels(self):
        mover = make_member(1, discord.Game("Chess"))
        old_channel = make_channel(1, [make_member(2, discord.Game("Go"))])
        new_channel = make_channel(2, [mover])

        await self.cog.on_voice_state_update(mover, voice_state(old_channel), voice_state(new_channel))

        self.assertEqual(self.written(), [(old_channel, "Go"), (new_channel, "Chess")])

    async def test_join(self):
        member = make_member(1, discord.Game("Chess"))
        channel = make_channel(1, [member])

        await self.cog.on_voice_state_update(member, voice_state(None), voice_state(channel))

        self.assertEqual(self.written(), [(channel, "Chess")])

    async def test_leave_last_member(self):
        member = make_member(1, discord.Game("Chess"))
        channel = make_channel(1)

        await self.cog.on_voice_state_update(member, voice_state(channel), voice_state(None))

        self.writer.apply_channel_status.assert_not_called()

    async def test_same_channel_updated_once(self):
        member = make_member(1, discord.Game("Chess"))
        channel = make_channel(1, [member])

        await self.cog.on_voice_state_update(member, voice_state(channel), voice_state(channel))

        self.assertEqual(self.writer.apply_channel_status.await_count, 1)

    async def test_failure_in_one_channel_does_not_block_other(self):
        self.writer.apply_channel_status.side_effect = [RuntimeError("rate limited"), True]
        mover = make_member(1, discord.Game("Chess"))
        old_channel = make_channel(1, [make_member(2, discord.Game("Go"))])
        new_channel = make_channel(2, [mover])

        await self.cog.on_voice_state_update(mover, voice_state(old_channel), voice_state(new_channel))

        self.assertEqual(self.writer.apply_channel_status.await_count, 2)
        self.assertIs(self.writer.apply_channel_status.await_args_list[1].args[0], new_channel)


class TestPresenceUpdate(ChannelStatusTestCase):

    async def test_game_change_recomputes_channel(self):
        channel = make_channel(1)
        before = make_member(1, channel=channel)
        after = make_member(1, discord.Game("Chess"), channel=channel)
        channel.members = [after]

        await self.cog.on_presence_update(before, after)

        self.assertEqual(self.written(), [(channel, "Chess")])

    async def test_unchanged_games_skipped(self):
        channel = make_channel(1)
        before = make_member(1, discord.Game("Chess"), channel=channel)
        after = make_member(1, discord.Game("Chess"), discord.CustomActivity(name="afk"), channel=channel)
        channel.members = [after]

        await self.cog.on_presence_update(before, after)

        self.writer.apply_channel_status.assert_not_called()

    async def test_member_not_in_voice(self):
        before = make_member(1)
        after = make_member(1, discord.Game("Chess"))

        await self.cog.on_presence_update(before, after)

        self.writer.apply_channel_status.assert_not_called()

    async def test_bot_presence_ignored(self):
        channel = make_channel(1)
        after = make_member(1, discord.Game("Chess"), bot=True, channel=channel)

        await self.cog.on_presence_update(make_member(1, bot=True, channel=channel), after)

        self.writer.apply_channel_status.assert_not_called()


class TestPresenceSnapshot(unittest.TestCase):

    def test_presence_from_member(self):
        member = make_member(7, discord.Game("Chess"), discord.Streaming(name="Live", url="https://twitch.tv/x"))

        presence = presence_from_member(member)

        self.assertEqual(presence.participant.id, 7)
        self.assertEqual(presence.participant.label, "user7#0001")
        self.assertEqual(presence.activities[0].kind, ACTIVITY_PLAYING)
        self.assertEqual(presence.activities[0].name, "Chess")
        self.assertNotEqual(presence.activities[1].kind, ACTIVITY_PLAYING)

    def test_presence_without_activities(self):
        self.assertIsNone(presence_from_member(make_member(7)).activities)

    def test_playing_names(self):
        member = make_member(1, discord.Game("Chess"), discord.CustomActivity(name="afk"))
        self.assertEqual(playing_names(member), ("Chess",))
        self.assertEqual(playing_names(None), ())


if __name__ == "__main__":
    unittest.main()
