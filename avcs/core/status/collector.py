"""
Activity collection for a voice channel's membership snapshot.
"""

import logging
import re
from typing import Iterable, List

from avcs.core.status.models import ACTIVITY_PLAYING, ActivityRecord, MemberPresence

logger = logging.getLogger("avcs.status.collector")

# Publisher decorations that would otherwise split "Game" and "Game™" into two buckets
_TRAILING_GLYPHS = re.compile(r"\s*[®©™][\s®©™]*$")


def normalize_game_name(name: str) -> str:
    """
    Strip trailing ®, © and ™ glyphs and the whitespace around them.

    Names without a trailing glyph are returned unchanged, trailing
    whitespace included.
    """
    return _TRAILING_GLYPHS.sub("", name)


def collect(members: Iterable[MemberPresence], normalize: bool = True) -> List[ActivityRecord]:
    """
    Collect "playing" activities from a channel's members.

    Args:
        members: Presence snapshots of the channel's non-bot members
        normalize: Strip trademark glyphs from game names

    Returns:
        ActivityRecords in member order, then activity order. A member
        with several concurrent games contributes one record per game.
    """
    records = []

    for member in members:
        if not member.activities:
            logger.debug(f"{member.participant.label} has no presence or activities")
            continue

        for activity in member.activities:
            if activity.kind != ACTIVITY_PLAYING or not activity.name:
                continue

            game = normalize_game_name(activity.name) if normalize else activity.name
            if not game:
                continue

            records.append(ActivityRecord(participant=member.participant, game=game))
            logger.debug(f"{member.participant.label} is playing: {game}")

    return records
