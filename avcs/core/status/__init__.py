"""
Voice channel status pipeline: collect member game activity, decide the
status text, write it back to the channel.
"""

from avcs.core.status.collector import collect, normalize_game_name
from avcs.core.status.decider import MAX_STATUS_LENGTH, decide, truncate_status
from avcs.core.status.models import (
    ACTIVITY_PLAYING,
    ActivityEntry,
    ActivityRecord,
    MemberPresence,
    Participant,
)

__all__ = [
    "ACTIVITY_PLAYING",
    "ActivityEntry",
    "ActivityRecord",
    "MAX_STATUS_LENGTH",
    "MemberPresence",
    "Participant",
    "collect",
    "decide",
    "normalize_game_name",
    "truncate_status",
]
