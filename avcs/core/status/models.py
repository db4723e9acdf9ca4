"""
Data shapes shared by the activity collector and the status decider.

Everything here is rebuilt from a fresh membership snapshot on every update;
nothing is cached or mutated between invocations.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

# Discord activity type codes (discord.ActivityType values)
ACTIVITY_PLAYING = 0
ACTIVITY_STREAMING = 1
ACTIVITY_LISTENING = 2
ACTIVITY_WATCHING = 3
ACTIVITY_CUSTOM = 4
ACTIVITY_COMPETING = 5


@dataclass(frozen=True)
class Participant:
    """A non-bot member connected to a voice channel."""
    id: int
    label: str


@dataclass(frozen=True)
class ActivityEntry:
    """One activity reported in a member's presence."""
    kind: int
    name: Optional[str] = None


@dataclass(frozen=True)
class MemberPresence:
    """
    A participant together with the activities their presence reports.

    ``activities`` is None when the platform sent no presence data for the
    member (e.g. they are offline or the presence intent is missing).
    """
    participant: Participant
    activities: Optional[Sequence[ActivityEntry]] = None


@dataclass(frozen=True)
class ActivityRecord:
    """A participant playing a game, with the (normalized) game label."""
    participant: Participant
    game: str
