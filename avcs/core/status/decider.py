"""
Status decision: turns collected game activity into the text shown on a
voice channel.

Rules:
- No activity -> empty status (clears the channel status)
- Single occupant -> their first game, verbatim
- Otherwise tally games, rank by count (desc) then name (asc), and render
  either every game or only the top one, with or without counts
"""

import logging
from collections import Counter
from typing import Dict, List, Sequence, Tuple

from avcs.core.status.models import ActivityRecord

logger = logging.getLogger("avcs.status.decider")

# Discord rejects voice channel statuses longer than this
MAX_STATUS_LENGTH = 500

SEPARATOR = ", "
ELLIPSIS = "…"


def tally_games(activities: Sequence[ActivityRecord]) -> Dict[str, int]:
    """Count ActivityRecords per game label (case-sensitive)."""
    return dict(Counter(record.game for record in activities))


def rank_games(tally: Dict[str, int]) -> List[Tuple[str, int]]:
    """Sort (game, count) pairs by count descending, then game name ascending."""
    return sorted(tally.items(), key=lambda item: (-item[1], item[0]))


def format_entry(game: str, count: int, include_counts: bool) -> str:
    if include_counts:
        return f"{game} ({count})"
    return game


def decide(
        activities: Sequence[ActivityRecord],
        member_count: int,
        include_counts: bool = True,
        list_all_games: bool = True
) -> str:
    """
    Decide the status string for a voice channel.

    Args:
        activities: Collected ActivityRecords for the channel
        member_count: Number of non-bot members in the channel
        include_counts: Render entries as "Game (n)" instead of "Game"
        list_all_games: List every game instead of only the top-ranked one

    Returns:
        Status text; an empty string means "clear the status"

    Raises:
        ValueError: If member_count is negative
    """
    if member_count < 0:
        raise ValueError(f"member_count must be >= 0, got {member_count}")

    if not activities:
        return ""

    if member_count == 1:
        return activities[0].game

    ranked = rank_games(tally_games(activities))
    if not list_all_games:
        ranked = ranked[:1]

    status = SEPARATOR.join(format_entry(game, count, include_counts) for game, count in ranked)
    logger.debug(f"Decided status {status!r} from {len(activities)} activities, {member_count} members")
    return status


def truncate_status(status: str, limit: int = MAX_STATUS_LENGTH) -> str:
    """
    Fit a status into the platform's length limit.

    Over-long text is cut to ``limit - 1`` characters and suffixed with an
    ellipsis, so the result is exactly ``limit`` characters long.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    if len(status) <= limit:
        return status
    return status[:limit - 1] + ELLIPSIS
