"""Parsing of the server's `list` console response."""
import re
from typing import Optional

from craftctl.core.models import PlayerCount

# Vanilla/Paper format: "There are 3 of a max of 20 players online: Alice, Bob"
PLAYER_COUNT_PATTERN = re.compile(r"There are (\d+) of a max of (\d+)")


def parse_player_count(response: str) -> Optional[PlayerCount]:
    """Extract (online, maximum) from a `list` response.

    The match is case-sensitive and may appear anywhere in the text.
    Returns None when the response does not follow the pattern, so callers
    can fall back to showing the raw text.
    """
    if not response:
        return None

    match = PLAYER_COUNT_PATTERN.search(response)
    if not match:
        return None

    return PlayerCount(online=int(match.group(1)), maximum=int(match.group(2)))
