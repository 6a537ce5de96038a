"""Tests for `list` response parsing."""
import pytest

from craftctl.core.models import PlayerCount
from craftctl.core.players import parse_player_count


@pytest.mark.parametrize(
    "response, expected",
    [
        ("There are 3 of a max of 20 players online: Alice, Bob, Carol", PlayerCount(3, 20)),
        ("There are 0 of a max of 20 players online: ", PlayerCount(0, 20)),
        ("There are 12 of a max of 100 players online:", PlayerCount(12, 100)),
        ("[RCON] There are 1 of a max of 8 players online: Steve", PlayerCount(1, 8)),
    ],
)
def test_parses_vanilla_format(response, expected):
    assert parse_player_count(response) == expected


@pytest.mark.parametrize(
    "response",
    [
        "§ unexpected format §",
        "",
        "there are 3 of a max of 20 players online",
        "There are 3/20 players online",
        "Unknown command. Type \"/help\" for help.",
    ],
)
def test_no_match_returns_none(response):
    assert parse_player_count(response) is None


def test_multiline_response():
    response = "Server list:\nThere are 2 of a max of 10 players online: Alex, Steve\n"
    assert parse_player_count(response) == PlayerCount(online=2, maximum=10)
