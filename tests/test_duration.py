import pytest

from crcbot.giveaways.duration import parse_duration


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1h", 3_600_000),
        ("2d", 172_800_000),
        ("45m", 2_700_000),
        ("1h 30m", 5_400_000),
        ("15s", 15_000),
        ("1H 30M", 5_400_000),
        ("1 h", 3_600_000),
        ("1h 1h", 7_200_000),
        ("1d2h3m4s", 93_784_000),
        ("ends in 10m please", 600_000),
    ],
)
def test_parse_duration_sums_tokens(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", [None, "", "   ", "0h", "0d 0m", "soon", "h1", "10x", "-"])
def test_parse_duration_rejects_empty_and_garbage(text):
    assert parse_duration(text) is None
