"""Tests for race time parsing."""
from __future__ import annotations

import pytest

from errors import InvalidFormatError, NoTimerDetectedError
from utils.race_time import lenient_find, parse_reply, strict_parse


def test_strict_parse_zero() -> None:
	"""The smallest valid time parses to zero."""
	assert strict_parse("0:00.000").total_milliseconds == 0


def test_strict_parse_value() -> None:
	"""Minutes, seconds and milliseconds add up."""
	result = strict_parse("1:05.250")
	assert (result.minutes, result.seconds, result.milliseconds) == (1, 5, 250)
	assert result.total_milliseconds == 65_250


def test_strict_parse_trims_whitespace() -> None:
	"""Surrounding whitespace is not part of the value."""
	assert strict_parse("  2:01.999\n").total_milliseconds == 121_999


@pytest.mark.parametrize(
	"text",
	["0:60.000", "12:3.000", "1:05.25", "1:05.2500", ":05.250", "1:05,250", "1:05.250s", "time 1:05.250", ""],
)
def test_strict_parse_rejects(text: str) -> None:
	"""Anything but the exact grammar is an invalid format."""
	with pytest.raises(InvalidFormatError):
		strict_parse(text)


@pytest.mark.parametrize("text", ["0:00.000", "1:05.250", "01:05.250", "123:59.999"])
def test_strict_parse_keeps_minute_width(text: str) -> None:
	"""Formatting reproduces the parsed text, minute padding included."""
	assert strict_parse(text).format() == text
	assert str(strict_parse(text)) == text


def test_lenient_find_in_commentary() -> None:
	"""The first embedded time is found inside prose."""
	result = lenient_find("Your time was 1:23.456, congrats!")
	assert result is not None
	assert result.total_milliseconds == 83_456


def test_lenient_find_takes_first_match() -> None:
	"""When several times appear the first one wins."""
	result = lenient_find("best 0:59.100 then 1:02.300")
	assert result is not None
	assert result.format() == "0:59.100"


def test_lenient_find_ignores_digits_glued_to_match() -> None:
	"""A longer millisecond run is not truncated into a match."""
	assert lenient_find("1:22.3334") is None


def test_lenient_find_sentinel_vs_prose() -> None:
	"""Only the literal sentinel means "no timer"; prose is just not found."""
	with pytest.raises(NoTimerDetectedError):
		lenient_find("null")
	with pytest.raises(NoTimerDetectedError):
		lenient_find("  NULL \n")
	assert lenient_find("no time visible") is None


def test_parse_reply_paths() -> None:
	"""Strict text, commentary, garbage and the sentinel map to distinct outcomes."""
	assert parse_reply("1:05.250").total_milliseconds == 65_250
	assert parse_reply("The time is 0:42.042.").total_milliseconds == 42_042
	with pytest.raises(InvalidFormatError):
		parse_reply("no time visible")
	with pytest.raises(NoTimerDetectedError):
		parse_reply("Null")

