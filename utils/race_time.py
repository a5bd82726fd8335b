"""Strict and lenient parsing of ``M:SS.mmm`` race times."""


import re
from typing import Final

from errors import InvalidFormatError, NoTimerDetectedError
from schemas import RaceTime

NO_TIMER_SENTINEL: Final[str] = "null"

_TIME_BODY: Final[str] = r"([0-9]+):([0-5][0-9])\.([0-9]{3})"
STRICT_PATTERN: Final[re.Pattern[str]] = re.compile(_TIME_BODY)
# Not glued to neighbouring digits, so "11:22.3334" is not read as "1:22.333".
LENIENT_PATTERN: Final[re.Pattern[str]] = re.compile(rf"(?<![0-9]){_TIME_BODY}(?![0-9])")


def _from_match(match: re.Match[str]) -> RaceTime:
	minutes, seconds, millis = match.groups()
	return RaceTime(
		minutes=int(minutes),
		seconds=int(seconds),
		milliseconds=int(millis),
		minute_digits=len(minutes),
	)


def is_no_timer_sentinel(text: str) -> bool:
	return text.strip().lower() == NO_TIMER_SENTINEL


def strict_parse(text: str) -> RaceTime:
	"""Parse text that must be exactly one race time after trimming.

	Raises:
		InvalidFormatError: If anything other than ``M:SS.mmm`` is present.
	"""
	match = STRICT_PATTERN.fullmatch(text.strip())
	if match is None:
		raise InvalidFormatError(f"Invalid race time format: {text.strip()!r}", details={"text": text})
	return _from_match(match)


def lenient_find(text: str) -> RaceTime | None:
	"""Return the first race time embedded in free-form text.

	Raises:
		NoTimerDetectedError: If the whole reply is the ``null`` sentinel.
	"""
	if is_no_timer_sentinel(text):
		raise NoTimerDetectedError("Source reported that no timer is visible", details={"text": text})
	match = LENIENT_PATTERN.search(text)
	if match is None:
		return None
	return _from_match(match)


def parse_reply(text: str) -> RaceTime:
	"""Turn recognised or generated text into a race time.

	The strict grammar is tried first; surrounding commentary is tolerated
	through the lenient scan.
	"""
	if is_no_timer_sentinel(text):
		raise NoTimerDetectedError("Source reported that no timer is visible", details={"text": text})
	match = STRICT_PATTERN.fullmatch(text.strip())
	if match is not None:
		return _from_match(match)
	found = lenient_find(text)
	if found is None:
		raise InvalidFormatError(f"No race time found in {text.strip()!r}", details={"text": text})
	return found
