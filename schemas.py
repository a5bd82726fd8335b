"""Pydantic schemas for race times and extraction reports."""


from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class RaceTime(BaseModel):
	"""Elapsed race time with millisecond resolution.

	``minute_digits`` remembers how many minute digits the source text used so
	that formatting reproduces it (``01:05.250`` stays ``01:05.250``).
	"""

	model_config = ConfigDict(frozen=True)

	minutes: int = Field(ge=0)
	seconds: int = Field(ge=0, le=59)
	milliseconds: int = Field(ge=0, le=999)
	minute_digits: int = Field(default=1, ge=1)

	@property
	def total_milliseconds(self) -> int:
		return (self.minutes * 60 + self.seconds) * 1000 + self.milliseconds

	def format(self) -> str:
		"""Render as ``M:SS.mmm``."""
		return f"{self.minutes:0{self.minute_digits}d}:{self.seconds:02d}.{self.milliseconds:03d}"

	def __str__(self) -> str:
		return self.format()


class ExtractionResult(BaseModel):
	"""Race time plus the raw text it was parsed from."""

	strategy: Literal["local", "remote"]
	time: RaceTime
	raw_text: str
	provider: str | None = None


class ExtractionReport(BaseModel):
	"""Outcome of one CLI run for console display and persistence."""

	image_path: str
	strategy: Literal["local", "remote"]
	run_id: str
	ok: bool
	time: str | None = None
	total_milliseconds: int | None = None
	raw_text: str | None = None
	provider: str | None = None
	error: dict[str, Any] | None = None
