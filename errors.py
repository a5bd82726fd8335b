"""Typed failures returned by the race timer extraction core."""


from enum import Enum
from typing import Any, ClassVar, Final

RETRYABLE_STATUSES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})


class ErrorCode(str, Enum):
	"""Stable identifiers for every failure the core can report."""

	DECODE_FAILED = "decode_failed"
	NO_CANDIDATE = "no_candidate_found"
	STAGE_FAILED = "stage_failed"
	RECOGNITION_FAILED = "recognition_failed"
	PAYLOAD_TOO_LARGE = "payload_too_large"
	PROVIDER_TRANSPORT = "provider_transport_failure"
	PROVIDER_STATUS = "provider_status"
	PROVIDER_RESPONSE = "provider_response_malformed"
	NO_PROVIDERS = "no_providers_configured"
	INVALID_FORMAT = "invalid_format"
	NO_TIMER = "no_timer_detected"


class ExtractionError(Exception):
	"""Base class for every failure leaving the core.

	Attributes:
		message: Human-readable description.
		stage: Name of the stage or provider that produced the failure.
		details: Extra context for logs and reports.
	"""

	code: ClassVar[ErrorCode] = ErrorCode.STAGE_FAILED
	retryable: ClassVar[bool] = False

	def __init__(self, message: str, *, stage: str | None = None, details: dict[str, Any] | None = None) -> None:
		super().__init__(message)
		self.message = message
		self.stage = stage
		self.details = details or {}

	def __str__(self) -> str:
		if self.stage:
			return f"[{self.stage}] {self.message}"
		return self.message

	def to_dict(self) -> dict[str, Any]:
		return {
			"code": self.code.value,
			"message": self.message,
			"stage": self.stage,
			"retryable": self.retryable,
			"details": self.details,
		}


class ImageDecodeError(ExtractionError):
	"""Input bytes are not a decodable still image."""

	code = ErrorCode.DECODE_FAILED


class NoCandidateFoundError(ExtractionError):
	"""No region on the mask looks like the timer card."""

	code = ErrorCode.NO_CANDIDATE


class StageError(ExtractionError):
	"""A pipeline stage failed for a reason without a dedicated type."""

	code = ErrorCode.STAGE_FAILED


class StageInputError(StageError):
	"""A stage received an IR variant it does not consume."""


class RecognitionError(ExtractionError):
	"""Text recognition could not run on the final image."""

	code = ErrorCode.RECOGNITION_FAILED


class ImageTooLargeError(ExtractionError):
	"""The payload could not be brought under the transport budget."""

	code = ErrorCode.PAYLOAD_TOO_LARGE


class ProviderTransportError(ExtractionError):
	"""Network failure or timeout while talking to a provider."""

	code = ErrorCode.PROVIDER_TRANSPORT
	retryable = True


class ProviderStatusError(ExtractionError):
	"""Provider answered with a non-success HTTP status."""

	code = ErrorCode.PROVIDER_STATUS

	def __init__(self, message: str, *, status_code: int, stage: str | None = None, details: dict[str, Any] | None = None) -> None:
		super().__init__(message, stage=stage, details={**(details or {}), "status_code": status_code})
		self.status_code = status_code

	@property
	def retryable(self) -> bool:  # type: ignore[override]
		return self.status_code in RETRYABLE_STATUSES


class ProviderResponseError(ExtractionError):
	"""Provider answered 2xx but the body is not the expected shape."""

	code = ErrorCode.PROVIDER_RESPONSE


class NoProvidersAvailableError(ExtractionError):
	"""No provider is configured, or every one failed with a retryable error."""

	code = ErrorCode.NO_PROVIDERS

	def __init__(self, message: str, *, attempts: list[ExtractionError] | None = None, stage: str | None = None) -> None:
		self.attempts = list(attempts or [])
		super().__init__(
			message,
			stage=stage,
			details={"attempts": [attempt.to_dict() for attempt in self.attempts]},
		)


class InvalidFormatError(ExtractionError):
	"""Recognised text does not contain a race time."""

	code = ErrorCode.INVALID_FORMAT


class NoTimerDetectedError(ExtractionError):
	"""The source explicitly reported that no timer is visible."""

	code = ErrorCode.NO_TIMER
