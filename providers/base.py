"""Shared HTTP handling for remote vision providers."""


import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from config import DEFAULT_SYSTEM_PROMPT, ProviderDescriptor
from errors import ProviderResponseError, ProviderStatusError, ProviderTransportError
from utils.payload import EncodedPayload

JsonDict = dict[str, Any]

ERROR_BODY_MAX_CHARS = 500


@dataclass
class VisionProvider:
	"""Sends one screenshot to a vision model and returns its reply text.

	Subclasses only describe the wire shape: :meth:`build_body` and
	:meth:`parse_body`. Status handling and error classification live here.
	"""

	descriptor: ProviderDescriptor
	system_prompt: str = DEFAULT_SYSTEM_PROMPT

	def __post_init__(self) -> None:
		self._logger = logging.getLogger(self.__class__.__name__)

	@property
	def name(self) -> str:
		return self.descriptor.name

	@property
	def stage(self) -> str:
		return f"provider:{self.descriptor.name}"

	def build_body(self, payload: EncodedPayload, prompt: str) -> JsonDict:
		raise NotImplementedError

	def parse_body(self, body: Any) -> str:
		raise NotImplementedError

	def build_headers(self) -> dict[str, str]:
		headers = {"Content-Type": "application/json"}
		if self.descriptor.api_key:
			headers["Authorization"] = f"Bearer {self.descriptor.api_key}"
		return headers

	async def recognize(self, client: httpx.AsyncClient, payload: EncodedPayload, prompt: str) -> str:
		"""Send the request and classify the outcome.

		Raises:
			ProviderTransportError: Network failure or timeout (retryable).
			ProviderStatusError: Non-2xx status; retryable for 429 and 5xx gateway codes.
			ProviderResponseError: Undecodable body, or 2xx body without the expected shape.
		"""
		body = self.build_body(payload, prompt)
		timeout = self.descriptor.timeout_s
		try:
			response = await asyncio.wait_for(
				client.post(self.descriptor.endpoint, json=body, headers=self.build_headers(), timeout=timeout),
				timeout=timeout,
			)
		except asyncio.TimeoutError as exc:
			raise ProviderTransportError(f"Request to {self.name} exceeded {timeout}s", stage=self.stage) from exc
		except httpx.DecodingError as exc:
			raise ProviderResponseError(f"{self.name} sent a body that could not be decoded: {exc}", stage=self.stage) from exc
		except httpx.RequestError as exc:
			raise ProviderTransportError(f"Request to {self.name} failed: {exc!r}", stage=self.stage) from exc

		if not response.is_success:
			raise ProviderStatusError(
				f"{self.name} returned HTTP {response.status_code}",
				status_code=response.status_code,
				stage=self.stage,
				details={"body": response.text[:ERROR_BODY_MAX_CHARS]},
			)

		try:
			data = response.json()
		except ValueError as exc:
			raise ProviderResponseError(
				f"{self.name} returned a non-JSON body",
				stage=self.stage,
				details={"body": response.text[:ERROR_BODY_MAX_CHARS]},
			) from exc
		try:
			return self.parse_body(data)
		except ValidationError as exc:
			raise ProviderResponseError(
				f"{self.name} response does not match the expected shape",
				stage=self.stage,
				details={"errors": exc.errors(include_url=False)},
			) from exc
