"""Ordered failover across configured vision providers."""


import logging
from dataclasses import dataclass, field
from typing import Sequence

import httpx

from config import AppConfig, ProviderDescriptor
from errors import ExtractionError, NoProvidersAvailableError
from providers.base import VisionProvider
from providers.ollama import OllamaProvider
from providers.openai_chat import OpenAIChatProvider
from utils.payload import EncodedPayload

PROVIDER_TYPES: dict[str, type[VisionProvider]] = {
	"ollama": OllamaProvider,
	"openai": OpenAIChatProvider,
}


def create_provider(descriptor: ProviderDescriptor, system_prompt: str) -> VisionProvider:
	try:
		provider_type = PROVIDER_TYPES[descriptor.kind]
	except KeyError:
		raise ValueError(f"Unsupported provider kind: {descriptor.kind}") from None
	return provider_type(descriptor=descriptor, system_prompt=system_prompt)


@dataclass(frozen=True)
class ProviderReply:
	text: str
	provider: str


@dataclass
class FailoverClient:
	"""Tries providers one at a time, in configured order.

	Retryable failures move on to the next provider. The first fatal failure
	is raised as is so a broken credential or endpoint is not hidden behind
	later providers.
	"""

	providers: Sequence[VisionProvider]
	client: httpx.AsyncClient | None = None
	transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)

	def __post_init__(self) -> None:
		self._logger = logging.getLogger(self.__class__.__name__)

	@classmethod
	def from_config(
		cls,
		config: AppConfig,
		*,
		client: httpx.AsyncClient | None = None,
		transport: httpx.AsyncBaseTransport | None = None,
	) -> "FailoverClient":
		providers = [create_provider(descriptor, config.system_prompt) for descriptor in config.providers]
		return cls(providers=providers, client=client, transport=transport)

	async def extract(self, payload: EncodedPayload, prompt: str) -> ProviderReply:
		"""Return the first successful provider reply.

		Raises:
			NoProvidersAvailableError: None configured, or all failed with retryable errors.
			ExtractionError: The first non-retryable provider failure.
		"""
		if not self.providers:
			raise NoProvidersAvailableError("No vision providers are configured")
		if self.client is not None:
			return await self._failover(self.client, payload, prompt)
		async with httpx.AsyncClient(transport=self.transport) as client:
			return await self._failover(client, payload, prompt)

	async def _failover(self, client: httpx.AsyncClient, payload: EncodedPayload, prompt: str) -> ProviderReply:
		attempts: list[ExtractionError] = []
		total = len(self.providers)
		for attempt, provider in enumerate(self.providers, start=1):
			try:
				text = await provider.recognize(client, payload, prompt)
			except ExtractionError as exc:
				attempts.append(exc)
				if not exc.retryable:
					self._logger.error("Provider %s failed (attempt %s/%s), not retrying: %s", provider.name, attempt, total, exc)
					raise
				self._logger.warning("Provider %s failed (attempt %s/%s): %s", provider.name, attempt, total, exc)
				continue
			self._logger.info("Provider %s answered on attempt %s/%s", provider.name, attempt, total)
			return ProviderReply(text=text, provider=provider.name)

		raise NoProvidersAvailableError(
			f"All {total} providers failed with retryable errors",
			attempts=attempts,
		) from attempts[-1]
