"""Ollama ``/api/generate`` provider implementation."""


from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from providers.base import JsonDict, VisionProvider
from utils.payload import EncodedPayload


class OllamaGenerateResponse(BaseModel):
	response: str


@dataclass
class OllamaProvider(VisionProvider):
	"""Client for a local or self-hosted Ollama vision model."""

	def build_body(self, payload: EncodedPayload, prompt: str) -> JsonDict:
		return {
			"model": self.descriptor.model,
			"system": self.system_prompt,
			"prompt": prompt,
			"stream": False,
			"images": [payload.to_base64()],
			"options": {"temperature": 0},
		}

	def parse_body(self, body: Any) -> str:
		return OllamaGenerateResponse.model_validate(body).response
