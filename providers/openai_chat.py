"""OpenAI-compatible chat completions provider implementation."""


from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from providers.base import JsonDict, VisionProvider
from utils.payload import EncodedPayload


class ChatMessage(BaseModel):
	content: str


class ChatChoice(BaseModel):
	message: ChatMessage


class ChatCompletionResponse(BaseModel):
	choices: list[ChatChoice] = Field(min_length=1)


@dataclass
class OpenAIChatProvider(VisionProvider):
	"""Client for any endpoint speaking the chat completions format."""

	max_tokens: int = 32

	def build_body(self, payload: EncodedPayload, prompt: str) -> JsonDict:
		return {
			"model": self.descriptor.model,
			"temperature": 0,
			"max_tokens": self.max_tokens,
			"messages": [
				{"role": "system", "content": self.system_prompt},
				{
					"role": "user",
					"content": [
						{"type": "text", "text": prompt},
						{"type": "image_url", "image_url": {"url": payload.to_data_url()}},
					],
				},
			],
		}

	def parse_body(self, body: Any) -> str:
		return ChatCompletionResponse.model_validate(body).choices[0].message.content
