"""
Llama Backend
=============

Ollama-compatible /api/chat endpoint over httpx. Local instances usually
need no key, so either a base URL or an API key is enough.

Role mapping: system, user and assistant are forwarded verbatim; function
messages use Ollama's native "tool" role. Function descriptors are not
sent, so this backend never produces a function call.
"""

from typing import Any

import httpx

from aigent.errors import AIGentError, ConfigurationError, ProviderError
from aigent.providers.base import ProviderConfig, describe_error
from aigent.types import Backend, Message, ProviderRequest, ProviderResponse, Role, Usage
from aigent.utils.logger import Logger

logger = Logger("Provider:llama")

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_NUM_PREDICT = 1000


def format_messages_for_llama(messages: tuple[Message, ...] | list[Message]) -> list[dict[str, str]]:
    return [
        {
            "role": "tool" if message.role is Role.FUNCTION else message.role.value,
            "content": message.content,
        }
        for message in messages
    ]


class LlamaProvider:
    """Backend for Ollama (and servers speaking its chat API)."""

    backend = Backend.LLAMA.value

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        if not config.base_url and not config.api_key:
            raise ConfigurationError("Either base_url or api_key is required for llama provider")

        self.config = config
        self.api_key = config.api_key
        self.base_url = (config.base_url or DEFAULT_BASE_URL).rstrip("/")
        self.transport = transport

    def build_payload(self, request: ProviderRequest) -> dict[str, Any]:
        return {
            "model": request.model,
            "messages": format_messages_for_llama(request.messages),
            "options": {
                "temperature": request.temperature,
                "num_predict": request.max_tokens or DEFAULT_NUM_PREDICT,
            },
            "stream": False,
        }

    def parse_response(self, data: dict[str, Any]) -> ProviderResponse:
        message = data.get("message")
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            raise ProviderError("Malformed response from Llama: missing message content", self.backend)

        usage = None
        if "eval_count" in data or "prompt_eval_count" in data:
            prompt = data.get("prompt_eval_count", 0)
            completion = data.get("eval_count", 0)
            usage = Usage(
                prompt_tokens=prompt,
                completion_tokens=completion,
                total_tokens=prompt + completion,
            )

        return ProviderResponse(content=message["content"], usage=usage)

    async def generate_response(self, request: ProviderRequest) -> ProviderResponse:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout,
                transport=self.transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}/api/chat",
                    json=self.build_payload(request),
                    headers=headers,
                )
                response.raise_for_status()
                return self.parse_response(response.json())

        except AIGentError:
            raise
        except Exception as e:
            logger.error("Llama request failed", e)
            raise ProviderError(describe_error(e), self.backend) from e
