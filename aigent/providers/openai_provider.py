"""
OpenAI Backend
==============

Chat Completions through the official async SDK.

Role mapping: none needed. OpenAI understands all four roles natively,
including "function" messages (with their name) and assistant messages
carrying a function_call, so history is forwarded as is.

Function calling uses the `functions` / `function_call="auto"` request
fields; the reply's function_call arguments arrive as a JSON string and are
parsed here.
"""

import json

import httpx
from openai import AsyncOpenAI

from aigent.errors import AIGentError, ConfigurationError, ProviderError
from aigent.providers.base import ProviderConfig, describe_error, format_messages
from aigent.types import Backend, FunctionCall, ProviderRequest, ProviderResponse, Usage
from aigent.utils.logger import Logger

logger = Logger("Provider:openai")


class OpenAIProvider:
    """Backend for OpenAI and OpenAI-compatible chat endpoints."""

    backend = Backend.OPENAI.value

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        if not config.api_key:
            raise ConfigurationError("API key is required for openai provider")

        self.config = config
        self.client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            # A failed call is terminal for the turn; the agent never retries
            max_retries=0,
            http_client=httpx.AsyncClient(transport=transport) if transport else None,
        )

    def build_payload(self, request: ProviderRequest) -> dict:
        payload = {
            "model": request.model,
            "messages": format_messages(request.messages),
            "temperature": request.temperature,
        }
        if request.max_tokens:
            payload["max_tokens"] = request.max_tokens
        if request.functions:
            payload["functions"] = list(request.functions)
            payload["function_call"] = "auto"
        return payload

    async def generate_response(self, request: ProviderRequest) -> ProviderResponse:
        payload = self.build_payload(request)
        logger.debug(f"Sending {len(request.messages)} messages to {request.model}")

        try:
            response = await self.client.chat.completions.create(**payload)

            if not response.choices:
                raise ProviderError("No response received from OpenAI", self.backend)
            message = response.choices[0].message

            function_call = None
            if message.function_call:
                try:
                    arguments = json.loads(message.function_call.arguments or "{}")
                except json.JSONDecodeError as e:
                    raise ProviderError(
                        f"OpenAI returned invalid function arguments: {e}", self.backend
                    ) from e
                if not isinstance(arguments, dict):
                    raise ProviderError(
                        "OpenAI returned invalid function arguments: expected a JSON object, "
                        f"got {type(arguments).__name__}",
                        self.backend,
                    )
                function_call = FunctionCall(
                    name=message.function_call.name,
                    arguments=arguments,
                )

            usage = None
            if response.usage:
                usage = Usage(
                    prompt_tokens=response.usage.prompt_tokens,
                    completion_tokens=response.usage.completion_tokens,
                    total_tokens=response.usage.total_tokens,
                )

            return ProviderResponse(
                content=message.content or "",
                function_call=function_call,
                usage=usage,
            )

        except AIGentError:
            raise
        except Exception as e:
            logger.error("OpenAI request failed", e)
            raise ProviderError(describe_error(e), self.backend) from e
