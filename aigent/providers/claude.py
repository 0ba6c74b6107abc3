"""
Claude Backend
==============

Anthropic Messages API over plain HTTP (httpx).

Role mapping:
- assistant → assistant. An assistant message carrying a function call is
  replayed as a tool_use block when its function result follows it.
- user → user
- function → user. A result answering the preceding call becomes a
  tool_result block linked to that call's tool_use id. A result with no
  matching call (its call was dropped by retention) is replayed as plain
  user text.
- system → joined into the top-level "system" field

The Messages API rejects empty text and expects roles to alternate, so
empty text is never sent and consecutive same-role turns are merged.
Tool ids are assigned per request (toolu_1, toolu_2, ...) in history order;
the pairing only has to hold within one request.

Registered functions are offered as Anthropic "tools"; a tool_use block in
the reply becomes the response's function call. The reply's content is an
array of typed blocks; only "text" blocks contribute to the content string.
"""

from itertools import count
from typing import Any

import httpx

from aigent.errors import AIGentError, ConfigurationError, ProviderError
from aigent.providers.base import ProviderConfig, describe_error
from aigent.types import (
    Backend,
    FunctionCall,
    Message,
    ProviderRequest,
    ProviderResponse,
    Role,
    Usage,
)
from aigent.utils.logger import Logger

logger = Logger("Provider:claude")

DEFAULT_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 1000


def _text_blocks(text: str) -> list[dict[str, Any]]:
    return [{"type": "text", "text": text}] if text.strip() else []


def _answered(history: list[Message], index: int) -> bool:
    """Whether the assistant call at history[index] is followed by its result."""
    call = history[index].function_call
    following = history[index + 1] if index + 1 < len(history) else None
    return (
        following is not None
        and following.role is Role.FUNCTION
        and following.name == call.name
    )


def _add_turn(turns: list[dict[str, Any]], role: str, blocks: list[dict[str, Any]]) -> None:
    if not blocks:
        return
    if turns and turns[-1]["role"] == role:
        turns[-1]["content"].extend(blocks)
    else:
        turns.append({"role": role, "content": blocks})


def format_messages_for_claude(
    messages: tuple[Message, ...] | list[Message]
) -> tuple[str | None, list[dict[str, Any]]]:
    """
    Split history into the system prompt and Claude-shaped turns.

    A turn made of a single text block is sent with plain string content;
    anything else keeps its list of content blocks.

    Returns:
        (system text or None, list of {role, content})
    """
    history = list(messages)
    tool_ids = count(1)
    pending: dict[str, str] = {}
    system_parts = []
    turns: list[dict[str, Any]] = []

    for index, message in enumerate(history):
        if message.role is Role.SYSTEM:
            system_parts.append(message.content)

        elif message.role is Role.ASSISTANT:
            blocks = _text_blocks(message.content)
            if message.function_call and _answered(history, index):
                tool_id = f"toolu_{next(tool_ids)}"
                pending[message.function_call.name] = tool_id
                blocks.append({
                    "type": "tool_use",
                    "id": tool_id,
                    "name": message.function_call.name,
                    "input": message.function_call.arguments,
                })
            _add_turn(turns, "assistant", blocks)

        elif message.role is Role.FUNCTION:
            tool_id = pending.pop(message.name, None)
            if tool_id is None:
                _add_turn(turns, "user", _text_blocks(message.content))
            else:
                _add_turn(turns, "user", [{
                    "type": "tool_result",
                    "tool_use_id": tool_id,
                    "content": message.content,
                }])

        else:
            _add_turn(turns, "user", _text_blocks(message.content))

    for turn in turns:
        blocks = turn["content"]
        if len(blocks) == 1 and blocks[0]["type"] == "text":
            turn["content"] = blocks[0]["text"]

    system = "\n\n".join(system_parts) if system_parts else None
    return system, turns


class ClaudeProvider:
    """Backend for Anthropic's Messages API."""

    backend = Backend.CLAUDE.value

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        if not config.api_key:
            raise ConfigurationError("API key is required for claude provider")

        self.config = config
        self.api_key = config.api_key
        self.base_url = (config.base_url or DEFAULT_BASE_URL).rstrip("/")
        self.transport = transport

    def build_payload(self, request: ProviderRequest) -> dict[str, Any]:
        system, messages = format_messages_for_claude(request.messages)
        payload: dict[str, Any] = {
            "model": request.model,
            "messages": messages,
            "max_tokens": request.max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": request.temperature,
        }
        if system:
            payload["system"] = system
        if request.functions:
            payload["tools"] = [
                {
                    "name": fn["name"],
                    "description": fn.get("description", ""),
                    "input_schema": fn.get("parameters") or {"type": "object", "properties": {}},
                }
                for fn in request.functions
            ]
        return payload

    def parse_response(self, data: dict[str, Any]) -> ProviderResponse:
        """
        Normalize a Messages API payload.

        Raises:
            ProviderError: If the payload has neither text nor a tool_use block
        """
        blocks = data.get("content")
        if not isinstance(blocks, list):
            raise ProviderError("Malformed response from Claude: missing content", self.backend)

        texts = []
        function_call = None
        for block in blocks:
            if not isinstance(block, dict):
                continue
            if block.get("type") == "text":
                texts.append(block.get("text", ""))
            elif block.get("type") == "tool_use" and function_call is None:
                function_call = FunctionCall(
                    name=block.get("name", ""),
                    arguments=dict(block.get("input") or {}),
                )

        if not texts and function_call is None:
            raise ProviderError("No text response received from Claude", self.backend)

        usage = None
        raw_usage = data.get("usage")
        if raw_usage:
            prompt = raw_usage.get("input_tokens", 0)
            completion = raw_usage.get("output_tokens", 0)
            usage = Usage(
                prompt_tokens=prompt,
                completion_tokens=completion,
                total_tokens=prompt + completion,
            )

        return ProviderResponse(content="".join(texts), function_call=function_call, usage=usage)

    async def generate_response(self, request: ProviderRequest) -> ProviderResponse:
        payload = self.build_payload(request)
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
        logger.debug(f"Sending {len(payload['messages'])} messages to {request.model}")

        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout,
                transport=self.transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}/v1/messages",
                    json=payload,
                    headers=headers,
                )
                response.raise_for_status()
                return self.parse_response(response.json())

        except AIGentError:
            raise
        except Exception as e:
            logger.error("Claude request failed", e)
            raise ProviderError(describe_error(e), self.backend) from e
