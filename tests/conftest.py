"""Pytest configuration and fixtures."""

import os

import pytest

os.environ.setdefault("LOG_LEVEL", "ERROR")

from aigent.agent import Agent  # noqa: E402
from aigent.errors import ProviderError  # noqa: E402
from aigent.types import (  # noqa: E402
    AgentConfig,
    MemoryPolicy,
    ProviderRequest,
    ProviderResponse,
    StreamingPolicy,
)


class ScriptedProvider:
    """
    Provider double that replays queued replies and records every request.

    Queue a ProviderResponse to return it, or an exception to raise it.
    """

    backend = "custom"

    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests: list[ProviderRequest] = []

    def queue(self, *replies) -> None:
        self.replies.extend(replies)

    async def generate_response(self, request: ProviderRequest) -> ProviderResponse:
        self.requests.append(request)
        if not self.replies:
            raise ProviderError("No scripted reply left", self.backend)
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


def make_config(
    max_messages: int = 10,
    memory_enabled: bool = True,
    system_prompt: str = "S",
    **overrides
) -> AgentConfig:
    values = dict(
        name="test-agent",
        system_prompt=system_prompt,
        backend="custom",
        model="test-model",
        memory=MemoryPolicy(enabled=memory_enabled, max_messages=max_messages),
        streaming=StreamingPolicy(enabled=True, chunk_size=4, delay=0),
    )
    values.update(overrides)
    return AgentConfig(**values)


@pytest.fixture
def provider():
    return ScriptedProvider()


@pytest.fixture
def agent(provider):
    return Agent(make_config(), provider=provider)
