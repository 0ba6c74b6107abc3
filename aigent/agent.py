"""
Agent Core
==========

The Agent owns one conversation and drives it one turn at a time.

Turn lifecycle:

    Idle
      │  append user message (retention applies immediately)
      ▼
    UserAppended
      │  request = retained history + descriptors of every function
      ▼
    AwaitingProvider ──── failure ───▶ RolledBack
      │                                (history restored exactly, error re-raised)
      │ success
      ▼
    AssistantAppended
      │  reply carries a function call?
      ├── no ──▶ Done
      ▼
    FunctionResolution ──▶ Done
      (function result appended; never rolled back. An unknown function
       raises ConfigurationError with the assistant message already kept)

A failed provider call must never leave an orphaned user message behind:
the next turn would otherwise replay a question that was never answered.

Concurrency: one turn at a time per Agent. Rollback assumes nothing else
appends between dispatch and failure. Separate Agents share no state and
can run concurrently.
"""

from typing import Any, AsyncIterator

import httpx

from aigent.functions import FunctionRegistry
from aigent.memory import MessageStore
from aigent.providers import LLMProvider, ProviderConfig, create_provider, resolve_backend
from aigent.providers.factory import validate_provider_config
from aigent.streaming import stream_response
from aigent.tools import ToolRegistry
from aigent.types import (
    AgentConfig,
    FunctionDefinition,
    Message,
    ProviderRequest,
    ProviderResponse,
    StreamChunk,
    Tool,
)
from aigent.utils.logger import Logger

logger = Logger("Agent")


class Agent:
    """
    A conversational agent bound to one backend.

    Example:
        agent = Agent(
            AgentConfig(
                name="helper",
                system_prompt="You are concise.",
                backend="openai",
                model="gpt-4o-mini",
            ),
            ProviderConfig(api_key="sk-..."),
        )

        response = await agent.send_message("What's 2 + 2?")
        print(response.content)
        print(agent.get_memory())   # system, user, assistant
    """

    def __init__(
        self,
        config: AgentConfig,
        provider_config: ProviderConfig | None = None,
        *,
        provider: LLMProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        """
        Build the agent and seed the system message.

        Args:
            config: Agent configuration
            provider_config: Backend connection settings; required unless
                a ready-made provider is passed
            provider: Pre-built provider to use instead of the factory
            transport: httpx transport for the backend's HTTP client

        Raises:
            ConfigurationError: Unknown backend or invalid provider config.
                Raised before any network attempt.
        """
        self.config = config
        backend = resolve_backend(config.backend)

        if provider is None:
            provider_config = provider_config or ProviderConfig()
            validate_provider_config(backend, provider_config)
            provider = create_provider(backend, provider_config, transport=transport)
        self.provider = provider

        self.memory = MessageStore(config.memory)
        self.functions = FunctionRegistry()
        self.tools = ToolRegistry()

        self.memory.append(Message.system(config.system_prompt))
        logger.info(f"Agent '{config.name}' initialized with {backend.value}/{config.model}")

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    def build_request(self) -> ProviderRequest:
        """Request for the current (post-retention) history."""
        descriptors = self.functions.descriptors()
        return ProviderRequest(
            messages=self.memory.snapshot(),
            model=self.config.model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            functions=tuple(descriptors) if descriptors else None,
        )

    async def send_message(self, content: str) -> ProviderResponse:
        """
        Run one turn.

        Args:
            content: The user's message

        Returns:
            The backend's full response

        Raises:
            ProviderError: The backend failed; history is exactly as before the call
            ConfigurationError: The model called an unregistered function
        """
        checkpoint = self.memory.checkpoint()
        self.memory.append(Message.user(content))
        logger.debug(f"Turn started ({len(self.memory)} messages in memory)")

        try:
            response = await self.provider.generate_response(self.build_request())
        except BaseException as e:
            # Cancellation included: the user message must not outlive the turn
            self.memory.restore(checkpoint)
            logger.error("Turn failed, history rolled back", e)
            raise

        self.memory.append(Message.assistant(response.content, response.function_call))

        if response.function_call:
            self.memory.append(await self.functions.resolve(response.function_call))

        logger.info(f"Turn complete ({len(response.content)} chars)")
        return response

    async def stream_message(self, content: str) -> AsyncIterator[StreamChunk]:
        """
        Run one turn, then replay the reply in display chunks.

        The turn completes (including rollback on failure) before the first
        chunk is produced; see aigent.streaming.
        """
        response = await self.send_message(content)
        streaming = self.config.streaming
        async for chunk in stream_response(response, streaming.chunk_size, streaming.delay):
            yield chunk

    def add_message(self, message: Message) -> None:
        """Append a message directly (retention applies)."""
        self.memory.append(message)

    def clear_memory(self) -> None:
        """Forget everything but the system message."""
        self.memory.clear()
        logger.info(f"Cleared memory for agent '{self.config.name}'")

    def get_memory(self) -> list[Message]:
        """A copy of the history; changing it doesn't affect the agent."""
        return list(self.memory.snapshot())

    # ------------------------------------------------------------------
    # Functions and tools
    # ------------------------------------------------------------------

    def register_function(self, definition: FunctionDefinition) -> None:
        self.functions.register(definition)

    def unregister_function(self, name: str) -> None:
        self.functions.unregister(name)

    def register_tool(self, tool: Tool) -> None:
        self.tools.register(tool)

    def unregister_tool(self, name: str) -> None:
        self.tools.unregister(name)

    async def execute_tool(self, name: str, args: dict[str, Any]) -> Any:
        """
        Invoke a registered tool directly.

        Raises:
            ConfigurationError: If no tool has that name
            Exception: Whatever the tool raises
        """
        return await self.tools.execute(name, args)
