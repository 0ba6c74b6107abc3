"""
Agent Relay
===========

Holds one Agent per session id and maps relay operations 1:1 onto Agent
operations:

    create_agent(id, config, provider_config) → Agent(...)
    send_message(id, content, stream)         → agent.send_message(...)
    get_memory(id)                            → agent.get_memory()
    clear_memory(id)                          → agent.clear_memory()

Each operation returns its result directly. After it completes (or fails)
an event is published to every subscriber; the relay is an observer layer
on top of the agents, not part of their turn logic. Agents share nothing,
so turns on different ids may run concurrently. Turns on the same id are
serialized by a per-agent asyncio.Lock: an agent runs at most one turn at a
time, and a failed turn's rollback only ever undoes that turn.
"""

import asyncio
from typing import Any, Awaitable, Callable

from aigent.agent import Agent
from aigent.errors import AIGentError, RelayError
from aigent.providers import ProviderConfig
from aigent.realtime.events import (
    AgentCreatedEvent,
    BaseEvent,
    ErrorEvent,
    ErrorType,
    MemoryClearedEvent,
    MemoryResponseEvent,
    MessageResponseEvent,
    StreamChunkEvent,
)
from aigent.streaming import stream_response
from aigent.types import AgentConfig, Message, ProviderResponse
from aigent.utils.awaitables import call_maybe_async
from aigent.utils.config import get_config
from aigent.utils.logger import Logger

logger = Logger("Relay")

Subscriber = Callable[[BaseEvent], Awaitable[None] | None]


class AgentRelay:
    """
    Session registry plus event fan-out.

    Example:
        relay = AgentRelay()
        relay.subscribe(lambda event: print(event.type))

        relay.create_agent("s1", {"name": "bot", "systemPrompt": "Hi",
                                  "provider": "llama", "model": "llama3"},
                           {"baseURL": "http://localhost:11434"})
        response = await relay.send_message("s1", "Hello!")
    """

    def __init__(self):
        self._agents: dict[str, Agent] = {}
        self._turn_locks: dict[str, asyncio.Lock] = {}
        self._subscribers: list[Subscriber] = []

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    async def publish(self, event: BaseEvent) -> None:
        """Deliver an event to every subscriber; a failing subscriber is logged and skipped."""
        for callback in list(self._subscribers):
            try:
                await call_maybe_async(callback, event)
            except Exception as e:
                logger.error(f"Subscriber failed on {event.type.value} event", e)

    async def _fail(self, agent_id: str, error_type: ErrorType, error: AIGentError) -> None:
        await self.publish(ErrorEvent(
            agent_id=agent_id,
            error_type=error_type,
            code=error.code,
            message=error.message,
        ))

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------

    def agent_ids(self) -> list[str]:
        return list(self._agents)

    def get_agent(self, agent_id: str) -> Agent:
        """
        Raises:
            RelayError: If no agent has that id
        """
        agent = self._agents.get(agent_id)
        if agent is None:
            raise RelayError(f"Agent {agent_id} not found")
        return agent

    def remove_agent(self, agent_id: str) -> bool:
        removed = self._agents.pop(agent_id, None) is not None
        self._turn_locks.pop(agent_id, None)
        if removed:
            logger.info(f"Agent removed: {agent_id}")
        return removed

    async def create_agent(
        self,
        agent_id: str,
        agent_config: AgentConfig | dict[str, Any],
        provider_config: ProviderConfig | dict[str, Any] | None = None
    ) -> Agent:
        """
        Build an agent and register it under agent_id (replacing any previous one).

        Without a provider_config, credentials come from the environment.

        Raises:
            ConfigurationError: Invalid agent or provider config
        """
        try:
            if isinstance(agent_config, dict):
                agent_config = AgentConfig.from_dict(agent_config)
            if isinstance(provider_config, dict):
                provider_config = ProviderConfig.from_dict(provider_config)
            if provider_config is None:
                provider_config = get_config().provider_config(agent_config.backend)

            agent = Agent(agent_config, provider_config)
        except AIGentError as e:
            await self._fail(agent_id, ErrorType.AGENT_CREATION, e)
            raise

        self._agents[agent_id] = agent
        self._turn_locks[agent_id] = asyncio.Lock()
        logger.info(f"Agent created: {agent_id}")
        await self.publish(AgentCreatedEvent(agent_id=agent_id))
        return agent

    async def send_message(self, agent_id: str, content: str, stream: bool = False) -> ProviderResponse:
        """
        Run one turn on an agent.

        With stream=True the completed reply is also published as a series
        of stream_chunk events (display pacing from the agent's streaming
        policy); otherwise a single message_response event is published.
        """
        try:
            agent = self.get_agent(agent_id)
            async with self._turn_locks[agent_id]:
                response = await agent.send_message(content)
        except AIGentError as e:
            await self._fail(agent_id, ErrorType.MESSAGE, e)
            raise

        if stream:
            policy = agent.config.streaming
            async for chunk in stream_response(response, policy.chunk_size, policy.delay):
                await self.publish(StreamChunkEvent(
                    agent_id=agent_id,
                    content=chunk.content,
                    is_complete=chunk.is_complete,
                    usage=chunk.usage.to_dict() if chunk.usage else None,
                ))
        else:
            data = response.to_dict()
            await self.publish(MessageResponseEvent(
                agent_id=agent_id,
                content=data["content"],
                function_call=data["function_call"],
                usage=data["usage"],
            ))
        return response

    async def get_memory(self, agent_id: str) -> list[Message]:
        try:
            memory = self.get_agent(agent_id).get_memory()
        except AIGentError as e:
            await self._fail(agent_id, ErrorType.MEMORY, e)
            raise

        await self.publish(MemoryResponseEvent(
            agent_id=agent_id,
            memory=[message.to_dict() for message in memory],
        ))
        return memory

    async def clear_memory(self, agent_id: str) -> None:
        try:
            self.get_agent(agent_id).clear_memory()
        except AIGentError as e:
            await self._fail(agent_id, ErrorType.MEMORY, e)
            raise

        await self.publish(MemoryClearedEvent(agent_id=agent_id))
