"""
Tests for the AgentRelay and its websocket front end.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from aigent.errors import ConfigurationError, ProviderError, RelayError
from aigent.providers import ProviderConfig
from aigent.realtime import AgentRelay, create_app
from aigent.realtime.events import EventType, ErrorType
from aigent.realtime.server import parse_command
from aigent.types import FunctionCall, ProviderResponse, Usage

AGENT_CONFIG = {
    "name": "relay-bot",
    "systemPrompt": "You relay.",
    "provider": "custom",
    "model": "echo",
    "memory": {"maxMessages": 10},
    "streaming": {"enabled": True, "chunkSize": 3, "delay": 0},
}


def _echo(request):
    text = request.messages[-1].content
    return ProviderResponse(content=f"echo:{text}", usage=Usage(1, 1, 2))


class _Collector:
    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)

    @property
    def types(self):
        return [event.type for event in self.events]


@pytest.fixture
def relay():
    return AgentRelay()


@pytest.fixture
def events(relay):
    collector = _Collector()
    relay.subscribe(collector)
    return collector


class TestAgentRelay:
    """Tests for relay operations and the events they publish."""

    @pytest.mark.asyncio
    async def test_create_agent(self, relay, events):
        agent = await relay.create_agent("s1", AGENT_CONFIG, ProviderConfig(handler=_echo))

        assert relay.get_agent("s1") is agent
        assert relay.agent_ids() == ["s1"]
        assert events.types == [EventType.AGENT_CREATED]
        assert events.events[0].agent_id == "s1"

    @pytest.mark.asyncio
    async def test_create_agent_failure_publishes_error(self, relay, events):
        with pytest.raises(ConfigurationError):
            await relay.create_agent("s1", {**AGENT_CONFIG, "provider": "gemini"})

        assert relay.agent_ids() == []
        error = events.events[0]
        assert error.type is EventType.ERROR
        assert error.error_type is ErrorType.AGENT_CREATION
        assert error.code == "CONFIGURATION_ERROR"
        assert "gemini" in error.message

    @pytest.mark.asyncio
    async def test_bad_provider_timeout_publishes_configuration_error(self, relay, events):
        llama_config = {**AGENT_CONFIG, "provider": "llama", "model": "llama3"}

        with pytest.raises(ConfigurationError):
            await relay.create_agent("s1", llama_config, {"baseURL": "http://h", "timeout": "soon"})

        error = events.events[-1]
        assert error.error_type is ErrorType.AGENT_CREATION
        assert error.code == "CONFIGURATION_ERROR"
        assert "timeout" in error.message

    @pytest.mark.asyncio
    async def test_send_message(self, relay, events):
        await relay.create_agent("s1", AGENT_CONFIG, ProviderConfig(handler=_echo))

        response = await relay.send_message("s1", "hello")

        assert response.content == "echo:hello"
        event = events.events[-1]
        assert event.type is EventType.MESSAGE_RESPONSE
        assert event.content == "echo:hello"
        assert event.usage == {"prompt_tokens": 1, "completion_tokens": 1, "total_tokens": 2}

    @pytest.mark.asyncio
    async def test_send_message_streams_chunks(self, relay, events):
        await relay.create_agent("s1", AGENT_CONFIG, ProviderConfig(handler=_echo))

        await relay.send_message("s1", "hey", stream=True)

        chunks = [e for e in events.events if e.type is EventType.STREAM_CHUNK]
        assert "".join(c.content for c in chunks) == "echo:hey"
        assert [c.is_complete for c in chunks] == [False, False, True]
        assert chunks[-1].usage["total_tokens"] == 2

    @pytest.mark.asyncio
    async def test_unknown_function_publishes_error(self, relay, events):
        reply = ProviderResponse(content="", function_call=FunctionCall("f", {"a": 1}))
        await relay.create_agent("s1", AGENT_CONFIG, ProviderConfig(handler=lambda request: reply))

        with pytest.raises(ConfigurationError):
            await relay.send_message("s1", "call it")

        error = events.events[-1]
        assert error.error_type is ErrorType.MESSAGE
        assert "'f' not found" in error.message

    @pytest.mark.asyncio
    async def test_provider_failure_publishes_error(self, relay, events):
        def down(request):
            raise ConnectionError("upstream down")

        await relay.create_agent("s1", AGENT_CONFIG, ProviderConfig(handler=down))

        with pytest.raises(ProviderError):
            await relay.send_message("s1", "hello")

        error = events.events[-1]
        assert error.code == "LLM_ERROR"
        assert error.message == "upstream down"
        assert len(relay.get_agent("s1").get_memory()) == 1

    @pytest.mark.asyncio
    async def test_failed_turn_does_not_erase_concurrent_turn(self, relay, events):
        calls = []

        async def handler(request):
            calls.append(request.messages[-1].content)
            if len(calls) == 1:
                await asyncio.sleep(0.05)
                raise RuntimeError("boom")
            return ProviderResponse(content="reply2")

        await relay.create_agent("s1", AGENT_CONFIG, ProviderConfig(handler=handler))

        results = await asyncio.gather(
            relay.send_message("s1", "first"),
            relay.send_message("s1", "second"),
            return_exceptions=True,
        )

        assert isinstance(results[0], ProviderError)
        assert results[1].content == "reply2"
        assert calls == ["first", "second"]
        memory = relay.get_agent("s1").get_memory()
        assert [(m.role.value, m.content) for m in memory] == [
            ("system", "You relay."),
            ("user", "second"),
            ("assistant", "reply2"),
        ]

    @pytest.mark.asyncio
    async def test_turns_on_different_agents_overlap(self, relay):
        started = []
        release = asyncio.Event()

        async def handler(request):
            started.append(request.messages[-1].content)
            await release.wait()
            return ProviderResponse(content="ok")

        await relay.create_agent("a", AGENT_CONFIG, ProviderConfig(handler=handler))
        await relay.create_agent("b", AGENT_CONFIG, ProviderConfig(handler=handler))

        async def both_started():
            while len(started) < 2:
                await asyncio.sleep(0)

        turns = asyncio.gather(relay.send_message("a", "x"), relay.send_message("b", "y"))
        await asyncio.wait_for(both_started(), timeout=1)
        release.set()
        await turns

        assert sorted(started) == ["x", "y"]

    @pytest.mark.asyncio
    async def test_unknown_agent(self, relay, events):
        with pytest.raises(RelayError, match="Agent ghost not found"):
            await relay.send_message("ghost", "hi")

        error = events.events[-1]
        assert error.agent_id == "ghost"
        assert error.code == "REALTIME_ERROR"

    @pytest.mark.asyncio
    async def test_memory_operations(self, relay, events):
        await relay.create_agent("s1", AGENT_CONFIG, ProviderConfig(handler=_echo))
        await relay.send_message("s1", "hello")

        memory = await relay.get_memory("s1")
        assert [m.content for m in memory] == ["You relay.", "hello", "echo:hello"]
        assert events.events[-1].memory[0] == {"role": "system", "content": "You relay."}

        await relay.clear_memory("s1")
        assert events.types[-1] is EventType.MEMORY_CLEARED
        assert len(await relay.get_memory("s1")) == 1

    @pytest.mark.asyncio
    async def test_clear_unknown_agent(self, relay, events):
        with pytest.raises(RelayError):
            await relay.clear_memory("ghost")

        assert events.events[-1].error_type is ErrorType.MEMORY

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_block_others(self, relay, events):
        def broken(event):
            raise RuntimeError("subscriber bug")

        relay.subscribe(broken)
        await relay.create_agent("s1", AGENT_CONFIG, ProviderConfig(handler=_echo))

        assert events.types == [EventType.AGENT_CREATED]

    @pytest.mark.asyncio
    async def test_async_subscriber_and_unsubscribe(self, relay):
        seen = []

        async def subscriber(event):
            seen.append(event.type)

        relay.subscribe(subscriber)
        await relay.create_agent("s1", AGENT_CONFIG, ProviderConfig(handler=_echo))
        relay.unsubscribe(subscriber)
        await relay.clear_memory("s1")

        assert seen == [EventType.AGENT_CREATED]

    @pytest.mark.asyncio
    async def test_remove_agent(self, relay):
        await relay.create_agent("s1", AGENT_CONFIG, ProviderConfig(handler=_echo))

        assert relay.remove_agent("s1") is True
        assert relay.remove_agent("s1") is False


class TestParseCommand:
    """Tests for command validation."""

    def test_camel_case_aliases(self):
        command = parse_command({
            "type": "create_agent",
            "agentId": "s1",
            "agentConfig": AGENT_CONFIG,
            "providerConfig": {"baseURL": "http://localhost:11434"},
        })

        assert command.agent_id == "s1"
        assert command.provider_config == {"baseURL": "http://localhost:11434"}

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown command type"):
            parse_command({"type": "reboot", "agent_id": "s1"})


@pytest.fixture
def app_relay():
    relay = AgentRelay()
    asyncio.run(relay.create_agent("s1", AGENT_CONFIG, ProviderConfig(handler=_echo)))
    return relay


class TestWebSocketServer:
    """Tests for the /ws endpoint and /health."""

    def test_health(self, app_relay):
        client = TestClient(create_app(app_relay))

        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["agents"] == 1
        assert body["connections"] == 0

    def test_send_message(self, app_relay):
        client = TestClient(create_app(app_relay))

        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "send_message", "agent_id": "s1", "content": "hi"})
            event = websocket.receive_json()

        assert event["type"] == "message_response"
        assert event["agent_id"] == "s1"
        assert event["content"] == "echo:hi"

    def test_streamed_message(self, app_relay):
        client = TestClient(create_app(app_relay))

        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({
                "type": "send_message", "agentId": "s1", "content": "yo", "stream": True,
            })
            chunks = [websocket.receive_json()]
            while not chunks[-1]["is_complete"]:
                chunks.append(websocket.receive_json())

        assert all(chunk["type"] == "stream_chunk" for chunk in chunks)
        assert "".join(chunk["content"] for chunk in chunks) == "echo:yo"

    def test_memory_commands(self, app_relay):
        client = TestClient(create_app(app_relay))

        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "get_memory", "agent_id": "s1"})
            memory = websocket.receive_json()
            websocket.send_json({"type": "clear_memory", "agent_id": "s1"})
            cleared = websocket.receive_json()

        assert memory["type"] == "memory_response"
        assert memory["memory"] == [{"role": "system", "content": "You relay."}]
        assert cleared["type"] == "memory_cleared"

    def test_create_agent_over_websocket(self):
        client = TestClient(create_app(AgentRelay()))

        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({
                "type": "create_agent",
                "agent_id": "s2",
                "agent_config": {**AGENT_CONFIG, "provider": "llama", "model": "llama3"},
                "provider_config": {"baseURL": "http://localhost:11434"},
            })
            event = websocket.receive_json()

        assert event["type"] == "agent_created"
        assert event["agent_id"] == "s2"
        assert event["status"] == "success"
        assert "timestamp" in event

    def test_create_agent_error(self):
        client = TestClient(create_app(AgentRelay()))

        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({
                "type": "create_agent",
                "agent_id": "s3",
                "agent_config": {**AGENT_CONFIG, "provider": "openai"},
                "provider_config": {"apiKey": "not-a-key"},
            })
            event = websocket.receive_json()

        assert event["type"] == "error"
        assert event["error_type"] == "agent_creation_error"
        assert event["message"] == "Invalid OpenAI API key format"

    def test_invalid_command(self, app_relay):
        client = TestClient(create_app(app_relay))

        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "send_message", "agent_id": "s1"})
            event = websocket.receive_json()

        assert event["type"] == "error"
        assert event["error_type"] == "command_error"
        assert event["code"] == "INVALID_COMMAND"
        assert event["agent_id"] == "s1"

    def test_unknown_agent_over_websocket(self, app_relay):
        client = TestClient(create_app(app_relay))

        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "get_memory", "agent_id": "ghost"})
            event = websocket.receive_json()

        assert event["type"] == "error"
        assert event["error_type"] == "memory_error"
        assert event["message"] == "Agent ghost not found"
