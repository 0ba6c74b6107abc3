"""
Tests for the data model: messages, configs and policies.
"""

import pytest

from aigent.errors import ConfigurationError
from aigent.types import (
    AgentConfig,
    Backend,
    FunctionCall,
    MemoryPolicy,
    Message,
    ProviderResponse,
    Role,
    StreamingPolicy,
    Usage,
)


class TestMessage:
    """Tests for Message."""

    def test_role_coerced_from_string(self):
        message = Message("user", "hi")

        assert message.role is Role.USER

    def test_unknown_role_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown message role"):
            Message("narrator", "once upon a time")

    def test_function_message_requires_name(self):
        with pytest.raises(ConfigurationError, match="require a name"):
            Message(Role.FUNCTION, "{}")

    def test_to_dict_omits_unset_keys(self):
        assert Message.user("hi").to_dict() == {"role": "user", "content": "hi"}

    def test_assistant_function_call_round_trip(self):
        message = Message.assistant("", FunctionCall("lookup", {"q": "x"}))
        data = message.to_dict()

        assert data["function_call"] == {"name": "lookup", "arguments": '{"q": "x"}'}
        assert Message.from_dict(data) == message

    def test_from_dict_accepts_camel_case_function_call(self):
        message = Message.from_dict({
            "role": "assistant",
            "content": None,
            "functionCall": {"name": "f", "arguments": {"a": 1}},
        })

        assert message.content == ""
        assert message.function_call == FunctionCall("f", {"a": 1})


class TestFunctionCall:
    """Tests for FunctionCall."""

    def test_from_dict_with_json_string(self):
        call = FunctionCall.from_dict({"name": "f", "arguments": '{"x": [1, 2]}'})

        assert call.arguments == {"x": [1, 2]}

    def test_from_dict_with_blank_string(self):
        assert FunctionCall.from_dict({"name": "f", "arguments": "  "}).arguments == {}

    def test_from_dict_with_bad_json(self):
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            FunctionCall.from_dict({"name": "f", "arguments": "{oops"})


class TestPolicies:
    """Tests for MemoryPolicy and StreamingPolicy."""

    def test_memory_defaults(self):
        policy = MemoryPolicy()

        assert policy.enabled is True
        assert policy.max_messages == 10

    def test_memory_rejects_zero(self):
        with pytest.raises(ConfigurationError):
            MemoryPolicy(max_messages=0)

    def test_disabled_memory_ignores_bound(self):
        assert MemoryPolicy(enabled=False, max_messages=0).enabled is False

    @pytest.mark.parametrize("kwargs", [{"chunk_size": 0}, {"delay": -1}])
    def test_streaming_rejects_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            StreamingPolicy(**kwargs)


class TestAgentConfig:
    """Tests for AgentConfig."""

    def test_backend_enum_stored_as_string(self):
        config = AgentConfig("bot", "S", Backend.CLAUDE, "claude-3")

        assert config.backend == "claude"

    @pytest.mark.parametrize("temperature", [-0.1, 2.5])
    def test_temperature_range(self, temperature):
        with pytest.raises(ConfigurationError, match="temperature"):
            AgentConfig("bot", "S", "openai", "gpt", temperature=temperature)

    def test_max_tokens_must_be_positive(self):
        with pytest.raises(ConfigurationError, match="max_tokens"):
            AgentConfig("bot", "S", "openai", "gpt", max_tokens=0)

    def test_from_dict_camel_case(self):
        config = AgentConfig.from_dict({
            "name": "bot",
            "systemPrompt": "Be helpful",
            "provider": "llama",
            "model": "llama3",
            "maxTokens": 256,
            "memory": {"enabled": True, "maxMessages": 4},
            "streaming": {"enabled": True, "chunkSize": 8, "delay": 0},
        })

        assert config.system_prompt == "Be helpful"
        assert config.backend == "llama"
        assert config.max_tokens == 256
        assert config.temperature == 0.7
        assert config.memory == MemoryPolicy(True, 4)
        assert config.streaming == StreamingPolicy(True, 8, 0.0)

    def test_from_dict_missing_keys(self):
        with pytest.raises(ConfigurationError, match="system_prompt, backend"):
            AgentConfig.from_dict({"name": "bot", "model": "m"})

    def test_from_dict_bad_value(self):
        with pytest.raises(ConfigurationError, match="Invalid agent config"):
            AgentConfig.from_dict({
                "name": "bot",
                "system_prompt": "S",
                "backend": "openai",
                "model": "gpt",
                "temperature": "warm",
            })

    def test_from_dict_keeps_unknown_backend(self):
        config = AgentConfig.from_dict({
            "name": "bot", "system_prompt": "S", "backend": "gemini", "model": "m",
        })

        assert config.backend == "gemini"


def test_provider_response_to_dict():
    response = ProviderResponse(
        content="ok",
        function_call=FunctionCall("f", {"a": 1}),
        usage=Usage(1, 2, 3),
    )

    assert response.to_dict() == {
        "content": "ok",
        "function_call": {"name": "f", "arguments": {"a": 1}},
        "usage": {"prompt_tokens": 1, "completion_tokens": 2, "total_tokens": 3},
    }
