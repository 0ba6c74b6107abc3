"""
Core Types
==========

Value objects shared by the agent, the providers and the relay.

- Message: one role-tagged entry of the conversation (immutable)
- AgentConfig: everything captured when an Agent is built (immutable)
- FunctionDefinition / Tool: named callables owned by an Agent
- ProviderRequest / ProviderResponse: the uniform shape every backend
  speaks, whatever its wire format
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

from aigent.errors import ConfigurationError


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"


class Backend(str, Enum):
    """The closed set of backend identifiers the provider factory knows."""
    OPENAI = "openai"
    CLAUDE = "claude"
    LLAMA = "llama"
    CUSTOM = "custom"


# Function handlers and tool callables may be plain or async functions
Handler = Callable[[dict[str, Any]], Awaitable[Any]] | Callable[[dict[str, Any]], Any]


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key, so both snake_case and camelCase work."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class FunctionCall:
    """
    A model's request to invoke a local function.

    Attributes:
        name: Registered function name
        arguments: Already-parsed arguments
    """
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    def arguments_json(self) -> str:
        return json.dumps(self.arguments, default=str)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "arguments": self.arguments_json()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FunctionCall":
        """Accept arguments either as a JSON string or as a dict."""
        arguments = data.get("arguments") or {}
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments) if arguments.strip() else {}
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    f"Function call arguments for '{data.get('name')}' are not valid JSON: {e}"
                ) from e
        return cls(name=data["name"], arguments=dict(arguments))


@dataclass(frozen=True)
class Message:
    """
    A single conversation entry.

    Messages are never mutated once appended; the store only ever adds or
    drops whole messages.

    Attributes:
        role: system, user, assistant or function
        content: The text
        name: Function name; required when role is function
        function_call: Set on assistant messages that asked for a function
    """
    role: Role
    content: str
    name: str | None = None
    function_call: FunctionCall | None = None

    def __post_init__(self):
        try:
            role = Role(self.role)
        except ValueError:
            raise ConfigurationError(f"Unknown message role: {self.role!r}") from None
        object.__setattr__(self, "role", role)

        if role is Role.FUNCTION and not self.name:
            raise ConfigurationError("Function messages require a name")

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str, function_call: FunctionCall | None = None) -> "Message":
        return cls(Role.ASSISTANT, content, function_call=function_call)

    @classmethod
    def function(cls, name: str, content: str) -> "Message":
        return cls(Role.FUNCTION, content, name=name)

    def to_dict(self) -> dict[str, Any]:
        """Wire/JSON form; optional keys are omitted when unset."""
        data: dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.name:
            data["name"] = self.name
        if self.function_call:
            data["function_call"] = self.function_call.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        function_call = _pick(data, "function_call", "functionCall")
        return cls(
            role=data["role"],
            content=data.get("content") or "",
            name=data.get("name"),
            function_call=FunctionCall.from_dict(function_call) if function_call else None,
        )


@dataclass(frozen=True)
class MemoryPolicy:
    """
    Retention policy for the message store.

    When enabled, the store never holds more than max_messages entries;
    the system message is always kept.
    """
    enabled: bool = True
    max_messages: int = 10

    def __post_init__(self):
        if self.enabled and self.max_messages < 1:
            raise ConfigurationError(
                f"memory.max_messages must be >= 1, got {self.max_messages}"
            )


@dataclass(frozen=True)
class StreamingPolicy:
    """How a completed response is cut up for chunked display."""
    enabled: bool = False
    chunk_size: int = 50
    delay: float = 0.05

    def __post_init__(self):
        if self.chunk_size < 1:
            raise ConfigurationError(f"streaming.chunk_size must be >= 1, got {self.chunk_size}")
        if self.delay < 0:
            raise ConfigurationError(f"streaming.delay must be >= 0, got {self.delay}")


@dataclass(frozen=True)
class AgentConfig:
    """
    Immutable agent configuration.

    backend is kept as a plain string: an unknown identifier is rejected by
    the provider factory when the Agent is built, before any network call.
    """
    name: str
    system_prompt: str
    backend: str
    model: str
    temperature: float = 0.7
    max_tokens: int | None = None
    description: str | None = None
    memory: MemoryPolicy = field(default_factory=MemoryPolicy)
    streaming: StreamingPolicy = field(default_factory=StreamingPolicy)

    def __post_init__(self):
        if isinstance(self.backend, Backend):
            object.__setattr__(self, "backend", self.backend.value)
        if not 0 <= self.temperature <= 2:
            raise ConfigurationError(
                f"temperature must be within [0, 2], got {self.temperature}"
            )
        if self.max_tokens is not None and self.max_tokens <= 0:
            raise ConfigurationError(f"max_tokens must be positive, got {self.max_tokens}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AgentConfig":
        """
        Build a config from a JSON-style dict.

        Accepts both snake_case keys and the camelCase keys used by
        JavaScript clients (systemPrompt, maxTokens, maxMessages, ...).
        "provider" is accepted as an alias of "backend".

        Raises:
            ConfigurationError: If a required key is missing or a value is invalid
        """
        memory = data.get("memory") or {}
        streaming = data.get("streaming") or {}

        name = _pick(data, "name")
        system_prompt = _pick(data, "system_prompt", "systemPrompt")
        backend = _pick(data, "backend", "provider")
        model = _pick(data, "model")
        missing = [
            key for key, value in (
                ("name", name),
                ("system_prompt", system_prompt),
                ("backend", backend),
                ("model", model),
            )
            if value is None
        ]
        if missing:
            raise ConfigurationError(f"Agent config is missing: {', '.join(missing)}")

        try:
            return cls(
                name=name,
                system_prompt=system_prompt,
                backend=str(backend),
                model=model,
                temperature=float(_pick(data, "temperature", default=0.7)),
                max_tokens=_pick(data, "max_tokens", "maxTokens"),
                description=_pick(data, "description"),
                memory=MemoryPolicy(
                    enabled=bool(_pick(memory, "enabled", default=True)),
                    max_messages=int(_pick(memory, "max_messages", "maxMessages", default=10)),
                ),
                streaming=StreamingPolicy(
                    enabled=bool(_pick(streaming, "enabled", default=False)),
                    chunk_size=int(_pick(streaming, "chunk_size", "chunkSize", default=50)),
                    delay=float(_pick(streaming, "delay", default=0.05)),
                ),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid agent config: {e}") from e


@dataclass
class FunctionDefinition:
    """
    A function the model may ask the agent to call.

    Attributes:
        name: Unique key in the agent's function registry
        description: Shown to the model
        parameters: JSON Schema for the arguments
        handler: Called with the parsed arguments; may be async; may raise
    """
    name: str
    description: str
    parameters: dict[str, Any]
    handler: Handler

    def to_descriptor(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


@dataclass
class Tool:
    """
    A utility the caller invokes directly through Agent.execute_tool().

    The model never calls tools; they have no effect on the conversation.
    """
    name: str
    description: str
    execute: Handler
    parameters: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Usage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    def to_dict(self) -> dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class ProviderRequest:
    """
    What the agent hands to a backend for one turn.

    Attributes:
        messages: Retained history, oldest first
        model: Backend model identifier
        temperature: Sampling temperature
        max_tokens: Output cap; backends apply their own default when None
        functions: Descriptors of registered functions, or None when there are none
    """
    messages: tuple[Message, ...]
    model: str
    temperature: float = 0.7
    max_tokens: int | None = None
    functions: tuple[dict[str, Any], ...] | None = None


@dataclass(frozen=True)
class ProviderResponse:
    """The uniform reply every backend normalizes to."""
    content: str
    function_call: FunctionCall | None = None
    usage: Usage | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "function_call": (
                {"name": self.function_call.name, "arguments": self.function_call.arguments}
                if self.function_call else None
            ),
            "usage": self.usage.to_dict() if self.usage else None,
        }


@dataclass(frozen=True)
class StreamChunk:
    """
    One display fragment of an already-complete response.

    usage is only set on the final chunk.
    """
    content: str
    is_complete: bool
    usage: Usage | None = None
