"""
Provider Contract
=================

Every backend exposes a single capability:

    async generate_response(request: ProviderRequest) -> ProviderResponse

Backends are independent classes selected by the factory; they share no
base class, only this protocol and a few helpers. A backend:

1. Validates its own config in __init__ and raises ConfigurationError
   before any network attempt
2. Translates the uniform message list into its wire format (role mapping
   is backend-specific and documented on each class)
3. Normalizes the reply into a ProviderResponse
4. Raises ProviderError on transport failure, malformed payloads, or
   replies with no usable content
"""

from dataclasses import dataclass
from typing import Any, Callable, Protocol, runtime_checkable

from aigent.errors import ConfigurationError
from aigent.types import Message, ProviderRequest, ProviderResponse

DEFAULT_TIMEOUT = 30


@dataclass(frozen=True)
class ProviderConfig:
    """
    Connection settings for one backend.

    Attributes:
        api_key: Credential; shape is checked per backend by the factory
        base_url: Override for the backend's default endpoint
        timeout: Transport timeout in seconds
        handler: Only for the custom backend, called with each ProviderRequest
    """
    api_key: str | None = None
    base_url: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    handler: Callable[[ProviderRequest], Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderConfig":
        """
        Build from a JSON-style dict; apiKey/baseURL aliases are accepted.

        Raises:
            ConfigurationError: If timeout is not a positive number
        """
        try:
            timeout = float(data.get("timeout") or DEFAULT_TIMEOUT)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid provider config: timeout {data.get('timeout')!r}") from e
        if timeout <= 0:
            raise ConfigurationError(f"Invalid provider config: timeout must be positive, got {timeout}")

        return cls(
            api_key=data.get("api_key") or data.get("apiKey"),
            base_url=data.get("base_url") or data.get("baseURL") or data.get("baseUrl"),
            timeout=timeout,
        )


@runtime_checkable
class LLMProvider(Protocol):
    """The capability the agent depends on."""

    backend: str

    async def generate_response(self, request: ProviderRequest) -> ProviderResponse:
        ...


def format_messages(messages: tuple[Message, ...] | list[Message]) -> list[dict[str, Any]]:
    """
    Render messages in the OpenAI chat shape, keeping name and function_call.

    Backends with a different shape do their own mapping.
    """
    return [message.to_dict() for message in messages]


def describe_error(error: BaseException) -> str:
    """Best human-readable text for an upstream exception."""
    return str(error) or type(error).__name__
