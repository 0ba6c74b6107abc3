"""
Provider Factory
================

Maps a backend identifier to its implementation. Both functions are pure:
no network, no global state.

    validate_provider_config("claude", config)   # credential shape checks
    provider = create_provider("claude", config)

Adding a backend means adding a Backend member, a provider class and an
entry in each table below.
"""

from typing import Callable

import httpx

from aigent.errors import ConfigurationError
from aigent.providers.base import LLMProvider, ProviderConfig
from aigent.providers.claude import ClaudeProvider
from aigent.providers.custom import CustomProvider
from aigent.providers.llama import LlamaProvider
from aigent.providers.openai_provider import OpenAIProvider
from aigent.types import Backend
from aigent.utils.logger import Logger

logger = Logger("ProviderFactory")

_PROVIDERS: dict[Backend, Callable[..., LLMProvider]] = {
    Backend.OPENAI: OpenAIProvider,
    Backend.CLAUDE: ClaudeProvider,
    Backend.LLAMA: LlamaProvider,
    Backend.CUSTOM: CustomProvider,
}


def resolve_backend(backend: str | Backend) -> Backend:
    """
    Parse a backend identifier.

    Raises:
        ConfigurationError: For identifiers outside the known set
    """
    try:
        return Backend(backend)
    except ValueError:
        raise ConfigurationError(f"Unsupported provider: {backend}") from None


def _validate_openai(config: ProviderConfig) -> None:
    if not config.api_key:
        raise ConfigurationError("API key is required for OpenAI provider")
    if not config.api_key.startswith("sk-"):
        raise ConfigurationError("Invalid OpenAI API key format")


def _validate_claude(config: ProviderConfig) -> None:
    if not config.api_key:
        raise ConfigurationError("API key is required for Claude provider")
    if not config.api_key.startswith("sk-ant-"):
        raise ConfigurationError("Invalid Claude API key format")


def _validate_llama(config: ProviderConfig) -> None:
    # Local Ollama instances usually run without a key
    if not config.base_url and not config.api_key:
        raise ConfigurationError("Either base_url or api_key is required for LLaMA provider")


def _validate_custom(config: ProviderConfig) -> None:
    if config.handler is None or not callable(config.handler):
        raise ConfigurationError("A callable handler is required for custom provider")


_VALIDATORS: dict[Backend, Callable[[ProviderConfig], None]] = {
    Backend.OPENAI: _validate_openai,
    Backend.CLAUDE: _validate_claude,
    Backend.LLAMA: _validate_llama,
    Backend.CUSTOM: _validate_custom,
}


def validate_provider_config(backend: str | Backend, config: ProviderConfig) -> None:
    """
    Check the credential shape a backend needs.

    Raises:
        ConfigurationError: On unknown backends or bad credentials
    """
    _VALIDATORS[resolve_backend(backend)](config)


def create_provider(
    backend: str | Backend,
    config: ProviderConfig,
    transport: httpx.AsyncBaseTransport | None = None
) -> LLMProvider:
    """
    Construct the provider for a backend.

    Args:
        backend: Backend identifier ("openai", "claude", "llama", "custom")
        config: Connection settings
        transport: Optional httpx transport handed to the HTTP client

    Returns:
        An object implementing generate_response()

    Raises:
        ConfigurationError: On unknown backends or invalid config
    """
    resolved = resolve_backend(backend)
    provider = _PROVIDERS[resolved](config, transport=transport)
    logger.debug(f"Created {resolved.value} provider")
    return provider
