"""
Configuration Management
========================

Environment-driven settings for the relay server and for building provider
configs when a client doesn't send its own credentials.

Everything is read once, after loading a .env file, into frozen
dataclasses. Nothing here is required at import time: agents can be built
entirely from explicit AgentConfig/ProviderConfig objects, and the
environment only supplies defaults.

Usage:
    from aigent.utils.config import get_config

    config = get_config()
    provider_config = config.provider_config("claude")
    print(config.server.port)
"""

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from aigent.utils.logger import Logger

if TYPE_CHECKING:
    from aigent.providers.base import ProviderConfig

logger = Logger("Config")


def _optional(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    return value if value else default


def _optional_int(name: str, default: int) -> int:
    """
    Read an integer environment variable.

    Invalid values are logged and replaced by the default.
    """
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"{name} is not a valid integer, using default: {default}")
        return default


@dataclass(frozen=True)
class BackendCredentials:
    """Credentials for one backend, as found in the environment."""
    api_key: str | None
    base_url: str | None


@dataclass(frozen=True)
class AgentDefaults:
    """Defaults applied to agents created without explicit values."""
    backend: str
    model: str
    max_messages: int
    stream_chunk_size: int


@dataclass(frozen=True)
class ServerConfig:
    """Relay server bind address."""
    host: str
    port: int


@dataclass(frozen=True)
class Settings:
    """
    Root settings object.

    Access via get_config():
        config.openai.api_key
        config.defaults.model
        config.server.port
    """
    openai: BackendCredentials
    claude: BackendCredentials
    llama: BackendCredentials
    provider_timeout: int
    defaults: AgentDefaults
    server: ServerConfig
    log_level: str

    def credentials_for(self, backend: str) -> BackendCredentials | None:
        return {
            "openai": self.openai,
            "claude": self.claude,
            "llama": self.llama,
        }.get(backend)

    def provider_config(self, backend: str) -> "ProviderConfig":
        """
        Build a ProviderConfig for a backend from environment credentials.

        Backends without environment credentials (custom) get an empty
        config; the provider factory decides whether that is acceptable.
        """
        from aigent.providers.base import ProviderConfig

        credentials = self.credentials_for(backend)
        if credentials is None:
            return ProviderConfig(timeout=self.provider_timeout)
        return ProviderConfig(
            api_key=credentials.api_key,
            base_url=credentials.base_url,
            timeout=self.provider_timeout,
        )


def load_config() -> Settings:
    """Load a .env file (if any) and read all settings from the environment."""
    load_dotenv()

    return Settings(
        openai=BackendCredentials(
            api_key=_optional("OPENAI_API_KEY"),
            base_url=_optional("OPENAI_BASE_URL"),
        ),
        claude=BackendCredentials(
            api_key=_optional("ANTHROPIC_API_KEY"),
            base_url=_optional("ANTHROPIC_BASE_URL"),
        ),
        llama=BackendCredentials(
            api_key=_optional("LLAMA_API_KEY"),
            base_url=_optional("LLAMA_BASE_URL"),
        ),
        provider_timeout=_optional_int("AIGENT_PROVIDER_TIMEOUT", 30),
        defaults=AgentDefaults(
            backend=_optional("AIGENT_DEFAULT_BACKEND", "openai"),
            model=_optional("AIGENT_DEFAULT_MODEL", "gpt-4o-mini"),
            max_messages=_optional_int("AIGENT_MEMORY_MAX_MESSAGES", 10),
            stream_chunk_size=_optional_int("AIGENT_STREAM_CHUNK_SIZE", 50),
        ),
        server=ServerConfig(
            host=_optional("AIGENT_HOST", "0.0.0.0"),
            port=_optional_int("AIGENT_PORT", 8000),
        ),
        log_level=_optional("LOG_LEVEL", "info"),
    )


_config_instance: Settings | None = None


def get_config() -> Settings:
    """Return the settings, loading them on first access."""
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config()
    return _config_instance


def reset_config() -> None:
    """Drop the cached settings so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None
