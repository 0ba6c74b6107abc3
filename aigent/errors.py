"""
Error Types
===========

Every failure the agent layer raises on purpose is an AIGentError. Each one
carries a machine-readable code (for relays and UIs) and a human-readable
message.

Categories:
- ConfigurationError: bad setup (backend id, credential shape, unknown
  function/tool name). Fatal to the operation that raised it.
- ProviderError: upstream transport/protocol failure or an empty reply.
  Fatal to the current turn only; the agent rolls its history back.
- RelayError: the transport front end was asked about an agent it
  doesn't know.
"""

from typing import Any


class AIGentError(Exception):
    """Base class for all agent errors."""

    code = "AIGENT_ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        """Serialize for error events."""
        return {"code": self.code, "message": self.message}


class ConfigurationError(AIGentError):
    """Invalid or missing setup."""

    code = "CONFIGURATION_ERROR"


class ProviderError(AIGentError):
    """
    A backend failed to produce a usable response.

    Attributes:
        backend: Identifier of the backend that failed ("openai", "claude", ...)
    """

    code = "LLM_ERROR"

    def __init__(self, message: str, backend: str):
        super().__init__(message)
        self.backend = backend

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["backend"] = self.backend
        return data


class RelayError(AIGentError):
    """Raised by the realtime relay for unknown agents or bad commands."""

    code = "REALTIME_ERROR"
