"""
Custom Backend
==============

Adapts any callable into a provider. The handler receives the
ProviderRequest and may return (directly or via await):

- a ProviderResponse
- a dict shaped like ProviderResponse.to_dict() (content, function_call, usage)
- a plain string, taken as the content

Useful for in-house gateways, canned replies and tests.
"""

from typing import Any

from aigent.errors import AIGentError, ConfigurationError, ProviderError
from aigent.providers.base import ProviderConfig, describe_error
from aigent.types import Backend, FunctionCall, ProviderRequest, ProviderResponse, Usage
from aigent.utils.awaitables import call_maybe_async
from aigent.utils.logger import Logger

logger = Logger("Provider:custom")


class CustomProvider:
    """Backend that delegates to a caller-supplied handler."""

    backend = Backend.CUSTOM.value

    def __init__(self, config: ProviderConfig, transport: Any = None):
        if config.handler is None or not callable(config.handler):
            raise ConfigurationError("A callable handler is required for custom provider")
        self.config = config
        self.handler = config.handler

    def _normalize(self, result: Any) -> ProviderResponse:
        if isinstance(result, ProviderResponse):
            return result
        if isinstance(result, str):
            return ProviderResponse(content=result)
        if isinstance(result, dict):
            if not isinstance(result.get("content"), str):
                raise ProviderError("Custom handler returned no content", self.backend)
            function_call = result.get("function_call")
            usage = result.get("usage")
            return ProviderResponse(
                content=result["content"],
                function_call=FunctionCall.from_dict(function_call) if function_call else None,
                usage=Usage(**usage) if usage else None,
            )
        raise ProviderError(
            f"Custom handler returned unsupported type {type(result).__name__}",
            self.backend,
        )

    async def generate_response(self, request: ProviderRequest) -> ProviderResponse:
        try:
            result = await call_maybe_async(self.handler, request)
            return self._normalize(result)
        except ProviderError:
            raise
        except AIGentError as e:
            raise ProviderError(e.message, self.backend) from e
        except Exception as e:
            logger.error("Custom handler failed", e)
            raise ProviderError(describe_error(e), self.backend) from e
