"""
Provider Abstraction
====================

Interchangeable LLM backends behind one capability, generate_response().

- openai: OpenAI chat completions (AsyncOpenAI)
- claude: Anthropic Messages API (httpx)
- llama: Ollama chat API (httpx)
- custom: any caller-supplied handler
"""

from aigent.providers.base import LLMProvider, ProviderConfig
from aigent.providers.claude import ClaudeProvider
from aigent.providers.custom import CustomProvider
from aigent.providers.factory import create_provider, resolve_backend, validate_provider_config
from aigent.providers.llama import LlamaProvider
from aigent.providers.openai_provider import OpenAIProvider

__all__ = [
    "LLMProvider",
    "ProviderConfig",
    "OpenAIProvider",
    "ClaudeProvider",
    "LlamaProvider",
    "CustomProvider",
    "create_provider",
    "resolve_backend",
    "validate_provider_config",
]
