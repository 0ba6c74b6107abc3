"""
AIGent - Conversational Agent Orchestration
===========================================

Agents that keep a bounded conversation, talk to interchangeable LLM
backends, and resolve the functions those backends ask for.

This package provides:
- Agent: the orchestrator (memory, turns, rollback, function calls)
- Providers for OpenAI, Claude, Llama (Ollama) and custom handlers
- Tools callable directly by the application
- A websocket relay serving agents to remote clients

Quick start:
    from aigent import Agent, AgentConfig, ProviderConfig

    agent = Agent(
        AgentConfig(name="bot", system_prompt="Be helpful.",
                    backend="openai", model="gpt-4o-mini"),
        ProviderConfig(api_key="sk-..."),
    )
    response = await agent.send_message("Hello!")
"""

from aigent.agent import Agent
from aigent.errors import AIGentError, ConfigurationError, ProviderError, RelayError
from aigent.providers import LLMProvider, ProviderConfig, create_provider, validate_provider_config
from aigent.types import (
    AgentConfig,
    Backend,
    FunctionCall,
    FunctionDefinition,
    MemoryPolicy,
    Message,
    ProviderRequest,
    ProviderResponse,
    Role,
    StreamChunk,
    StreamingPolicy,
    Tool,
    Usage,
)

__version__ = "1.0.0"

__all__ = [
    "Agent",
    "AgentConfig",
    "AIGentError",
    "Backend",
    "ConfigurationError",
    "FunctionCall",
    "FunctionDefinition",
    "LLMProvider",
    "MemoryPolicy",
    "Message",
    "ProviderConfig",
    "ProviderError",
    "ProviderRequest",
    "ProviderResponse",
    "RelayError",
    "Role",
    "StreamChunk",
    "StreamingPolicy",
    "Tool",
    "Usage",
    "create_provider",
    "validate_provider_config",
]
