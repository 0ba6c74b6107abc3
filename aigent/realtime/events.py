"""
Relay Event Schema
==================

Pydantic models for everything that crosses the websocket.

Inbound commands (client → server), selected by "type":
    create_agent, send_message, get_memory, clear_memory

Outbound events (server → client):
    agent_created, message_response, stream_chunk,
    memory_response, memory_cleared, error

Field names are snake_case on the wire; camelCase (agentId, agentConfig,
providerConfig) is accepted on input for JavaScript clients.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CommandType(str, Enum):
    CREATE_AGENT = "create_agent"
    SEND_MESSAGE = "send_message"
    GET_MEMORY = "get_memory"
    CLEAR_MEMORY = "clear_memory"


class EventType(str, Enum):
    AGENT_CREATED = "agent_created"
    MESSAGE_RESPONSE = "message_response"
    STREAM_CHUNK = "stream_chunk"
    MEMORY_RESPONSE = "memory_response"
    MEMORY_CLEARED = "memory_cleared"
    ERROR = "error"


class ErrorType(str, Enum):
    AGENT_CREATION = "agent_creation_error"
    MESSAGE = "message_error"
    MEMORY = "memory_error"
    COMMAND = "command_error"


# ==============================================================================
# Commands
# ==============================================================================

class BaseCommand(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: CommandType
    agent_id: str = Field(alias="agentId")


class CreateAgentCommand(BaseCommand):
    type: Literal[CommandType.CREATE_AGENT] = CommandType.CREATE_AGENT
    agent_config: Dict[str, Any] = Field(alias="agentConfig")
    provider_config: Optional[Dict[str, Any]] = Field(default=None, alias="providerConfig")


class SendMessageCommand(BaseCommand):
    type: Literal[CommandType.SEND_MESSAGE] = CommandType.SEND_MESSAGE
    content: str
    stream: bool = False


class GetMemoryCommand(BaseCommand):
    type: Literal[CommandType.GET_MEMORY] = CommandType.GET_MEMORY


class ClearMemoryCommand(BaseCommand):
    type: Literal[CommandType.CLEAR_MEMORY] = CommandType.CLEAR_MEMORY


COMMAND_MODELS = {
    CommandType.CREATE_AGENT: CreateAgentCommand,
    CommandType.SEND_MESSAGE: SendMessageCommand,
    CommandType.GET_MEMORY: GetMemoryCommand,
    CommandType.CLEAR_MEMORY: ClearMemoryCommand,
}


# ==============================================================================
# Events
# ==============================================================================

class BaseEvent(BaseModel):
    """Base model for every outbound event."""
    type: EventType
    agent_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=_now)


class AgentCreatedEvent(BaseEvent):
    type: Literal[EventType.AGENT_CREATED] = EventType.AGENT_CREATED
    status: str = "success"


class MessageResponseEvent(BaseEvent):
    type: Literal[EventType.MESSAGE_RESPONSE] = EventType.MESSAGE_RESPONSE
    content: str
    function_call: Optional[Dict[str, Any]] = None
    usage: Optional[Dict[str, int]] = None


class StreamChunkEvent(BaseEvent):
    type: Literal[EventType.STREAM_CHUNK] = EventType.STREAM_CHUNK
    content: str
    is_complete: bool
    usage: Optional[Dict[str, int]] = None


class MemoryResponseEvent(BaseEvent):
    type: Literal[EventType.MEMORY_RESPONSE] = EventType.MEMORY_RESPONSE
    memory: List[Dict[str, Any]]


class MemoryClearedEvent(BaseEvent):
    type: Literal[EventType.MEMORY_CLEARED] = EventType.MEMORY_CLEARED


class ErrorEvent(BaseEvent):
    type: Literal[EventType.ERROR] = EventType.ERROR
    error_type: ErrorType
    code: str
    message: str
