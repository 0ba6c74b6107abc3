"""
Relay WebSocket Server
======================

A thin FastAPI front end over AgentRelay.

Protocol (JSON over /ws):
    → {"type": "create_agent", "agent_id": "s1", "agent_config": {...}, "provider_config": {...}}
    ← {"type": "agent_created", "agent_id": "s1", ...}

    → {"type": "send_message", "agent_id": "s1", "content": "Hello", "stream": true}
    ← {"type": "stream_chunk", "content": "Hel...", "is_complete": false, ...}

A connection joins the "room" of every agent id it sends a command for and
from then on receives all events about that agent, including those caused
by other connections. Malformed commands get an error event directly.
"""

from datetime import datetime, timezone

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from aigent.errors import AIGentError
from aigent.realtime.events import (
    COMMAND_MODELS,
    BaseEvent,
    ClearMemoryCommand,
    CommandType,
    CreateAgentCommand,
    ErrorEvent,
    ErrorType,
    GetMemoryCommand,
    SendMessageCommand,
)
from aigent.realtime.relay import AgentRelay
from aigent.utils.logger import Logger

logger = Logger("RelayServer")


def parse_command(data: dict):
    """
    Validate a raw command.

    Raises:
        ValueError: For unknown command types
        ValidationError: For malformed payloads
    """
    try:
        command_type = CommandType(data.get("type"))
    except ValueError:
        raise ValueError(f"Unknown command type: {data.get('type')!r}") from None
    return COMMAND_MODELS[command_type].model_validate({**data, "type": command_type})


async def dispatch(relay: AgentRelay, command) -> None:
    """Forward one validated command to the relay."""
    if isinstance(command, CreateAgentCommand):
        await relay.create_agent(command.agent_id, command.agent_config, command.provider_config)
    elif isinstance(command, SendMessageCommand):
        await relay.send_message(command.agent_id, command.content, stream=command.stream)
    elif isinstance(command, GetMemoryCommand):
        await relay.get_memory(command.agent_id)
    elif isinstance(command, ClearMemoryCommand):
        await relay.clear_memory(command.agent_id)


def create_app(relay: AgentRelay | None = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        relay: Relay to serve; a fresh one is created when omitted
    """
    app = FastAPI(title="AIGent Relay")
    app.state.relay = relay or AgentRelay()
    app.state.connections = 0

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "agents": len(app.state.relay.agent_ids()),
            "connections": app.state.connections,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.websocket("/ws")
    async def relay_websocket(websocket: WebSocket):
        relay: AgentRelay = app.state.relay
        joined: set[str] = set()

        async def send(event: BaseEvent) -> None:
            await websocket.send_json(event.model_dump(mode="json"))

        async def forward(event: BaseEvent) -> None:
            if event.agent_id in joined:
                await send(event)

        await websocket.accept()
        app.state.connections += 1
        relay.subscribe(forward)
        logger.info("Client connected")

        try:
            while True:
                data = await websocket.receive_json()

                try:
                    command = parse_command(data if isinstance(data, dict) else {})
                except (ValueError, ValidationError) as e:
                    await send(ErrorEvent(
                        agent_id=data.get("agent_id") if isinstance(data, dict) else None,
                        error_type=ErrorType.COMMAND,
                        code="INVALID_COMMAND",
                        message=str(e),
                    ))
                    continue

                joined.add(command.agent_id)
                try:
                    await dispatch(relay, command)
                except AIGentError:
                    # Already published as an error event to this room
                    continue
                except Exception as e:
                    logger.error(f"Error processing {command.type.value}", e)
                    await send(ErrorEvent(
                        agent_id=command.agent_id,
                        error_type=ErrorType.COMMAND,
                        code="INTERNAL_ERROR",
                        message=str(e),
                    ))

        except WebSocketDisconnect:
            logger.info("Client disconnected")
        except Exception as e:
            logger.error("WebSocket error", e)
        finally:
            relay.unsubscribe(forward)
            app.state.connections -= 1

    return app
