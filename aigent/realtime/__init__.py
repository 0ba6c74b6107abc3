"""
Realtime Relay
==============

Exposes agents over a websocket: one Agent per session id, operations
forwarded 1:1, results delivered as events.

- AgentRelay: session registry and event fan-out
- create_app: FastAPI application serving the relay
"""

from aigent.realtime.relay import AgentRelay
from aigent.realtime.server import create_app

__all__ = ["AgentRelay", "create_app"]
