"""
gateway/ — Hiven WebSocket Gateway

One GatewaySession per connection: hello/login handshake, heartbeat ticker,
and in-order delivery of server events to an EventHandler.
"""

from hiven.gateway.handler import EventHandler, LoggingEventHandler
from hiven.gateway.protocol import Event, EventType, Frame, Heartbeat, Hello, Login, OpCode
from hiven.gateway.session import SHUTDOWN, GatewaySession, SessionState
from hiven.gateway.transport import Transport, TransportMessage, WebSocketTransport

__all__ = [
    "EventHandler",
    "LoggingEventHandler",
    "Event",
    "EventType",
    "Frame",
    "Heartbeat",
    "Hello",
    "Login",
    "OpCode",
    "SHUTDOWN",
    "GatewaySession",
    "SessionState",
    "Transport",
    "TransportMessage",
    "WebSocketTransport",
]
