"""
hiven — async client for the Hiven chat service.

    from hiven import HivenClient, EventHandler

    class Echo(EventHandler):
        async def on_message(self, client, message):
            await client.send_message(message.room_id, message.content)

    async with HivenClient(token) as client:
        await client.start_gateway(Echo())
"""

from hiven.client import HivenClient
from hiven.exceptions import (
    CloseReason,
    ExpectationFailedError,
    GatewayConnectError,
    GatewayError,
    HivenError,
    HTTPConnectionError,
    HTTPError,
    HTTPRequestError,
    InternalChannelError,
    SocketCloseError,
)
from hiven.gateway import EventHandler, GatewaySession, LoggingEventHandler
from hiven.models import House, InitState, Message, Room, TypingStart, User

__version__ = "0.1.0"

__all__ = [
    "HivenClient",
    "EventHandler",
    "LoggingEventHandler",
    "GatewaySession",
    "CloseReason",
    "HivenError",
    "GatewayError",
    "GatewayConnectError",
    "ExpectationFailedError",
    "SocketCloseError",
    "InternalChannelError",
    "HTTPError",
    "HTTPConnectionError",
    "HTTPRequestError",
    "House",
    "InitState",
    "Message",
    "Room",
    "TypingStart",
    "User",
]
