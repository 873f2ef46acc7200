"""
gateway/transport.py — Gateway Transport

The socket pump talks to a Transport, not to a websocket directly:

    recv()   → next TransportMessage, or None when the stream ended
               without a close frame
    send()   → write one text frame; raises SocketCloseError if the peer
               already closed
    close()  → close cleanly (idempotent)

WebSocketTransport adapts a `websockets` client connection. Ping/pong are
answered by the library and never surface here, so the kinds a pump can see
are text, binary and close.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Union

import websockets
from websockets.asyncio.client import ClientConnection
from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.frames import Close, CloseCode

from hiven.exceptions import CloseReason, GatewayConnectError, SocketCloseError
from hiven.observability.logger import get_logger

log = get_logger(__name__)


class MessageKind(str, Enum):
    TEXT   = "text"
    BINARY = "binary"
    CLOSE  = "close"


@dataclass(frozen=True)
class TransportMessage:
    kind: MessageKind
    data: Union[str, bytes, None] = None
    close_reason: Optional[CloseReason] = None

    @classmethod
    def text(cls, data: str) -> "TransportMessage":
        return cls(MessageKind.TEXT, data)

    @classmethod
    def binary(cls, data: bytes) -> "TransportMessage":
        return cls(MessageKind.BINARY, data)

    @classmethod
    def closed(cls, close_reason: Optional[CloseReason] = None) -> "TransportMessage":
        return cls(MessageKind.CLOSE, close_reason=close_reason)


class Transport(Protocol):
    async def recv(self) -> Optional[TransportMessage]: ...

    async def send(self, data: str) -> None: ...

    async def close(self) -> None: ...


def close_reason_from_frame(frame: Optional[Close]) -> Optional[CloseReason]:
    """Map a websockets Close frame to a CloseReason; a frame without a status code maps to None."""
    if frame is None or frame.code == CloseCode.NO_STATUS_RCVD:
        return None
    return CloseReason(code=int(frame.code), reason=frame.reason)


class WebSocketTransport:
    """Transport over a `websockets` client connection."""

    def __init__(self, ws: ClientConnection):
        self._ws = ws

    @classmethod
    async def connect(cls, url: str) -> "WebSocketTransport":
        try:
            # Keepalive is the gateway heartbeat's job, not websocket pings.
            ws = await websockets.connect(url, max_size=2**22, ping_interval=None)
        except (OSError, WebSocketException) as e:
            raise GatewayConnectError(f"Cannot open gateway socket at {url}: {e}") from e
        log.info("gateway.transport.connected", url=url)
        return cls(ws)

    async def recv(self) -> Optional[TransportMessage]:
        try:
            data = await self._ws.recv()
        except ConnectionClosed as e:
            if e.rcvd is None:
                log.debug("gateway.transport.eof", sent=str(e.sent) if e.sent else None)
                return None
            return TransportMessage.closed(close_reason_from_frame(e.rcvd))
        if isinstance(data, str):
            return TransportMessage.text(data)
        return TransportMessage.binary(data)

    async def send(self, data: str) -> None:
        try:
            await self._ws.send(data)
        except ConnectionClosed as e:
            raise SocketCloseError(close_reason_from_frame(e.rcvd)) from e

    async def close(self) -> None:
        await self._ws.close()
        log.info("gateway.transport.closed")
