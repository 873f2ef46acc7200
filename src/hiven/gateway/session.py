"""
gateway/session.py — Gateway Session Manager

Owns one authenticated gateway socket from connect to termination.

    transport ⇄ socket pump ⇄ ingress  → dispatcher → EventHandler callbacks
                            ⇄ egress   ← dispatcher (Login), Heartbeat ticker

Two long-lived tasks share nothing but two bounded anyio memory streams:

  socket pump  — races transport reads against egress items. Text frames
                 are parsed and pushed on ingress (unparsable ones are
                 dropped); a close frame, a non-text frame or the end of the
                 stream ends the pump with an error. Egress frames are
                 serialized and written; SHUTDOWN closes the socket.
  dispatcher   — runs the handshake (Hello → Login → heartbeat ticker) and
                 then awaits one handler callback per Event, in order.

Each side closes its stream ends on the way out, so the partner task
always sees end-of-stream instead of hanging. run() reports the
dispatcher's error in preference to the pump's; the pump's error is
usually just a consequence. The one exception is a dispatcher that only
failed because the pump was already gone (InternalChannelError): then the
pump's error is the cause and is reported instead.

Usage:
    session = GatewaySession(client, MyHandler())
    await session.run()
"""

from __future__ import annotations

import asyncio
import uuid
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Union

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from hiven.exceptions import ExpectationFailedError, InternalChannelError, SocketCloseError
from hiven.gateway.handler import EventHandler
from hiven.gateway.heartbeat import Heartbeat
from hiven.gateway.protocol import (
    Event,
    EventType,
    Frame,
    FrameParseError,
    Hello,
    Login,
    encode_frame,
    parse_frame,
)
from hiven.gateway.transport import MessageKind, Transport, TransportMessage, WebSocketTransport
from hiven.observability.logger import get_logger, session_context

if TYPE_CHECKING:
    from hiven.client import HivenClient

log = get_logger(__name__)

DEFAULT_QUEUE_CAPACITY = 5

_CALLBACKS: dict[EventType, str] = {
    EventType.INIT_STATE:     "on_connect",
    EventType.HOUSE_JOIN:     "on_house_join",
    EventType.TYPING_START:   "on_typing",
    EventType.MESSAGE_CREATE: "on_message",
}

_CHANNEL_GONE = (anyio.BrokenResourceError, anyio.ClosedResourceError)


class _Shutdown:
    def __repr__(self) -> str:
        return "SHUTDOWN"


# Egress sentinel: ask the pump to close the socket and stop.
SHUTDOWN = _Shutdown()

EgressItem = Union[Frame, _Shutdown]
Connect = Callable[[str], Awaitable[Transport]]


class SessionState(str, Enum):
    AWAITING_HELLO  = "awaiting_hello"
    AWAITING_EVENTS = "awaiting_events"
    TERMINATED      = "terminated"


class GatewaySession:
    """
    One gateway connection lifetime. Not reusable: call run() once.

    The client is only held to be handed to handler callbacks and to read
    the token and gateway URL from.
    """

    def __init__(
        self,
        client: "HivenClient",
        handler: Optional[EventHandler] = None,
        *,
        queue_capacity: int = DEFAULT_QUEUE_CAPACITY,
        connect: Optional[Connect] = None,
    ):
        if queue_capacity < 1:
            raise ValueError("queue_capacity must be >= 1")
        self.id = str(uuid.uuid4())[:8]
        self.state = SessionState.AWAITING_HELLO
        self.heartbeat: Optional[Heartbeat] = None
        self._client = client
        self._handler = handler or EventHandler()
        self._queue_capacity = queue_capacity
        self._connect = connect or WebSocketTransport.connect

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    async def run(self) -> None:
        """
        Run the session until it terminates.

        Returns normally on a clean shutdown; otherwise raises the first
        GatewayError seen, the dispatcher's before the pump's.
        """
        with session_context(self.id):
            url = self._client.gateway_url
            log.info("gateway.session.start", url=url)
            transport = await self._connect(url)

            ingress_tx, ingress_rx = anyio.create_memory_object_stream(
                max_buffer_size=self._queue_capacity
            )
            egress_tx, egress_rx = anyio.create_memory_object_stream(
                max_buffer_size=self._queue_capacity
            )

            pump = asyncio.create_task(
                self._pump(transport, ingress_tx, egress_rx),
                name=f"hiven-pump-{self.id}",
            )
            dispatcher = asyncio.create_task(
                self._dispatch(ingress_rx, egress_tx),
                name=f"hiven-dispatch-{self.id}",
            )
            pump_result, dispatch_result = await asyncio.gather(
                pump, dispatcher, return_exceptions=True
            )

            errors = [
                r for r in (dispatch_result, pump_result) if isinstance(r, BaseException)
            ]
            # A dead pipe only reports that the partner already failed; the
            # pump's error is the cause. Deliberate, pinned by
            # test_close_right_after_hello_reports_the_close.
            if len(errors) == 2 and isinstance(errors[0], InternalChannelError):
                errors.reverse()
            if errors:
                log.info(
                    "gateway.session.ended",
                    error=str(errors[0]),
                    error_type=type(errors[0]).__name__,
                )
                raise errors[0]
            log.info("gateway.session.ended")

    # ─────────────────────────────────────────────────────────────────────────
    # Socket pump
    # ─────────────────────────────────────────────────────────────────────────

    async def _pump(
        self,
        transport: Transport,
        ingress: MemoryObjectSendStream,
        egress: MemoryObjectReceiveStream,
    ) -> None:
        incoming: Optional[asyncio.Future] = None
        outgoing: Optional[asyncio.Future] = None
        try:
            while True:
                # A pending read that lost the race stays armed for the next
                # round, so no message is ever dropped between iterations.
                if incoming is None:
                    incoming = asyncio.ensure_future(transport.recv())
                if outgoing is None:
                    outgoing = asyncio.ensure_future(_next_egress(egress))

                done, _ = await asyncio.wait(
                    {incoming, outgoing}, return_when=asyncio.FIRST_COMPLETED
                )

                if incoming in done:
                    message = incoming.result()
                    incoming = None
                    await self._receive(message, ingress)

                if outgoing in done:
                    item = outgoing.result()
                    outgoing = None
                    if item is SHUTDOWN:
                        log.debug("gateway.pump.shutdown")
                        return
                    await transport.send(encode_frame(item))
                    log.debug("gateway.frame.sent", op=int(item.op))
        finally:
            for pending in (incoming, outgoing):
                if pending is not None:
                    pending.cancel()
            ingress.close()
            egress.close()
            await transport.close()

    async def _receive(
        self, message: Optional[TransportMessage], ingress: MemoryObjectSendStream
    ) -> None:
        if message is None:
            raise ExpectationFailedError("text or close", "end of stream")

        if message.kind is MessageKind.CLOSE:
            raise SocketCloseError(message.close_reason)

        if message.kind is not MessageKind.TEXT:
            size = len(message.data) if message.data is not None else 0
            raise ExpectationFailedError(
                "text or close", f"{message.kind.value} frame ({size} bytes)"
            )

        try:
            frame = parse_frame(message.data)
        except FrameParseError as e:
            log.debug("gateway.frame.dropped", reason=str(e))
            return

        try:
            await ingress.send(frame)
        except _CHANNEL_GONE as e:
            raise InternalChannelError("ingress") from e

    # ─────────────────────────────────────────────────────────────────────────
    # Dispatcher
    # ─────────────────────────────────────────────────────────────────────────

    async def _dispatch(
        self,
        ingress: MemoryObjectReceiveStream,
        egress: MemoryObjectSendStream,
    ) -> None:
        stop = asyncio.Event()
        ticker: Optional[asyncio.Task] = None
        try:
            frame = await _next_frame(ingress)
            if frame is None:
                log.info("gateway.dispatch.closed_before_hello")
                return
            if not isinstance(frame, Hello):
                raise ExpectationFailedError("Hello", frame)

            log.info("gateway.hello", heartbeat_interval_ms=frame.heartbeat_interval_ms)
            # Login goes on egress before the ticker exists, so it is always
            # written ahead of the first heartbeat.
            try:
                await egress.send(Login(token=self._client.token))
            except _CHANNEL_GONE as e:
                raise InternalChannelError("egress") from e

            self.heartbeat = Heartbeat(
                egress.clone(), frame.heartbeat_interval_ms / 1000, stop
            )
            ticker = asyncio.create_task(
                self.heartbeat.run(), name=f"hiven-heartbeat-{self.id}"
            )
            self.state = SessionState.AWAITING_EVENTS

            while True:
                frame = await _next_frame(ingress)
                if frame is None:
                    log.info("gateway.dispatch.ingress_closed")
                    return
                if not isinstance(frame, Event):
                    raise ExpectationFailedError("event", frame)
                await self._deliver(frame)
        finally:
            self.state = SessionState.TERMINATED
            ingress.close()
            stop.set()
            try:
                egress.send_nowait(SHUTDOWN)
            except (anyio.WouldBlock, *_CHANNEL_GONE):
                pass
            egress.close()
            if ticker is not None:
                await ticker

    async def _deliver(self, event: Event) -> None:
        callback = getattr(self._handler, _CALLBACKS[event.type])
        log.debug("gateway.event", event_type=event.type.value)
        await callback(self._client, event.data)


async def _next_egress(egress: MemoryObjectReceiveStream) -> EgressItem:
    """Next egress item; end-of-stream reads as SHUTDOWN."""
    try:
        return await egress.receive()
    except anyio.EndOfStream:
        return SHUTDOWN


async def _next_frame(ingress: MemoryObjectReceiveStream) -> Optional[Frame]:
    try:
        return await ingress.receive()
    except anyio.EndOfStream:
        return None
