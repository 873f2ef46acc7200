"""
tests/unit/test_transport.py — WebSocket Transport Tests

The websocket connection is an AsyncMock; only the mapping from the
websockets API to TransportMessage / SocketCloseError is under test.
"""

from unittest.mock import AsyncMock, patch

import pytest
from websockets.exceptions import ConnectionClosed, InvalidURI
from websockets.frames import Close, CloseCode

from hiven.exceptions import CloseReason, GatewayConnectError, SocketCloseError
from hiven.gateway.transport import (
    MessageKind,
    TransportMessage,
    WebSocketTransport,
    close_reason_from_frame,
)


def _ws(**kwargs) -> AsyncMock:
    ws = AsyncMock()
    for name, value in kwargs.items():
        getattr(ws, name).side_effect = value
    return ws


class TestCloseReason:
    def test_none_frame(self):
        assert close_reason_from_frame(None) is None

    def test_no_status_code(self):
        assert close_reason_from_frame(Close(CloseCode.NO_STATUS_RCVD, "")) is None

    def test_code_and_reason(self):
        reason = close_reason_from_frame(Close(4001, "invalid token"))
        assert reason == CloseReason(code=4001, reason="invalid token")
        assert str(reason) == "4001 invalid token"


class TestRecv:
    @pytest.mark.asyncio
    async def test_text(self):
        transport = WebSocketTransport(_ws(recv=['{"op": 3}']))
        assert await transport.recv() == TransportMessage.text('{"op": 3}')

    @pytest.mark.asyncio
    async def test_binary(self):
        transport = WebSocketTransport(_ws(recv=[b"\x00\x01"]))
        message = await transport.recv()
        assert message.kind is MessageKind.BINARY
        assert message.data == b"\x00\x01"

    @pytest.mark.asyncio
    async def test_close_frame(self):
        closed = ConnectionClosed(Close(4000, "bye"), Close(4000, "bye"), rcvd_then_sent=True)
        transport = WebSocketTransport(_ws(recv=closed))
        message = await transport.recv()
        assert message.kind is MessageKind.CLOSE
        assert message.close_reason == CloseReason(4000, "bye")

    @pytest.mark.asyncio
    async def test_close_frame_received_without_reply(self):
        transport = WebSocketTransport(_ws(recv=ConnectionClosed(Close(4000, "bye"), None)))
        message = await transport.recv()
        assert message.close_reason == CloseReason(4000, "bye")

    @pytest.mark.asyncio
    async def test_close_frame_without_status(self):
        closed = ConnectionClosed(Close(CloseCode.NO_STATUS_RCVD, ""), None)
        transport = WebSocketTransport(_ws(recv=closed))
        message = await transport.recv()
        assert message.kind is MessageKind.CLOSE
        assert message.close_reason is None

    @pytest.mark.asyncio
    async def test_dropped_connection_is_end_of_stream(self):
        transport = WebSocketTransport(_ws(recv=ConnectionClosed(None, None)))
        assert await transport.recv() is None


class TestSend:
    @pytest.mark.asyncio
    async def test_writes_text(self):
        ws = _ws()
        await WebSocketTransport(ws).send('{"op": 3}')
        ws.send.assert_awaited_once_with('{"op": 3}')

    @pytest.mark.asyncio
    async def test_send_after_peer_close(self):
        transport = WebSocketTransport(
            _ws(send=ConnectionClosed(Close(4002, "gone"), None))
        )
        with pytest.raises(SocketCloseError) as exc_info:
            await transport.send("x")
        assert exc_info.value.code == 4002

    @pytest.mark.asyncio
    async def test_close(self):
        ws = _ws()
        await WebSocketTransport(ws).close()
        ws.close.assert_awaited_once()


class TestConnect:
    @pytest.mark.asyncio
    async def test_connect_passes_url(self):
        ws = _ws()
        with patch("hiven.gateway.transport.websockets.connect", AsyncMock(return_value=ws)) as connect:
            transport = await WebSocketTransport.connect("wss://gateway.test/socket")
        assert connect.await_args.args == ("wss://gateway.test/socket",)
        assert connect.await_args.kwargs["ping_interval"] is None
        await transport.close()
        ws.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_os_error_becomes_connect_error(self):
        failing = AsyncMock(side_effect=ConnectionRefusedError("refused"))
        with patch("hiven.gateway.transport.websockets.connect", failing):
            with pytest.raises(GatewayConnectError, match="gateway.test"):
                await WebSocketTransport.connect("wss://gateway.test/socket")

    @pytest.mark.asyncio
    async def test_websocket_error_becomes_connect_error(self):
        failing = AsyncMock(side_effect=InvalidURI("nope", "not a websocket URI"))
        with patch("hiven.gateway.transport.websockets.connect", failing):
            with pytest.raises(GatewayConnectError):
                await WebSocketTransport.connect("nope")
