"""
Gateway test fixtures. See gateway_fakes.py for the scripted transport.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import pytest

from gateway_fakes import RecordingHandler, ScriptedTransport, SessionRun
from hiven.client import HivenClient
from hiven.exceptions import HivenError
from hiven.gateway.handler import EventHandler
from hiven.gateway.session import GatewaySession


@pytest.fixture
def client():
    return HivenClient("T", gateway_host="gateway.test")


@pytest.fixture
def recorder():
    return RecordingHandler()


@pytest.fixture
def run_session(client):
    """Run one GatewaySession over a ScriptedTransport; returns a SessionRun."""

    async def _run(
        script: list[Any],
        handler: Optional[EventHandler] = None,
        queue_capacity: int = 5,
        timeout: float = 5.0,
    ) -> SessionRun:
        transport = ScriptedTransport(script)

        async def connect(url: str) -> ScriptedTransport:
            transport.url = url
            return transport

        session = GatewaySession(client, handler, queue_capacity=queue_capacity, connect=connect)
        error: Optional[BaseException] = None
        try:
            await asyncio.wait_for(session.run(), timeout=timeout)
        except HivenError as e:
            error = e
        return SessionRun(session, transport, error)

    return _run
