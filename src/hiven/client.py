"""
client.py — Hiven Client Handle

HivenClient bundles the session token, the two hosts and the REST client.
It is what event handlers receive with every callback.

Usage:
    async with HivenClient(token) as client:
        await client.start_gateway(MyHandler())
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import httpx

from hiven.gateway.handler import EventHandler
from hiven.gateway.session import DEFAULT_QUEUE_CAPACITY, Connect, GatewaySession
from hiven.rest import DEFAULT_API_HOST, RestClient, RoomId

if TYPE_CHECKING:
    from hiven.config.settings import Settings

DEFAULT_GATEWAY_HOST = "swarm-dev.hiven.io"


class HivenClient:
    def __init__(
        self,
        token: str,
        *,
        api_host: str = DEFAULT_API_HOST,
        gateway_host: str = DEFAULT_GATEWAY_HOST,
        queue_capacity: int = DEFAULT_QUEUE_CAPACITY,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if not token:
            raise ValueError("a session token is required")
        self._token = token
        self._api_host = api_host
        self._gateway_host = gateway_host
        self._queue_capacity = queue_capacity
        self.rest = RestClient(token, api_host, http_client=http_client, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: "Settings", **kwargs) -> "HivenClient":
        return cls(
            settings.token or "",
            api_host=settings.api.host,
            gateway_host=settings.gateway.host,
            queue_capacity=settings.gateway.queue_capacity,
            timeout=settings.api.timeout_seconds,
            **kwargs,
        )

    async def __aenter__(self) -> "HivenClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    @property
    def token(self) -> str:
        return self._token

    @property
    def gateway_url(self) -> str:
        return f"wss://{self._gateway_host}/socket"

    @property
    def api_url(self) -> str:
        return self.rest.base_url

    async def aclose(self) -> None:
        await self.rest.aclose()

    async def start_gateway(
        self,
        handler: Optional[EventHandler] = None,
        *,
        connect: Optional[Connect] = None,
    ) -> None:
        """Run one gateway session to completion. See GatewaySession.run()."""
        session = GatewaySession(
            self, handler, queue_capacity=self._queue_capacity, connect=connect
        )
        await session.run()

    async def send_message(self, room_id: RoomId, content: str) -> None:
        """Send `content` to the room `room_id`."""
        await self.rest.send_message(room_id, content)

    def __repr__(self) -> str:
        return f"<HivenClient api={self._api_host} gateway={self._gateway_host}>"
