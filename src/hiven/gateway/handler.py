"""
gateway/handler.py — Gateway Event Handler

Subclass EventHandler and override the callbacks you care about; the rest
stay no-ops. Every callback receives the HivenClient that owns the session,
so handlers can answer through the REST API:

    class Echo(EventHandler):
        async def on_message(self, client, message):
            await client.send_message(message.room_id, message.content)

Callbacks are awaited one at a time in the order the server sent the
events. A slow callback delays every later event; fan out to your own tasks
if you need parallelism.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hiven.models import House, InitState, Message, TypingStart
from hiven.observability.logger import get_logger

if TYPE_CHECKING:
    from hiven.client import HivenClient

log = get_logger(__name__)


class EventHandler:
    """Base event handler. All callbacks default to no-ops."""

    async def on_connect(self, client: "HivenClient", event: InitState) -> None:
        pass

    async def on_house_join(self, client: "HivenClient", event: House) -> None:
        pass

    async def on_typing(self, client: "HivenClient", event: TypingStart) -> None:
        pass

    async def on_message(self, client: "HivenClient", event: Message) -> None:
        pass


class LoggingEventHandler(EventHandler):
    """Logs every event it receives. Used by the `hiven` command."""

    async def on_connect(self, client: "HivenClient", event: InitState) -> None:
        log.info(
            "event.connected",
            user_id=event.user.id if event.user else None,
            username=event.user.username if event.user else None,
            houses=len(event.house_memberships),
        )

    async def on_house_join(self, client: "HivenClient", event: House) -> None:
        log.info("event.house_join", house_id=event.id, name=event.name, rooms=len(event.rooms))

    async def on_typing(self, client: "HivenClient", event: TypingStart) -> None:
        log.debug("event.typing", author_id=event.author_id, room_id=event.room_id)

    async def on_message(self, client: "HivenClient", event: Message) -> None:
        log.info(
            "event.message",
            message_id=event.id,
            room_id=event.room_id,
            author_id=event.author_id,
            content=event.content,
        )
