"""
gateway/protocol.py — Hiven Gateway Frame Protocol

Typed frames for all client↔server gateway traffic.
Every frame is JSON of the form {"op": <int>, "d": <payload>}:

    op 0  Event      server → client   {"event": <tag>, "data": {...}}
    op 1  Hello      server → client   {"heartbeat_interval": <ms>}
    op 2  Login      client → server   {"token": <str>}
    op 3  Heartbeat  client → server   payload omitted

parse_frame() raises FrameParseError for anything it does not model —
malformed JSON, unknown opcodes, unknown event tags, payloads that fail
validation. Callers on the receive path drop such frames instead of
failing, so the server can add opcodes without breaking older clients.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, ClassVar, Union

from pydantic import ValidationError

from hiven.models import HivenModel, House, InitState, Message, TypingStart


# ─────────────────────────────────────────────────────────────────────────────
# Opcodes and event tags
# ─────────────────────────────────────────────────────────────────────────────

class OpCode(IntEnum):
    EVENT     = 0
    HELLO     = 1
    LOGIN     = 2
    HEARTBEAT = 3


class EventType(str, Enum):
    """Event tags the client knows how to decode."""

    INIT_STATE     = "INIT_STATE"
    HOUSE_JOIN     = "HOUSE_JOIN"
    TYPING_START   = "TYPING_START"
    MESSAGE_CREATE = "MESSAGE_CREATE"


EVENT_MODELS: dict[EventType, type[HivenModel]] = {
    EventType.INIT_STATE:     InitState,
    EventType.HOUSE_JOIN:     House,
    EventType.TYPING_START:   TypingStart,
    EventType.MESSAGE_CREATE: Message,
}


class FrameParseError(ValueError):
    """A text frame did not decode into any known Frame."""


# ─────────────────────────────────────────────────────────────────────────────
# Frames
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Hello:
    op: ClassVar[OpCode] = OpCode.HELLO
    heartbeat_interval_ms: int

    def payload(self) -> dict[str, Any]:
        return {"heartbeat_interval": self.heartbeat_interval_ms}


@dataclass(frozen=True)
class Login:
    op: ClassVar[OpCode] = OpCode.LOGIN
    token: str = field(repr=False)

    def payload(self) -> dict[str, Any]:
        return {"token": self.token}


@dataclass(frozen=True)
class Heartbeat:
    op: ClassVar[OpCode] = OpCode.HEARTBEAT

    def payload(self) -> None:
        return None


@dataclass(frozen=True)
class Event:
    op: ClassVar[OpCode] = OpCode.EVENT
    type: EventType
    data: HivenModel

    def payload(self) -> dict[str, Any]:
        return {
            "event": self.type.value,
            "data": self.data.model_dump(mode="json", exclude_none=True),
        }


Frame = Union[Hello, Login, Heartbeat, Event]


# ─────────────────────────────────────────────────────────────────────────────
# Codec
# ─────────────────────────────────────────────────────────────────────────────

def encode_frame(frame: Frame) -> str:
    """Serialize a frame to its JSON text form. Heartbeat omits `d`."""
    d: dict[str, Any] = {"op": int(frame.op)}
    payload = frame.payload()
    if payload is not None:
        d["d"] = payload
    return json.dumps(d)


def _parse_hello(d: Any) -> Hello:
    interval = d.get("heartbeat_interval") if isinstance(d, dict) else None
    if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
        raise FrameParseError(f"hello without a usable heartbeat_interval: {d!r}")
    return Hello(heartbeat_interval_ms=interval)


def _parse_login(d: Any) -> Login:
    token = d.get("token") if isinstance(d, dict) else None
    if not isinstance(token, str):
        raise FrameParseError("login without a token")
    return Login(token=token)


def _parse_heartbeat(d: Any) -> Heartbeat:
    if d is not None:
        raise FrameParseError(f"heartbeat with unexpected payload: {d!r}")
    return Heartbeat()


def _parse_event(d: Any) -> Event:
    if not isinstance(d, dict):
        raise FrameParseError(f"event payload is not an object: {d!r}")
    tag = d.get("event")
    try:
        event_type = EventType(tag)
    except ValueError:
        raise FrameParseError(f"unknown event tag: {tag!r}") from None
    try:
        data = EVENT_MODELS[event_type].model_validate(d.get("data") or {})
    except ValidationError as e:
        raise FrameParseError(f"invalid {event_type.value} payload: {e}") from e
    return Event(type=event_type, data=data)


_PARSERS = {
    OpCode.EVENT:     _parse_event,
    OpCode.HELLO:     _parse_hello,
    OpCode.LOGIN:     _parse_login,
    OpCode.HEARTBEAT: _parse_heartbeat,
}


def parse_frame(raw: str) -> Frame:
    """Parse a JSON text frame. Raises FrameParseError if it is not a known Frame."""
    try:
        d = json.loads(raw)
    except json.JSONDecodeError as e:
        raise FrameParseError(f"invalid JSON: {e}") from e
    if not isinstance(d, dict):
        raise FrameParseError("frame is not a JSON object")

    op = d.get("op")
    if isinstance(op, bool) or not isinstance(op, int):
        raise FrameParseError(f"missing or non-integer op: {op!r}")
    try:
        opcode = OpCode(op)
    except ValueError:
        raise FrameParseError(f"unknown opcode: {op}") from None
    return _PARSERS[opcode](d.get("d"))


# ─────────────────────────────────────────────────────────────────────────────
# Factory helpers
# ─────────────────────────────────────────────────────────────────────────────

def make_event(event_type: EventType | str, data: dict[str, Any]) -> Event:
    """Build an Event frame from a tag and a raw data object."""
    event_type = EventType(event_type)
    return Event(type=event_type, data=EVENT_MODELS[event_type].model_validate(data))
