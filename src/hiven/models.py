"""
models.py — Hiven Event Payload Models

Typed views over the `data` object of gateway events. The server adds
fields freely, so every model keeps unknown keys (extra="allow") instead of
rejecting them; only the fields the client relies on are declared.

Snowflake ids stay strings on the wire models. Numeric ids sent by older
servers are coerced to strings.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class HivenModel(BaseModel):
    """Base for all payload models."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class User(HivenModel):
    id: str
    username: Optional[str] = None
    name: Optional[str] = None
    icon: Optional[str] = None
    header: Optional[str] = None
    bot: Optional[bool] = None


class Room(HivenModel):
    id: str
    name: Optional[str] = None
    house_id: Optional[str] = None
    type: Optional[int] = None
    description: Optional[str] = None
    emoji: Optional[Any] = None
    last_message_id: Optional[str] = None


class House(HivenModel):
    id: str
    name: Optional[str] = None
    owner_id: Optional[str] = None
    icon: Optional[str] = None
    rooms: list[Room] = Field(default_factory=list)
    members: list[dict[str, Any]] = Field(default_factory=list)


class Message(HivenModel):
    id: str
    content: Optional[str] = None
    room_id: Optional[str] = None
    house_id: Optional[str] = None
    author_id: Optional[str] = None
    author: Optional[User] = None
    timestamp: Optional[Union[int, str]] = None
    mentions: list[User] = Field(default_factory=list)


class TypingStart(HivenModel):
    author_id: str
    room_id: Optional[str] = None
    house_id: Optional[str] = None
    timestamp: Optional[Union[int, str]] = None


class InitState(HivenModel):
    """First event after login: who we are and where we are."""

    user: Optional[User] = None
    house_memberships: dict[str, Any] = Field(default_factory=dict)
    private_rooms: list[Room] = Field(default_factory=list)
    settings: dict[str, Any] = Field(default_factory=dict)


__all__ = [
    "HivenModel",
    "User",
    "Room",
    "House",
    "Message",
    "TypingStart",
    "InitState",
]
