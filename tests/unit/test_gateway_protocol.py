"""
tests/unit/test_gateway_protocol.py — Gateway Frame Protocol Tests

Tests for frame encoding, frame parsing and the payload models.
"""

import json

import pytest

from hiven.gateway.protocol import (
    Event,
    EventType,
    FrameParseError,
    Heartbeat,
    Hello,
    Login,
    OpCode,
    encode_frame,
    make_event,
    parse_frame,
)
from hiven.models import House, InitState, Message, TypingStart


# ─────────────────────────────────────────────────────────────────────────────
# Encoding
# ─────────────────────────────────────────────────────────────────────────────

class TestEncode:
    def test_login(self):
        assert json.loads(encode_frame(Login(token="T"))) == {"op": 2, "d": {"token": "T"}}

    def test_heartbeat_omits_payload(self):
        assert json.loads(encode_frame(Heartbeat())) == {"op": 3}

    def test_hello(self):
        d = json.loads(encode_frame(Hello(heartbeat_interval_ms=30000)))
        assert d == {"op": 1, "d": {"heartbeat_interval": 30000}}

    def test_event_drops_none_fields(self):
        frame = make_event(EventType.MESSAGE_CREATE, {"id": "1", "content": "hi"})
        d = json.loads(encode_frame(frame))
        assert d["op"] == 0
        assert d["d"]["event"] == "MESSAGE_CREATE"
        assert d["d"]["data"]["content"] == "hi"
        assert "room_id" not in d["d"]["data"]

    def test_login_repr_hides_token(self):
        assert "secret" not in repr(Login(token="secret"))


# ─────────────────────────────────────────────────────────────────────────────
# Parsing
# ─────────────────────────────────────────────────────────────────────────────

class TestParse:
    def test_hello(self):
        frame = parse_frame('{"op": 1, "d": {"heartbeat_interval": 30000}}')
        assert frame == Hello(heartbeat_interval_ms=30000)

    def test_heartbeat_with_null_payload(self):
        assert parse_frame('{"op": 3, "d": null}') == Heartbeat()

    def test_heartbeat_without_payload(self):
        assert parse_frame('{"op": 3}') == Heartbeat()

    def test_login(self):
        frame = parse_frame('{"op": 2, "d": {"token": "abc"}}')
        assert isinstance(frame, Login)
        assert frame.token == "abc"

    def test_message_event(self):
        raw = {"op": 0, "d": {"event": "MESSAGE_CREATE",
                              "data": {"id": "1", "content": "hi", "room_id": "9"}}}
        frame = parse_frame(json.dumps(raw))
        assert isinstance(frame, Event)
        assert frame.type is EventType.MESSAGE_CREATE
        assert isinstance(frame.data, Message)
        assert frame.data.content == "hi"
        assert frame.data.room_id == "9"

    @pytest.mark.parametrize("tag,model", [
        ("INIT_STATE", InitState),
        ("HOUSE_JOIN", House),
        ("TYPING_START", TypingStart),
        ("MESSAGE_CREATE", Message),
    ])
    def test_each_event_tag_maps_to_its_model(self, tag, model):
        data = {"INIT_STATE": {}, "HOUSE_JOIN": {"id": "h"},
                "TYPING_START": {"author_id": "a"}, "MESSAGE_CREATE": {"id": "m"}}[tag]
        frame = parse_frame(json.dumps({"op": 0, "d": {"event": tag, "data": data}}))
        assert isinstance(frame.data, model)

    def test_unknown_fields_are_kept(self):
        raw = {"op": 0, "d": {"event": "MESSAGE_CREATE",
                              "data": {"id": "1", "embed": {"url": "x"}}}}
        frame = parse_frame(json.dumps(raw))
        assert frame.data.model_extra["embed"] == {"url": "x"}

    def test_numeric_ids_become_strings(self):
        raw = {"op": 0, "d": {"event": "HOUSE_JOIN",
                              "data": {"id": 123, "rooms": [{"id": 456}]}}}
        frame = parse_frame(json.dumps(raw))
        assert frame.data.id == "123"
        assert frame.data.rooms[0].id == "456"

    @pytest.mark.parametrize("raw", [
        "not json",
        "[1, 2]",
        '{"d": {}}',
        '{"op": "1"}',
        '{"op": true}',
        '{"op": 99, "d": {}}',
        '{"op": 1, "d": {}}',
        '{"op": 1, "d": {"heartbeat_interval": 0}}',
        '{"op": 1, "d": {"heartbeat_interval": "30000"}}',
        '{"op": 2, "d": {}}',
        '{"op": 3, "d": {"x": 1}}',
        '{"op": 0, "d": "nope"}',
        '{"op": 0, "d": {"event": "REACTION_ADD", "data": {}}}',
        '{"op": 0, "d": {"event": "MESSAGE_CREATE", "data": {"content": "no id"}}}',
    ])
    def test_rejects(self, raw):
        with pytest.raises(FrameParseError):
            parse_frame(raw)

    def test_parse_error_is_a_value_error(self):
        assert issubclass(FrameParseError, ValueError)


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────

class TestOpCode:
    def test_values(self):
        assert OpCode.EVENT == 0
        assert OpCode.HELLO == 1
        assert OpCode.LOGIN == 2
        assert OpCode.HEARTBEAT == 3

    def test_frames_carry_their_opcode(self):
        assert Hello.op is OpCode.HELLO
        assert Login.op is OpCode.LOGIN
        assert Heartbeat.op is OpCode.HEARTBEAT
        assert Event.op is OpCode.EVENT

    def test_make_event_accepts_string_tag(self):
        frame = make_event("TYPING_START", {"author_id": "a", "room_id": "r"})
        assert frame.type is EventType.TYPING_START
