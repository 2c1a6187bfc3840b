"""Tests for homevalet.streaming.models"""

from datetime import datetime

from homevalet.streaming import (
    EventType,
    TurnEvent,
    create_error_event,
    create_message_chunk_event,
    create_tool_call_event,
    create_tool_result_event,
)


class TestTurnEvent:

    def test_to_dict(self):
        event = TurnEvent(
            type=EventType.MESSAGE_CHUNK,
            data={"chunk": "Hi", "text": "Hi"},
            timestamp=datetime(2024, 5, 1, 9, 30),
            sequence=3,
        )
        assert event.to_dict() == {
            "type": "message_chunk",
            "data": {"chunk": "Hi", "text": "Hi"},
            "timestamp": "2024-05-01T09:30:00",
            "sequence": 3,
        }
        assert TurnEvent.from_dict(event.to_dict()) == event

    def test_default_data(self):
        assert TurnEvent(type=EventType.MESSAGE_START).data == {}


class TestFactories:

    def test_message_chunk(self):
        event = create_message_chunk_event("lo", "Hello")
        assert event.type == EventType.MESSAGE_CHUNK
        assert event.data == {"chunk": "lo", "text": "Hello"}

    def test_tool_call(self):
        event = create_tool_call_event("toggleLight", {"deviceId": "lamp"}, "call_0")
        assert event.type == EventType.TOOL_CALL_START
        assert event.data["tool_input"] == {"deviceId": "lamp"}

    def test_tool_result(self):
        event = create_tool_result_event("toggleLight", {"success": False}, False)
        assert event.type == EventType.TOOL_RESULT
        assert event.data["success"] is False
        assert event.data["call_id"] is None

    def test_error(self):
        event = create_error_event("offline", error_type="offline")
        assert event.type == EventType.ERROR
        assert event.data["recoverable"] is True
