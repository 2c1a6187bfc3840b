"""
HomeValet Streaming Models - Data structures for turn events

This module defines:
- Event types a conversation turn reports to its consumer
- TurnEvent, the event envelope
- Helper functions for creating events
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Optional
from enum import Enum


class EventType(str, Enum):
    """Types of events that can be streamed"""
    # Message events
    MESSAGE_START = "message_start"
    MESSAGE_CHUNK = "message_chunk"
    MESSAGE_END = "message_end"

    # Tool events
    TOOL_CALL_START = "tool_call_start"
    TOOL_RESULT = "tool_result"

    # Execution events
    EXECUTION_START = "execution_start"
    EXECUTION_END = "execution_end"

    # Error events
    ERROR = "error"


@dataclass
class TurnEvent:
    """
    Event emitted while a turn is processed.

    All events have:
    - type: The type of event
    - data: Event-specific data
    - timestamp: When the event occurred
    - sequence: Position within the turn, starting at 0
    """
    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    sequence: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization"""
        return {
            "type": self.type.value,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
            "sequence": self.sequence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TurnEvent":
        """Create event from dictionary"""
        return cls(
            type=EventType(data["type"]),
            data=data.get("data", {}),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            sequence=data.get("sequence", 0),
        )


def create_message_chunk_event(chunk: str, text: str) -> TurnEvent:
    """Create a message chunk event carrying the delta and the text so far"""
    return TurnEvent(
        type=EventType.MESSAGE_CHUNK,
        data={"chunk": chunk, "text": text},
    )


def create_tool_call_event(
    tool_name: str,
    tool_input: Dict[str, Any],
    call_id: Optional[str] = None,
) -> TurnEvent:
    """Create a tool call event"""
    return TurnEvent(
        type=EventType.TOOL_CALL_START,
        data={"tool_name": tool_name, "tool_input": tool_input, "call_id": call_id},
    )


def create_tool_result_event(
    tool_name: str,
    result: Dict[str, Any],
    success: bool,
    call_id: Optional[str] = None,
) -> TurnEvent:
    """Create a tool result event"""
    return TurnEvent(
        type=EventType.TOOL_RESULT,
        data={
            "tool_name": tool_name,
            "result": result,
            "success": success,
            "call_id": call_id,
        },
    )


def create_error_event(
    error: str,
    error_type: Optional[str] = None,
    recoverable: bool = True,
) -> TurnEvent:
    """Create an error event"""
    return TurnEvent(
        type=EventType.ERROR,
        data={
            "error": error,
            "error_type": error_type,
            "recoverable": recoverable,
        },
    )
