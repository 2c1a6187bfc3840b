"""
HomeValet Streaming - Events reported while a turn is processed
"""

from .models import (
    EventType,
    TurnEvent,
    create_message_chunk_event,
    create_tool_call_event,
    create_tool_result_event,
    create_error_event,
)

__all__ = [
    "EventType",
    "TurnEvent",
    "create_message_chunk_event",
    "create_tool_call_event",
    "create_tool_result_event",
    "create_error_event",
]
