"""
HomeValet Stream Events - Discrete units of an incremental completion

A completion stream is adapted into a strictly ordered sequence of:
- ContentDelta: a fragment of assistant text
- ToolCallDelta: a fragment of one tool call (name and/or argument text)
- ToolCallComplete: a tool call whose arguments are fully assembled
- StreamEnd: no more events follow
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


class StreamEventType(str, Enum):
    CONTENT_DELTA = "content_delta"
    TOOL_CALL_DELTA = "tool_call_delta"
    TOOL_CALL_COMPLETE = "tool_call_complete"
    STREAM_END = "stream_end"


@dataclass(frozen=True)
class ContentDelta:
    text: str

    @property
    def type(self) -> StreamEventType:
        return StreamEventType.CONTENT_DELTA


@dataclass(frozen=True)
class ToolCallDelta:
    """
    Partial tool call.

    Fragments sharing an index are concatenated in arrival order to rebuild
    the arguments text.
    """
    index: int
    name: Optional[str] = None
    arguments_fragment: Optional[str] = None
    call_id: Optional[str] = None

    @property
    def type(self) -> StreamEventType:
        return StreamEventType.TOOL_CALL_DELTA


@dataclass(frozen=True)
class ToolCallComplete:
    index: int
    name: str
    arguments: Dict[str, Any]
    call_id: Optional[str] = None

    @property
    def type(self) -> StreamEventType:
        return StreamEventType.TOOL_CALL_COMPLETE


@dataclass(frozen=True)
class StreamEnd:
    finish_reason: Optional[str] = None

    @property
    def type(self) -> StreamEventType:
        return StreamEventType.STREAM_END


StreamEvent = Union[ContentDelta, ToolCallDelta, ToolCallComplete, StreamEnd]
