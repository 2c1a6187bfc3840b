"""
HomeValet LLM - Completion service client

Provides a StreamingClient for any OpenAI-compatible chat completions
endpoint, adapting the incremental response into StreamEvents.

Usage:
    from homevalet.llm import StreamingClient, LLMConfig

    config = LLMConfig(model="gpt-4o-mini", api_key="sk-xxx")
    client = StreamingClient(config=config)

    async for event in client.stream_completion(messages=[...], tools=registry.list_definitions()):
        print(event)

    # Non-streaming fallback
    response = await client.completion(messages=[...])
"""

from .base import LLMConfig, LLMResponse, ToolCall, Usage, StopReason
from .events import (
    StreamEventType,
    StreamEvent,
    ContentDelta,
    ToolCallDelta,
    ToolCallComplete,
    StreamEnd,
)
from .decoder import LineBuffer, MalformedEventError
from .accumulator import PendingToolCall, TurnAccumulator, fold_events, parse_arguments
from .client import StreamingClient, TransportError

__all__ = [
    "LLMConfig",
    "LLMResponse",
    "ToolCall",
    "Usage",
    "StopReason",
    "StreamEventType",
    "StreamEvent",
    "ContentDelta",
    "ToolCallDelta",
    "ToolCallComplete",
    "StreamEnd",
    "LineBuffer",
    "MalformedEventError",
    "PendingToolCall",
    "TurnAccumulator",
    "fold_events",
    "parse_arguments",
    "StreamingClient",
    "TransportError",
]
