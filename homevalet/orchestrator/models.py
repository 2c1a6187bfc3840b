"""
HomeValet Orchestrator Models - Data structures for conversation turns

This module defines:
- MessageRole / ChatMessage: the append-only conversation history
- TurnResult: what one user turn produced
- TurnInProgressError: raised when a second turn is submitted too early
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from enum import Enum

from ..tools.models import ExecutionOutcome, ToolCallRequest

GENERIC_FAILURE_MESSAGE = "Sorry, I couldn't reach the assistant service. Please try again."
OFFLINE_MESSAGE = "I'm offline right now. I'll be able to help once the connection is back."


class TurnInProgressError(RuntimeError):
    """A message was submitted while the previous turn is still streaming"""

    def __init__(self):
        super().__init__("A turn is already in progress")


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


def wire_call_id(call: ToolCallRequest) -> str:
    """Call id used on the wire; synthesized from the index when the service gave none"""
    return call.call_id or f"call_{call.index}"


@dataclass
class ChatMessage:
    """
    One entry in the conversation history.

    Attributes:
        role: Who produced the message
        content: Message text
        timestamp: When it was appended
        tool_calls: Calls requested by an assistant message
        tool_call_id: Call a tool message answers
        name: Tool name for tool messages
    """
    role: MessageRole
    content: str
    timestamp: datetime = field(default_factory=datetime.now)
    tool_calls: Tuple[ToolCallRequest, ...] = ()
    tool_call_id: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(
        cls, content: str, tool_calls: Tuple[ToolCallRequest, ...] = ()
    ) -> "ChatMessage":
        return cls(role=MessageRole.ASSISTANT, content=content, tool_calls=tuple(tool_calls))

    @classmethod
    def tool(cls, call: ToolCallRequest, outcome: ExecutionOutcome) -> "ChatMessage":
        return cls(
            role=MessageRole.TOOL,
            content=json.dumps(outcome.to_dict(), ensure_ascii=False),
            tool_call_id=wire_call_id(call),
            name=call.name,
        )

    def to_wire(self) -> Dict[str, Any]:
        """Project to the chat completions message shape"""
        message: Dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [
                {
                    "id": wire_call_id(call),
                    "type": "function",
                    "function": {
                        "name": call.name,
                        "arguments": json.dumps(call.arguments, ensure_ascii=False),
                    },
                }
                for call in self.tool_calls
            ]
        if self.tool_call_id:
            message["tool_call_id"] = self.tool_call_id
        return message


@dataclass
class TurnResult:
    """
    What one user turn produced.

    Attributes:
        success: False when the turn failed at the transport level or was refused offline
        reply: User-visible assistant text (streamed text plus action confirmations)
        outcomes: One ExecutionOutcome per tool call, in execution order
        error: Diagnostic error text on failure
    """
    success: bool
    reply: str
    outcomes: List[ExecutionOutcome] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "reply": self.reply,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
            "error": self.error,
        }
