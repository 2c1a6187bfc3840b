"""
HomeValet LLM Base - Common types for the completion service client

This module provides:
- LLMConfig: Configuration dataclass
- LLMResponse: Standardized non-streaming response
- ToolCall / Usage / StopReason: Response parts
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

DEFAULT_BASE_URL = "https://api.openai.com/v1"


class StopReason(str, Enum):
    """Reason why the LLM stopped generating"""
    END_TURN = "end_turn"           # Natural completion
    MAX_TOKENS = "max_tokens"       # Hit token limit
    STOP_SEQUENCE = "stop_sequence" # Hit stop sequence
    TOOL_USE = "tool_use"           # Model wants to use a tool
    CONTENT_FILTER = "content_filter"
    ERROR = "error"                 # Error occurred

    @classmethod
    def from_finish_reason(cls, finish_reason: Optional[str]) -> "StopReason":
        """Map an OpenAI-style finish_reason to StopReason"""
        if finish_reason is None:
            return cls.END_TURN
        mapping = {
            "stop": cls.END_TURN,
            "length": cls.MAX_TOKENS,
            "tool_calls": cls.TOOL_USE,
            "function_call": cls.TOOL_USE,  # Legacy
            "content_filter": cls.CONTENT_FILTER,
        }
        return mapping.get(finish_reason, cls.END_TURN)


@dataclass
class LLMConfig:
    """
    Configuration for the completion service client.

    Attributes:
        api_key: Bearer token for the service (omitted from requests when empty)
        model: Model name
        base_url: API root; requests go to ``{base_url}/chat/completions``
        temperature: Sampling temperature
        max_tokens: Maximum tokens in the reply
        timeout: Request timeout in seconds
        default_headers: Additional headers to send with requests
    """
    api_key: Optional[str] = None
    model: str = "gpt-3.5-turbo"
    base_url: str = DEFAULT_BASE_URL
    temperature: float = 0.5
    max_tokens: int = 200
    timeout: float = 60.0
    default_headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LLMConfig":
        """Build from the ``llm`` section of the YAML config, ignoring unknown keys"""
        known = {name for name in cls.__dataclass_fields__}
        values = {k: v for k, v in data.items() if k in known and v is not None}
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }


@dataclass
class ToolCall:
    """A tool call from a non-streaming response"""
    id: str
    name: str
    arguments: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "arguments": self.arguments,
        }


@dataclass
class Usage:
    """Token usage information"""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class LLMResponse:
    """
    Standardized non-streaming response.

    ``raw_response`` keeps the decoded JSON body for debugging.
    """
    content: str
    tool_calls: Optional[List[ToolCall]] = None
    stop_reason: StopReason = StopReason.END_TURN
    usage: Optional[Usage] = None
    model: Optional[str] = None
    raw_response: Optional[Any] = None

    @property
    def has_tool_calls(self) -> bool:
        """Check if response contains tool calls"""
        return self.tool_calls is not None and len(self.tool_calls) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "tool_calls": [tc.to_dict() for tc in self.tool_calls] if self.tool_calls else None,
            "stop_reason": self.stop_reason.value,
            "usage": self.usage.to_dict() if self.usage else None,
            "model": self.model,
        }
