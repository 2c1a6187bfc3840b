"""
Fold a StreamEvent sequence into a turn's reply text and tool calls.

TurnAccumulator is immutable: ``fold`` returns a new accumulator, so a
consumer inspecting an intermediate value never sees a half-merged call.
Pending calls become ToolCallRequests exactly once, on ToolCallComplete or
at StreamEnd.
"""

import dataclasses
import json
import logging
from dataclasses import dataclass
from functools import reduce
from typing import Any, Dict, Iterable, Optional, Tuple

from ..tools.models import ToolCallRequest
from .events import ContentDelta, StreamEnd, StreamEvent, ToolCallComplete, ToolCallDelta

logger = logging.getLogger(__name__)


def parse_arguments(text: Any) -> Dict[str, Any]:
    """Parse tool-call argument text; anything that is not a JSON object becomes {}"""
    if isinstance(text, dict):
        return text
    if not text:
        return {}
    try:
        arguments = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"Discarding unparseable tool arguments: {text!r}")
        return {}
    if not isinstance(arguments, dict):
        logger.warning(f"Tool arguments are not an object: {text!r}")
        return {}
    return arguments


@dataclass(frozen=True)
class PendingToolCall:
    """A tool call still receiving fragments"""
    index: int
    name: str = ""
    arguments_text: str = ""
    call_id: Optional[str] = None

    def extend(self, delta: ToolCallDelta) -> "PendingToolCall":
        return dataclasses.replace(
            self,
            name=delta.name or self.name,
            arguments_text=self.arguments_text + (delta.arguments_fragment or ""),
            call_id=delta.call_id or self.call_id,
        )

    def commit(self) -> ToolCallRequest:
        return ToolCallRequest(
            index=self.index,
            name=self.name,
            arguments=parse_arguments(self.arguments_text),
            call_id=self.call_id,
        )


@dataclass(frozen=True)
class TurnAccumulator:
    """
    Snapshot of everything received so far in one stream.

    Attributes:
        content: Concatenated assistant text
        pending: Calls still receiving fragments
        completed: Calls fully assembled
        order: Call indices in first-seen order
        finished: Whether StreamEnd has been folded
        finish_reason: Reason carried by StreamEnd
    """
    content: str = ""
    pending: Tuple[PendingToolCall, ...] = ()
    completed: Tuple[ToolCallRequest, ...] = ()
    order: Tuple[int, ...] = ()
    finished: bool = False
    finish_reason: Optional[str] = None

    def fold(self, event: StreamEvent) -> "TurnAccumulator":
        if self.finished:
            return self
        if isinstance(event, ContentDelta):
            return dataclasses.replace(self, content=self.content + event.text)
        if isinstance(event, ToolCallDelta):
            return self._fold_delta(event)
        if isinstance(event, ToolCallComplete):
            return self._fold_complete(event)
        if isinstance(event, StreamEnd):
            committed = tuple(call.commit() for call in self.pending)
            return dataclasses.replace(
                self,
                pending=(),
                completed=self.completed + committed,
                finished=True,
                finish_reason=event.finish_reason,
            )
        return self

    def _fold_delta(self, delta: ToolCallDelta) -> "TurnAccumulator":
        if self._is_completed(delta.index):
            logger.debug(f"Ignoring fragment for already completed call {delta.index}")
            return self

        existing = self.get_pending(delta.index)
        if existing is None:
            return dataclasses.replace(
                self,
                pending=self.pending + (PendingToolCall(index=delta.index).extend(delta),),
                order=self._with_index(delta.index),
            )

        pending = tuple(
            call.extend(delta) if call.index == delta.index else call for call in self.pending
        )
        return dataclasses.replace(self, pending=pending)

    def _fold_complete(self, complete: ToolCallComplete) -> "TurnAccumulator":
        if self._is_completed(complete.index):
            return self

        existing = self.get_pending(complete.index)
        request = ToolCallRequest(
            index=complete.index,
            name=complete.name or (existing.name if existing else ""),
            arguments=complete.arguments,
            call_id=complete.call_id or (existing.call_id if existing else None),
        )
        return dataclasses.replace(
            self,
            pending=tuple(call for call in self.pending if call.index != complete.index),
            completed=self.completed + (request,),
            order=self._with_index(complete.index),
        )

    def _with_index(self, index: int) -> Tuple[int, ...]:
        return self.order if index in self.order else self.order + (index,)

    def _is_completed(self, index: int) -> bool:
        return any(call.index == index for call in self.completed)

    def get_pending(self, index: int) -> Optional[PendingToolCall]:
        for call in self.pending:
            if call.index == index:
                return call
        return None

    @property
    def tool_calls(self) -> Tuple[ToolCallRequest, ...]:
        """Completed calls in the order they were first seen"""
        return tuple(sorted(self.completed, key=lambda call: self.order.index(call.index)))


def fold_events(events: Iterable[StreamEvent]) -> TurnAccumulator:
    """Fold a whole event sequence at once"""
    return reduce(TurnAccumulator.fold, events, TurnAccumulator())
