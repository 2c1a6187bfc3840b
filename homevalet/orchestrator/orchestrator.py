"""
HomeValet Orchestrator - One conversation, one turn at a time

Flow of a turn:
    1. Refuse early when the connectivity monitor reports offline
    2. Append the user message, build the system prompt from a fresh snapshot
    3. Stream one completion; text accumulates into the pending reply,
       tool-call fragments fold into a TurnAccumulator
    4. At stream end, commit the assistant message and run the assembled
       calls sequentially, in the order first seen
    5. Append each outcome as a tool message, then a final assistant message
       carrying the confirmations

There is no second completion round: confirmations come from the outcomes'
messages, not from a follow-up model call.

Example:
    orchestrator = Orchestrator(client, prompt_builder, executor)

    async for event in orchestrator.stream_message("Turn on the desk lamp"):
        if event.type == EventType.MESSAGE_CHUNK:
            render(event.data["text"])

    result = await orchestrator.handle_message("Make it warmer")
    print(result.reply)
"""

import asyncio
import itertools
import logging
from contextlib import aclosing
from typing import AsyncIterator, List, Optional, Tuple

from ..connectivity import ConnectivityMonitor
from ..llm.accumulator import TurnAccumulator
from ..llm.client import TransportError
from ..llm.events import ContentDelta, StreamEnd
from ..protocols import CompletionClientProtocol
from ..streaming.models import (
    EventType,
    TurnEvent,
    create_error_event,
    create_message_chunk_event,
    create_tool_call_event,
    create_tool_result_event,
)
from ..tools.executor import ToolExecutor
from ..tools.models import ExecutionOutcome
from .models import (
    GENERIC_FAILURE_MESSAGE,
    OFFLINE_MESSAGE,
    ChatMessage,
    TurnInProgressError,
    TurnResult,
    wire_call_id,
)
from .prompts import PromptBuilder

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Wires the prompt builder, completion client and tool executor together.

    Only one turn may be in flight. A message submitted while a turn is still
    streaming raises TurnInProgressError instead of being queued.
    """

    def __init__(
        self,
        client: CompletionClientProtocol,
        prompt_builder: PromptBuilder,
        executor: ToolExecutor,
        connectivity: Optional[ConnectivityMonitor] = None,
    ):
        self.client = client
        self.prompt_builder = prompt_builder
        self.executor = executor
        self.connectivity = connectivity

        self._messages: List[ChatMessage] = []
        self._pending_reply = ""
        self._lock = asyncio.Lock()
        self.last_result: Optional[TurnResult] = None

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def pending_reply(self) -> str:
        """Assistant text received so far in the current turn"""
        return self._pending_reply

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    def reset(self) -> None:
        """Clear the conversation history"""
        if self.is_busy:
            raise TurnInProgressError()
        self._messages.clear()
        self._pending_reply = ""
        self.last_result = None
        logger.info("[Turn] conversation cleared")

    def _build_wire_messages(self, system_prompt: str) -> List[dict]:
        return [{"role": "system", "content": system_prompt}] + [
            message.to_wire() for message in self._messages
        ]

    async def handle_message(self, text: str) -> TurnResult:
        """
        Run a whole turn and return its result.

        Raises:
            TurnInProgressError: If another turn is still active
        """
        async with aclosing(self.stream_message(text)) as events:
            async for _ in events:
                pass
        return self.last_result

    async def stream_message(self, text: str) -> AsyncIterator[TurnEvent]:
        """
        Run a turn, yielding TurnEvents as it progresses.

        Yields:
            EXECUTION_START, MESSAGE_START, MESSAGE_CHUNK*, (TOOL_CALL_START,
            TOOL_RESULT)*, MESSAGE_END, EXECUTION_END. A failed turn yields
            ERROR in place of the message and tool events.

        Raises:
            TurnInProgressError: If another turn is still active
        """
        if self._lock.locked():
            raise TurnInProgressError()

        async with self._lock:
            sequence = itertools.count()

            def stamp(event: TurnEvent) -> TurnEvent:
                event.sequence = next(sequence)
                return event

            yield stamp(TurnEvent(type=EventType.EXECUTION_START, data={"message": text}))

            if self.connectivity is not None and not self.connectivity.is_online:
                logger.warning("[Turn] offline, not contacting the completion service")
                result = TurnResult(success=False, reply=OFFLINE_MESSAGE, error="offline")
                self.last_result = result
                yield stamp(create_error_event(OFFLINE_MESSAGE, error_type="offline"))
                yield stamp(TurnEvent(type=EventType.EXECUTION_END, data=result.to_dict()))
                return

            self._messages.append(ChatMessage.user(text))
            context = self.prompt_builder.environment.snapshot()
            wire_messages = self._build_wire_messages(
                self.prompt_builder.build_system_prompt(context)
            )
            tools = self.prompt_builder.get_tools()

            logger.info(f"[Turn] history={len(self._messages)}, tools={len(tools)}")

            accumulator = TurnAccumulator()
            self._pending_reply = ""
            yield stamp(TurnEvent(type=EventType.MESSAGE_START))

            try:
                async with aclosing(self.client.stream_completion(wire_messages, tools)) as events:
                    async for event in events:
                        accumulator = accumulator.fold(event)
                        if isinstance(event, ContentDelta):
                            self._pending_reply = accumulator.content
                            yield stamp(create_message_chunk_event(event.text, accumulator.content))
                        if accumulator.finished:
                            break
            except TransportError as e:
                logger.error(f"[Turn] completion failed: {e}")
                if e.status_code is None and self.connectivity is not None:
                    self.connectivity.mark_offline(str(e))
                self._pending_reply = ""
                result = TurnResult(success=False, reply=GENERIC_FAILURE_MESSAGE, error=str(e))
                self.last_result = result
                yield stamp(create_error_event(GENERIC_FAILURE_MESSAGE, error_type="transport"))
                yield stamp(TurnEvent(type=EventType.EXECUTION_END, data=result.to_dict()))
                return

            if not accumulator.finished:
                accumulator = accumulator.fold(StreamEnd())

            calls = accumulator.tool_calls
            self._messages.append(ChatMessage.assistant(accumulator.content, calls))
            self._pending_reply = ""

            if calls:
                logger.info(f"[Turn] executing: {', '.join(call.name for call in calls)}")

            outcomes: List[ExecutionOutcome] = []
            for call in calls:
                call_id = wire_call_id(call)
                yield stamp(create_tool_call_event(call.name, call.arguments, call_id))
                outcome = await self.executor.execute(call.name, call.arguments)
                outcomes.append(outcome)
                self._messages.append(ChatMessage.tool(call, outcome))
                yield stamp(create_tool_result_event(
                    call.name, outcome.to_dict(), outcome.success, call_id
                ))

            confirmation = "\n".join(outcome.message for outcome in outcomes if outcome.message)
            if confirmation:
                self._messages.append(ChatMessage.assistant(confirmation))

            reply = "\n\n".join(part for part in (accumulator.content, confirmation) if part)
            result = TurnResult(success=True, reply=reply, outcomes=outcomes)
            self.last_result = result

            yield stamp(TurnEvent(type=EventType.MESSAGE_END, data={"text": reply}))
            yield stamp(TurnEvent(type=EventType.EXECUTION_END, data=result.to_dict()))
