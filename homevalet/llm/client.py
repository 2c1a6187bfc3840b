"""
HomeValet Streaming Client - OpenAI-compatible chat completions over httpx

Supports:
- Incremental completions adapted into StreamEvents
- Non-streaming completions as a fallback
- Any OpenAI-compatible endpoint (OpenAI, Azure gateways, vLLM, Ollama /v1)
"""

import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple, Union

import httpx

from ..tools.models import ToolDefinition
from .accumulator import TurnAccumulator, parse_arguments
from .base import LLMConfig, LLMResponse, StopReason, ToolCall, Usage
from .decoder import LineBuffer, MalformedEventError, extract_data, is_done, parse_payload
from .events import ContentDelta, StreamEnd, StreamEvent, ToolCallComplete, ToolCallDelta

logger = logging.getLogger(__name__)

ToolSpec = Union[ToolDefinition, Dict[str, Any]]


class TransportError(Exception):
    """
    The completion service could not be reached or answered with a non-2xx status.

    Attributes:
        status_code: HTTP status, or None when the request never got a response
        body: Raw response body text (or the network error description)
    """

    def __init__(self, status_code: Optional[int], body: str):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"Completion service unreachable: {body}"
        else:
            message = f"Completion service error: {status_code} - {body}"
        super().__init__(message)


def _translate_payload(
    payload: Dict[str, Any],
    calls: TurnAccumulator,
) -> Tuple[List[StreamEvent], TurnAccumulator, Optional[str]]:
    """
    Turn one decoded payload into events.

    ``calls`` tracks tool-call fragments so that a finish_reason can be
    answered with a ToolCallComplete per pending call.
    """
    choices = payload.get("choices")
    if not choices:
        # Usage-only or keep-alive payload
        return [], calls, None
    if not isinstance(choices, list) or not isinstance(choices[0], dict):
        raise MalformedEventError("Event payload has malformed choices")

    choice = choices[0]
    delta = choice.get("delta") or {}
    events: List[StreamEvent] = []

    content = delta.get("content")
    if content is not None and not isinstance(content, str):
        raise MalformedEventError("Event delta content is not text")
    if content:
        events.append(ContentDelta(text=content))

    for tc_delta in delta.get("tool_calls") or []:
        function = tc_delta.get("function") or {}
        event = ToolCallDelta(
            index=tc_delta.get("index", 0),
            name=function.get("name"),
            arguments_fragment=function.get("arguments"),
            call_id=tc_delta.get("id"),
        )
        events.append(event)
        calls = calls.fold(event)

    finish_reason = choice.get("finish_reason")
    if finish_reason:
        for pending in calls.pending:
            request = pending.commit()
            complete = ToolCallComplete(
                index=request.index,
                name=request.name,
                arguments=request.arguments,
                call_id=request.call_id,
            )
            events.append(complete)
            calls = calls.fold(complete)

    return events, calls, finish_reason


class _EventTranslator:
    """Per-stream state: pending tool calls, finish reason and the done flag"""

    def __init__(self):
        self.calls = TurnAccumulator()
        self.finish_reason: Optional[str] = None
        self.done = False

    def handle_line(self, line: str) -> List[StreamEvent]:
        data = extract_data(line)
        if data is None or self.done:
            return []
        if is_done(data):
            return [self.end()]

        try:
            payload = parse_payload(data)
            events, self.calls, reason = _translate_payload(payload, self.calls)
        except (MalformedEventError, AttributeError, TypeError) as e:
            logger.debug(f"[Stream] skipping malformed event line: {e}")
            return []

        self.finish_reason = reason or self.finish_reason
        return events

    def end(self) -> StreamEnd:
        self.done = True
        return StreamEnd(finish_reason=self.finish_reason)


class StreamingClient:
    """
    Completion service client.

    Example:
        client = StreamingClient(api_key="sk-xxx", model="gpt-4o-mini")

        # Streaming
        async with contextlib.aclosing(client.stream_completion(messages, tools)) as events:
            async for event in events:
                if isinstance(event, ContentDelta):
                    print(event.text, end="")

        # Non-streaming fallback
        response = await client.completion(messages, tools)
    """

    provider = "openai"

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        **kwargs,
    ):
        """
        Initialize the client.

        Args:
            config: LLMConfig instance
            http_client: Shared httpx.AsyncClient; not closed by this client
            **kwargs: Override config values
        """
        if config is None:
            config = LLMConfig(**kwargs)
        else:
            for key, value in kwargs.items():
                if hasattr(config, key):
                    setattr(config, key, value)

        self.config = config
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/chat/completions"

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout, connect=10.0),
            )
        return self._client

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", **self.config.default_headers}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    @staticmethod
    def _format_tools(tools: Optional[Sequence[ToolSpec]]) -> List[Dict[str, Any]]:
        schemas = []
        for tool in tools or []:
            if isinstance(tool, ToolDefinition):
                schemas.append(tool.to_function_schema())
            else:
                schemas.append(tool)
        return schemas

    def build_request(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[Sequence[ToolSpec]] = None,
        stream: bool = True,
    ) -> Dict[str, Any]:
        """
        Build the JSON request body.

        Tools and tool_choice are left out entirely when there are no tools.
        """
        body: Dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
        }

        tool_schemas = self._format_tools(tools)
        if tool_schemas:
            body["tools"] = tool_schemas
            body["tool_choice"] = "auto"

        body["stream"] = stream
        body["temperature"] = self.config.temperature
        body["max_tokens"] = self.config.max_tokens
        return body

    async def stream_completion(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[Sequence[ToolSpec]] = None,
    ) -> AsyncIterator[StreamEvent]:
        """
        Stream a completion as StreamEvents.

        Closing the generator early (``aclose()``) closes the HTTP response.

        Args:
            messages: Full message history including the system prompt
            tools: ToolDefinitions or ready-made function schemas

        Yields:
            ContentDelta, ToolCallDelta, ToolCallComplete and a final StreamEnd

        Raises:
            TransportError: On a non-2xx status (before any event) or network failure
        """
        client = self._get_client()
        body = self.build_request(messages, tools, stream=True)

        logger.info(
            f"[Stream] model={self.config.model}, "
            f"tools={len(body.get('tools', []))}, messages={len(messages)}"
        )

        try:
            async with client.stream(
                "POST", self.endpoint, json=body, headers=self._headers()
            ) as response:
                if not response.is_success:
                    raw = await response.aread()
                    raise TransportError(
                        response.status_code, raw.decode("utf-8", errors="replace")
                    )

                buffer = LineBuffer()
                translator = _EventTranslator()

                async for chunk in response.aiter_bytes():
                    for line in buffer.feed(chunk):
                        for event in translator.handle_line(line):
                            yield event
                        if translator.done:
                            # Anything still buffered after the sentinel is dropped
                            return

                for line in buffer.flush():
                    for event in translator.handle_line(line):
                        yield event
                    if translator.done:
                        return

                yield translator.end()
        except httpx.HTTPError as e:
            logger.error(f"[Stream] transport failure: {e}")
            raise TransportError(None, str(e)) from e

    async def completion(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[Sequence[ToolSpec]] = None,
    ) -> LLMResponse:
        """
        Non-streaming completion.

        Raises:
            TransportError: On a non-2xx status or network failure
        """
        client = self._get_client()
        body = self.build_request(messages, tools, stream=False)

        logger.info(
            f"[Completion] model={self.config.model}, "
            f"tools={len(body.get('tools', []))}, messages={len(messages)}"
        )

        try:
            response = await client.post(self.endpoint, json=body, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"[Completion] transport failure: {e}")
            raise TransportError(None, str(e)) from e

        if not response.is_success:
            raise TransportError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(response.status_code, response.text) from e

        if not isinstance(data, dict):
            raise TransportError(response.status_code, response.text)

        return self._parse_response(data)

    def _parse_response(self, data: Dict[str, Any]) -> LLMResponse:
        choices = data.get("choices") or [{}]
        choice = choices[0]
        message = choice.get("message") or {}

        tool_calls = None
        if message.get("tool_calls"):
            tool_calls = []
            for tc in message["tool_calls"]:
                function = tc.get("function") or {}
                tool_calls.append(ToolCall(
                    id=tc.get("id", ""),
                    name=function.get("name", ""),
                    arguments=parse_arguments(function.get("arguments")),
                ))

        usage = None
        if data.get("usage"):
            usage = Usage(
                prompt_tokens=data["usage"].get("prompt_tokens", 0),
                completion_tokens=data["usage"].get("completion_tokens", 0),
                total_tokens=data["usage"].get("total_tokens", 0),
            )

        return LLMResponse(
            content=message.get("content") or "",
            tool_calls=tool_calls,
            stop_reason=StopReason.from_finish_reason(choice.get("finish_reason")),
            usage=usage,
            model=data.get("model"),
            raw_response=data,
        )

    async def close(self) -> None:
        """Close the HTTP client if this instance created it"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
