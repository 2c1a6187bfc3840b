"""Tests for homevalet.llm.client: wire format, stream adaptation, errors"""

import json
from contextlib import aclosing

import httpx
import pytest

from homevalet.llm import (
    ContentDelta,
    LLMConfig,
    StopReason,
    StreamEnd,
    StreamingClient,
    ToolCallComplete,
    ToolCallDelta,
    TransportError,
)
from homevalet.tools import ToolRegistry


# ── Helpers ──


class ChunkStream(httpx.AsyncByteStream):
    """Response body delivered in the given chunks; records whether it was closed"""

    def __init__(self, chunks):
        self.chunks = list(chunks)
        self.delivered = 0
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            self.delivered += 1
            yield chunk

    async def aclose(self):
        self.closed = True


def sse(*payloads) -> bytes:
    lines = []
    for payload in payloads:
        data = payload if isinstance(payload, str) else json.dumps(payload)
        lines.append(f"data: {data}\n")
    return "".join(lines).encode("utf-8")


def content(text):
    return {"choices": [{"delta": {"content": text}}]}


def tool_delta(index, name=None, arguments=None, call_id=None):
    tc = {"index": index, "function": {}}
    if call_id:
        tc["id"] = call_id
    if name is not None:
        tc["function"]["name"] = name
    if arguments is not None:
        tc["function"]["arguments"] = arguments
    return {"choices": [{"delta": {"tool_calls": [tc]}}]}


def finish(reason):
    return {"choices": [{"delta": {}, "finish_reason": reason}]}


def make_client(handler, **config):
    config.setdefault("model", "test-model")
    config.setdefault("api_key", "sk-test")
    config.setdefault("base_url", "https://llm.test/v1")
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return StreamingClient(config=LLMConfig(**config), http_client=http_client)


def streaming_client(chunks, status=200, captured=None):
    body = ChunkStream(chunks)

    def handler(request):
        if captured is not None:
            captured.append(request)
        return httpx.Response(status, stream=body)

    return make_client(handler), body


async def collect(client, messages=None, tools=None):
    events = []
    async for event in client.stream_completion(messages or [{"role": "user", "content": "hi"}], tools):
        events.append(event)
    return events


MESSAGES = [{"role": "user", "content": "Dim the lamp"}]


# ── Request body ──


class TestBuildRequest:

    def test_tools_omitted_when_empty(self):
        client = StreamingClient(config=LLMConfig(model="m"))
        body = client.build_request(MESSAGES, [], stream=True)
        assert "tools" not in body
        assert "tool_choice" not in body
        assert body == {
            "model": "m",
            "messages": MESSAGES,
            "stream": True,
            "temperature": 0.5,
            "max_tokens": 200,
        }

    def test_tool_definitions_projected(self):
        client = StreamingClient(config=LLMConfig(model="m"))
        registry = ToolRegistry()
        body = client.build_request(MESSAGES, registry.list_definitions(), stream=False)
        assert body["tools"] == registry.get_tools_schema()
        assert body["tool_choice"] == "auto"
        assert body["stream"] is False

    def test_kwargs_override_config(self):
        client = StreamingClient(config=LLMConfig(model="m"), temperature=0.1)
        assert client.build_request(MESSAGES)["temperature"] == 0.1

    def test_endpoint(self):
        client = StreamingClient(config=LLMConfig(base_url="http://localhost:11434/v1/"))
        assert client.endpoint == "http://localhost:11434/v1/chat/completions"

    @pytest.mark.asyncio
    async def test_wire_request(self):
        captured = []
        client, _ = streaming_client([sse(content("ok"), "[DONE]")], captured=captured)

        await collect(client, MESSAGES, ToolRegistry().list_definitions())

        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == "https://llm.test/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == "test-model"
        assert body["stream"] is True
        assert len(body["tools"]) == 8

    @pytest.mark.asyncio
    async def test_no_authorization_without_key(self):
        captured = []
        body = ChunkStream([sse("[DONE]")])

        def handler(request):
            captured.append(request)
            return httpx.Response(200, stream=body)

        client = make_client(handler, api_key=None)
        await collect(client)
        assert "Authorization" not in captured[0].headers


# ── Stream adaptation ──


TOOL_STREAM = sse(
    content("Sure, "),
    content("dimming it."),
    tool_delta(0, name="setBrightness", arguments="", call_id="call_1"),
    tool_delta(0, arguments='{"val'),
    tool_delta(0, arguments='ue": 5'),
    tool_delta(0, arguments="0}"),
    finish("tool_calls"),
    "[DONE]",
)


class TestStreamCompletion:

    @pytest.mark.asyncio
    async def test_content_and_tool_call(self):
        client, _ = streaming_client([TOOL_STREAM])

        events = await collect(client)

        assert events == [
            ContentDelta("Sure, "),
            ContentDelta("dimming it."),
            ToolCallDelta(index=0, name="setBrightness", arguments_fragment="", call_id="call_1"),
            ToolCallDelta(index=0, arguments_fragment='{"val'),
            ToolCallDelta(index=0, arguments_fragment='ue": 5'),
            ToolCallDelta(index=0, arguments_fragment="0}"),
            ToolCallComplete(index=0, name="setBrightness", arguments={"value": 50}, call_id="call_1"),
            StreamEnd(finish_reason="tool_calls"),
        ]

    @pytest.mark.asyncio
    async def test_chunk_boundaries_do_not_matter(self):
        whole_client, _ = streaming_client([TOOL_STREAM])
        expected = await collect(whole_client)

        for split in range(1, len(TOOL_STREAM)):
            client, _ = streaming_client([TOOL_STREAM[:split], TOOL_STREAM[split:]])
            assert await collect(client) == expected, f"split at byte {split}"

        three_way = [TOOL_STREAM[:7], TOOL_STREAM[7:90], TOOL_STREAM[90:]]
        client, _ = streaming_client(three_way)
        assert await collect(client) == expected

    @pytest.mark.asyncio
    async def test_byte_at_a_time_with_multibyte_text(self):
        raw = sse(content("22°C ☀️"), "[DONE]")
        client, _ = streaming_client([raw[i:i + 1] for i in range(len(raw))])

        events = await collect(client)

        assert events == [ContentDelta("22°C ☀️"), StreamEnd()]

    @pytest.mark.asyncio
    async def test_done_stops_immediately(self):
        raw = sse(content("first"), "[DONE]", content("ignored")) + b"data: {\"partial"
        client, _ = streaming_client([raw])

        events = await collect(client)

        assert events == [ContentDelta("first"), StreamEnd()]

    @pytest.mark.asyncio
    async def test_malformed_lines_skipped(self):
        raw = (
            sse(content("a"))
            + b"data: {not json\n"
            + b": keep-alive\n"
            + b"data: [1, 2]\n"
            + b'data: {"choices": "nope"}\n'
            + sse(content("b"), "[DONE]")
        )
        client, _ = streaming_client([raw])

        events = await collect(client)

        assert events == [ContentDelta("a"), ContentDelta("b"), StreamEnd()]

    @pytest.mark.asyncio
    async def test_non_text_content_skipped(self):
        raw = sse(content(5), content(["x"]), content("hi"), "[DONE]")
        client, _ = streaming_client([raw])

        events = await collect(client)

        assert events == [ContentDelta("hi"), StreamEnd()]

    @pytest.mark.asyncio
    async def test_end_of_body_without_done(self):
        raw = sse(content("bye"), finish("stop"))
        client, _ = streaming_client([raw[:-1]])  # final newline missing too

        events = await collect(client)

        assert events == [ContentDelta("bye"), StreamEnd(finish_reason="stop")]

    @pytest.mark.asyncio
    async def test_unparseable_arguments_complete_as_empty(self):
        raw = sse(tool_delta(0, name="toggleLight", arguments='{"state": '), finish("tool_calls"), "[DONE]")
        client, _ = streaming_client([raw])

        events = await collect(client)

        assert ToolCallComplete(index=0, name="toggleLight", arguments={}) in events

    @pytest.mark.asyncio
    async def test_parallel_calls_complete_in_index_order(self):
        raw = sse(
            tool_delta(0, name="toggleLight", arguments="{}", call_id="a"),
            tool_delta(1, name="setTemperature", arguments='{"value": 21}', call_id="b"),
            finish("tool_calls"),
            "[DONE]",
        )
        client, _ = streaming_client([raw])

        events = await collect(client)
        completes = [e for e in events if isinstance(e, ToolCallComplete)]

        assert [c.index for c in completes] == [0, 1]
        assert completes[1].arguments == {"value": 21}

    @pytest.mark.asyncio
    async def test_early_close_releases_response(self):
        chunks = [sse(content(f"part {i} ")) for i in range(50)] + [sse("[DONE]")]
        client, body = streaming_client(chunks)

        async with aclosing(client.stream_completion(MESSAGES)) as events:
            async for event in events:
                assert event == ContentDelta("part 0 ")
                break

        assert body.closed
        assert body.delivered < len(chunks)


# ── Errors ──


class TestErrors:

    @pytest.mark.asyncio
    async def test_non_2xx_stream_raises_before_any_event(self):
        def handler(request):
            return httpx.Response(401, text='{"error": "invalid api key"}')

        client = make_client(handler)
        events = []

        with pytest.raises(TransportError) as exc_info:
            async for event in client.stream_completion(MESSAGES):
                events.append(event)

        assert events == []
        assert exc_info.value.status_code == 401
        assert "invalid api key" in exc_info.value.body

    @pytest.mark.asyncio
    async def test_non_2xx_completion_carries_status_and_body(self):
        def handler(request):
            return httpx.Response(500, text="upstream exploded")

        client = make_client(handler)

        with pytest.raises(TransportError) as exc_info:
            await client.completion(MESSAGES)

        assert "500" in str(exc_info.value)
        assert "upstream exploded" in str(exc_info.value)
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(TransportError) as exc_info:
            await collect(client)

        assert exc_info.value.status_code is None
        assert "connection refused" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_completion_network_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)

        with pytest.raises(TransportError):
            await client.completion(MESSAGES)

    @pytest.mark.asyncio
    async def test_completion_body_not_an_object(self):
        def handler(request):
            return httpx.Response(200, json=["not", "an", "object"])

        with pytest.raises(TransportError) as exc_info:
            await make_client(handler).completion(MESSAGES)

        assert exc_info.value.status_code == 200


# ── Non-streaming fallback ──


class TestCompletion:

    @pytest.mark.asyncio
    async def test_parses_response(self):
        captured = []

        def handler(request):
            captured.append(json.loads(request.content))
            return httpx.Response(200, json={
                "model": "test-model",
                "choices": [{
                    "message": {
                        "role": "assistant",
                        "content": None,
                        "tool_calls": [{
                            "id": "call_9",
                            "type": "function",
                            "function": {"name": "setTemperature", "arguments": '{"value": 23}'},
                        }],
                    },
                    "finish_reason": "tool_calls",
                }],
                "usage": {"prompt_tokens": 100, "completion_tokens": 12, "total_tokens": 112},
            })

        client = make_client(handler)
        response = await client.completion(MESSAGES, ToolRegistry().list_definitions())

        assert captured[0]["stream"] is False
        assert response.content == ""
        assert response.has_tool_calls
        assert response.tool_calls[0].name == "setTemperature"
        assert response.tool_calls[0].arguments == {"value": 23}
        assert response.stop_reason == StopReason.TOOL_USE
        assert response.usage.total_tokens == 112

    @pytest.mark.asyncio
    async def test_plain_text(self):
        def handler(request):
            return httpx.Response(200, json={
                "choices": [{"message": {"content": "Hello Dana"}, "finish_reason": "stop"}],
            })

        response = await make_client(handler).completion(MESSAGES)

        assert response.content == "Hello Dana"
        assert not response.has_tool_calls
        assert response.stop_reason == StopReason.END_TURN


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        async with StreamingClient(config=LLMConfig(), http_client=http_client):
            pass
        assert not http_client.is_closed
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        client = StreamingClient(config=LLMConfig())
        http_client = client._get_client()
        await client.close()
        assert http_client.is_closed
