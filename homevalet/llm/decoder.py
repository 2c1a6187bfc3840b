"""
Server-sent event line decoding.

Network chunks arrive at arbitrary byte boundaries. LineBuffer turns them
into complete text lines regardless of where a chunk was cut, including
through the middle of a multi-byte UTF-8 character.
"""

import codecs
import json
from typing import Any, Dict, List, Optional

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class MalformedEventError(ValueError):
    """A data line whose payload is not a JSON object"""


class LineBuffer:
    """
    Incremental bytes-to-lines splitter.

    Example:
        buffer = LineBuffer()
        buffer.feed(b'data: {"a"')      # []
        buffer.feed(b': 1}\\ndata: [')   # ['data: {"a": 1}']
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    @property
    def pending(self) -> str:
        """Trailing text not yet terminated by a newline"""
        return self._pending

    def feed(self, chunk: bytes) -> List[str]:
        """Add a chunk and return every line it completed"""
        self._pending += self._decoder.decode(chunk)
        *lines, self._pending = self._pending.split("\n")
        return [line.rstrip("\r") for line in lines]

    def flush(self) -> List[str]:
        """Return whatever is left once the body has ended"""
        self._pending += self._decoder.decode(b"", final=True)
        tail, self._pending = self._pending.rstrip("\r"), ""
        return [tail] if tail else []


def extract_data(line: str) -> Optional[str]:
    """Return the payload of a ``data: `` line, or None for any other line"""
    if not line.startswith(DATA_PREFIX):
        return None
    return line[len(DATA_PREFIX):]


def is_done(data: str) -> bool:
    return data.strip() == DONE_SENTINEL


def parse_payload(data: str) -> Dict[str, Any]:
    """
    Decode one event payload.

    Raises:
        MalformedEventError: If the payload is not a JSON object
    """
    try:
        payload = json.loads(data)
    except json.JSONDecodeError as e:
        raise MalformedEventError(f"Invalid JSON in event payload: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedEventError(f"Event payload is not an object: {type(payload).__name__}")
    return payload
