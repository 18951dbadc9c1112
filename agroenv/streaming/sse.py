"""
Server-Sent Events framing.

Each record is ``event: <type>\\ndata: <json>\\n\\n`` with the JSON kept on
a single line.
"""
import json
import logging
import re
from typing import AsyncIterable, AsyncIterator, List

from agroenv.streaming.events import StreamEvent

logger = logging.getLogger(__name__)

EVENT_DELIMITER = "\n\n"
EVENT_PATTERN = re.compile(r"event: (\w+)\ndata: (.+)")


class StreamProtocolError(ValueError):
    """A framed event carried data that is not valid JSON."""


def format_sse(event: StreamEvent) -> str:
    """Frame one event for the wire."""
    data = json.dumps(event.data, ensure_ascii=False, separators=(",", ":"))
    return f"event: {event.event}\ndata: {data}{EVENT_DELIMITER}"


async def encode_stream(events: AsyncIterable[StreamEvent]) -> AsyncIterator[str]:
    """Frame every event of an async event source."""
    async for event in events:
        yield format_sse(event)


class SSEDecoder:
    """
    Incremental decoder for a stream of framed events.

    Chunks may split an event anywhere; the trailing incomplete fragment is
    kept until the next chunk completes it.
    """

    def __init__(self):
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text received but not yet terminated by a blank line."""
        return self._buffer

    def feed(self, chunk: str) -> List[StreamEvent]:
        """
        Append a chunk and return every event it completed.

        Raises:
            StreamProtocolError: If a completed event has invalid JSON data
        """
        self._buffer = (self._buffer + chunk).replace("\r\n", "\n")
        blocks = self._buffer.split(EVENT_DELIMITER)
        self._buffer = blocks.pop()
        return [event for event in map(self._parse_block, blocks) if event is not None]

    def flush(self) -> List[StreamEvent]:
        """Decode whatever is left once the stream has ended."""
        remainder, self._buffer = self._buffer.strip("\n"), ""
        if not remainder:
            return []
        event = self._parse_block(remainder)
        return [event] if event is not None else []

    @staticmethod
    def _parse_block(block: str):
        match = EVENT_PATTERN.search(block)
        if not match:
            if block.strip():
                logger.debug(f"Skipping unrecognised stream block: {block!r}")
            return None

        event_type, data = match.groups()
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            raise StreamProtocolError(f"Invalid JSON in '{event_type}' event: {e}") from e
        if not isinstance(payload, dict):
            raise StreamProtocolError(f"Event '{event_type}' data must be a JSON object")
        return StreamEvent(event=event_type, data=payload)
