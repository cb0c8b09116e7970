"""Stream transcoder - Ollama NDJSON in, OpenAI-style SSE chunks out.

One transcoder per connection. Lines are parsed as they complete; the
outbound stream always ends with ``data: [DONE]``, also when upstream ends
early or fails.
"""

import json
import logging
from collections.abc import AsyncIterator
from enum import Enum

from pydantic import BaseModel, ValidationError
from sse_starlette.sse import ServerSentEvent

from src.application.streaming.line_buffer import LineBuffer
from src.domain.entities.completions import (
    DONE_SENTINEL,
    ChatCompletionChunk,
    FinishReason,
    StreamError,
    TextCompletionChunk,
    chat_chunk_payload,
    chat_completion_id,
    text_chunk_payload,
    text_completion_id,
)
from src.domain.errors import UpstreamTransportError
from src.domain.ports.llm import ChatStreamLine, GenerateStreamLine
from src.domain.services.text_cleanup import extract_code_content

logger = logging.getLogger(__name__)

GENERATION_INTERRUPTED_TEXT = "\n\n[Error: generation was interrupted]"


class Dialect(str, Enum):
    """Outbound event shape."""

    CHAT = "chat"  # chat.completion.chunk with deltas
    GENERATE = "generate"  # text_completion.chunk from cumulative text


class StreamState(str, Enum):
    """Transcoder lifecycle."""

    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


def sse_event(data: dict | str) -> ServerSentEvent:
    """Frame a payload as ``data: <json>\\n\\n``."""
    if not isinstance(data, str):
        data = json.dumps(data, ensure_ascii=False)
    return ServerSentEvent(data=data, sep="\n")


class StreamTranscoder:
    """Converts one upstream completion stream into client events."""

    def __init__(self, dialect: Dialect, model: str, response_id: str | None = None) -> None:
        self._dialect = dialect
        self._model = model
        if response_id is None:
            response_id = chat_completion_id() if dialect is Dialect.CHAT else text_completion_id()
        self._id = response_id
        self._buffer = LineBuffer()
        self._state = StreamState.OPEN
        self._finished = False
        self._sentinel_sent = False
        self._emitted_text = ""

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def response_id(self) -> str:
        return self._id

    async def transcode(self, byte_stream: AsyncIterator[bytes]) -> AsyncIterator[ServerSentEvent]:
        """Yield SSE events for the byte stream until it ends, fails, or the consumer stops."""
        try:
            try:
                async for chunk in byte_stream:
                    for line in self._buffer.feed(chunk):
                        for event in self._process_line(line):
                            yield event
                        if self._state is StreamState.CLOSED:
                            return
            except UpstreamTransportError as e:
                if self._sentinel_sent:
                    logger.warning("Upstream failed after stream end, ignored: %s", e)
                    return
                logger.error("Upstream stream failed: %s", e)
                for event in self._fail(str(e)):
                    yield event
                return

            self._state = StreamState.CLOSING
            residual = self._buffer.flush()
            for event in self._process_line(residual, final=True):
                yield event
            if not self._sentinel_sent:
                yield self._sentinel()
        finally:
            self._state = StreamState.CLOSED
            self._buffer.clear()
            close = getattr(byte_stream, "aclose", None)
            if close is not None:
                await close()

    def _process_line(self, line: str, final: bool = False) -> list[ServerSentEvent]:
        if self._finished or not line.strip():
            return []
        if self._dialect is Dialect.CHAT:
            parsed = self._parse(ChatStreamLine, line, final)
            return self._chat_events(parsed) if parsed else []
        parsed = self._parse(GenerateStreamLine, line, final)
        return self._generate_events(parsed) if parsed else []

    def _parse(self, model: type[BaseModel], line: str, final: bool):
        try:
            return model.model_validate_json(line)
        except ValidationError as e:
            if final:
                logger.debug("Discarding unparsable residual buffer: %r", line[:200])
            else:
                logger.warning("Skipping malformed stream line (%d errors): %r", e.error_count(), line[:200])
            return None

    def _chat_events(self, line: ChatStreamLine) -> list[ServerSentEvent]:
        if line.error:
            return self._fail(line.error)
        events = []
        content = line.message.content if line.message else None
        if content:
            chunk = ChatCompletionChunk(id=self._id, model=self._model, content=content)
            events.append(sse_event(chat_chunk_payload(chunk)))
        if line.done:
            events.extend(self._finish())
        return events

    def _generate_events(self, line: GenerateStreamLine) -> list[ServerSentEvent]:
        if line.error:
            return self._fail(line.error)
        events = []
        if line.response is not None:
            cleaned = extract_code_content(line.response)
            # Length-based: whatever extends past what was already sent
            delta = cleaned[len(self._emitted_text) :]
            self._emitted_text = cleaned
            if delta:
                chunk = TextCompletionChunk(id=self._id, model=self._model, text=delta)
                events.append(sse_event(text_chunk_payload(chunk)))
                logger.debug("Sent delta: %r", delta)
        if line.done:
            events.extend(self._finish())
        return events

    def _finish(self) -> list[ServerSentEvent]:
        """Final 'stop' chunk and sentinel; later lines are ignored."""
        self._finished = True
        if self._dialect is Dialect.CHAT:
            chunk = ChatCompletionChunk(id=self._id, model=self._model, finish_reason=FinishReason.STOP)
            final = sse_event(chat_chunk_payload(chunk))
        else:
            text_chunk = TextCompletionChunk(id=self._id, model=self._model, finish_reason=FinishReason.STOP)
            final = sse_event(text_chunk_payload(text_chunk))
        logger.debug("Stream %s complete", self._id)
        return [final, self._sentinel()]

    def _fail(self, message: str) -> list[ServerSentEvent]:
        """Error chunk and sentinel; the stream is closed afterwards."""
        self._finished = True
        self._state = StreamState.CLOSED
        error = StreamError(message=message or "Stream processing failed")
        if self._dialect is Dialect.CHAT:
            chunk = ChatCompletionChunk(id=self._id, model=self._model, finish_reason=FinishReason.ERROR, error=error)
            event = sse_event(chat_chunk_payload(chunk))
        else:
            text_chunk = TextCompletionChunk(
                id=self._id,
                model=self._model,
                text=GENERATION_INTERRUPTED_TEXT,
                finish_reason=FinishReason.ERROR,
                error=error,
            )
            event = sse_event(text_chunk_payload(text_chunk))
        return [event, self._sentinel()]

    def _sentinel(self) -> ServerSentEvent:
        self._sentinel_sent = True
        return sse_event(DONE_SENTINEL)
