"""OpenAI-compatible completion payloads.

Plain frozen value structs; the *_payload functions produce the JSON-ready
dicts sent to clients.
"""

import time
from dataclasses import dataclass, field
from enum import Enum

DONE_SENTINEL = "[DONE]"


class FinishReason(str, Enum):
    """Why a completion stream stopped."""

    STOP = "stop"
    ERROR = "error"


def chat_completion_id() -> str:
    """Response id for chat dialect streams (chatcmpl-<ms>)."""
    return f"chatcmpl-{int(time.time() * 1000)}"


def text_completion_id() -> str:
    """Response id for text dialect streams (cmpl-<ms>)."""
    return f"cmpl-{int(time.time() * 1000)}"


def _now() -> int:
    return int(time.time())


@dataclass(frozen=True)
class StreamError:
    """Error descriptor attached to a failed stream's last chunk."""

    message: str
    type: str = "server_error"


@dataclass(frozen=True)
class ChatCompletionChunk:
    """One chat.completion.chunk event."""

    id: str
    model: str
    content: str | None = None
    finish_reason: FinishReason | None = None
    error: StreamError | None = None
    created: int = field(default_factory=_now)


@dataclass(frozen=True)
class TextCompletionChunk:
    """One text_completion.chunk event."""

    id: str
    model: str
    text: str = ""
    finish_reason: FinishReason | None = None
    error: StreamError | None = None
    created: int = field(default_factory=_now)


@dataclass(frozen=True)
class ChatCompletion:
    """Non-streaming chat.completion response."""

    id: str
    model: str
    role: str
    content: str
    created: int = field(default_factory=_now)


def _finish(reason: FinishReason | None) -> str | None:
    return reason.value if reason else None


def _with_error(payload: dict, error: StreamError | None) -> dict:
    if error is not None:
        payload["error"] = {"message": error.message, "type": error.type}
    return payload


def chat_chunk_payload(chunk: ChatCompletionChunk) -> dict:
    """Wire view of a chat chunk."""
    delta = {"content": chunk.content} if chunk.content else {}
    payload = {
        "id": chunk.id,
        "object": "chat.completion.chunk",
        "created": chunk.created,
        "model": chunk.model,
        "choices": [
            {
                "delta": delta,
                "index": 0,
                "finish_reason": _finish(chunk.finish_reason),
            }
        ],
    }
    return _with_error(payload, chunk.error)


def text_chunk_payload(chunk: TextCompletionChunk) -> dict:
    """Wire view of a text completion chunk."""
    payload = {
        "id": chunk.id,
        "object": "text_completion.chunk",
        "created": chunk.created,
        "model": chunk.model,
        "choices": [
            {
                "text": chunk.text,
                "index": 0,
                "logprobs": None,
                "finish_reason": _finish(chunk.finish_reason),
            }
        ],
    }
    return _with_error(payload, chunk.error)


def chat_completion_payload(completion: ChatCompletion) -> dict:
    """Wire view of a full chat completion. Token usage is not tracked (-1)."""
    return {
        "id": completion.id,
        "object": "chat.completion",
        "created": completion.created,
        "model": completion.model,
        "choices": [
            {
                "index": 0,
                "message": {"role": completion.role, "content": completion.content},
                "finish_reason": FinishReason.STOP.value,
            }
        ],
        "usage": {
            "prompt_tokens": -1,
            "completion_tokens": -1,
            "total_tokens": -1,
        },
    }
