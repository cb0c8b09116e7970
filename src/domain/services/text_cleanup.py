"""Cleanup of model output before it is streamed to an editor."""

import json
import re

# One fenced block wrapping the whole text: ```lang\n...```
_FENCED_BLOCK_RE = re.compile(r"\A\s*```[\w+#.-]*[ \t]*\n(.*?)\n?[ \t]*```\s*\Z", re.DOTALL)

PAYLOAD_KEYS = ("response", "result", "code")


def strip_code_fence(text: str) -> str:
    """Remove one outer fenced code block if it wraps the entire text."""
    match = _FENCED_BLOCK_RE.match(text)
    return match.group(1) if match else text


def parse_json_object(text: str) -> dict | None:
    """Parse text as a JSON object literal, or None if it is not one."""
    stripped = text.strip()
    if not (stripped.startswith("{") and stripped.endswith("}")):
        return None
    try:
        value = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def extract_code_content(text: str) -> str:
    """Clean model output: unwrap a code fence, then a JSON envelope.

    Models sometimes answer with ```lang ...``` or {"code": "..."}; both are
    reduced to the bare text.
    """
    if not text:
        return ""
    cleaned = strip_code_fence(text).strip()
    payload = parse_json_object(cleaned)
    if payload is not None:
        for key in PAYLOAD_KEYS:
            value = payload.get(key)
            if isinstance(value, str):
                return value
    return cleaned
