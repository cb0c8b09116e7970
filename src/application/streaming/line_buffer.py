"""Newline-delimited byte stream buffering."""

import codecs


class LineBuffer:
    """Turns arbitrary byte chunks into complete lines.

    Holds at most one unterminated fragment between feeds. UTF-8 sequences
    split across chunks are decoded once complete.
    """

    def __init__(self) -> None:
        self._pending = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def pending(self) -> str:
        """Text received after the last newline."""
        return self._pending

    def feed(self, data: bytes | str) -> list[str]:
        """Append a chunk and return the lines it completed (without newlines)."""
        text = self._decoder.decode(data) if isinstance(data, bytes) else data
        *lines, self._pending = (self._pending + text).split("\n")
        return [line.rstrip("\r") for line in lines]

    def flush(self) -> str:
        """Return and forget whatever is left once the stream has ended."""
        residual = self._pending + self._decoder.decode(b"", final=True)
        self.clear()
        return residual

    def clear(self) -> None:
        self._pending = ""
        self._decoder.reset()
