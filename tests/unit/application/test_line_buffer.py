"""Tests for LineBuffer."""

from src.application.streaming.line_buffer import LineBuffer


class TestLineBuffer:
    """Tests for feeding and flushing."""

    def test_complete_lines(self):
        buffer = LineBuffer()
        assert buffer.feed(b"one\ntwo\n") == ["one", "two"]
        assert buffer.pending == ""

    def test_partial_line_is_held(self):
        """A fragment without newline produces no line until completed."""
        buffer = LineBuffer()
        assert buffer.feed(b'{"a": ') == []
        assert buffer.pending == '{"a": '
        assert buffer.feed(b"1}\n") == ['{"a": 1}']

    def test_holds_one_fragment(self):
        buffer = LineBuffer()
        buffer.feed(b"a\nb\nc")
        assert buffer.pending == "c"

    def test_crlf(self):
        buffer = LineBuffer()
        assert buffer.feed(b"x\r\ny\r\n") == ["x", "y"]

    def test_split_utf8_sequence(self):
        """A multi-byte character split across chunks decodes once."""
        data = "é\n".encode()
        buffer = LineBuffer()
        assert buffer.feed(data[:1]) == []
        assert buffer.feed(data[1:]) == ["é"]

    def test_flush_returns_residual(self):
        buffer = LineBuffer()
        buffer.feed(b"done\ntail")
        assert buffer.flush() == "tail"
        assert buffer.pending == ""

    def test_str_input(self):
        buffer = LineBuffer()
        assert buffer.feed("a\n") == ["a"]
