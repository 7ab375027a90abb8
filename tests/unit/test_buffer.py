#
# tests/unit/test_buffer.py
#
"""Tests for reassembling lines across chunk boundaries."""

import pytest

from pymstest.parsing.buffer import LineBuffer


def test_partial_line_is_carried_over() -> None:
    buffer = LineBuffer()
    assert buffer.feed("Passed  A\r\nFail") == ["Passed  A"]
    assert buffer.pending == "Fail"
    assert buffer.feed("ed  B\r\n") == ["Failed  B"]
    assert buffer.pending == ""


def test_terminator_split_across_chunks() -> None:
    buffer = LineBuffer()
    assert buffer.feed("abc\r") == []
    assert buffer.feed("\ndef\r\n") == ["abc", "def"]


def test_empty_lines_are_dropped() -> None:
    buffer = LineBuffer()
    assert buffer.feed("a\r\n\r\n\r\nb\r\n") == ["a", "b"]


def test_bare_newline_is_not_a_terminator_by_default() -> None:
    buffer = LineBuffer()
    assert buffer.feed("a\nb\r\n") == ["a\nb"]


def test_custom_terminator() -> None:
    buffer = LineBuffer(terminator="\n")
    assert buffer.feed("one\ntwo\nthr") == ["one", "two"]
    assert buffer.flush() == ["thr"]


def test_multibyte_character_split_across_byte_chunks() -> None:
    data = "Endgültige Testergebnisse:\r\n".encode("utf-8")
    split_at = data.index("ü".encode("utf-8")) + 1  # Inside the two-byte sequence.
    buffer = LineBuffer()
    assert buffer.feed(data[:split_at]) == []
    assert buffer.feed(data[split_at:]) == ["Endgültige Testergebnisse:"]


def test_invalid_bytes_are_replaced() -> None:
    buffer = LineBuffer()
    assert buffer.feed(b"bad \xff byte\r\n") == ["bad \ufffd byte"]


def test_flush_returns_tail_and_resets() -> None:
    buffer = LineBuffer()
    buffer.feed("complete\r\npartial")
    assert buffer.flush() == ["partial"]
    assert buffer.flush() == []
    assert buffer.feed("next\r\n") == ["next"]


def test_empty_chunk_is_a_no_op() -> None:
    buffer = LineBuffer()
    buffer.feed("abc")
    assert buffer.feed("") == []
    assert buffer.feed(b"") == []
    assert buffer.pending == "abc"


def test_empty_terminator_is_rejected() -> None:
    with pytest.raises(ValueError):
        LineBuffer(terminator="")
