#
# src/pymstest/parsing/buffer.py
#
"""
Reassembles complete lines from arbitrarily sized output chunks.
"""
import codecs

DEFAULT_TERMINATOR = "\r\n"


class LineBuffer:
    """
    Carries a partial trailing line over from one chunk to the next.

    Bytes are decoded incrementally so a multi-byte character split across two
    reads is not corrupted. Empty strings produced by the split itself are
    dropped; they carry no information.
    """

    def __init__(
        self,
        terminator: str = DEFAULT_TERMINATOR,
        encoding: str = "utf-8",
    ) -> None:
        if not terminator:
            raise ValueError("Line terminator must not be empty")
        self.terminator = terminator
        self.encoding = encoding
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    @property
    def pending(self) -> str:
        """The incomplete line held back from the last chunk."""
        return self._pending

    def feed(self, chunk: bytes | str) -> list[str]:
        """Adds a chunk and returns every line it completed."""
        text = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        if not text:
            return []

        pieces = (self._pending + text).split(self.terminator)
        self._pending = pieces.pop()
        return [piece for piece in pieces if piece]

    def flush(self) -> list[str]:
        """Returns the trailing partial line at end of stream and resets."""
        tail = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        self._decoder.reset()
        return [tail] if tail else []

# 🔼⚙️
