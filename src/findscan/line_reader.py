"""Terminator-preserving line reader.

``readline()``-style helpers lose the exact line endings, which the
replacer needs to re-emit untouched regions byte for byte. ``LineReader``
keeps the terminating ``\\n`` (or NUL) on every line and only drops carriage
returns.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import BinaryIO

ENCODING = "utf-8"
# Undecodable bytes round-trip through lone surrogates instead of being lost.
ERRORS = "surrogateescape"

LINE_TERMINATORS = ("\n", "\0")


def decode(raw: bytes) -> str:
    return raw.decode(ENCODING, errors=ERRORS)


def encode(text: str) -> bytes:
    return text.encode(ENCODING, errors=ERRORS)


def strip_terminator(line: str) -> str:
    """Return ``line`` without its trailing line feed or NUL."""
    if line.endswith(LINE_TERMINATORS):
        return line[:-1]
    return line


class LineReader:
    """Reads logical lines from a binary stream.

    A line ends at a line feed, a NUL, or end-of-stream. The terminator is
    part of the returned text; ``next_line`` returns ``""`` only once the
    stream is exhausted.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._pending = b""

    def next_line(self) -> str:
        raw = self._pending or self._stream.readline()
        self._pending = b""
        if not raw:
            return ""

        nul = raw.find(b"\0")
        if nul >= 0:
            # NUL terminates the line; the rest is the start of the next one.
            self._pending = raw[nul + 1:]
            raw = raw[:nul + 1]

        return decode(raw.replace(b"\r", b""))

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if not line:
                return
            yield line


def read_lines(stream: BinaryIO) -> list[str]:
    """Read every remaining logical line of ``stream``, terminators kept."""
    return list(LineReader(stream))
