"""Backslash escaping for embedded payloads, with reversible offset maps.

Container files store embedded documents as quoted strings, so quotes and
backslashes inside the payload are escaped. Matches are found on the raw
(escaped) text and reported on the un-escaped text; the maps below carry
positions between the two spaces.
"""

from __future__ import annotations

from dataclasses import dataclass


ESCAPE_SEQUENCES: dict[str, str] = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "'": "'",
    '"': '"',
    "?": "?",
    "\\": "\\",
}

# Characters the container writer escapes when it stores a payload.
_WRITE_ESCAPES: dict[str, str] = {"\\": "\\\\", '"': '\\"'}


@dataclass(frozen=True, slots=True)
class UnescapedText:
    """Un-escaped text plus offset maps in both directions.

    ``raw_to_unescaped[i]`` is the index of the un-escaped character produced
    by the escape sequence covering raw index ``i``; ``unescaped_to_raw[k]``
    is the raw index where the sequence producing character ``k`` starts.
    Both tables carry one extra trailing entry for the end position.
    """

    raw_text: str
    text: str
    raw_to_unescaped: tuple[int, ...]
    unescaped_to_raw: tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.raw_to_unescaped) != len(self.raw_text) + 1:
            raise ValueError("raw_to_unescaped length must equal len(raw_text) + 1")
        if len(self.unescaped_to_raw) != len(self.text) + 1:
            raise ValueError("unescaped_to_raw length must equal len(text) + 1")

    @property
    def escape_count(self) -> int:
        return len(self.raw_text) - len(self.text)

    def _is_boundary(self, raw_pos: int) -> bool:
        return self.unescaped_to_raw[self.raw_to_unescaped[raw_pos]] == raw_pos

    def to_unescaped_span(self, begin: int, end: int) -> tuple[int, int]:
        """Map a raw ``[begin, end)`` span onto the un-escaped text.

        An end that falls inside an escape sequence keeps the character that
        sequence produces.
        """
        new_begin = self.raw_to_unescaped[begin]
        new_end = self.raw_to_unescaped[end]
        if not self._is_boundary(end):
            new_end += 1
        return new_begin, new_end

    def to_raw_span(self, begin: int, end: int) -> tuple[int, int]:
        """Map an un-escaped ``[begin, end)`` span back onto the raw text."""
        return self.unescaped_to_raw[begin], self.unescaped_to_raw[end]


def unescape(raw: str) -> UnescapedText:
    """Resolve backslash escapes in one pass.

    Unknown escapes and a trailing lone backslash are kept verbatim.
    """

    out: list[str] = []
    raw_to_unescaped = [0] * (len(raw) + 1)
    unescaped_to_raw: list[int] = []

    i = 0
    while i < len(raw):
        ch = raw[i]
        next_i = i + 1
        emitted = ch

        if ch == "\\" and i + 1 < len(raw) and raw[i + 1] in ESCAPE_SEQUENCES:
            emitted = ESCAPE_SEQUENCES[raw[i + 1]]
            next_i = i + 2

        for raw_pos in range(i, next_i):
            raw_to_unescaped[raw_pos] = len(out)
        unescaped_to_raw.append(i)
        out.append(emitted)
        i = next_i

    raw_to_unescaped[len(raw)] = len(out)
    unescaped_to_raw.append(len(raw))

    return UnescapedText(
        raw_text=raw,
        text="".join(out),
        raw_to_unescaped=tuple(raw_to_unescaped),
        unescaped_to_raw=tuple(unescaped_to_raw),
    )


def escape(text: str) -> str:
    """Escape ``text`` the way the container writer stores payload strings."""
    return "".join(_WRITE_ESCAPES.get(ch, ch) for ch in text)
