"""Single-line literal matching with case and whole-word rules.

Pure text operations with zero I/O. Positions are character indices into
the line exactly as read, so scanner and replacer always agree on them.
"""
from __future__ import annotations

from collections.abc import Iterator
from string import ascii_letters, digits

IDENTIFIER_CHARS = frozenset(ascii_letters + digits + "_")


def is_identifier_char(ch: str) -> bool:
    """True for ASCII letters, digits and underscore."""
    return ch in IDENTIFIER_CHARS


def fold_case(text: str) -> str:
    """Lower-case ``text`` one character at a time, preserving its length.

    ``str.lower`` may expand a character (``"İ".lower()`` has two code
    points), which would shift every later index. Such characters are left
    unchanged.
    """
    if text.isascii():
        return text.lower()
    folded: list[str] = []
    for ch in text:
        low = ch.lower()
        folded.append(low if len(low) == 1 else ch)
    return "".join(folded)


def is_whole_word(line: str, begin: int, end: int) -> bool:
    """True when neither neighbour of ``line[begin:end]`` is an identifier char."""
    if begin > 0 and is_identifier_char(line[begin - 1]):
        return False
    if end < len(line) and is_identifier_char(line[end]):
        return False
    return True


def find_next(
    line: str,
    pattern: str,
    start: int = 0,
    *,
    case_sensitive: bool = False,
    whole_word: bool = False,
) -> tuple[int, int] | None:
    """Find the first accepted occurrence of ``pattern`` at or after ``start``.

    A candidate rejected by the whole-word rule resumes the search from its
    own end, so an occurrence buried in a longer identifier never loops.

    Args:
        line: Text to search.
        pattern: Literal, non-empty pattern.
        start: Index to start searching from.
        case_sensitive: If False (default), matching ignores case.
        whole_word: Reject candidates touching identifier characters.

    Returns:
        ``(begin, end)`` of the match with ``end`` exclusive, or None.
    """
    if not pattern:
        raise ValueError("Cannot search for an empty pattern")
    if start < 0:
        raise ValueError(f"start must be >= 0, got {start}")

    haystack = line if case_sensitive else fold_case(line)
    needle = pattern if case_sensitive else fold_case(pattern)

    end = start
    while True:
        begin = haystack.find(needle, end)
        if begin < 0:
            return None
        end = begin + len(needle)
        if whole_word and not is_whole_word(line, begin, end):
            continue
        return begin, end


def iter_matches(
    line: str,
    pattern: str,
    *,
    case_sensitive: bool = False,
    whole_word: bool = False,
) -> Iterator[tuple[int, int]]:
    """Yield every accepted, non-overlapping match in ``line``."""
    end = 0
    while True:
        found = find_next(
            line, pattern, end,
            case_sensitive=case_sensitive, whole_word=whole_word,
        )
        if found is None:
            return
        yield found
        end = found[1]
