"""Core types shared by the scanners, the replacer and the container layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ScanOptions:
    """Matching rules applied by both scan and replace."""

    case_sensitive: bool = False
    whole_word: bool = False


@dataclass(frozen=True, slots=True)
class ScanRange:
    """Inclusive window of physical lines to scan.

    ``end_line <= 0`` means "to end of file".
    """

    start_line: int = 1
    end_line: int = 0

    def __post_init__(self) -> None:
        if self.start_line < 1:
            raise ValueError(f"start_line must be >= 1, got {self.start_line}")

    def contains(self, line_number: int) -> bool:
        if line_number < self.start_line:
            return False
        return self.end_line <= 0 or line_number <= self.end_line

    def is_past_end(self, line_number: int) -> bool:
        return self.end_line > 0 and line_number > self.end_line

    def to_local(self, line_number: int) -> int:
        """Translate a physical line number to window-local numbering (1-based)."""
        return line_number - self.start_line + 1


FULL_RANGE = ScanRange()


@dataclass(frozen=True, slots=True)
class ReplaceLocation:
    """Positional subset of a MatchRecord consumed by the replacer."""

    line_number: int
    begin: int
    end: int

    def __post_init__(self) -> None:
        if self.line_number < 1:
            raise ValueError(f"line_number must be >= 1, got {self.line_number}")
        if self.begin < 0:
            raise ValueError(f"begin must be >= 0, got {self.begin}")
        if self.end < self.begin:
            raise ValueError(f"end must be >= begin, got {self.end} < {self.begin}")

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.line_number, self.begin)


@dataclass(frozen=True, slots=True)
class MatchRecord:
    """One accepted match.

    ``begin``/``end`` are character indices into ``line_text`` (``end``
    exclusive). For matches inside an embedded sub-document ``file_path`` is
    the composite ``<container>::<identifier>`` and ``line_number`` is local
    to the sub-document.
    """

    file_path: str
    display_label: str
    line_number: int
    begin: int
    end: int
    line_text: str

    @property
    def matched_text(self) -> str:
        return self.line_text[self.begin:self.end]

    def location(self) -> ReplaceLocation:
        return ReplaceLocation(self.line_number, self.begin, self.end)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "display_label": self.display_label,
            "line_number": self.line_number,
            "begin": self.begin,
            "end": self.end,
            "line_text": self.line_text,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> MatchRecord:
        return cls(
            file_path=str(payload["file_path"]),
            display_label=str(payload.get("display_label", payload["file_path"])),
            line_number=int(payload["line_number"]),
            begin=int(payload["begin"]),
            end=int(payload["end"]),
            line_text=str(payload.get("line_text", "")),
        )


@dataclass(frozen=True, slots=True)
class SubDocument:
    """An embedded document found inside a container file.

    ``start_line`` is the payload-opening line and ``end_line`` the
    payload-closing line (container numbering); the payload occupies
    ``[start_line, end_line)``.
    """

    identifier: str
    start_line: int
    end_line: int
    label: str = ""

    def __post_init__(self) -> None:
        if self.start_line < 1:
            raise ValueError(f"start_line must be >= 1, got {self.start_line}")
        if self.end_line <= self.start_line:
            raise ValueError(
                f"end_line must be > start_line, got {self.end_line} <= {self.start_line}",
            )

    @property
    def scan_range(self) -> ScanRange:
        return ScanRange(self.start_line, self.end_line - 1)

    @property
    def line_offset(self) -> int:
        """Offset that maps document-local line numbers onto container lines."""
        return self.start_line - 1


@dataclass(frozen=True, slots=True)
class ReplaceSummary:
    """Outcome of one replace call."""

    applied: int = 0
    skipped: int = 0

    def __add__(self, other: ReplaceSummary) -> ReplaceSummary:
        return ReplaceSummary(self.applied + other.applied, self.skipped + other.skipped)


class RewriteError(OSError):
    """Raised when the rewritten content cannot be written back."""
