"""Line-oriented scan and batch replace over plain text streams.

``scan_stream`` reports every match in a file (or a window of its lines).
``replace_stream`` replays previously reported matches as replacements,
re-checking each one against the current content and compensating for
offset drift when several replacements land on the same line.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import BinaryIO

from findscan.io_utils import atomic_write_bytes
from findscan.line_reader import LineReader, encode, strip_terminator
from findscan.scan_types import (
    FULL_RANGE,
    MatchRecord,
    ReplaceLocation,
    ReplaceSummary,
    ScanOptions,
    ScanRange,
)
from findscan.textmatch import find_next, iter_matches

log = logging.getLogger(__name__)

DEFAULT_OPTIONS = ScanOptions()


def scan_stream(
    stream: BinaryIO,
    file_path: str,
    display_label: str,
    pattern: str,
    options: ScanOptions = DEFAULT_OPTIONS,
    scan_range: ScanRange = FULL_RANGE,
) -> list[MatchRecord]:
    """Scan ``stream`` from its current position for ``pattern``.

    Lines before ``scan_range.start_line`` are read but not matched; reading
    stops before the first line past ``scan_range.end_line``. Emitted line
    numbers are local to the window (its first line is 1).
    """
    if not pattern:
        raise ValueError("Cannot scan for an empty pattern")

    matches: list[MatchRecord] = []
    reader = LineReader(stream)
    line_number = 1
    while not scan_range.is_past_end(line_number):
        raw_line = reader.next_line()
        if not raw_line:
            break
        if scan_range.contains(line_number):
            line = strip_terminator(raw_line)
            local_line = scan_range.to_local(line_number)
            for begin, end in iter_matches(
                line, pattern,
                case_sensitive=options.case_sensitive,
                whole_word=options.whole_word,
            ):
                matches.append(MatchRecord(
                    file_path=file_path,
                    display_label=display_label,
                    line_number=local_line,
                    begin=begin,
                    end=end,
                    line_text=line,
                ))
        line_number += 1
    return matches


def replace_stream(
    stream: BinaryIO,
    output_path: Path,
    locations: Iterable[ReplaceLocation],
    options: ScanOptions,
    search_text: str,
    new_text: str,
    line_offset: int = 0,
) -> ReplaceSummary:
    """Apply a batch of replacements read from ``stream`` and rewrite ``output_path``.

    Each location must still hold ``search_text`` at its recorded position
    (after earlier edits on the same line are accounted for); otherwise it is
    stale and skipped. ``line_offset`` is added to every location's line
    number, mapping document-local numbering onto the physical file.

    Args:
        stream: Binary stream positioned at the start of the file.
        output_path: File rewritten with the result.
        locations: Positions previously reported by a scan.
        options: Case and whole-word rules used to confirm each location.
        search_text: Text each location is expected to hold.
        new_text: Replacement text.
        line_offset: Added to each ``location.line_number``.

    Returns:
        ReplaceSummary counting applied and skipped locations. When nothing
        is applied the file is not rewritten.

    Raises:
        RewriteError: the rewritten content could not be written back.
    """
    if not search_text:
        raise ValueError("Cannot replace an empty search text")

    reader = LineReader(stream)
    buffer: list[str] = []
    current_line = 1
    line = reader.next_line()
    # Growth of the current line caused by replacements already applied to it.
    drift = 0
    applied = 0
    skipped = 0

    for location in sorted(locations, key=lambda loc: loc.sort_key):
        target_line = location.line_number + line_offset
        while current_line < target_line and line:
            buffer.append(line)
            line = reader.next_line()
            current_line += 1
            drift = 0

        begin = location.begin + drift
        end = location.end + drift
        found = None
        if current_line == target_line and line:
            found = find_next(
                line, search_text, begin,
                case_sensitive=options.case_sensitive,
                whole_word=options.whole_word,
            )
        if found != (begin, end):
            log.info(
                "Occurrence no longer matches, replace will be ignored in %s: line %d, col %d",
                output_path, target_line, begin,
            )
            skipped += 1
            continue

        line = line[:begin] + new_text + line[end:]
        drift += len(new_text) - (end - begin)
        applied += 1

    buffer.append(line)
    buffer.extend(reader)

    if applied:
        atomic_write_bytes(output_path, encode("".join(buffer)))
        log.debug("Rewrote %s: %d applied, %d skipped", output_path, applied, skipped)

    return ReplaceSummary(applied=applied, skipped=skipped)
