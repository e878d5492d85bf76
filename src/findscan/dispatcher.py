"""Public scan/replace entry points.

Routes container files to the embedded-document layer and everything else
to the plain scanner/replacer. Files that cannot be opened are logged and
skipped; they never raise.
"""
from __future__ import annotations

import io
import logging
from collections.abc import Iterable
from pathlib import Path

from findscan.container import SCENE_FORMAT, ContainerFormat, replace_container, scan_container
from findscan.plain import replace_stream, scan_stream
from findscan.scan_types import MatchRecord, ReplaceLocation, ReplaceSummary, ScanOptions

log = logging.getLogger(__name__)


def is_container(path: str | Path, fmt: ContainerFormat = SCENE_FORMAT) -> bool:
    return fmt.handles(path)


def scan(
    file_path: str | Path,
    pattern: str,
    case_sensitive: bool = False,
    whole_word: bool = False,
) -> list[MatchRecord]:
    """Report every match of ``pattern`` in one file.

    Returns an empty list when the file cannot be opened.
    """
    options = ScanOptions(case_sensitive=case_sensitive, whole_word=whole_word)
    path_str = str(file_path)
    try:
        fh = open(file_path, "rb")
    except OSError as exc:
        log.warning("Cannot open file %s: %s", path_str, exc)
        return []

    with fh:
        if is_container(path_str):
            return scan_container(fh, path_str, pattern, options)
        return scan_stream(fh, path_str, path_str, pattern, options)


def replace(
    relative_path: str,
    absolute_path: str | Path,
    locations: Iterable[ReplaceLocation],
    case_sensitive: bool,
    whole_word: bool,
    search_text: str,
    new_text: str,
) -> ReplaceSummary:
    """Apply previously scanned locations of one file as replacements.

    ``relative_path`` is the ``file_path`` reported by ``scan`` (composite
    for embedded documents); ``absolute_path`` is the file on disk that gets
    rewritten. Stale locations are skipped. A file that cannot be opened is
    skipped; a file that cannot be rewritten raises ``RewriteError``.
    """
    options = ScanOptions(case_sensitive=case_sensitive, whole_word=whole_word)
    target = Path(absolute_path)
    try:
        content = target.read_bytes()
    except OSError as exc:
        log.warning("Cannot open file %s: %s", target, exc)
        return ReplaceSummary()

    # Work from an in-memory snapshot so the handle is closed before the rewrite.
    stream = io.BytesIO(content)
    if is_container(target):
        return replace_container(
            stream, relative_path, target, locations, options, search_text, new_text,
        )
    return replace_stream(stream, target, locations, options, search_text, new_text)
