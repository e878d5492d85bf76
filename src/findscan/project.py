"""Project-wide search and replace built on the per-file dispatcher.

Files are processed one after another; every per-file call is independent.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

from findscan.container import split_composite_path
from findscan.dispatcher import replace, scan
from findscan.plain import DEFAULT_OPTIONS
from findscan.scan_types import MatchRecord, ReplaceSummary, ScanOptions

log = logging.getLogger(__name__)

DEFAULT_EXCLUDED_DIRS = frozenset({".git", ".hg", ".svn", "__pycache__", ".godot", ".import"})


def _normalize_extensions(extensions: Iterable[str] | None) -> frozenset[str] | None:
    if extensions is None:
        return None
    normalized = {
        ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        for ext in extensions
        if ext
    }
    return frozenset(normalized) or None


def iter_candidate_files(
    root: Path,
    include_extensions: Iterable[str] | None = None,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> Iterator[Path]:
    """Yield files under ``root`` in sorted order.

    A file root yields itself regardless of its extension. Directories named
    in ``excluded_dirs`` are not descended into.
    """
    if root.is_file():
        yield root
        return
    if not root.is_dir():
        log.warning("Search root not found: %s", root)
        return

    extensions = _normalize_extensions(include_extensions)
    excluded = frozenset(excluded_dirs)
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        if excluded.intersection(path.relative_to(root).parts[:-1]):
            continue
        if extensions is not None and path.suffix.lower() not in extensions:
            continue
        yield path


def search_paths(
    paths: Sequence[Path],
    pattern: str,
    options: ScanOptions = DEFAULT_OPTIONS,
    include_extensions: Iterable[str] | None = None,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> list[MatchRecord]:
    """Scan every candidate file under ``paths`` and concatenate the matches."""
    if not pattern:
        raise ValueError("Cannot search for an empty pattern")

    include = list(include_extensions) if include_extensions is not None else None
    excluded = frozenset(excluded_dirs)
    results: list[MatchRecord] = []
    files_scanned = 0
    for root in paths:
        for path in iter_candidate_files(root, include, excluded):
            results.extend(scan(path, pattern, options.case_sensitive, options.whole_word))
            files_scanned += 1
    log.debug("Scanned %d files, %d matches", files_scanned, len(results))
    return results


def group_by_file(records: Iterable[MatchRecord]) -> dict[str, list[MatchRecord]]:
    """Group records by ``file_path`` keeping first-seen order."""
    grouped: dict[str, list[MatchRecord]] = {}
    for record in records:
        grouped.setdefault(record.file_path, []).append(record)
    return grouped


def resolve_disk_path(file_path: str, root: Path | None = None) -> Path:
    """File on disk holding the matches reported under ``file_path``."""
    parts = split_composite_path(file_path)
    path = Path(parts[0] if parts is not None else file_path)
    if root is not None and not path.is_absolute():
        path = root / path
    return path


def replace_matches(
    records: Iterable[MatchRecord],
    search_text: str,
    new_text: str,
    options: ScanOptions = DEFAULT_OPTIONS,
    root: Path | None = None,
) -> dict[str, ReplaceSummary]:
    """Replay scan results as replacements, one ``replace`` call per file path."""
    summaries: dict[str, ReplaceSummary] = {}
    for file_path, file_records in group_by_file(records).items():
        summaries[file_path] = replace(
            file_path,
            resolve_disk_path(file_path, root),
            [r.location() for r in file_records],
            options.case_sensitive,
            options.whole_word,
            search_text,
            new_text,
        )
    return summaries
