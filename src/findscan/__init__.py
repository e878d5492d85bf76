"""findscan: find and replace across plain files and scene-embedded scripts."""

from findscan.container import (
    SCENE_FORMAT,
    ContainerFormat,
    ExtractorState,
    extract_sub_documents,
    replace_container,
    scan_container,
)
from findscan.dispatcher import replace, scan
from findscan.line_reader import LineReader
from findscan.plain import replace_stream, scan_stream
from findscan.project import group_by_file, iter_candidate_files, replace_matches, search_paths
from findscan.scan_types import (
    MatchRecord,
    ReplaceLocation,
    ReplaceSummary,
    RewriteError,
    ScanOptions,
    ScanRange,
    SubDocument,
)
from findscan.textmatch import find_next, iter_matches

__all__ = [
    "ContainerFormat",
    "ExtractorState",
    "LineReader",
    "MatchRecord",
    "ReplaceLocation",
    "ReplaceSummary",
    "RewriteError",
    "SCENE_FORMAT",
    "ScanOptions",
    "ScanRange",
    "SubDocument",
    "extract_sub_documents",
    "find_next",
    "group_by_file",
    "iter_candidate_files",
    "iter_matches",
    "replace",
    "replace_container",
    "replace_matches",
    "replace_stream",
    "scan",
    "scan_container",
    "scan_stream",
    "search_paths",
]
