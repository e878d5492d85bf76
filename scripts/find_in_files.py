#!/usr/bin/env python3
"""Search files (and scripts embedded in scene files) for a literal pattern.

Prints structured JSON results to stdout with log messages to stderr.
With ``--out`` the individual matches are also saved as JSONL so that
``replace_in_files.py`` can replay them later.

Usage:
    python3 scripts/find_in_files.py --pattern "player_speed" project/
    python3 scripts/find_in_files.py --pattern speed --whole-words \
      --include gd --include tscn --out matches.jsonl project/
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from findscan.io_utils import dump_json, save_match_records
from findscan.project import DEFAULT_EXCLUDED_DIRS, group_by_file, search_paths
from findscan.scan_types import MatchRecord, RewriteError, ScanOptions

log = logging.getLogger("find_in_files")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Search files and scene-embedded scripts for a literal pattern."
    )
    parser.add_argument("paths", nargs="+", type=Path, help="Files or directories to search")
    parser.add_argument("--pattern", required=True, help="Literal text to search for")
    parser.add_argument(
        "--match-case", action="store_true", help="Case-sensitive matching (default: ignore case)"
    )
    parser.add_argument(
        "--whole-words",
        action="store_true",
        help="Only match occurrences not touching letters, digits or underscores",
    )
    parser.add_argument(
        "--include",
        action="append",
        default=None,
        help="File extension to search (repeatable, e.g. --include gd --include tscn)",
    )
    parser.add_argument(
        "--exclude-dir",
        action="append",
        default=[],
        help="Additional directory name to skip (repeatable)",
    )
    parser.add_argument(
        "--out", type=Path, default=None, help="Save matches as JSONL for a later replace"
    )
    parser.add_argument(
        "--max-results",
        type=int,
        default=200,
        help="Maximum number of matches echoed to stdout (default: 200)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_results < 0:
        parser.error("--max-results must be >= 0")
    return args


def build_report(records: list[MatchRecord], *, pattern: str, max_results: int) -> dict[str, object]:
    grouped = group_by_file(records)
    return {
        "pattern": pattern,
        "total_matches": len(records),
        "files_with_matches": len(grouped),
        "per_file": {path: len(rows) for path, rows in grouped.items()},
        "matches": [r.to_dict() for r in records[:max_results]],
        "truncated": len(records) > max_results,
    }


def run(args: argparse.Namespace) -> int:
    if not args.pattern:
        log.error("Pattern must not be empty")
        return 1

    options = ScanOptions(case_sensitive=args.match_case, whole_word=args.whole_words)
    records = search_paths(
        args.paths,
        args.pattern,
        options,
        include_extensions=args.include,
        excluded_dirs=DEFAULT_EXCLUDED_DIRS | set(args.exclude_dir),
    )

    if args.out is not None:
        try:
            count = save_match_records(records, args.out)
        except RewriteError as exc:
            log.error("%s", exc)
            return 2
        log.info("Saved %d matches to %s", count, args.out)

    dump_json(build_report(records, pattern=args.pattern, max_results=args.max_results))
    log.info("%d matches in %d files", len(records), len(group_by_file(records)))
    return 0


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    sys.exit(run(args))


if __name__ == "__main__":
    main()
