#!/usr/bin/env python3
"""Replay matches saved by ``find_in_files.py --out`` as replacements.

Every saved match is re-checked against the current file content; matches
whose text changed since the scan are skipped and counted. Prints a JSON
summary to stdout.

Usage:
    python3 scripts/replace_in_files.py --matches matches.jsonl \
      --search player_speed --with move_speed
    python3 scripts/replace_in_files.py --matches matches.jsonl \
      --search speed --with velocity --whole-words --root project/
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from findscan.io_utils import dump_json, load_match_records
from findscan.project import replace_matches
from findscan.scan_types import ReplaceSummary, RewriteError, ScanOptions

log = logging.getLogger("replace_in_files")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Apply saved find-in-files matches as replacements."
    )
    parser.add_argument(
        "--matches", required=True, type=Path, help="JSONL file written by find_in_files.py --out"
    )
    parser.add_argument("--search", required=True, help="Text each match is expected to hold")
    parser.add_argument("--with", dest="new_text", required=True, help="Replacement text")
    parser.add_argument("--match-case", action="store_true", help="Case-sensitive re-check")
    parser.add_argument(
        "--whole-words", action="store_true", help="Whole-word re-check"
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Directory relative match paths are resolved against (default: cwd)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Report what would be replayed")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def run(args: argparse.Namespace) -> int:
    if not args.matches.exists():
        log.error("Matches file not found: %s", args.matches)
        return 1

    records = load_match_records(args.matches)
    if args.dry_run:
        dump_json({"matches": len(records), "files": sorted({r.file_path for r in records})})
        return 0

    options = ScanOptions(case_sensitive=args.match_case, whole_word=args.whole_words)
    try:
        summaries = replace_matches(records, args.search, args.new_text, options, root=args.root)
    except RewriteError as exc:
        log.error("%s", exc)
        return 2

    total = sum(summaries.values(), ReplaceSummary())
    dump_json({
        "applied": total.applied,
        "skipped": total.skipped,
        "per_file": {
            path: {"applied": s.applied, "skipped": s.skipped}
            for path, s in summaries.items()
        },
    })
    log.info("Applied %d replacements, skipped %d stale matches", total.applied, total.skipped)
    return 0


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    sys.exit(run(args))


if __name__ == "__main__":
    main()
