"""I/O utilities for JSON, JSONL, and whole-file rewrites.

JSON goes through orjson. Rewrites go to a uniquely named sibling temp file
first and are swapped in with ``os.replace()`` so a target is never left half-written.
"""
from __future__ import annotations

import os
import shutil
import sys
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import orjson

from findscan.scan_types import MatchRecord, RewriteError


def dump_json(obj: object) -> None:
    """Write ``obj`` to stdout as indented JSON."""
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()


def load_jsonl(path: Path) -> list[dict[str, Any]]:
    """Load a JSON Lines file (one JSON object per line). Blank lines skipped."""
    records: list[dict[str, Any]] = []
    for line in path.read_bytes().split(b"\n"):
        line = line.strip()
        if line:
            records.append(orjson.loads(line))
    return records


def save_jsonl(records: Iterable[dict[str, Any]], path: Path) -> None:
    """Save dicts as a JSON Lines file."""
    lines = [orjson.dumps(r) for r in records]
    atomic_write_bytes(path, b"\n".join(lines) + b"\n" if lines else b"")


def save_match_records(records: Iterable[MatchRecord], path: Path) -> int:
    """Persist scan results so a later run can replay them as replacements."""
    rows = [r.to_dict() for r in records]
    save_jsonl(rows, path)
    return len(rows)


def load_match_records(path: Path) -> list[MatchRecord]:
    return [MatchRecord.from_dict(row) for row in load_jsonl(path)]


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Atomic write: write to a temp file beside the target, then os.replace().

    A symlinked target is resolved first, so the linked file is rewritten and
    the link stays in place. The temp file gets a unique name and never
    clobbers an existing sibling.

    Raises:
        RewriteError: the temp file could not be written or swapped in.
    """
    target = Path(os.path.realpath(path))
    tmp: Path | None = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp",
        )
        tmp = Path(tmp_name)
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        if target.exists():
            shutil.copymode(target, tmp)
        else:
            # mkstemp creates 0600; new files get the usual umask-derived mode.
            umask = os.umask(0)
            os.umask(umask)
            os.chmod(tmp, 0o666 & ~umask)
        os.replace(tmp, target)
    except OSError as exc:
        if tmp is not None:
            tmp.unlink(missing_ok=True)
        raise RewriteError(f"Cannot write file '{path}': {exc}") from exc
