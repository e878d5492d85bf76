"""Tests for findscan.dispatcher routing and failure handling."""
from __future__ import annotations

import logging
from pathlib import Path

import pytest

from findscan.dispatcher import is_container, replace, scan
from findscan.scan_types import ReplaceLocation, ReplaceSummary

SCENE = (
    '[sub_resource type="GDScript" id="s1"]\n'
    'script/source = "extends Node\n'
    "var hp = 3\n"
    '"\n'
    '[node name="Hero" type="Node"]\n'
    'script = SubResource("s1")\n'
)


class TestRouting:
    def test_container_extension_is_case_insensitive(self) -> None:
        assert is_container("a/level.tscn")
        assert is_container("a/LEVEL.TSCN")
        assert not is_container("a/level.tres")
        assert not is_container("a/player.gd")

    def test_plain_file(self, tmp_path: Path) -> None:
        path = tmp_path / "player.gd"
        path.write_text("var hp = 3\nhp -= 1\n")
        records = scan(path, "hp", whole_word=True)
        assert [(r.line_number, r.begin) for r in records] == [(1, 4), (2, 0)]
        assert records[0].file_path == str(path)
        assert records[0].display_label == str(path)

    def test_container_file(self, tmp_path: Path) -> None:
        path = tmp_path / "level.TSCN"
        path.write_text(SCENE)
        records = scan(path, "hp")
        assert [(r.file_path, r.line_number, r.begin, r.end) for r in records] == [
            (f"{path}::s1", 2, 4, 6),
        ]
        assert records[0].display_label == f"{path}::Hero"

    def test_container_replace_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "level.tscn"
        path.write_text(SCENE)
        records = scan(path, "hp")
        summary = replace(
            records[0].file_path, path, [r.location() for r in records], False, False, "hp", "health",
        )
        assert summary == ReplaceSummary(applied=1, skipped=0)
        assert "var health = 3\n" in path.read_text()
        assert scan(path, "hp") == []

    def test_plain_replace_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "player.gd"
        path.write_text("var hp = 3\nhp -= 1\n")
        records = scan(path, "hp", case_sensitive=True)
        replace("player.gd", path, [r.location() for r in records], True, False, "hp", "health")
        assert path.read_text() == "var health = 3\nhealth -= 1\n"


class TestFailures:
    def test_scan_missing_file_returns_empty(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="findscan.dispatcher"):
            assert scan(tmp_path / "missing.gd", "x") == []
        assert "Cannot open file" in caplog.text

    def test_scan_directory_returns_empty(self, tmp_path: Path) -> None:
        assert scan(tmp_path, "x") == []

    def test_replace_missing_file_is_a_no_op(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture,
    ) -> None:
        missing = tmp_path / "missing.gd"
        with caplog.at_level(logging.WARNING, logger="findscan.dispatcher"):
            summary = replace("missing.gd", missing, [ReplaceLocation(1, 0, 1)], False, False, "x", "y")
        assert summary == ReplaceSummary()
        assert not missing.exists()
        assert "Cannot open file" in caplog.text

    def test_stale_replace_logs_diagnostic(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture,
    ) -> None:
        path = tmp_path / "a.txt"
        path.write_text("abc\n")
        with caplog.at_level(logging.INFO, logger="findscan.plain"):
            summary = replace("a.txt", path, [ReplaceLocation(1, 1, 2)], False, False, "x", "y")
        assert summary.skipped == 1
        assert "no longer matches" in caplog.text
        assert path.read_text() == "abc\n"
