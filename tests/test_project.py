"""Tests for findscan.project multi-file orchestration."""
from __future__ import annotations

from pathlib import Path

import pytest

from findscan.project import (
    group_by_file,
    iter_candidate_files,
    replace_matches,
    resolve_disk_path,
    search_paths,
)
from findscan.scan_types import MatchRecord, ScanOptions

SCENE = (
    '[sub_resource type="GDScript" id="s1"]\n'
    'script/source = "extends Node\n'
    "var speed = 3\n"
    '"\n'
    '[node name="Hero" type="Node"]\n'
    'script = SubResource("s1")\n'
)


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    (tmp_path / "scripts").mkdir()
    (tmp_path / "scripts" / "player.gd").write_text("var speed = 1\nfunc go():\n\tspeed += 1\n")
    (tmp_path / "scripts" / "notes.txt").write_text("speed notes\n")
    (tmp_path / "level.tscn").write_text(SCENE)
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "config.gd").write_text("speed\n")
    return tmp_path


class TestCandidateFiles:
    def test_sorted_walk_skips_excluded_dirs(self, project: Path) -> None:
        files = [p.relative_to(project).as_posix() for p in iter_candidate_files(project)]
        assert files == ["level.tscn", "scripts/notes.txt", "scripts/player.gd"]

    def test_extension_filter(self, project: Path) -> None:
        files = [p.name for p in iter_candidate_files(project, ["gd", ".TSCN"])]
        assert files == ["level.tscn", "player.gd"]

    def test_file_root_yields_itself(self, project: Path) -> None:
        path = project / "scripts" / "notes.txt"
        assert list(iter_candidate_files(path, ["gd"])) == [path]

    def test_missing_root(self, tmp_path: Path) -> None:
        assert list(iter_candidate_files(tmp_path / "nope")) == []


class TestSearchAndReplace:
    def test_search_collects_plain_and_embedded_matches(self, project: Path) -> None:
        records = search_paths([project], "speed", ScanOptions(whole_word=True), ["gd", "tscn"])
        grouped = group_by_file(records)
        assert list(grouped) == [
            f"{project / 'level.tscn'}::s1",
            str(project / "scripts" / "player.gd"),
        ]
        assert len(grouped[str(project / "scripts" / "player.gd")]) == 2

    def test_default_options_ignore_case(self, project: Path) -> None:
        (project / "scripts" / "loud.gd").write_text("SPEED = 9\n")
        records = search_paths([project / "scripts" / "loud.gd"], "speed")
        assert [(r.line_number, r.begin, r.end) for r in records] == [(1, 0, 5)]

    def test_empty_pattern_rejected(self, project: Path) -> None:
        with pytest.raises(ValueError):
            search_paths([project], "")

    def test_replace_matches_round_trip(self, project: Path) -> None:
        records = search_paths([project], "speed", include_extensions=["gd", "tscn"])
        summaries = replace_matches(records, "speed", "velocity")
        assert sum(s.applied for s in summaries.values()) == 3
        assert search_paths([project], "speed", include_extensions=["gd", "tscn"]) == []
        assert "var velocity = 3\n" in (project / "level.tscn").read_text()
        assert (project / "scripts" / "notes.txt").read_text() == "speed notes\n"

    def test_replace_matches_resolves_relative_paths(self, project: Path) -> None:
        record = MatchRecord("scripts/player.gd", "scripts/player.gd", 1, 4, 9, "var speed = 1")
        summaries = replace_matches([record], "speed", "pace", root=project)
        assert summaries["scripts/player.gd"].applied == 1
        assert (project / "scripts" / "player.gd").read_text().startswith("var pace = 1\n")


class TestHelpers:
    def test_resolve_disk_path(self, tmp_path: Path) -> None:
        assert resolve_disk_path("res/a.tscn::s1", tmp_path) == tmp_path / "res" / "a.tscn"
        assert resolve_disk_path("res/a.gd") == Path("res/a.gd")
        assert resolve_disk_path(str(tmp_path / "a.gd"), Path("/elsewhere")) == tmp_path / "a.gd"

    def test_group_by_file_keeps_order(self) -> None:
        rows = [
            MatchRecord("b", "b", 1, 0, 1, "x"),
            MatchRecord("a", "a", 1, 0, 1, "x"),
            MatchRecord("b", "b", 2, 0, 1, "x"),
        ]
        grouped = group_by_file(rows)
        assert list(grouped) == ["b", "a"]
        assert [r.line_number for r in grouped["b"]] == [1, 2]
