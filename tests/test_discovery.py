"""Tests for artifact file discovery."""

import os
from pathlib import Path

from conftest import CHROME_HEADER, RBCMD_HEADER, chrome_rows, rbcmd_rows, walk_denying

from timeliner.core.discovery import (
    find_artifact_files,
    has_required_headers,
    relative_evidence_path,
)
from timeliner.models.artifact import DiscoveryRule


class TestFindArtifactFiles:
    """Tests for find_artifact_files."""

    def test_filename_pattern_and_required_headers(self, tmp_path, write_csv):
        write_csv(tmp_path / "out" / "20230601_RBCmd_Output.csv", RBCMD_HEADER, rbcmd_rows(1))
        write_csv(tmp_path / "out" / "20230601_PECmd_Output.csv", ["ExecutableName"], [])
        rule = DiscoveryRule(filename_patterns=["RBCmd"], required_headers=["DeletedOn"])

        files = find_artifact_files(tmp_path, tmp_path, rule)

        assert [f.name for f in files] == ["20230601_RBCmd_Output.csv"]

    def test_folder_pattern_matches_any_segment(self, tmp_path, write_csv):
        write_csv(tmp_path / "EZTools" / "FileDeletion" / "host" / "export.csv", RBCMD_HEADER, [])
        rule = DiscoveryRule(foldername_patterns=["FileDeletion"])

        files = find_artifact_files(tmp_path, tmp_path, rule)

        assert [f.name for f in files] == ["export.csv"]

    def test_required_headers_exclude_folder_matches(self, tmp_path, write_csv):
        write_csv(tmp_path / "FileDeletion" / "good.csv", RBCMD_HEADER, [])
        write_csv(tmp_path / "FileDeletion" / "other.csv", ["Foo", "Bar"], [])
        rule = DiscoveryRule(foldername_patterns=["FileDeletion"], required_headers=["deletedon"])

        files = find_artifact_files(tmp_path, tmp_path, rule)

        assert [f.name for f in files] == ["good.csv"]

    def test_extension_filter(self, tmp_path, write_csv):
        write_csv(tmp_path / "RBCmd_Output.csv", RBCMD_HEADER, [])
        (tmp_path / "RBCmd_Output.txt").write_text("DeletedOn\n", encoding="utf-8")
        rule = DiscoveryRule(filename_patterns=["RBCmd"])

        files = find_artifact_files(tmp_path, tmp_path, rule)

        assert [f.name for f in files] == ["RBCmd_Output.csv"]

    def test_extensions_are_normalized(self):
        rule = DiscoveryRule(file_extensions=["CSV", ".TSV"])
        assert rule.file_extensions == [".csv", ".tsv"]

    def test_strict_filename_match(self, tmp_path, write_csv):
        write_csv(tmp_path / "Chrome Web History.csv", CHROME_HEADER, chrome_rows(1))
        write_csv(tmp_path / "Chrome Web History Archive.csv", CHROME_HEADER, chrome_rows(1))
        rule = DiscoveryRule(filename_patterns=["Chrome Web History"], strict_filename_match=True)

        files = find_artifact_files(tmp_path, tmp_path, rule)

        assert [f.name for f in files] == ["Chrome Web History.csv"]

    def test_substring_match_is_case_insensitive(self, tmp_path, write_csv):
        write_csv(tmp_path / "chrome web history.csv", CHROME_HEADER, [])
        rule = DiscoveryRule(filename_patterns=["Chrome Web History"])

        assert len(find_artifact_files(tmp_path, tmp_path, rule)) == 1

    def test_glob_pattern(self, tmp_path, write_csv):
        write_csv(tmp_path / "Internet Explorer 10-11 Main History.csv", ["URL"], [])
        write_csv(tmp_path / "Internet Explorer Cookies.csv", ["URL"], [])
        rule = DiscoveryRule(filename_patterns=["*Internet Explorer*History*"])

        files = find_artifact_files(tmp_path, tmp_path, rule)

        assert [f.name for f in files] == ["Internet Explorer 10-11 Main History.csv"]

    def test_folder_segments_are_relative_to_base(self, tmp_path, write_csv):
        base = tmp_path / "FileDeletion"
        write_csv(base / "export.csv", RBCMD_HEADER, [])
        rule = DiscoveryRule(foldername_patterns=["FileDeletion"])

        assert find_artifact_files(base, base, rule) == []

    def test_nested_results_are_sorted(self, tmp_path, write_csv):
        for folder in ("b", "a", "c/d"):
            write_csv(tmp_path / folder / "RBCmd_Output.csv", RBCMD_HEADER, [])
        rule = DiscoveryRule(filename_patterns=["RBCmd"])

        files = find_artifact_files(tmp_path, tmp_path, rule)
        relative = [relative_evidence_path(f, tmp_path) for f in files]

        assert relative == ["a/RBCmd_Output.csv", "b/RBCmd_Output.csv", "c/d/RBCmd_Output.csv"]

    def test_missing_input_directory(self, tmp_path):
        rule = DiscoveryRule(filename_patterns=["RBCmd"])
        assert find_artifact_files(tmp_path / "missing", tmp_path, rule) == []

    def test_empty_rule_matches_every_csv(self, tmp_path, write_csv):
        write_csv(tmp_path / "one.csv", ["A"], [])
        write_csv(tmp_path / "two.csv", ["A"], [])

        assert len(find_artifact_files(tmp_path, tmp_path, DiscoveryRule())) == 2


class TestHelpers:
    """Tests for header sniffing and evidence paths."""

    def test_has_required_headers_with_bom(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes(b"\xef\xbb\xbfDeletedOn,FileName\r\n")

        assert has_required_headers(path, ["DeletedOn", "filename"])
        assert not has_required_headers(path, ["FileSize"])

    def test_unreadable_header_is_kept(self, tmp_path):
        assert has_required_headers(tmp_path / "missing.csv", ["DeletedOn"])

    def test_relative_evidence_path(self, tmp_path):
        path = tmp_path / "EZTools" / "FileDeletion" / "x.csv"
        assert relative_evidence_path(path, tmp_path) == "EZTools/FileDeletion/x.csv"

    def test_evidence_path_outside_base(self, tmp_path):
        path = tmp_path / "exports" / "x.csv"
        assert relative_evidence_path(path, tmp_path / "case") == "../exports/x.csv"

    def test_undecodable_header_is_kept(self, tmp_path):
        path = tmp_path / "b_RBCmd.csv"
        path.write_bytes(b"\xff\xfe\x00D\x00e\xffgarbage\r\n")

        assert has_required_headers(path, ["DeletedOn"])


class TestUnreadableDirectories:
    """Tests for directories the walk cannot list."""

    def test_skipped_directory_is_reported(self, tmp_path, write_csv, monkeypatch):
        write_csv(tmp_path / "open" / "RBCmd.csv", RBCMD_HEADER, [])
        write_csv(tmp_path / "locked" / "RBCmd.csv", RBCMD_HEADER, [])
        monkeypatch.setattr(os, "walk", walk_denying("locked"))
        skipped: list[OSError] = []

        files = find_artifact_files(tmp_path, tmp_path, DiscoveryRule(), on_skip=skipped.append)

        assert [f.parent.name for f in files] == ["open"]
        assert [Path(e.filename).name for e in skipped] == ["locked"]

    def test_skip_without_callback_continues(self, tmp_path, write_csv, monkeypatch):
        write_csv(tmp_path / "open" / "RBCmd.csv", RBCMD_HEADER, [])
        write_csv(tmp_path / "locked" / "RBCmd.csv", RBCMD_HEADER, [])
        monkeypatch.setattr(os, "walk", walk_denying("locked"))

        files = find_artifact_files(tmp_path, tmp_path, DiscoveryRule())

        assert [f.parent.name for f in files] == ["open"]

    def test_corrupt_header_stays_a_candidate(self, tmp_path, write_csv):
        write_csv(tmp_path / "a_RBCmd.csv", RBCMD_HEADER, [])
        (tmp_path / "b_RBCmd.csv").write_bytes(b"\xff\xfe\x00D\x00e\xffgarbage\r\n")
        rule = DiscoveryRule(filename_patterns=["RBCmd"], required_headers=["DeletedOn"])

        files = find_artifact_files(tmp_path, tmp_path, rule)

        assert [f.name for f in files] == ["a_RBCmd.csv", "b_RBCmd.csv"]
