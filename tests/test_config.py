"""Tests for artifact definition loading and run options."""

from datetime import date

import pytest
from pydantic import ValidationError

from timeliner.config import ArtifactConfigLoader
from timeliner.core.errors import ConfigNotFoundError, ConfigValidationError
from timeliner.models.error import ErrorCode
from timeliner.models.options import RunOptions
from timeliner.parsers import ParserRegistry

CUSTOM_YAML = """
artifacts:
  - artifact: Deleted
    tool: Lab
    description: File Deletion
    parser: eztools.deleted
    discovery:
      filename_patterns: ["RBCmd"]
"""


class TestArtifactConfigLoader:
    """Tests for ArtifactConfigLoader."""

    def test_builtin_definitions(self):
        definitions = ArtifactConfigLoader().load()
        keys = [d.key for d in definitions]

        assert ("EZTools", "Deleted") in keys
        assert ("Axiom", "IEHistory") in keys
        assert ("Nirsoft", "WebHistory") in keys
        assert ("Hayabusa", "Detections") in keys
        assert len(set(keys)) == len(keys)
        assert all(ParserRegistry.get(d.parser) for d in definitions)

    def test_builtin_files_load_in_sorted_order(self):
        tools = [d.tool for d in ArtifactConfigLoader().load()]
        first_seen = list(dict.fromkeys(tools))

        assert first_seen == ["Axiom", "EZTools", "Hayabusa", "Nirsoft"]

    def test_extra_file_is_appended(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(CUSTOM_YAML, encoding="utf-8")

        definitions = ArtifactConfigLoader(config_paths=[path]).load()

        assert definitions[-1].key == ("Lab", "Deleted")
        assert definitions[-1].category == "Deleted"

    def test_without_builtin(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(CUSTOM_YAML, encoding="utf-8")

        definitions = ArtifactConfigLoader(config_paths=[path], include_builtin=False).load()

        assert [d.key for d in definitions] == [("Lab", "Deleted")]

    def test_top_level_list(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text(
            "- artifact: A\n  tool: T\n  description: d\n  parser: eztools.lnk\n",
            encoding="utf-8",
        )

        definitions = ArtifactConfigLoader(config_paths=[tmp_path], include_builtin=False).load()

        assert [d.parser for d in definitions] == ["eztools.lnk"]

    def test_duplicate_definition(self, tmp_path):
        path = tmp_path / "dup.yaml"
        path.write_text(CUSTOM_YAML.replace("tool: Lab", "tool: ezTOOLS"), encoding="utf-8")

        with pytest.raises(ConfigValidationError) as exc_info:
            ArtifactConfigLoader(config_paths=[path]).load()

        assert "Duplicate" in exc_info.value.error.context["errors"][0]

    def test_unknown_parser(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(CUSTOM_YAML.replace("eztools.deleted", "eztools.unknown"), encoding="utf-8")

        with pytest.raises(ConfigValidationError) as exc_info:
            ArtifactConfigLoader(config_paths=[path], include_builtin=False).load()

        assert exc_info.value.error.code == ErrorCode.CONFIG_VALIDATION_ERROR
        assert "unknown parser" in exc_info.value.error.context["errors"][0]

    def test_unknown_date_format(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(CUSTOM_YAML + "    date_format: ymd\n", encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            ArtifactConfigLoader(config_paths=[path], include_builtin=False).load()

    def test_unknown_field(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(CUSTOM_YAML + "    colour: blue\n", encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            ArtifactConfigLoader(config_paths=[path], include_builtin=False).load()

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("artifacts: [\n", encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            ArtifactConfigLoader(config_paths=[path], include_builtin=False).load()

    def test_missing_path(self, tmp_path):
        with pytest.raises(ConfigNotFoundError):
            ArtifactConfigLoader(config_paths=[tmp_path / "missing.yaml"]).load()

    def test_list_definitions(self):
        listed = ArtifactConfigLoader().list_definitions()

        assert {"tool", "artifact", "artifact_name", "parser", "description", "enabled"} <= set(listed[0])


class TestRunOptions:
    """Tests for RunOptions."""

    def test_defaults(self, tmp_path):
        options = RunOptions(base_dir=tmp_path)

        assert options.output_format == "csv"
        assert options.workers == 1
        assert options.input_dir_for("EZTools") == tmp_path

    def test_inverted_date_range(self, tmp_path):
        with pytest.raises(ValidationError):
            RunOptions(base_dir=tmp_path, start_date=date(2023, 7, 1), end_date=date(2023, 6, 1))

    def test_selection_is_case_insensitive(self, tmp_path):
        options = RunOptions(base_dir=tmp_path, tools=["eztools"], artifacts=["DELETED"])

        assert options.selects("EZTools", "Deleted")
        assert not options.selects("EZTools", "Prefetch")
        assert not options.selects("Axiom", "Deleted")
