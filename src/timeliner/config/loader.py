"""Artifact definition loader for YAML configuration files.

Loads artifact definitions from the built-in configuration directory and
any extra files or directories, and validates them against the
ArtifactDefinition model and the parser registry.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from timeliner.core.errors import ConfigNotFoundError, ConfigValidationError
from timeliner.models.artifact import ArtifactDefinition
from timeliner.parsers import ParserRegistry


class ArtifactConfigLoader:
    """Loads artifact definitions from YAML files."""

    BUILTIN_PATH = Path(__file__).parent / "artifacts"

    def __init__(
        self,
        config_paths: list[Path] | None = None,
        include_builtin: bool = True,
    ) -> None:
        """Initialize the loader.

        Args:
            config_paths: Extra YAML files or directories of YAML files
            include_builtin: Whether to load the bundled definitions first
        """
        self.paths: list[Path] = []
        if include_builtin and self.BUILTIN_PATH.exists():
            self.paths.append(self.BUILTIN_PATH)
        if config_paths:
            self.paths.extend(Path(p) for p in config_paths)

    def load(self) -> tuple[ArtifactDefinition, ...]:
        """Load every definition in configuration order.

        Returns:
            Definitions ordered by file (sorted within a directory), then by
            position within the file

        Raises:
            ConfigNotFoundError: If a configured path does not exist
            ConfigValidationError: If a file is malformed or defines an
                unknown parser or a duplicate (tool, artifact) pair
        """
        definitions: list[ArtifactDefinition] = []
        seen: dict[tuple[str, str], Path] = {}

        for path in self._config_files():
            for definition in self._load_file(path):
                key = (definition.tool.lower(), definition.artifact.lower())
                if key in seen:
                    raise ConfigValidationError(
                        path,
                        [
                            f"Duplicate artifact '{definition.tool}/{definition.artifact}' "
                            f"(first defined in {seen[key]})"
                        ],
                    )
                seen[key] = path
                definitions.append(definition)

        return tuple(definitions)

    def list_definitions(self) -> list[dict[str, Any]]:
        """List definitions as plain dictionaries for display."""
        return [
            {
                "tool": d.tool,
                "artifact": d.artifact,
                "artifact_name": d.category,
                "parser": d.parser,
                "description": d.description,
                "enabled": d.enabled,
            }
            for d in self.load()
        ]

    def _config_files(self) -> list[Path]:
        """Expand configured paths into YAML files."""
        files: list[Path] = []
        for path in self.paths:
            if not path.exists():
                raise ConfigNotFoundError(path)
            if path.is_dir():
                files.extend(sorted(p for p in path.iterdir() if p.suffix in (".yaml", ".yml")))
            else:
                files.append(path)
        return files

    def _load_file(self, path: Path) -> list[ArtifactDefinition]:
        """Load and validate one YAML file.

        Args:
            path: Path to the YAML file

        Returns:
            Definitions in file order
        """
        with open(path, encoding="utf-8") as f:
            content = f.read()

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigValidationError(path, [f"YAML parse error: {e}"])

        if data is None:
            return []
        if isinstance(data, dict):
            data = data.get("artifacts", [])
        if not isinstance(data, list):
            raise ConfigValidationError(path, ["'artifacts' must be a list"])

        definitions: list[ArtifactDefinition] = []
        errors: list[str] = []

        for i, entry in enumerate(data):
            if not isinstance(entry, dict):
                errors.append(f"Artifact {i} must be an object")
                continue

            try:
                definition = ArtifactDefinition.model_validate(entry)
            except ValidationError as e:
                for err in e.errors():
                    location = ".".join(str(part) for part in err["loc"])
                    errors.append(f"Artifact {i}: {location}: {err['msg']}")
                continue

            if ParserRegistry.get(definition.parser) is None:
                errors.append(
                    f"Artifact {i} ({definition.artifact}): unknown parser '{definition.parser}'. "
                    f"Supported: {', '.join(ParserRegistry.supported_parsers())}"
                )
                continue

            definitions.append(definition)

        if errors:
            raise ConfigValidationError(path, errors)

        return definitions
