"""Artifact file discovery across nested export trees."""

import csv
import os
from collections.abc import Callable, Iterable
from fnmatch import fnmatch
from pathlib import Path

from timeliner.core.logging import debug, warning
from timeliner.models.artifact import DiscoveryRule

_GLOB_CHARS = frozenset("*?[")


def find_artifact_files(
    input_dir: Path,
    base_dir: Path,
    rule: DiscoveryRule,
    on_skip: Callable[[OSError], None] | None = None,
) -> list[Path]:
    """Find export files for an artifact.

    Args:
        input_dir: Directory to scan recursively
        base_dir: Run base directory; folder patterns are matched against
            path segments relative to it when input_dir lies below it
        rule: Discovery rule of the artifact definition
        on_skip: Called with the error for each directory that cannot be
            listed; the walk continues past it

    Returns:
        Matching files in sorted order (empty if nothing matches)
    """
    input_dir = Path(input_dir).resolve()
    if not input_dir.is_dir():
        debug(f"Input directory does not exist: {input_dir}", path=str(input_dir))
        return []

    anchor = _anchor(input_dir, Path(base_dir).resolve())
    matches: list[Path] = []

    def _on_error(exc: OSError) -> None:
        if on_skip is not None:
            on_skip(exc)
        else:
            warning(f"Skipping unreadable directory: {exc.filename} ({exc.strerror})", path=exc.filename)

    for dirpath, dirnames, filenames in os.walk(input_dir, onerror=_on_error):
        dirnames.sort()
        folders = Path(dirpath).relative_to(anchor).parts

        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if not _has_extension(filename, rule.file_extensions):
                continue
            if not _matches_rule(filename, folders, rule):
                continue
            if rule.required_headers and not has_required_headers(path, rule.required_headers):
                debug(f"Skipping {path.name}: required headers missing", path=str(path))
                continue
            matches.append(path)

    return matches


def has_required_headers(path: Path, required: Iterable[str]) -> bool:
    """Check a CSV header row for required column names.

    Files whose header cannot be read or decoded are kept as candidates so
    the parser can report them as parse failures.
    """
    try:
        with open(path, encoding="utf-8-sig", newline="") as handle:
            header = next(csv.reader(handle), [])
    except (OSError, UnicodeError, csv.Error):
        return True

    present = {column.strip().lower() for column in header}
    return all(name.strip().lower() in present for name in required)


def relative_evidence_path(path: Path, base_dir: Path) -> str:
    """Path of an export file relative to the base directory, '/' separated."""
    try:
        return Path(path).resolve().relative_to(Path(base_dir).resolve()).as_posix()
    except ValueError:
        return Path(os.path.relpath(Path(path).resolve(), Path(base_dir).resolve())).as_posix()


def _anchor(input_dir: Path, base_dir: Path) -> Path:
    """Directory that folder segments are taken relative to."""
    try:
        input_dir.relative_to(base_dir)
    except ValueError:
        return input_dir
    return base_dir


def _has_extension(filename: str, extensions: list[str]) -> bool:
    if not extensions:
        return True
    return filename.lower().endswith(tuple(extensions))


def _matches_rule(filename: str, folders: tuple[str, ...], rule: DiscoveryRule) -> bool:
    if not rule.filename_patterns and not rule.foldername_patterns:
        return True

    stem = Path(filename).stem
    for pattern in rule.filename_patterns:
        if _matches(filename, pattern, rule.strict_filename_match) or (
            rule.strict_filename_match and _matches(stem, pattern, strict=True)
        ):
            return True

    for folder in folders:
        for pattern in rule.foldername_patterns:
            if _matches(folder, pattern, rule.strict_folder_match):
                return True

    return False


def _matches(value: str, pattern: str, strict: bool) -> bool:
    value, pattern = value.lower(), pattern.lower()
    if _GLOB_CHARS.intersection(pattern):
        return fnmatch(value, pattern)
    if strict:
        return value == pattern
    return pattern in value
