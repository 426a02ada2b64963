"""Artifact definition configuration."""

from timeliner.config.loader import ArtifactConfigLoader

__all__ = ["ArtifactConfigLoader"]
