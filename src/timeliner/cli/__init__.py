"""Timeliner CLI layer."""

__all__ = ["cli"]


def cli() -> None:
    """Lazy import and run the CLI."""
    from timeliner.cli.main import cli as _cli

    _cli()
