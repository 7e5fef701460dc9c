"""relpack CLI — main entry point and shared utilities."""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console

from relpack.config import Settings, get_settings

console = Console()


def setup_logging(verbose: int) -> None:
    """Route library debug logs to stderr at -vv."""
    level = logging.DEBUG if verbose >= 2 else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def resolve_settings(release_dir: str | None, sources_dir: str | None = None) -> Settings:
    """Settings with CLI overrides applied on top of env / .env values."""
    settings = get_settings()
    updates: dict = {}
    if release_dir:
        updates["release_dir"] = Path(release_dir)
    if sources_dir:
        updates["sources_dir"] = Path(sources_dir)
    return settings.model_copy(update=updates) if updates else settings


def release_dir_option(fn):
    """Shared --release-dir option."""
    return click.option(
        "--release-dir",
        default=None,
        help="Release directory holding packages/ and src/ (default: $RELPACK_RELEASE_DIR or .)",
    )(fn)


@click.group()
def main():
    """relpack — versioned package tarballs for releases."""
    pass


def cli():
    """Entrypoint that loads .env before running the CLI."""
    from dotenv import load_dotenv

    load_dotenv()
    main()


# Import subcommand modules to register commands
from relpack.cli.build_commands import build, fingerprint  # noqa: E402, F401
from relpack.cli.info_commands import versions  # noqa: E402, F401

main.add_command(build)
main.add_command(fingerprint)
main.add_command(versions)
