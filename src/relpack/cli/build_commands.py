"""Build commands — relpack build, relpack fingerprint."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.panel import Panel

from relpack.cli.main import console, release_dir_option, resolve_settings, setup_logging
from relpack.core.errors import RelpackError


@click.command()
@click.argument("name")
@release_dir_option
@click.option("--sources-dir", default=None, help="Override sources directory (default: <release-dir>/src)")
@click.option("--final", is_flag=True, default=False, help="Promote the package to a final version")
@click.option("--blobstore-dir", default=None, help="Local blob store directory for final tarballs")
@click.option("--verbose", "-v", count=True, help="Verbosity level: -v cache lookups, -vv debug details")
def build(
    name: str,
    release_dir: str | None,
    sources_dir: str | None,
    final: bool,
    blobstore_dir: str | None,
    verbose: int,
):
    """Build package NAME, reusing a cached tarball when nothing changed.

    Reads the spec from <release-dir>/packages/NAME/spec.
    """
    from relpack.blobstore.local import LocalBlobStore
    from relpack.build.builder import PackageBuilder
    from relpack.core.logging import BuildLogger, Verbosity

    setup_logging(verbose)
    settings = resolve_settings(release_dir, sources_dir)
    build_logger = BuildLogger(
        verbosity=Verbosity(min(verbose, Verbosity.DEBUG)),
        log_dir=settings.log_dir,
        console=console,
    )

    try:
        blobstore = None
        if final or blobstore_dir:
            blobstore = LocalBlobStore(Path(blobstore_dir) if blobstore_dir else settings.blobstore_dir)

        with PackageBuilder(
            settings.package_spec_path(name),
            release_dir=settings.release_dir,
            final=final,
            blobstore=blobstore,
            sources_dir=settings.resolved_sources_dir,
            build_logger=build_logger,
        ) as builder:
            result = builder.build()
    except RelpackError as e:
        console.print(f"[red]Build failed:[/red] {e}")
        sys.exit(1)
    finally:
        build_logger.close()

    tier = "final" if result.source == "final" or result.promoted else "dev"
    console.print(
        Panel(
            f"[bold]Package:[/bold] {result.name}\n"
            f"[bold]Version:[/bold] {result.version} ({tier})\n"
            f"[bold]Source:[/bold] {result.source}"
            + (" + uploaded" if result.promoted else "")
            + f"\n[bold]Fingerprint:[/bold] {result.fingerprint}\n"
            f"[bold]Tarball:[/bold] {result.tarball_path}",
            title="[bold cyan]relpack build[/bold cyan]",
            border_style="cyan",
        )
    )


@click.command()
@click.argument("name")
@release_dir_option
@click.option("--sources-dir", default=None, help="Override sources directory (default: <release-dir>/src)")
def fingerprint(name: str, release_dir: str | None, sources_dir: str | None):
    """Print the fingerprint of package NAME and the files that went into it."""
    from relpack.build.builder import PackageBuilder

    settings = resolve_settings(release_dir, sources_dir)
    try:
        builder = PackageBuilder(
            settings.package_spec_path(name),
            release_dir=settings.release_dir,
            sources_dir=settings.resolved_sources_dir,
        )
        digest = builder.fingerprint
    except RelpackError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    console.print(f"[bold]{name}[/bold] {digest}")
    for filename in builder.resolved_globs:
        console.print(f"  [dim]{filename}[/dim]")
