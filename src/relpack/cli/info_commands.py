"""Index browsing command — relpack versions."""

from __future__ import annotations

import sys

import click
from rich import box
from rich.table import Table

from relpack.cli.main import console, release_dir_option, resolve_settings
from relpack.core.errors import RelpackError


@click.command()
@click.argument("name")
@release_dir_option
def versions(name: str, release_dir: str | None):
    """List dev and final versions recorded for package NAME."""
    from relpack.build.index import ArtifactIndex

    settings = resolve_settings(release_dir)
    package_dir = settings.release_dir / "packages" / name

    found_any = False
    for tier in ("dev", "final"):
        try:
            index = ArtifactIndex(package_dir / f"{tier}_builds.yml", package_dir / f"{tier}_builds")
        except RelpackError:
            continue
        if not len(index):
            continue
        found_any = True

        table = Table(title=f"[bold]{name}[/bold] — {tier} builds", box=box.ROUNDED)
        table.add_column("Version", justify="right", style="bold")
        table.add_column("Fingerprint", style="dim", no_wrap=True)
        table.add_column("SHA1", style="dim", no_wrap=True)
        table.add_column("Local", justify="center")
        if tier == "final":
            table.add_column("Blobstore ID", no_wrap=True)

        for fp, record in index.items():
            local = "[green]yes[/green]" if index.has_local_artifact(record.version) else "[dim]no[/dim]"
            row = [str(record.version), fp[:12], record.sha1[:12], local]
            if tier == "final":
                row.append(record.blobstore_id or "-")
            table.add_row(*row)
        console.print(table)

    if not found_any:
        console.print(f"[dim]No builds recorded for {name}.[/dim]")
        sys.exit(1)
