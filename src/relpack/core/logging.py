"""Structured logging and verbosity levels for package builds."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any

from rich.console import Console


class Verbosity(IntEnum):
    """Verbosity levels for console output."""

    DEFAULT = 0   # Outcome lines only
    VERBOSE = 1   # + cache lookups
    DEBUG = 2     # + paths, blob ids, fingerprints


@dataclass
class BuildLog:
    """Tally of what a logger has seen across builds."""

    final_hits: int = 0
    dev_hits: int = 0
    generated: int = 0
    fetched: int = 0
    uploaded: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "final_hits": self.final_hits,
            "dev_hits": self.dev_hits,
            "generated": self.generated,
            "fetched": self.fetched,
            "uploaded": self.uploaded,
        }


class BuildLogger:
    """Structured logger for package builds.

    Writes JSONL events to ``log_dir/<run_id>.jsonl`` when a log directory
    is given and prints Rich console lines filtered by verbosity.
    """

    def __init__(
        self,
        verbosity: Verbosity = Verbosity.DEFAULT,
        log_dir: Path | None = None,
        console: Console | None = None,
    ):
        self.verbosity = verbosity
        self.console = console or Console()
        self.run_id = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        self.build_log = BuildLog()
        self._log_file = None
        self.log_path: Path | None = None

        if log_dir is not None:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            self.log_path = log_dir / f"{self.run_id}.jsonl"
            self._log_file = open(self.log_path, "a")

    def _write_event(self, event: dict[str, Any]) -> None:
        if self._log_file is not None:
            event["timestamp"] = datetime.now(timezone.utc).isoformat()
            self._log_file.write(json.dumps(event) + "\n")
            self._log_file.flush()

    def _console_print(self, message: str, min_verbosity: Verbosity) -> None:
        if self.verbosity >= min_verbosity:
            self.console.print(message)

    # -- Lookups --

    def lookup(self, name: str, tier: str) -> None:
        """Log the start of a dev or final index lookup."""
        self._write_event({"event": "lookup", "package": name, "tier": tier})
        self._console_print(
            f"  Looking for {tier} version of [bold]{name}[/bold]",
            Verbosity.VERBOSE,
        )

    def cache_hit(self, name: str, tier: str, version: int) -> None:
        if tier == "final":
            self.build_log.final_hits += 1
        else:
            self.build_log.dev_hits += 1
        self._write_event({
            "event": "cache_hit",
            "package": name,
            "tier": tier,
            "version": version,
        })
        self._console_print(
            f"  [cyan]=[/cyan] {name} ({tier} version {version}) found in local cache",
            Verbosity.DEFAULT,
        )

    def cache_miss(self, name: str, tier: str, reason: str = "not found") -> None:
        self._write_event({
            "event": "cache_miss",
            "package": name,
            "tier": tier,
            "reason": reason,
        })
        self._console_print(
            f"  [dim]{tier.capitalize()} version of {name}: {reason}[/dim]",
            Verbosity.VERBOSE,
        )

    # -- Remote transfers --

    def fetched(self, name: str, version: int, blobstore_id: str) -> None:
        """Log a final tarball pulled down from the blob store."""
        self.build_log.fetched += 1
        self._write_event({
            "event": "fetched",
            "package": name,
            "version": version,
            "blobstore_id": blobstore_id,
        })
        self._console_print(
            f"  [blue]v[/blue] {name} (final version {version}) fetched from blobstore",
            Verbosity.DEFAULT,
        )
        self._console_print(f"    [dim]blobstore id {blobstore_id}[/dim]", Verbosity.DEBUG)

    def uploaded(self, name: str, version: int, blobstore_id: str) -> None:
        self.build_log.uploaded += 1
        self._write_event({
            "event": "uploaded",
            "package": name,
            "version": version,
            "blobstore_id": blobstore_id,
        })
        self._console_print(
            f"  [yellow]^[/yellow] {name} (final version {version}) uploaded",
            Verbosity.DEFAULT,
        )
        self._console_print(f"    [dim]blobstore id {blobstore_id}[/dim]", Verbosity.DEBUG)

    def already_uploaded(self, name: str, version: int) -> None:
        self._write_event({
            "event": "already_uploaded",
            "package": name,
            "version": version,
        })
        self._console_print(
            f"  [dim]{name} (final version {version}) already uploaded[/dim]",
            Verbosity.VERBOSE,
        )

    # -- Generation --

    def generated(self, name: str, version: int, path: Path) -> None:
        self.build_log.generated += 1
        self._write_event({
            "event": "generated",
            "package": name,
            "version": version,
            "path": str(path),
        })
        self._console_print(
            f"  [green]+[/green] {name} (dev version {version}) generated",
            Verbosity.DEFAULT,
        )
        self._console_print(f"    [dim]{path}[/dim]", Verbosity.DEBUG)

    def build_finish(self, name: str, version: int | None, fingerprint: str) -> None:
        self._write_event({
            "event": "build_finish",
            "package": name,
            "version": version,
            "fingerprint": fingerprint,
        })
        self._console_print(f"    [dim]fingerprint {fingerprint}[/dim]", Verbosity.DEBUG)

    def close(self) -> None:
        """Close the log file if open."""
        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None
