"""Build index — fingerprint to version records, backed by a YAML file."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from relpack.core.errors import ConfigurationError, InvalidPackage, atomic_write
from relpack.core.models import VersionRecord

logger = logging.getLogger(__name__)


class ArtifactIndex:
    """One tier (dev or final) of a package's build cache.

    Maps fingerprints to version records and owns a storage directory
    holding one ``<version>.tgz`` tarball per version. The whole index is
    read at construction and rewritten on every ``add_package``. There is
    no locking: two writers on the same index file race, last write wins.
    """

    def __init__(self, index_file: str | Path, storage_dir: str | Path):
        self.index_file = Path(index_file).resolve()
        self.storage_dir = Path(storage_dir).resolve()

        if not self.index_file.is_file() or not os.access(self.index_file, os.R_OK):
            raise ConfigurationError(f"Cannot read package index file: {index_file}")
        if not self.storage_dir.is_dir():
            raise ConfigurationError(f"Cannot read package storage directory: {storage_dir}")

        self._records: dict[str, VersionRecord] = self._load()

    def _load(self) -> dict[str, VersionRecord]:
        try:
            data = yaml.safe_load(self.index_file.read_text())
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Malformed package index file {self.index_file}: {e}") from e
        if not isinstance(data, dict):
            return {}
        records: dict[str, VersionRecord] = {}
        try:
            for fingerprint, attrs in data.items():
                if not isinstance(attrs, dict):
                    raise ConfigurationError(
                        f"Bad entry for {fingerprint} in package index file {self.index_file}"
                    )
                records[str(fingerprint)] = VersionRecord.from_dict(attrs)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Bad version in package index file {self.index_file}: {e}") from e
        return records

    def _save(self) -> None:
        data = {fp: record.to_dict() for fp, record in self._records.items()}
        atomic_write(self.index_file, yaml.safe_dump(data, default_flow_style=False))

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, fingerprint: str) -> bool:
        return fingerprint in self._records

    def items(self) -> list[tuple[str, VersionRecord]]:
        """All (fingerprint, record) pairs ordered by version."""
        return sorted(self._records.items(), key=lambda item: item[1].version or 0)

    def lookup(self, fingerprint: str) -> VersionRecord | None:
        return self._records.get(fingerprint)

    def next_version(self) -> int:
        """One past the highest recorded version (gaps are not reused)."""
        return max((record.version or 0 for record in self._records.values()), default=0) + 1

    def artifact_path(self, version: int) -> Path:
        return self.storage_dir / f"{version}.tgz"

    def has_local_artifact(self, version: int) -> bool:
        """True if the tarball for ``version`` is on disk."""
        return self.artifact_path(version).is_file()

    def add_package(self, fingerprint: str, record: VersionRecord, payload: bytes) -> Path:
        """Store a tarball and register it under ``fingerprint``.

        Overwrites any existing entry for the fingerprint, so re-adding an
        unchanged record is harmless. Returns the absolute tarball path.
        """
        if record.version is None:
            raise InvalidPackage("Cannot save package without knowing its version")

        path = self.artifact_path(record.version)
        atomic_write(path, payload)

        self._records[fingerprint] = record
        self._save()
        logger.debug("Indexed %s as version %s in %s", fingerprint, record.version, self.index_file)
        return path
