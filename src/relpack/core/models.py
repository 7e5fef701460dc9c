"""Core data models for relpack."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from relpack.core.errors import ConfigurationError

_IDENTIFIER_RE = re.compile(r"^[-0-9A-Za-z_+.]+$")


def is_valid_identifier(name: str) -> bool:
    """Release identifier check: letters, digits and ``-_+.`` only."""
    return bool(_IDENTIFIER_RE.match(name))


@dataclass(frozen=True)
class PackageSpec:
    """What goes into a package: its name, file globs and dependency names."""

    name: str
    files: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> PackageSpec:
        """Build a spec from a parsed spec document.

        ``dependencies`` that is not a list is treated as no dependencies.
        Validation happens in ``validate()``, not here.
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Package spec should be a mapping")
        files = data.get("files")
        dependencies = data.get("dependencies")
        return cls(
            name=str(data.get("name") or ""),
            files=tuple(files) if isinstance(files, list) else (),
            dependencies=tuple(dependencies) if isinstance(dependencies, list) else (),
        )

    def validate(self, is_valid_name=is_valid_identifier) -> None:
        """Raise ConfigurationError unless name and file globs are usable."""
        if not self.name.strip():
            raise ConfigurationError("Package name is missing")
        if not is_valid_name(self.name):
            raise ConfigurationError("Package name should be a valid identifier")
        if not self.files:
            raise ConfigurationError(f"Package '{self.name}' doesn't include any files")


def load_package_spec(path: str | Path) -> PackageSpec:
    """Load a YAML package spec file."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text())
    except OSError as e:
        raise ConfigurationError(f"Cannot read package spec {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed package spec {path}: {e}") from e
    return PackageSpec.from_dict(data)


@dataclass
class VersionRecord:
    """One entry of a build index: a version and the sha1 of its tarball.

    ``blobstore_id`` is only set on final versions that were uploaded.
    """

    version: int | None
    sha1: str
    blobstore_id: str | None = None
    extra: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Serialize to the index file format."""
        data = dict(self.extra)
        data["version"] = self.version
        data["sha1"] = self.sha1
        if self.blobstore_id is not None:
            data["blobstore_id"] = self.blobstore_id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> VersionRecord:
        """Deserialize an index entry. Unknown keys are kept in ``extra``."""
        version = data.get("version")
        blobstore_id = data.get("blobstore_id")
        return cls(
            version=int(version) if version not in (None, "") else None,
            sha1=str(data.get("sha1") or ""),
            blobstore_id=str(blobstore_id) if blobstore_id is not None else None,
            extra={
                k: v for k, v in data.items()
                if k not in ("version", "sha1", "blobstore_id")
            },
        )
