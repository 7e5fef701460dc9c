"""Package builder — reuse cached tarballs by fingerprint, generate, promote."""

from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from relpack.blobstore.base import BlobNotFound, BlobStore, BlobstoreError
from relpack.build.archive import pack_directory
from relpack.build.fingerprint import compute_fingerprint, file_sha1, sha1_hex
from relpack.build.globs import resolve_globs
from relpack.build.index import ArtifactIndex
from relpack.core.errors import ChecksumUnavailable, ConfigurationError, InvalidPackage
from relpack.core.logging import BuildLogger
from relpack.core.models import PackageSpec, VersionRecord, load_package_spec

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Outcome of a single ``PackageBuilder.build()`` call."""

    name: str
    version: int
    tarball_path: Path
    fingerprint: str
    source: str  # "final", "dev" or "generated"
    promoted: bool = False


class PackageBuilder:
    """Builds one package tarball, reusing cached builds when possible.

    Packages come in two tiers, both kept under
    ``<release_dir>/packages/<name>/``:

    - dev builds: local only, index and tarballs are not checked in
    - final builds: tarballs mirrored to the blob store, index checked in

    Both tiers are keyed by the same fingerprint but numbered
    independently. The caller must not run two builders for the same
    package at once; index writes are last-writer-wins.
    """

    def __init__(
        self,
        spec: PackageSpec | dict | str | Path,
        release_dir: str | Path,
        final: bool = False,
        blobstore: BlobStore | None = None,
        sources_dir: str | Path | None = None,
        build_logger: BuildLogger | None = None,
    ):
        if isinstance(spec, (str, Path)):
            spec = load_package_spec(spec)
        elif isinstance(spec, dict):
            spec = PackageSpec.from_dict(spec)
        spec.validate()

        self.spec = spec
        self.release_dir = Path(release_dir)
        self.sources_dir = Path(sources_dir) if sources_dir else self.release_dir / "src"
        self.final = final
        self.blobstore = blobstore
        self.build_logger = build_logger or BuildLogger()

        if final and blobstore is None:
            raise ConfigurationError(f"Final build of '{self.name}' requires a blobstore")
        if not self.sources_dir.is_dir():
            raise ConfigurationError(f"Sources directory not found: {self.sources_dir}")

        self.version: int | None = None
        self.tarball_path: Path | None = None
        self._fingerprint: str | None = None
        self._resolved_globs: list[str] | None = None
        self._workspace: tempfile.TemporaryDirectory | None = None

        self._provision_layout()
        self.dev_packages = ArtifactIndex(self.dev_builds_index_file, self.dev_builds_dir)
        self.final_packages = ArtifactIndex(self.final_builds_index_file, self.final_builds_dir)

    def __enter__(self) -> PackageBuilder:
        return self

    def __exit__(self, *exc_info) -> None:
        self.cleanup()

    # ------------------------------------------------------------------
    # Spec accessors and layout
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def globs(self) -> list[str]:
        return list(self.spec.files)

    @property
    def dependencies(self) -> list[str]:
        return list(self.spec.dependencies)

    @property
    def final_build(self) -> bool:
        return self.final

    @property
    def package_dir(self) -> Path:
        return self.release_dir / "packages" / self.name

    @property
    def metadata_dir(self) -> Path:
        return self.package_dir / "data"

    @property
    def dev_builds_index_file(self) -> Path:
        return self.package_dir / "dev_builds.yml"

    @property
    def dev_builds_dir(self) -> Path:
        return self.package_dir / "dev_builds"

    @property
    def final_builds_index_file(self) -> Path:
        return self.package_dir / "final_builds.yml"

    @property
    def final_builds_dir(self) -> Path:
        return self.package_dir / "final_builds"

    def _provision_layout(self) -> None:
        """Create the package's data dir, build dirs and empty index files."""
        try:
            self.metadata_dir.mkdir(parents=True, exist_ok=True)
            self.dev_builds_dir.mkdir(parents=True, exist_ok=True)
            self.final_builds_dir.mkdir(parents=True, exist_ok=True)
            self.dev_builds_index_file.touch(exist_ok=True)
            self.final_builds_index_file.touch(exist_ok=True)
        except OSError as e:
            raise ConfigurationError(f"Cannot set up package directory {self.package_dir}: {e}") from e

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def build(self) -> BuildResult:
        """Select a tarball for the current fingerprint, then promote if final.

        Tries the final index, then the dev index, then generates a new
        dev tarball. Errors abort the build; whatever was indexed before
        the failure stays indexed.
        """
        if self.use_final_version():
            source = "final"
        elif self.use_dev_version():
            source = "dev"
        else:
            self.generate_tarball()
            source = "generated"

        promoted = False
        if self.final_build:
            promoted = self.upload_tarball(self.tarball_path)

        self.build_logger.build_finish(self.name, self.version, self.fingerprint)
        return BuildResult(
            name=self.name,
            version=self.version,
            tarball_path=self.tarball_path,
            fingerprint=self.fingerprint,
            source=source,
            promoted=promoted,
        )

    def use_final_version(self) -> bool:
        """Select the final tarball for this fingerprint, fetching it if needed."""
        self.build_logger.lookup(self.name, "final")
        record = self.final_packages.lookup(self.fingerprint)

        if record is None:
            self.build_logger.cache_miss(self.name, "final")
            return False
        if record.version is None:
            raise InvalidPackage(f"Final version of `{self.name}' has no version number in its index")

        if self.final_packages.has_local_artifact(record.version):
            self.build_logger.cache_hit(self.name, "final", record.version)
            self.tarball_path = self.final_packages.artifact_path(record.version)
        else:
            payload = self._fetch_final(record)
            self.tarball_path = self.final_packages.add_package(self.fingerprint, record, payload)
            self.build_logger.fetched(self.name, record.version, record.blobstore_id)

        self.version = record.version
        return True

    def _fetch_final(self, record: VersionRecord) -> bytes:
        if not record.blobstore_id:
            raise InvalidPackage(
                f"Final version of `{self.name}' ({record.version}) has no blobstore id"
            )
        if self.blobstore is None:
            raise InvalidPackage(
                f"Cannot fetch final version of `{self.name}' ({record.version}) without a blobstore"
            )
        logger.debug("Fetching %s final version %s (%s)", self.name, record.version, record.blobstore_id)
        try:
            return self.blobstore.get(record.blobstore_id)
        except BlobNotFound as e:
            raise InvalidPackage(f"Final version of `{self.name}' not found in blobstore") from e
        except BlobstoreError as e:
            raise InvalidPackage(f"Blobstore error: {e}") from e

    def use_dev_version(self) -> bool:
        """Select the dev tarball for this fingerprint if it exists locally."""
        self.build_logger.lookup(self.name, "dev")
        record = self.dev_packages.lookup(self.fingerprint)

        if record is None:
            self.build_logger.cache_miss(self.name, "dev")
            return False
        if record.version is None or not self.dev_packages.has_local_artifact(record.version):
            self.build_logger.cache_miss(self.name, "dev", f"tarball for version {record.version} missing")
            return False

        self.build_logger.cache_hit(self.name, "dev", record.version)
        self.tarball_path = self.dev_packages.artifact_path(record.version)
        self.version = record.version
        return True

    def generate_tarball(self) -> bool:
        """Build a dev tarball from sources and metadata and index it.

        A fingerprint already in the dev index is rebuilt under its old
        version number.
        """
        record = self.dev_packages.lookup(self.fingerprint)
        if record is not None and record.version is not None:
            version = record.version
        else:
            version = self.dev_packages.next_version()

        logger.debug("Generating %s (dev version %s)", self.name, version)
        self.copy_files()
        payload = pack_directory(self.build_dir)

        record = VersionRecord(version=version, sha1=sha1_hex(payload))
        self.tarball_path = self.dev_packages.add_package(self.fingerprint, record, payload)
        self.version = version

        self.build_logger.generated(self.name, version, self.tarball_path)
        return True

    def upload_tarball(self, path: str | Path | None) -> bool:
        """Promote the tarball at ``path`` to the next final version.

        Returns False without touching the blob store when this fingerprint
        already has a final version.
        """
        record = self.final_packages.lookup(self.fingerprint)
        if record is not None:
            self.build_logger.already_uploaded(self.name, record.version)
            return False

        if path is None:
            raise InvalidPackage(f"Nothing to upload for `{self.name}': no tarball selected")
        if self.blobstore is None:
            raise InvalidPackage(f"Cannot upload `{self.name}' without a blobstore")

        version = self.final_packages.next_version()
        payload = Path(path).read_bytes()

        logger.debug("Uploading %s as %s (final version %s)", path, self.name, version)
        try:
            blobstore_id = self.blobstore.create(payload)
        except BlobstoreError as e:
            raise InvalidPackage(f"Blobstore error: {e}") from e

        record = VersionRecord(version=version, sha1=sha1_hex(payload), blobstore_id=blobstore_id)
        self.tarball_path = self.final_packages.add_package(self.fingerprint, record, payload)
        self.version = version

        self.build_logger.uploaded(self.name, version, blobstore_id)
        return True

    @property
    def checksum(self) -> str:
        """SHA-1 of the selected tarball."""
        if self.tarball_path is not None and self.tarball_path.is_file():
            return file_sha1(self.tarball_path)
        raise ChecksumUnavailable("cannot read checksum for not yet generated package")

    # ------------------------------------------------------------------
    # Fingerprint and file selection
    # ------------------------------------------------------------------

    def reload(self) -> PackageBuilder:
        """Forget the memoized fingerprint and file list (sources changed)."""
        self._fingerprint = None
        self._resolved_globs = None
        return self

    @property
    def fingerprint(self) -> str:
        if self._fingerprint is None:
            self._fingerprint = compute_fingerprint(
                self.resolved_globs, self.sources_dir, self.metadata_dir
            )
        return self._fingerprint

    @property
    def resolved_globs(self) -> list[str]:
        if self._resolved_globs is None:
            self._resolved_globs = resolve_globs(self.globs, self.sources_dir)
        return self._resolved_globs

    files = resolved_globs

    def strip_package_name(self, filename: str) -> str:
        """Drop a leading directory named after the package.

        lib/sphinx-0.9.tar.gz => lib/sphinx-0.9.tar.gz
        cloudcontroller/lib/cloud.rb => lib/cloud.rb
        """
        head, sep, rest = filename.partition("/")
        if sep and head == self.name:
            return rest
        return filename

    # ------------------------------------------------------------------
    # Workspace
    # ------------------------------------------------------------------

    @property
    def build_dir(self) -> Path:
        """Private scratch directory, created on first use."""
        if self._workspace is None:
            self._workspace = tempfile.TemporaryDirectory(prefix=f"relpack-{self.name}-")
        return Path(self._workspace.name)

    def cleanup(self) -> None:
        """Remove the scratch directory, if one was created."""
        if self._workspace is not None:
            self._workspace.cleanup()
            self._workspace = None

    def _clear_build_dir(self) -> Path:
        build_dir = self.build_dir
        for child in build_dir.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()
        return build_dir

    def copy_files(self) -> int:
        """Stage sources and metadata into an empty build dir.

        Returns the number of files copied. A metadata entry whose name is
        already taken by a staged source fails the build.
        """
        build_dir = self._clear_build_dir()
        copied = 0

        for filename in self.resolved_globs:
            source = self.sources_dir / filename
            destination = build_dir / self.strip_package_name(filename)
            if source.is_dir():
                destination.mkdir(parents=True, exist_ok=True)
            else:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy(source, destination)
                copied += 1

        for entry in sorted(self.metadata_dir.iterdir()):
            if entry.name.startswith("."):
                continue
            destination = build_dir / entry.name
            if destination.exists():
                raise InvalidPackage(
                    f"Package '{self.name}' has '{entry.name}' file "
                    "that conflicts with one of its metadata files"
                )
            if entry.is_dir():
                shutil.copytree(entry, destination)
            else:
                shutil.copy(entry, destination)
            copied += 1

        return copied
