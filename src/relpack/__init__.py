"""relpack - versioned, content-addressed package tarballs for releases.

Usage:
    from relpack import LocalBlobStore, PackageBuilder

    builder = PackageBuilder(
        "release/packages/redis/spec",
        release_dir="release",
        final=True,
        blobstore=LocalBlobStore("/var/blobs"),
    )
    result = builder.build()
    print(result.version, result.tarball_path)
"""

from relpack.blobstore import BlobNotFound, BlobStore, BlobstoreError, LocalBlobStore
from relpack.build.builder import BuildResult, PackageBuilder
from relpack.build.fingerprint import compute_fingerprint
from relpack.build.globs import resolve_globs
from relpack.build.index import ArtifactIndex
from relpack.core.errors import (
    ChecksumUnavailable,
    ConfigurationError,
    InvalidPackage,
    RelpackError,
)
from relpack.core.models import PackageSpec, VersionRecord, load_package_spec

__all__ = [
    "ArtifactIndex",
    "BlobNotFound",
    "BlobStore",
    "BlobstoreError",
    "BuildResult",
    "ChecksumUnavailable",
    "ConfigurationError",
    "InvalidPackage",
    "LocalBlobStore",
    "PackageBuilder",
    "PackageSpec",
    "RelpackError",
    "VersionRecord",
    "compute_fingerprint",
    "load_package_spec",
    "resolve_globs",
]

__version__ = "0.1.0"
