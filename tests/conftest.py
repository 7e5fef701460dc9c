"""Shared test fixtures for relpack."""

from __future__ import annotations

import io
import os
from pathlib import Path

import pytest
from rich.console import Console

from relpack.blobstore.base import BlobNotFound, BlobStore
from relpack.build.builder import PackageBuilder
from relpack.core.logging import BuildLogger


class FakeBlobStore(BlobStore):
    """In-memory blob store that records every call."""

    def __init__(self):
        self.blobs: dict[str, bytes] = {}
        self.get_calls: list[str] = []
        self.create_calls = 0
        self.fail_with: Exception | None = None

    def get(self, blob_id: str) -> bytes:
        self.get_calls.append(blob_id)
        if self.fail_with is not None:
            raise self.fail_with
        if blob_id not in self.blobs:
            raise BlobNotFound(f"Blob not found: {blob_id}")
        return self.blobs[blob_id]

    def create(self, payload: bytes) -> str:
        self.create_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        blob_id = f"blob-{len(self.blobs) + 1}"
        self.blobs[blob_id] = payload
        return blob_id


@pytest.fixture
def blobstore():
    return FakeBlobStore()


@pytest.fixture
def release_dir(tmp_path):
    """Empty release checkout with a src/ directory."""
    release = tmp_path / "release"
    (release / "src").mkdir(parents=True)
    return release


@pytest.fixture
def write_file():
    """Write a file under root, creating parents, with an explicit mode."""

    def _write(root: Path, relative: str, content: str | bytes = "", mode: int = 0o644) -> Path:
        path = Path(root) / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode()
        path.write_bytes(content)
        os.chmod(path, mode)
        return path

    return _write


@pytest.fixture
def foo_sources(release_dir, write_file):
    """Sources for package ``foo``: lib/a.rb and lib/b.rb."""
    src = release_dir / "src"
    write_file(src, "lib/a.rb", "puts 'a'\n")
    write_file(src, "lib/b.rb", "puts 'b'\n")
    return src


@pytest.fixture
def log_output():
    return io.StringIO()


@pytest.fixture
def quiet_logger(log_output):
    """BuildLogger whose console writes into a buffer."""
    return BuildLogger(console=Console(file=log_output, width=200))


@pytest.fixture
def make_builder(release_dir, quiet_logger):
    """Factory for PackageBuilders over release_dir; cleans up workspaces."""
    builders: list[PackageBuilder] = []

    def _make(spec=None, final=False, blobstore=None, **kwargs) -> PackageBuilder:
        if spec is None:
            spec = {"name": "foo", "files": ["lib/**/*"]}
        builder = PackageBuilder(
            spec,
            release_dir,
            final=final,
            blobstore=blobstore,
            build_logger=kwargs.pop("build_logger", quiet_logger),
            **kwargs,
        )
        builders.append(builder)
        return builder

    yield _make

    for builder in builders:
        builder.cleanup()
