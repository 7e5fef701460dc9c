"""Tests for the directory-backed blob store."""

from __future__ import annotations

import pytest

from relpack.blobstore.base import BlobNotFound, BlobstoreError
from relpack.blobstore.local import LocalBlobStore


class TestLocalBlobStore:
    def test_create_and_get(self, tmp_path):
        store = LocalBlobStore(tmp_path / "blobs")
        blob_id = store.create(b"tarball bytes")

        assert len(blob_id) == 32
        assert store.exists(blob_id)
        assert store.get(blob_id) == b"tarball bytes"
        assert (tmp_path / "blobs" / blob_id[:2] / blob_id).is_file()

    def test_ids_are_unique(self, tmp_path):
        store = LocalBlobStore(tmp_path)
        assert store.create(b"same") != store.create(b"same")

    def test_get_missing(self, tmp_path):
        store = LocalBlobStore(tmp_path)
        with pytest.raises(BlobNotFound):
            store.get("0" * 32)

    def test_get_invalid_id(self, tmp_path):
        store = LocalBlobStore(tmp_path)
        with pytest.raises(BlobNotFound, match="Invalid blob id"):
            store.get("../../etc/passwd")
        assert store.exists("../../etc/passwd") is False

    def test_not_found_is_blobstore_error(self):
        assert issubclass(BlobNotFound, BlobstoreError)

    def test_unusable_base_path(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a dir")
        with pytest.raises(BlobstoreError, match="Cannot create blobstore directory"):
            LocalBlobStore(blocker / "blobs")
