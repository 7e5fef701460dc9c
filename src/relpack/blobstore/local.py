"""Directory-backed blob store."""

from __future__ import annotations

import re
import uuid
from pathlib import Path

from relpack.blobstore.base import BlobNotFound, BlobStore, BlobstoreError
from relpack.core.errors import atomic_write

_BLOB_ID_RE = re.compile(r"^[0-9a-f]{32}$")


class LocalBlobStore(BlobStore):
    """Blob store keeping each blob as a file named by a uuid4 hex id.

    Layout: {base_path}/{id[0:2]}/{id}
    """

    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path)
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BlobstoreError(f"Cannot create blobstore directory {self.base_path}: {e}") from e

    def _blob_path(self, blob_id: str) -> Path:
        if not _BLOB_ID_RE.match(blob_id):
            raise BlobNotFound(f"Invalid blob id: {blob_id!r}")
        return self.base_path / blob_id[:2] / blob_id

    def exists(self, blob_id: str) -> bool:
        try:
            return self._blob_path(blob_id).is_file()
        except BlobNotFound:
            return False

    def get(self, blob_id: str) -> bytes:
        path = self._blob_path(blob_id)
        if not path.is_file():
            raise BlobNotFound(f"Blob not found: {blob_id}")
        try:
            return path.read_bytes()
        except OSError as e:
            raise BlobstoreError(f"Cannot read blob {blob_id}: {e}") from e

    def create(self, payload: bytes) -> str:
        blob_id = uuid.uuid4().hex
        path = self._blob_path(blob_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(path, payload)
        except OSError as e:
            raise BlobstoreError(f"Cannot write blob {blob_id}: {e}") from e
        return blob_id
