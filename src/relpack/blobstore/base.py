"""Base class and errors for blob stores."""

from __future__ import annotations

from abc import ABC, abstractmethod

from relpack.core.errors import RelpackError


class BlobstoreError(RelpackError):
    """A blob store operation failed."""

    pass


class BlobNotFound(BlobstoreError):
    """The requested blob does not exist in the store."""

    pass


class BlobStore(ABC):
    """Opaque-id storage for final package tarballs.

    Calls are single attempt. Implementations raise ``BlobNotFound`` for
    missing ids and ``BlobstoreError`` for everything else.
    """

    @abstractmethod
    def get(self, blob_id: str) -> bytes:
        """Return the bytes stored under ``blob_id``."""
        ...

    @abstractmethod
    def create(self, payload: bytes) -> str:
        """Store ``payload`` and return its new id."""
        ...
