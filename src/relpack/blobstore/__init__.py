"""Blob stores — remote storage for final package tarballs."""

from relpack.blobstore.base import BlobNotFound, BlobStore, BlobstoreError
from relpack.blobstore.local import LocalBlobStore

__all__ = ["BlobNotFound", "BlobStore", "BlobstoreError", "LocalBlobStore"]
