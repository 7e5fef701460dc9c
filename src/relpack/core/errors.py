"""Relpack error types and utilities."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def atomic_write(path: Path, content: str | bytes) -> None:
    """Write content to a file atomically using temp file + rename.

    Writes to a temporary file in the same directory, fsyncs it,
    then atomically replaces the target path. Text is encoded as UTF-8.
    """
    data = content.encode() if isinstance(content, str) else content
    fd, tmp = tempfile.mkstemp(dir=Path(path).parent, suffix=".tmp")
    closed = False
    try:
        view = memoryview(data)
        while view:
            view = view[os.write(fd, view):]
        os.fsync(fd)
        os.close(fd)
        closed = True
        os.replace(tmp, str(path))
    except BaseException:
        if not closed:
            os.close(fd)
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


class RelpackError(Exception):
    """Base exception for relpack."""

    pass


class InvalidPackage(RelpackError):
    """A package cannot be loaded, built, fetched or promoted."""

    pass


class ConfigurationError(InvalidPackage):
    """Bad package spec or on-disk layout, detected before any build step."""

    pass


class ChecksumUnavailable(RelpackError, RuntimeError):
    """Checksum requested before a package tarball was selected."""

    pass
