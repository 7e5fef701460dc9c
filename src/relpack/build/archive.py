"""Tarball packing for generated package workspaces."""

from __future__ import annotations

import io
import tarfile
from pathlib import Path

from relpack.core.errors import InvalidPackage


def pack_directory(source_dir: str | Path) -> bytes:
    """Gzip-compressed tar of everything under source_dir, rooted at ``.``."""
    buffer = io.BytesIO()
    try:
        with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
            tar.add(str(source_dir), arcname=".")
    except (OSError, tarfile.TarError) as e:
        raise InvalidPackage(f"Cannot create package tarball: {e}") from e
    return buffer.getvalue()
