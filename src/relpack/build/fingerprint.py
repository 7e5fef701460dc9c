"""Package fingerprinting — content hash of sources, modes and metadata."""

from __future__ import annotations

import hashlib
import os
from collections.abc import Iterable
from pathlib import Path


def _mode_octal(path: Path) -> str:
    """Full st_mode (type and permission bits) as octal text, e.g. ``100644``."""
    return format(os.stat(path).st_mode, "o")


def _read_content(path: Path) -> bytes:
    """File bytes, empty for directories."""
    if path.is_dir():
        return b""
    return path.read_bytes()


def compute_fingerprint(
    files: Iterable[str],
    base_dir: str | Path,
    metadata_dir: str | Path,
) -> str:
    """SHA-1 hex digest identifying a package's exact contents.

    Hashes, in sorted order, each source path followed by its bytes and its
    octal mode, then each non-hidden metadata entry followed by its bytes.
    Metadata entries carry no mode. Timestamps and ownership never enter
    the digest.
    """
    base_dir = Path(base_dir)
    metadata_dir = Path(metadata_dir)
    digest = hashlib.sha1()

    # First, source files (+ modes)
    for name in sorted(set(files)):
        path = base_dir / name
        digest.update(name.encode())
        digest.update(_read_content(path))
        digest.update(_mode_octal(path).encode())

    # Second, metadata files (packaging scripts, migrations, ...)
    if metadata_dir.is_dir():
        for entry in sorted(p.name for p in metadata_dir.iterdir() if not p.name.startswith(".")):
            digest.update(entry.encode())
            digest.update(_read_content(metadata_dir / entry))

    return digest.hexdigest()


def sha1_hex(data: bytes) -> str:
    """Return the SHA-1 hex digest of raw bytes."""
    return hashlib.sha1(data).hexdigest()


def file_sha1(path: str | Path) -> str:
    """SHA-1 hex digest of a file's bytes."""
    return sha1_hex(Path(path).read_bytes())
