"""Tests for error types and atomic file writes."""

from __future__ import annotations

import os

import pytest

from relpack.core.errors import atomic_write


class TestAtomicWrite:
    def test_writes_text_and_bytes(self, tmp_path):
        atomic_write(tmp_path / "index.yml", "fp: 1\n")
        atomic_write(tmp_path / "1.tgz", b"\x1f\x8b payload")

        assert (tmp_path / "index.yml").read_text() == "fp: 1\n"
        assert (tmp_path / "1.tgz").read_bytes() == b"\x1f\x8b payload"

    def test_short_writes_complete_payload(self, tmp_path, monkeypatch):
        """os.write may write fewer bytes than asked; the rest still lands."""
        real_write = os.write
        calls = []

        def partial_write(fd, data):
            calls.append(len(data))
            return real_write(fd, bytes(data[: max(1, len(data) // 2)]))

        monkeypatch.setattr(os, "write", partial_write)
        atomic_write(tmp_path / "1.tgz", b"x" * 1000)
        monkeypatch.undo()

        assert (tmp_path / "1.tgz").read_bytes() == b"x" * 1000
        assert len(calls) > 1

    def test_failure_leaves_no_temp_file(self, tmp_path, monkeypatch):
        def failing_write(fd, data):
            raise OSError("disk full")

        monkeypatch.setattr(os, "write", failing_write)
        with pytest.raises(OSError, match="disk full"):
            atomic_write(tmp_path / "1.tgz", b"payload")
        monkeypatch.undo()

        assert list(tmp_path.iterdir()) == []
