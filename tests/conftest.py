"""
Shared fixtures for duplicate detection tests.
Creates isolated temporary directories with controlled test files.
"""
import threading
from collections import Counter
from pathlib import Path
from typing import Dict

import pytest

from dupsfinder.core.hasher import HasherImpl
from dupsfinder.core.models import HashFailure


class CountingHasher(HasherImpl):
    """HasherImpl that counts digest() calls per path and can fail chosen paths."""

    def __init__(self, *args, failing_paths=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = Counter()
        self.failing_paths = {str(p) for p in failing_paths}
        self._lock = threading.Lock()

    def digest(self, path, max_bytes=0):
        with self._lock:
            self.calls[path] += 1
        if path in self.failing_paths:
            return HashFailure(path, "Permission denied")
        return super().digest(path, max_bytes)

    def calls_for(self, path) -> int:
        return self.calls[str(path)]


@pytest.fixture
def temp_dir(tmp_path):
    """Isolated temporary directory, auto-cleanup after test."""
    return tmp_path


@pytest.fixture
def counting_hasher():
    return CountingHasher()


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files:
    - 3 identical 1KB files (one in a subdirectory), small enough for partial == full
    - 2 identical 2KB files
    - 2 files of 2KB sharing the first 1KB but differing after it
    - 2 files of unique size
    - 1 empty file
    """
    files = {}

    # Duplicate set #1 (1KB of 'A')
    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    # Duplicate pair #2 (2KB of 'B')
    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.bin"
    files["dup2_b"] = temp_dir / "dup2_b.bin"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    # Same size and same first 1KB, different tail
    files["prefix_a"] = temp_dir / "prefix_a.bin"
    files["prefix_b"] = temp_dir / "prefix_b.bin"
    files["prefix_a"].write_bytes(b"P" * 1024 + b"x" * 1024)
    files["prefix_b"].write_bytes(b"P" * 1024 + b"y" * 1024)

    # Unique files
    files["unique1"] = temp_dir / "unique1.txt"
    files["unique1"].write_bytes(b"C" * 1500)
    files["unique2"] = temp_dir / "unique2.txt"
    files["unique2"].write_bytes(b"D" * 2500)

    files["empty"] = temp_dir / "empty.txt"
    files["empty"].write_bytes(b"")

    # Subdirectory with duplicates
    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)  # Same as dup1_a/b

    return files
