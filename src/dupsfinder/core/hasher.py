"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements file hashing utilities using the FileRecord class and pluggable hash algorithms.

HasherImpl.digest() is a pure streaming function: it reads the file through a fixed-size
buffer and never holds the whole file in memory. compute_partial_hash() and
compute_full_hash() memoize results in the record's digest slots.
"""

import hashlib
import os
import stat
import logging
from typing import Callable, Optional

import xxhash

from dupsfinder.core.models import (
    FileRecord, HashFailure, DigestResult, HashAlgorithmName, PARTIAL_CHECKSUM_BYTES)
from dupsfinder.core.interfaces import Hasher, HashAlgorithm

logger = logging.getLogger(__name__)

# file read buffer size
BUFFER_SIZE = 64 * 1024


# Use the same way to implement and use any other hashing algorithm
class Sha1AlgorithmImpl(HashAlgorithm):
    name = "sha1"

    def new(self):
        return hashlib.sha1()


class XXHashAlgorithmImpl(HashAlgorithm):
    name = "xxhash"

    def new(self):
        return xxhash.xxh64()


ALGORITHMS = {
    HashAlgorithmName.SHA1: Sha1AlgorithmImpl,
    HashAlgorithmName.XXHASH: XXHashAlgorithmImpl,
}


def algorithm_for(name: HashAlgorithmName) -> HashAlgorithm:
    return ALGORITHMS[name]()


class HasherImpl(Hasher):
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    Computes and caches hashes for the first bytes and the whole content of a file.
    """

    def __init__(
            self,
            algorithm: Optional[HashAlgorithm] = None,
            partial_bytes: int = PARTIAL_CHECKSUM_BYTES,
            buffer_size: int = BUFFER_SIZE,
            stopped_flag: Optional[Callable[[], bool]] = None
    ):
        if partial_bytes <= 0:
            raise ValueError("partial_bytes must be positive")
        self.algorithm = algorithm or Sha1AlgorithmImpl()
        self.partial_bytes = partial_bytes
        self.buffer_size = buffer_size
        self.stopped_flag = stopped_flag

    def digest(self, path: str, max_bytes: int = 0) -> DigestResult:
        """
        Hex digest of the file content.

        Args:
            path: File to read
            max_bytes: 0 hashes the whole file, N > 0 only the first N bytes
                       (the whole file if it is shorter)
        Returns:
            Hex digest string, or HashFailure if the file could not be read
        """
        try:
            # O_NONBLOCK keeps a fifo swapped in after the walk from blocking the open
            fd = os.open(path, os.O_RDONLY | getattr(os, "O_NONBLOCK", 0) | getattr(os, "O_BINARY", 0))
            try:
                regular = stat.S_ISREG(os.fstat(fd).st_mode)
            except OSError:
                os.close(fd)
                raise
            if not regular:
                os.close(fd)
                return self._failure(path, "not a regular file")

            with os.fdopen(fd, 'rb') as f:
                accumulator = self.algorithm.new()
                remaining = max_bytes if max_bytes > 0 else None
                while remaining is None or remaining > 0:
                    if self.stopped_flag and self.stopped_flag():
                        return HashFailure(path, "cancelled")
                    size = self.buffer_size if remaining is None else min(self.buffer_size, remaining)
                    chunk = f.read(size)
                    if not chunk:
                        break
                    accumulator.update(chunk)
                    if remaining is not None:
                        remaining -= len(chunk)
                return accumulator.hexdigest()
        except OSError as e:
            return self._failure(path, str(e))

    def compute_partial_hash(self, file: FileRecord) -> DigestResult:
        """Computes and caches the hash of the first `partial_bytes` bytes of a file."""
        result = file.partial_hash.compute_once(
            lambda: self.digest(file.path, self.partial_bytes))

        # The partial read already covered the whole file (or failed): reuse it as full hash
        size = file.size
        if isinstance(result, HashFailure) or (size is not None and size <= self.partial_bytes):
            file.full_hash.adopt(result)
        return result

    def compute_full_hash(self, file: FileRecord) -> DigestResult:
        """Computes and caches the hash of the entire file."""
        return file.full_hash.compute_once(lambda: self.digest(file.path))

    @staticmethod
    def _failure(path: str, reason: str) -> HashFailure:
        logger.warning(f"Could not hash {path}: {reason}")
        return HashFailure(path, reason)
