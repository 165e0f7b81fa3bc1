"""
Core duplicate detection engine: directory walker, content hasher, grouper and the pipeline.

This package contains the performance-critical foundation of dupsfinder:
- FileWalkerImpl: parallel fork/join directory traversal
- HasherImpl + Sha1AlgorithmImpl / XXHashAlgorithmImpl: streaming partial/full content hashing
- FileGrouperImpl: size and hash-based grouping with singleton pruning
- DeduplicatorImpl: multi-stage pipeline (size → partial hash → full hash)
- Models: FileRecord, DuplicateGroup, and configuration objects

All components are pure Python with no presentation logic.
"""

from .walker import FileWalkerImpl
from .grouper import FileGrouperImpl
from .hasher import HasherImpl, Sha1AlgorithmImpl, XXHashAlgorithmImpl
from .deduplicator import DeduplicatorImpl
from .models import (
    FileRecord, DigestSlot, FieldState, HashFailure, DuplicateGroup, DeduplicationParams,
    DeduplicationStats, HashAlgorithmName, Stage, PARTIAL_CHECKSUM_BYTES)

__all__ = [
    "FileWalkerImpl",
    "FileGrouperImpl",
    "HasherImpl",
    "Sha1AlgorithmImpl",
    "XXHashAlgorithmImpl",
    "DeduplicatorImpl",
    "FileRecord",
    "DigestSlot",
    "FieldState",
    "HashFailure",
    "DuplicateGroup",
    "DeduplicationParams",
    "DeduplicationStats",
    "HashAlgorithmName",
    "Stage",
    "PARTIAL_CHECKSUM_BYTES",
]
