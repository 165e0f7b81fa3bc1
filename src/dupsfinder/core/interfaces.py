"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the duplicate finder.
These protocols enforce structural typing using Python's `typing.Protocol` so that
walker, hasher and stages can be swapped independently (e.g. a counting hasher in tests).

Key Components:
---------------
- HashAlgorithm: Factory for streaming digest accumulators (SHA-1, xxHash, ...).
- Hasher: Computes partial/full digests and memoizes them on a FileRecord.
- FileWalker: Enumerates regular files under a root directory.
- FileGrouper: Partitions records by size or digest, dropping singleton groups.
- SizeStage / GroupingStage: Steps of the size → partial hash → full hash funnel.
- Deduplicator: Runs the whole funnel.
"""

from typing import Protocol, List, Dict, Tuple, Optional, Callable
from dupsfinder.core.models import (
    FileRecord,
    DigestResult,
    DuplicateGroup,
    DeduplicationStats,
)


# ===== Interfaces =====

class DigestAccumulator(Protocol):
    """Incremental digest object, the shape of `hashlib` and `xxhash` objects."""
    def update(self, data: bytes) -> None: ...
    def hexdigest(self) -> str: ...


class HashAlgorithm(Protocol):
    """
    Interface for generic hash algorithms.

    Allows plugging in different hashing functions like SHA-1 or xxHash
    without affecting the rest of the deduplication logic.
    """

    name: str

    def new(self) -> DigestAccumulator:
        """Returns a fresh accumulator."""
        ...


class Hasher(Protocol):
    """Interface for hashing a whole file or its first bytes."""
    partial_bytes: int

    def digest(self, path: str, max_bytes: int = 0) -> DigestResult: ...
    def compute_partial_hash(self, file: FileRecord) -> DigestResult: ...
    def compute_full_hash(self, file: FileRecord) -> DigestResult: ...


class FileWalker(Protocol):
    """
    Interface for walking a directory tree and collecting regular files.
    """
    def walk(
        self,
        root: str,
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> List[FileRecord]:
        """
        Args:
            root: Directory to walk.
            stopped_flag: Function that returns True if operation should be canceled.

        Returns:
            Every regular file found under root.
        """
        ...


class FileGrouper(Protocol):
    """
    Interface for partitioning files by size or digest.
    Returned groups always have 2+ members.
    """
    def group_by_size(self, files: List[FileRecord]) -> Dict[int, List[FileRecord]]:
        ...

    def group_by_partial_hash(
        self,
        files: List[FileRecord],
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Dict[Tuple[int, str], List[FileRecord]]:
        ...

    def group_by_full_hash(
        self,
        files: List[FileRecord],
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Dict[Tuple[int, str], List[FileRecord]]:
        ...


# =============================
# Stage Interfaces
# =============================


class SizeStage(Protocol):
    """
    Interface for the first funnel stage: grouping files by size.
    """
    def get_stage_name(self) -> str: ...

    def process(
        self,
        files: List[FileRecord],
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> List[DuplicateGroup]:
        """
        Returns groups where each contains 2+ files of the same size.
        """
        ...


class GroupingStage(Protocol):
    """
    Interface for one funnel stage.

    Methods:
        process: Takes candidate groups and returns refined groups with 2+ files each.
    """

    def get_stage_name(self) -> str:
        """Return the name of this stage (used in logging and stats)."""
        ...

    def process(
        self,
        groups: List[DuplicateGroup],
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> List[DuplicateGroup]:
        ...


class Deduplicator(Protocol):
    """
    Interface for the main deduplication engine.

    Runs size → partial hash → full hash and collects statistics.
    """
    def find_duplicates(
        self,
        files: List[FileRecord],
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Tuple[List[DuplicateGroup], DeduplicationStats]:
        """
        Args:
            files: Records produced by the walk.
            stopped_flag: Optional function to check for cancellation.

        Returns:
            A tuple containing:
                - List of confirmed duplicate groups
                - Statistics collected during processing
        """
        ...
