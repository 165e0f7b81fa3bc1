"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for file walking and duplicate detection.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Union, Callable
import os
import threading
import logging
from enum import Enum

logger = logging.getLogger(__name__)

# Number of leading bytes covered by the partial digest
PARTIAL_CHECKSUM_BYTES = 1024


# =============================
# Enums
# =============================

class HashAlgorithmName(Enum):
    """
    Content digest used to compare files.
    SHA-1 is chosen for speed; only accidental collisions matter here, not adversarial ones.
    """
    SHA1 = "sha1"
    XXHASH = "xxhash"

    @property
    def display_name(self) -> str:
        """Human-readable name for help text."""
        mapping = {
            HashAlgorithmName.SHA1: "SHA-1",
            HashAlgorithmName.XXHASH: "xxHash64",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class Stage(str, Enum):
    SIZE = "size"
    PARTIAL = "partial"
    FULL = "full"

    @property
    def display_name(self) -> str:
        mapping = {
            Stage.SIZE: "Size grouping",
            Stage.PARTIAL: "Partial Hash",
            Stage.FULL: "Full Hash",
        }
        return mapping[self]

    @classmethod
    def get_all(cls):
        return [cls.SIZE, cls.PARTIAL, cls.FULL]


class FieldState(Enum):
    UNSET = "unset"
    COMPUTED = "computed"
    FAILED = "failed"


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class HashFailure:
    """
    Marks a digest that could not be computed (I/O error, permission denied,
    file vanished, not a regular file any more).
    Never equal to a real digest, so failed files can not end up in one bucket.
    """
    path: str
    reason: str

    def __str__(self):
        return f"{self.path}: {self.reason}"


DigestResult = Union[str, HashFailure]


class DigestSlot:
    """
    Write-once holder for a lazily computed digest.

    State moves UNSET -> COMPUTED or UNSET -> FAILED exactly once; later writes
    are ignored and the first value is kept.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._state = FieldState.UNSET
        self._value: Optional[DigestResult] = None

    @property
    def state(self) -> FieldState:
        return self._state

    @property
    def value(self) -> Optional[DigestResult]:
        return self._value

    def is_set(self) -> bool:
        return self._state is not FieldState.UNSET

    def compute_once(self, compute: Callable[[], DigestResult]) -> DigestResult:
        """Runs `compute` on first access only; every caller gets the same result."""
        with self._lock:
            if self._state is FieldState.UNSET:
                self._publish(compute())
            return self._value

    def adopt(self, value: DigestResult) -> bool:
        """Stores a value computed elsewhere. Returns False if the slot was already set."""
        with self._lock:
            if self._state is not FieldState.UNSET:
                return False
            self._publish(value)
            return True

    def _publish(self, value: DigestResult) -> None:
        self._value = value
        self._state = FieldState.FAILED if isinstance(value, HashFailure) else FieldState.COMPUTED

    def __repr__(self):
        return f"<DigestSlot {self._state.value}>"


class FileRecord:
    """
    Represents a single regular file found during the walk.

    The path never changes. The walker passes in the size it read from the directory
    entry; otherwise it is read on first access. Size and digests are set at most once
    and kept for the lifetime of the record.
    """

    def __init__(self, path: str, size: Optional[int] = None):
        self._path = path
        self._size_lock = threading.Lock()
        self._size_state = FieldState.UNSET if size is None else FieldState.COMPUTED
        self._size = size
        self.partial_hash = DigestSlot()
        self.full_hash = DigestSlot()
        self.duplicate_count: int = 0  # filled in once the funnel is complete

    @classmethod
    def with_unknown_size(cls, path: str) -> "FileRecord":
        """Record whose size could not be read; it never takes part in grouping."""
        record = cls(path)
        record._size_state = FieldState.FAILED
        return record

    @property
    def path(self) -> str:
        return self._path

    @property
    def size(self) -> Optional[int]:
        """File size in bytes, or None if it could not be read."""
        with self._size_lock:
            if self._size_state is FieldState.UNSET:
                try:
                    self._size = os.stat(self._path, follow_symlinks=False).st_size
                    self._size_state = FieldState.COMPUTED
                except OSError as e:
                    logger.warning(f"Could not get size of {self._path}: {e}")
                    self._size_state = FieldState.FAILED
            return self._size if self._size_state is FieldState.COMPUTED else None

    @property
    def digest(self) -> Optional[str]:
        """Full content digest, once it has been computed successfully."""
        value = self.full_hash.value
        return value if isinstance(value, str) else None

    def __repr__(self):
        return f"<FileRecord path={self._path}, size={self._size}>"


@dataclass
class DuplicateGroup:
    """
    A group of files sharing the same size and hash signature.
    After the full-hash stage every group holds true duplicates.
    """
    size: int
    files: List[FileRecord]
    digest: Optional[str] = None

    @property
    def duplicate_count(self) -> int:
        """How many files are in this group."""
        return len(self.files)

    @property
    def wasted_space(self) -> int:
        """Bytes reclaimable by keeping a single copy."""
        return (self.duplicate_count - 1) * self.size if self.files else 0

    def __repr__(self):
        return f"<DuplicateGroup size={self.size}, count={len(self.files)}>"


@dataclass
class DeduplicationStats:
    """
    Statistics collected while walking and deduplicating.
    """
    examined_files: int = 0
    duplicate_files: int = 0
    wasted_space: int = 0
    total_time: float = 0.0
    stage_stats: Dict[str, Dict[str, Union[int, float]]] = field(default_factory=dict)

    def update_stage(
            self,
            stage_name: str,
            groups_found: int,
            files_processed: int,
            duration: float
    ) -> None:
        if stage_name not in self.stage_stats:
            self.stage_stats[stage_name] = {
                "groups": 0,
                "files": 0,
                "time": 0.0
            }
        self.stage_stats[stage_name]["groups"] += groups_found
        self.stage_stats[stage_name]["files"] += files_processed
        self.stage_stats[stage_name]["time"] += duration

    def record_groups(self, groups: List[DuplicateGroup]) -> None:
        """Accumulates duplicate count and wasted space over final groups."""
        for group in groups:
            self.duplicate_files += group.duplicate_count
            self.wasted_space += group.wasted_space

    def print_summary(self) -> str:
        lines = [
            "Deduplication Statistics:",
            f"Examined files: {self.examined_files}",
            f"Total Execution Time: {self.total_time:.3f}s\n",
            "Stage: GROUPS / FILES / TIME"
        ]

        for stage in Stage.get_all():
            data = self.stage_stats.get(stage.value)
            if data is None:
                continue
            lines.append(f"{stage.display_name}: {data['groups']} / {data['files']} / {data['time']:.3f}s")

        return "\n".join(lines)


"""
DTO for deduplication parameters with built-in validation.
"""

@dataclass
class DeduplicationParams:
    """Parameters for one run with validation."""
    root_dir: str = "."
    algorithm: HashAlgorithmName = HashAlgorithmName.SHA1
    partial_bytes: int = PARTIAL_CHECKSUM_BYTES
    max_workers: Optional[int] = None
    min_size_bytes: Optional[int] = None
    max_size_bytes: Optional[int] = None

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        if self.partial_bytes <= 0:
            raise ValueError("Partial hash length must be positive")

        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("Worker count must be at least 1")

        if self.min_size_bytes is not None and self.min_size_bytes < 0:
            raise ValueError("Minimum size cannot be negative")

        if self.max_size_bytes is not None and self.max_size_bytes < 0:
            raise ValueError("Maximum size cannot be negative")

        if self.max_size_bytes is not None and self.min_size_bytes is not None \
                and self.max_size_bytes < self.min_size_bytes:
            raise ValueError("Maximum size cannot be less than minimum size")

    def size_passes(self, size: int) -> bool:
        """Check if file size is within configured limits."""
        if self.min_size_bytes is not None and size < self.min_size_bytes:
            return False
        if self.max_size_bytes is not None and size > self.max_size_bytes:
            return False
        return True
