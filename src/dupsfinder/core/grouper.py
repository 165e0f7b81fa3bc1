"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Implements file grouping strategies using FileRecord objects and a Hasher.

Digest keys are computed concurrently, one task per file. Workers only return
their key; a single thread folds the results into the partition map after every
task of the call has finished, so equal keys always land in the same bucket.
"""

import logging
from collections import defaultdict
from concurrent.futures import Executor, ThreadPoolExecutor, as_completed
from typing import List, Dict, Tuple, Any, Callable, Optional

from dupsfinder.core.interfaces import FileGrouper, Hasher
from dupsfinder.core.models import FileRecord, HashFailure
from dupsfinder.core.hasher import HasherImpl

logger = logging.getLogger(__name__)


class FileGrouperImpl(FileGrouper):
    """
    A concrete implementation of FileGrouper.
    Uses an injected Hasher instance for flexibility and testability.
    """

    def __init__(
            self,
            hasher: Optional[Hasher] = None,
            executor: Optional[Executor] = None,
            max_workers: Optional[int] = None
    ):
        self.hasher = hasher or HasherImpl()
        self.executor = executor
        self.max_workers = max_workers

    def group_by_size(self, files: List[FileRecord]) -> Dict[int, List[FileRecord]]:
        """Groups files by their size. Files of unknown size are left out."""
        return self._group_by(files, lambda f: f.size)

    def group_by_partial_hash(
            self,
            files: List[FileRecord],
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Dict[Tuple[int, str], List[FileRecord]]:
        """Groups files by (size, digest of the first bytes)."""
        return self._group_by_concurrent(files, self.hasher.compute_partial_hash, stopped_flag)

    def group_by_full_hash(
            self,
            files: List[FileRecord],
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Dict[Tuple[int, str], List[FileRecord]]:
        """Groups files by (size, full content digest)."""
        return self._group_by_concurrent(files, self.hasher.compute_full_hash, stopped_flag)

    def _group_by_concurrent(
            self,
            files: List[FileRecord],
            digest_func: Callable[[FileRecord], Any],
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Dict[Tuple[int, str], List[FileRecord]]:
        """
        Computes digests in the worker pool and waits for all of them before
        partitioning. Returns an empty dict if cancelled.
        """
        if not files:
            return {}

        def task(file: FileRecord):
            if stopped_flag and stopped_flag():
                return None
            return digest_func(file)

        if self.executor is not None:
            digests = self._collect(self.executor, files, task)
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                digests = self._collect(executor, files, task)

        if stopped_flag and stopped_flag():
            return {}

        return self._group_by(files, lambda f: self._digest_key(f, digests.get(f)))

    @staticmethod
    def _collect(
            executor: Executor,
            files: List[FileRecord],
            task: Callable[[FileRecord], Any]
    ) -> Dict[FileRecord, Any]:
        future_to_file = {executor.submit(task, f): f for f in files}
        digests = {}
        for future in as_completed(future_to_file):
            file = future_to_file[future]
            try:
                digests[file] = future.result()
            except Exception as e:
                logger.warning(f"Error processing {file.path}: {e}")
        return digests

    @staticmethod
    def _digest_key(file: FileRecord, digest: Any) -> Optional[Tuple[int, str]]:
        if digest is None or isinstance(digest, HashFailure):
            return None
        return file.size, digest

    @staticmethod
    def _group_by(files: List[FileRecord], key_func: Callable[[FileRecord], Any]) -> Dict[Any, List[FileRecord]]:
        """
        Helper method to group files by any computed key.
        Files whose key is None are dropped, as are groups with fewer than 2 files.
        Args:
            files: List of files to group
            key_func: Function that computes a hashable key from a FileRecord
        Returns:
            Dict[key, List[FileRecord]]
        """
        groups = defaultdict(list)
        skipped_files = 0
        for file in files:
            try:
                key = key_func(file)
            except Exception as e:
                logger.warning(f"Error processing {file.path}: {e}")
                skipped_files += 1
                continue
            if key is None:
                skipped_files += 1
            else:
                groups[key].append(file)

        if skipped_files > 0:
            logger.debug(f"Skipped {skipped_files} files without a usable key")

        return {key: group for key, group in groups.items() if len(group) >= 2}
