"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/walker.py
Parallel recursive directory walker.

Every directory is a task. A task lists its directory, reads the size of each
regular file from its directory entry and hands its subdirectories back instead
of descending into them. The walking thread forks one task per returned
subdirectory into the worker pool and merges results as tasks finish, so a
directory is fully merged only after all of its descendants are, and the call
stack stays flat however deep the tree is.

Tasks never wait on other tasks, so a bounded pool can not deadlock.
"""

import os
import time
import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor, FIRST_COMPLETED, wait
from pathlib import Path
from typing import Dict, List, Optional, Callable, Tuple

from dupsfinder.core.models import FileRecord
from dupsfinder.core.interfaces import FileWalker

logger = logging.getLogger(__name__)


def _record_for(entry: os.DirEntry) -> FileRecord:
    try:
        return FileRecord(entry.path, size=entry.stat(follow_symlinks=False).st_size)
    except OSError as e:
        logger.warning(f"Could not get size of {entry.path}: {e}")
        return FileRecord.with_unknown_size(entry.path)


def _list_directory(
        path: str,
        stopped_flag: Optional[Callable[[], bool]] = None
) -> Tuple[List[FileRecord], List[str]]:
    """
    Regular files directly under path, and its subdirectories.
    An unreadable directory is logged and treated as empty.
    """
    files: List[FileRecord] = []
    subdirs: List[str] = []

    if stopped_flag and stopped_flag():
        return files, subdirs

    try:
        with os.scandir(path) as entries:
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        subdirs.append(entry.path)
                    elif entry.is_file(follow_symlinks=False):
                        files.append(_record_for(entry))
                    else:
                        logger.debug(f"Skipping non-regular entry: {entry.path}")
                except OSError as e:
                    logger.warning(f"Could not inspect {entry.path}: {e}")
    except OSError as e:
        logger.warning(f"Could not list directory {path}: {e}")

    return files, subdirs


class FileWalkerImpl(FileWalker):
    """
    Walks a directory tree with fork/join parallelism and returns a FileRecord
    for every regular file.

    Symlinks are never followed: a symlink to a directory is not descended and a
    symlink to a file is not collected. Devices, sockets and fifos are skipped.

    Attributes:
        executor: Shared worker pool (optional; a private pool is created per walk otherwise)
        max_workers: Size of the private pool
    """

    def __init__(self, executor: Optional[Executor] = None, max_workers: Optional[int] = None):
        self.executor = executor
        self.max_workers = max_workers

    def walk(self,
             root: str,
             stopped_flag: Optional[Callable[[], bool]] = None) -> List[FileRecord]:
        """
        Returns all regular files under root.
        Raises RuntimeError if root itself can not be resolved or is not a directory.
        """
        root_path = self.resolve_root(root)
        logger.debug(f"Walking directory: {root_path}")

        if stopped_flag and stopped_flag():
            logger.debug("Walk cancelled before start")
            return []

        start_time = time.time()

        if self.executor is not None:
            files = self._walk_with(self.executor, str(root_path), stopped_flag)
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                files = self._walk_with(executor, str(root_path), stopped_flag)

        logger.debug(f"Walk completed in {time.time() - start_time:.2f}s, found {len(files)} files")
        return files

    @staticmethod
    def _walk_with(
            executor: Executor,
            root: str,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> List[FileRecord]:
        """Forks one task per directory and merges finished tasks on this thread."""
        files: List[FileRecord] = []
        pending: Dict[Future, str] = {executor.submit(_list_directory, root, stopped_flag): root}

        while pending:
            done, _ = wait(pending, return_when=FIRST_COMPLETED)
            for future in done:
                path = pending.pop(future)
                try:
                    dir_files, subdirs = future.result()
                except Exception as e:
                    logger.warning(f"Could not walk {path}: {e}")
                    continue
                files.extend(dir_files)
                for subdir in subdirs:
                    pending[executor.submit(_list_directory, subdir, stopped_flag)] = subdir

        return files

    @staticmethod
    def resolve_root(root: str) -> Path:
        """Canonical absolute path of the root directory."""
        try:
            root_path = Path(root).resolve(strict=True)
        except (OSError, RuntimeError) as e:
            error_msg = f"Cannot resolve directory {root}: {e}"
            logger.debug(error_msg)
            raise RuntimeError(error_msg)
        if not root_path.is_dir():
            error_msg = f"Not a directory: {root}"
            logger.debug(error_msg)
            raise RuntimeError(error_msg)
        return root_path
