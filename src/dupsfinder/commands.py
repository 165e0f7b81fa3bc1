"""
Command orchestrator for duplicate detection.
This is the single source of business logic used by the CLI.
"""
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Callable, Tuple

from dupsfinder.core.models import DuplicateGroup, DeduplicationStats, DeduplicationParams
from dupsfinder.core.walker import FileWalkerImpl
from dupsfinder.core.hasher import HasherImpl, algorithm_for
from dupsfinder.core.grouper import FileGrouperImpl
from dupsfinder.core.deduplicator import DeduplicatorImpl

logger = logging.getLogger(__name__)


class DeduplicationCommand:
    """
    Orchestrates the entire workflow:
    1. Walk the root directory in parallel
    2. Run the size → partial hash → full hash funnel
    3. Return duplicate groups with statistics

    One bounded worker pool is shared by the walk and every hashing stage.

    Usage:
        params = DeduplicationParams(root_dir="~/Downloads")
        groups, stats = DeduplicationCommand().execute(params)
    """

    def execute(
            self,
            params: DeduplicationParams,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Tuple[List[DuplicateGroup], DeduplicationStats]:
        """
        Execute duplicate detection with given parameters.

        Args:
            params: Validated parameters
            stopped_flag: () -> bool (returns True if operation should stop)

        Returns:
            Tuple of (duplicate_groups, statistics)

        Raises:
            RuntimeError: If the root directory can not be resolved
        """
        max_workers = params.max_workers or os.cpu_count() or 1
        logger.debug(f"Using {max_workers} workers, {params.algorithm.display_name}, "
                     f"partial hash over {params.partial_bytes} bytes")

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="dupsfinder") as executor:
            # Step 1: Walk files
            walker = FileWalkerImpl(executor=executor)
            files = walker.walk(params.root_dir, stopped_flag=stopped_flag)

            # Step 2: Find duplicates
            hasher = HasherImpl(
                algorithm=algorithm_for(params.algorithm),
                partial_bytes=params.partial_bytes,
                stopped_flag=stopped_flag
            )
            grouper = FileGrouperImpl(hasher=hasher, executor=executor)
            deduplicator = DeduplicatorImpl(grouper=grouper, params=params)
            groups, stats = deduplicator.find_duplicates(files, stopped_flag=stopped_flag)

        return groups, stats

