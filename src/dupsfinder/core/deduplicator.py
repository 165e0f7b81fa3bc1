"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

deduplicator.py
Implements the pipeline-based duplicate detection using FileRecord objects:
    size → partial hash (first K bytes) → full hash

Each stage drops singleton groups, so a file whose size is unique is never read,
and a file whose partial digest is unique is never read in full.
"""
import time
import logging
from typing import List, Tuple, Optional, Callable

from dupsfinder.core.models import FileRecord, DuplicateGroup, DeduplicationStats, DeduplicationParams
from dupsfinder.core.grouper import FileGrouperImpl
from dupsfinder.core.interfaces import GroupingStage, Deduplicator
from dupsfinder.core.stages import SizeStageImpl, PartialHashStage, FullHashStage

logger = logging.getLogger(__name__)


# =============================
# Main Deduplicator Class
# =============================
class DeduplicatorImpl(Deduplicator):
    """
    Implements multi-stage duplicate detection using a pipeline architecture
    and collects detailed statistics.
    """
    def __init__(self, grouper: Optional[FileGrouperImpl] = None, params: Optional[DeduplicationParams] = None):
        self.grouper = grouper or FileGrouperImpl()
        self.params = params

    def find_duplicates(
        self,
        files: List[FileRecord],
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Tuple[List[DuplicateGroup], DeduplicationStats]:
        """
        Main deduplication pipeline.
        Args:
            files: Records produced by the walk
            stopped_flag (Optional[Callable[[], bool]]): Function that returns True if operation should be stopped.
        Returns:
            Tuple[List[DuplicateGroup], DeduplicationStats]
        """
        stats = DeduplicationStats(examined_files=len(files))
        total_start_time = time.time()

        if self.params is not None:
            files = [f for f in files if f.size is not None and self.params.size_passes(f.size)]

        # Initial stage: group by size
        size_stage = SizeStageImpl(self.grouper)
        start_time = time.time()
        groups = size_stage.process(files, stopped_flag=stopped_flag)
        DeduplicatorImpl._update_stats(stats, size_stage.get_stage_name(), time.time() - start_time, groups)

        # Run the digest stages in sequence; each one finishes completely before the next starts
        for stage in self._build_pipeline():
            if not groups:
                break
            start_time = time.time()
            groups = stage.process(groups, stopped_flag=stopped_flag)
            DeduplicatorImpl._update_stats(stats, stage.get_stage_name(), time.time() - start_time, groups)

        if stopped_flag and stopped_flag():
            logger.debug("Deduplication cancelled")
            groups = []

        groups = self._finalize(groups)
        stats.record_groups(groups)

        # Finalize stats
        stats.total_time = time.time() - total_start_time

        return groups, stats

    def _build_pipeline(self) -> List[GroupingStage]:
        return [PartialHashStage(self.grouper), FullHashStage(self.grouper)]

    @staticmethod
    def _finalize(groups: List[DuplicateGroup]) -> List[DuplicateGroup]:
        """
        Sets duplicate_count on every member and orders groups by descending size,
        then digest; members by path.
        """
        for group in groups:
            group.files.sort(key=lambda f: f.path)
            for file in group.files:
                file.duplicate_count = group.duplicate_count
        groups.sort(key=lambda g: (-g.size, g.digest or ""))
        return groups

    @staticmethod
    def _update_stats(
        stats: DeduplicationStats,
        stage: str,
        duration: float,
        groups: List[DuplicateGroup]
    ):
        """
        Helper to update DeduplicationStats object with the groups leaving a stage.
        """
        total_files = sum(len(g.files) for g in groups)
        stats.update_stage(
            stage_name=stage,
            groups_found=len(groups),
            files_processed=total_files,
            duration=duration
        )
        logger.debug(f"Stage {stage}: {len(groups)} groups / {total_files} files / {duration:.3f}s")
