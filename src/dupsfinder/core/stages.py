"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/stages.py
Funnel stages of the duplicate detection pipeline.

CLASS HIERARCHY
---------------
SizeStageImpl      : Partitions all walked files by size
HashStageBase      : Shared flatten → partition → prune logic for digest stages
PartialHashStage   : Partitions size candidates by the digest of their first bytes
FullHashStage      : Partitions partial candidates by the digest of the whole file

STAGE CONTRACTS
---------------
Each stage implements `process()`:
  • Accepts candidate groups from the previous stage
  • Hashes every candidate of the stage and waits for all of them
  • Returns only groups with 2+ files; singletons never reach the next stage
  • Respects cancellation via stopped_flag (returns an empty list)
"""

import logging
from typing import List, Dict, Tuple, Optional, Callable

from dupsfinder.core.models import FileRecord, DuplicateGroup, Stage
from dupsfinder.core.grouper import FileGrouperImpl
from dupsfinder.core.interfaces import SizeStage, GroupingStage

logger = logging.getLogger(__name__)


class SizeStageImpl(SizeStage):
    def __init__(self, grouper: FileGrouperImpl):
        self.grouper = grouper

    def get_stage_name(self) -> str:
        return Stage.SIZE.value

    def process(
            self,
            files: List[FileRecord],
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> List[DuplicateGroup]:
        """
        Group by file size.
        Returns list of DuplicateGroups with 2+ files of same size.
        """
        if stopped_flag and stopped_flag():
            return []

        size_groups = self.grouper.group_by_size(files)
        return [
            DuplicateGroup(size=size, files=files_list)
            for size, files_list in size_groups.items()
        ]


class HashStageBase(GroupingStage):
    """
    Base class for digest stages. All candidates of a stage are hashed in one
    concurrent batch, so no group is pruned before every digest is known.
    """

    def __init__(self, grouper: FileGrouperImpl):
        self.grouper = grouper

    def get_stage_name(self) -> str:
        raise NotImplementedError

    def _group_files(
            self,
            files: List[FileRecord],
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Dict[Tuple[int, str], List[FileRecord]]:
        raise NotImplementedError

    def process(
            self,
            groups: List[DuplicateGroup],
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> List[DuplicateGroup]:
        if stopped_flag and stopped_flag():
            return []

        candidates = [file for group in groups for file in group.files]
        hash_groups = self._group_files(candidates, stopped_flag=stopped_flag)

        if stopped_flag and stopped_flag():
            return []

        logger.debug(f"{self.get_stage_name()}: {len(candidates)} candidates → {len(hash_groups)} groups")
        return [
            DuplicateGroup(size=size, files=files, digest=digest)
            for (size, digest), files in hash_groups.items()
        ]


class PartialHashStage(HashStageBase):
    def get_stage_name(self) -> str:
        return Stage.PARTIAL.value

    def _group_files(self, files, stopped_flag=None):
        return self.grouper.group_by_partial_hash(files, stopped_flag=stopped_flag)


class FullHashStage(HashStageBase):
    def get_stage_name(self) -> str:
        return Stage.FULL.value

    def _group_files(self, files, stopped_flag=None):
        return self.grouper.group_by_full_hash(files, stopped_flag=stopped_flag)
