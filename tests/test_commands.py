"""
Integration tests for DeduplicationCommand, the orchestration layer between CLI and core.
Verifies correct wiring of walker → deduplicator with a shared worker pool.
"""
import os
from pathlib import Path

import pytest

from dupsfinder import DeduplicationCommand, DeduplicationParams, HashAlgorithmName


class TestDeduplicationCommand:
    """Test command orchestration logic."""

    def test_execute_returns_groups_and_stats(self, test_files):
        root_dir = str(Path(test_files["dup1_a"]).parent)

        groups, stats = DeduplicationCommand().execute(DeduplicationParams(root_dir=root_dir))

        assert len(groups) == 2
        assert stats.examined_files == len(test_files)
        assert stats.total_time >= 0
        assert {"size", "partial", "full"} <= set(stats.stage_stats)

    @pytest.mark.parametrize("algorithm", list(HashAlgorithmName))
    def test_algorithms_find_same_groups(self, test_files, algorithm):
        root_dir = str(Path(test_files["dup1_a"]).parent)

        groups, _ = DeduplicationCommand().execute(
            DeduplicationParams(root_dir=root_dir, algorithm=algorithm, max_workers=2))

        assert sorted(len(g.files) for g in groups) == [2, 3]

    def test_single_worker(self, test_files):
        root_dir = str(Path(test_files["dup1_a"]).parent)

        groups, _ = DeduplicationCommand().execute(DeduplicationParams(root_dir=root_dir, max_workers=1))

        assert len(groups) == 2

    def test_custom_partial_bytes(self, tmp_path):
        """With a 4-byte prefix, a 10-byte pair needs a full read to be confirmed."""
        (tmp_path / "a").write_bytes(b"0123456789")
        (tmp_path / "b").write_bytes(b"0123456789")

        groups, stats = DeduplicationCommand().execute(
            DeduplicationParams(root_dir=str(tmp_path), partial_bytes=4))

        assert len(groups) == 1
        assert stats.stage_stats["full"]["files"] == 2

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(RuntimeError):
            DeduplicationCommand().execute(DeduplicationParams(root_dir=str(tmp_path / "nope")))

    def test_empty_directory_is_not_an_error(self, tmp_path):
        groups, stats = DeduplicationCommand().execute(DeduplicationParams(root_dir=str(tmp_path)))
        assert groups == []
        assert stats.examined_files == 0

    def test_relative_root(self, test_files):
        root = Path(test_files["dup1_a"]).parent
        old_cwd = os.getcwd()
        os.chdir(root)
        try:
            groups, _ = DeduplicationCommand().execute(DeduplicationParams())
        finally:
            os.chdir(old_cwd)
        assert all(os.path.isabs(f.path) for g in groups for f in g.files)

    def test_duplicates_at_the_bottom_of_a_deep_tree(self, tmp_path):
        """Depth alone never aborts the run."""
        current = tmp_path
        for _ in range(400):
            current = current / "d"
            current.mkdir()
        (current / "a").write_bytes(b"deep")
        (tmp_path / "b").write_bytes(b"deep")

        groups, stats = DeduplicationCommand().execute(DeduplicationParams(root_dir=str(tmp_path)))

        assert stats.examined_files == 2
        assert [len(g.files) for g in groups] == [2]
