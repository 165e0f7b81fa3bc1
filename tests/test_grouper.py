"""
Unit tests for FileGrouperImpl.
Verifies grouping logic for size and hash-based grouping with proper filtering.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

from dupsfinder.core import FileGrouperImpl, HasherImpl
from dupsfinder.core import FileRecord, HashFailure
from conftest import CountingHasher


class StubHasher(HasherImpl):
    """Returns preset digests without touching the disk."""

    def __init__(self, digests):
        super().__init__()
        self.digests = digests

    def compute_partial_hash(self, file):
        return self.digests[file.path]

    def compute_full_hash(self, file):
        return self.digests[file.path]


class TestFileGrouperImpl:
    """Test file grouping by size and hash."""

    def test_groups_by_size_filters_single_files(self):
        """
        group_by_size returns ONLY groups with 2+ files of same size.
        Single files are filtered out (not considered duplicates).
        """
        files = [
            FileRecord("/a.txt", size=1024),
            FileRecord("/b.txt", size=1024),  # Same size → group
            FileRecord("/c.txt", size=2048),  # Single file → filtered
        ]

        size_groups = FileGrouperImpl().group_by_size(files)

        assert list(size_groups) == [1024]
        assert len(size_groups[1024]) == 2

    def test_group_by_size_excludes_unknown_size(self, tmp_path):
        files = [
            FileRecord(str(tmp_path / "missing1")),
            FileRecord(str(tmp_path / "missing2")),
            FileRecord("/a", size=5),
            FileRecord("/b", size=5),
        ]

        size_groups = FileGrouperImpl().group_by_size(files)

        assert list(size_groups) == [5]
        assert {f.path for f in size_groups[5]} == {"/a", "/b"}

    def test_groups_by_hash_filters_small_groups(self):
        """Hash-based grouping should exclude groups with <2 files."""
        files = [
            FileRecord("/dup1.txt", size=100),
            FileRecord("/dup2.txt", size=100),
            FileRecord("/unique.txt", size=100),
        ]
        hasher = StubHasher({"/dup1.txt": "aaaa", "/dup2.txt": "aaaa", "/unique.txt": "bbbb"})

        hash_groups = FileGrouperImpl(hasher).group_by_partial_hash(files)

        assert list(hash_groups) == [(100, "aaaa")]
        assert {f.path for f in hash_groups[(100, "aaaa")]} == {"/dup1.txt", "/dup2.txt"}

    def test_failed_files_are_never_grouped_together(self):
        """Two failures must not form a 'failed' bucket."""
        files = [
            FileRecord("/bad1", size=100),
            FileRecord("/bad2", size=100),
            FileRecord("/good1", size=100),
            FileRecord("/good2", size=100),
        ]
        hasher = StubHasher({
            "/bad1": HashFailure("/bad1", "denied"),
            "/bad2": HashFailure("/bad2", "denied"),
            "/good1": "cafe",
            "/good2": "cafe",
        })

        hash_groups = FileGrouperImpl(hasher).group_by_full_hash(files)

        assert list(hash_groups) == [(100, "cafe")]

    def test_same_digest_different_size_not_grouped(self):
        files = [FileRecord("/a", size=1), FileRecord("/b", size=2)]
        hasher = StubHasher({"/a": "same", "/b": "same"})

        assert FileGrouperImpl(hasher).group_by_full_hash(files) == {}

    def test_group_by_empty_input(self):
        """Empty file list should return empty dict."""
        grouper = FileGrouperImpl()
        assert grouper.group_by_size([]) == {}
        assert grouper.group_by_partial_hash([]) == {}
        assert grouper.group_by_full_hash([]) == {}

    def test_group_by_error_handling(self, caplog):
        """Exceptions in key_func should be caught and logged, not crash the whole process."""
        files = [
            FileRecord("/good1.txt", size=100),
            FileRecord("/bad.txt", size=200),  # Will raise
            FileRecord("/good2.txt", size=100),
        ]

        def flaky_key_func(f):
            if "bad" in f.path:
                raise ValueError("Simulated hash error")
            return f.size

        groups = FileGrouperImpl._group_by(files, flaky_key_func)

        assert "Error processing /bad.txt" in caplog.text
        assert list(groups) == [100]
        assert len(groups[100]) == 2

    def test_concurrent_hashing_puts_equal_digests_in_one_bucket(self, tmp_path):
        """Many identical files hashed in parallel must end up in exactly one group."""
        files = []
        for i in range(50):
            path = tmp_path / f"copy{i}.bin"
            path.write_bytes(b"same content" * 200)
            files.append(FileRecord(str(path)))

        with ThreadPoolExecutor(max_workers=8) as executor:
            grouper = FileGrouperImpl(HasherImpl(), executor=executor)
            hash_groups = grouper.group_by_full_hash(files)

        assert len(hash_groups) == 1
        assert len(next(iter(hash_groups.values()))) == 50

    def test_hashing_uses_worker_threads(self, tmp_path):
        seen_threads = set()

        class ThreadRecordingHasher(CountingHasher):
            def digest(self, path, max_bytes=0):
                seen_threads.add(threading.current_thread().name)
                return super().digest(path, max_bytes)

        files = []
        for i in range(4):
            path = tmp_path / f"f{i}.bin"
            path.write_bytes(b"z" * 10)
            files.append(FileRecord(str(path)))

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="hashpool") as executor:
            FileGrouperImpl(ThreadRecordingHasher(), executor=executor).group_by_full_hash(files)

        assert seen_threads
        assert all(name.startswith("hashpool") for name in seen_threads)

    def test_cancelled_grouping_returns_empty(self, tmp_path):
        files = []
        for i in range(3):
            path = tmp_path / f"f{i}.bin"
            path.write_bytes(b"q" * 10)
            files.append(FileRecord(str(path)))
        hasher = CountingHasher()

        groups = FileGrouperImpl(hasher).group_by_full_hash(files, stopped_flag=lambda: True)

        assert groups == {}
        assert sum(hasher.calls.values()) == 0
