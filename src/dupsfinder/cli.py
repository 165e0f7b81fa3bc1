#!/usr/bin/env python3
"""
dupsfinder CLI: finds duplicate files under a directory by content.

stdout: one line per duplicate file, <digest>:<count>:<size>:"<path>"
stderr: warnings (WARN ...), header and summary lines
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import logging
import signal
import sys
import threading
import time
from typing import List, Optional, NoReturn

from dupsfinder.core.models import (
    DeduplicationParams, DeduplicationStats, DuplicateGroup, FileRecord,
    HashAlgorithmName, PARTIAL_CHECKSUM_BYTES)
from dupsfinder.commands import DeduplicationCommand
from dupsfinder.core.walker import FileWalkerImpl
from dupsfinder.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)

EPILOG_TEXT = """
Examples:
  Find duplicates in the current directory
  %(prog)s

  Find duplicates in Downloads, ignoring files under 1MB
  %(prog)s ~/Downloads --min-size 1M

  Use xxHash and 8 workers, show per-stage statistics
  %(prog)s ~/Downloads --algorithm xxhash --workers 8 -v
"""


class LevelLabelFormatter(logging.Formatter):
    """Formats WARNING records with the short label WARN."""

    LABELS = {logging.WARNING: "WARN"}

    def format(self, record: logging.LogRecord) -> str:
        label = self.LABELS.get(record.levelno)
        if label is None:
            return super().format(record)
        # Other handlers see the same record, so relabel a copy
        relabelled = logging.makeLogRecord(record.__dict__)
        relabelled.levelname = label
        return super().format(relabelled)


class CLIApplication:
    """Main CLI application controller."""

    _log_handler: Optional[logging.Handler] = None

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self._stop_event = threading.Event()

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="dupsfinder",
            description="dupsfinder: find duplicate files by content",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "root",
            nargs="?",
            default=".",
            help="Directory to search for duplicates. Default: current directory"
        )

        # Hashing options
        parser.add_argument(
            "--algorithm", "-a",
            choices=[a.value for a in HashAlgorithmName],
            default=HashAlgorithmName.SHA1.value,
            help="Content digest: 'sha1' (default) or 'xxhash' (faster, non-cryptographic)"
        )
        parser.add_argument(
            "--partial-bytes",
            type=int,
            default=PARTIAL_CHECKSUM_BYTES,
            metavar="N",
            help=f"Bytes covered by the partial hash. Default: {PARTIAL_CHECKSUM_BYTES}"
        )
        parser.add_argument(
            "--workers", "-w",
            type=int,
            default=None,
            metavar="N",
            help="Worker threads for walking and hashing. Default: number of CPUs"
        )

        # Filtering options
        parser.add_argument(
            "--min-size", "-m",
            default=None,
            type=str,
            metavar="SIZE",
            help="Ignore files smaller than SIZE (e.g., 500KB, 1MB)"
        )
        parser.add_argument(
            "--max-size", "-M",
            default=None,
            type=str,
            metavar="SIZE",
            help="Ignore files larger than SIZE (e.g., 10MB, 1GB)"
        )

        # Output options
        parser.add_argument(
            "--si",
            action="store_true",
            help="Print wasted space with 1000-based units (kB, MB) instead of KiB, MiB"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress header and summary lines"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show per-stage statistics and debug output"
        )

        return parser.parse_args(args)

    def configure_logging(self) -> None:
        """Warnings go to stderr as 'WARN <message>'."""
        package_logger = logging.getLogger("dupsfinder")
        if CLIApplication._log_handler is not None:
            package_logger.removeHandler(CLIApplication._log_handler)

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(LevelLabelFormatter("%(levelname)s %(message)s"))
        package_logger.addHandler(handler)
        package_logger.setLevel(logging.DEBUG if self.verbose else logging.WARNING)
        CLIApplication._log_handler = handler

    @staticmethod
    def reset_logging() -> None:
        """Detach the stderr handler installed by configure_logging."""
        if CLIApplication._log_handler is not None:
            logging.getLogger("dupsfinder").removeHandler(CLIApplication._log_handler)
            CLIApplication._log_handler = None

    def create_params(self, args: argparse.Namespace) -> DeduplicationParams:
        """Create DeduplicationParams from CLI arguments."""
        try:
            min_size_bytes = ConvertUtils.human_to_bytes(args.min_size) if args.min_size else None
            max_size_bytes = ConvertUtils.human_to_bytes(args.max_size) if args.max_size else None

            return DeduplicationParams(
                root_dir=args.root,
                algorithm=HashAlgorithmName(args.algorithm),
                partial_bytes=args.partial_bytes,
                max_workers=args.workers,
                min_size_bytes=min_size_bytes,
                max_size_bytes=max_size_bytes,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def stopped_flag(self) -> bool:
        """True once the user asked to stop (Ctrl+C)."""
        return self._stop_event.is_set()

    def _request_stop(self, signum, frame) -> None:
        self._stop_event.set()

    def run_deduplication(self, params: DeduplicationParams):
        """Execute the walk and the duplicate funnel."""
        command = DeduplicationCommand()
        previous_handler = None
        in_main_thread = threading.current_thread() is threading.main_thread()
        if in_main_thread:
            previous_handler = signal.signal(signal.SIGINT, self._request_stop)

        try:
            groups, stats = command.execute(params, stopped_flag=self.stopped_flag)
        except RuntimeError as e:
            self.error_exit(str(e))
        finally:
            if in_main_thread:
                signal.signal(signal.SIGINT, previous_handler)

        if self.stopped_flag():
            print("\nOperation cancelled by user (Ctrl+C)", file=sys.stderr)
            sys.exit(130)

        return groups, stats

    @staticmethod
    def format_record(file: FileRecord) -> str:
        return f'{file.digest}:{file.duplicate_count}:{file.size}:"{file.path}"'

    def output_results(self, groups: List[DuplicateGroup]) -> None:
        """Print one line per duplicate file, in core order."""
        lines = [self.format_record(file) for group in groups for file in group.files]
        if lines:
            sys.stdout.write("\n".join(lines) + "\n")
            sys.stdout.flush()

    def output_summary(self, stats: DeduplicationStats, use_si: bool = False) -> None:
        if self.verbose:
            print(stats.print_summary(), file=sys.stderr)
        if self.quiet:
            return
        wasted = ConvertUtils.bytes_to_human(stats.wasted_space, use_si=use_si)
        print(
            f"Examined {stats.examined_files} files, found {stats.duplicate_files} dups, "
            f"total wasted space {wasted}",
            file=sys.stderr
        )

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Main entry point."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        self.configure_logging()
        try:
            self._execute(args)
        finally:
            self.reset_logging()

    def _execute(self, args: argparse.Namespace) -> None:
        params = self.create_params(args)

        try:
            root_path = FileWalkerImpl.resolve_root(params.root_dir)
        except RuntimeError as e:
            self.error_exit(str(e))

        if not self.quiet:
            print(f'Searching for duplicates in the "{root_path}" directory.', file=sys.stderr)

        groups, stats = self.run_deduplication(params)
        self.output_results(groups)
        self.output_summary(stats, use_si=args.si)

        if self.verbose:
            elapsed = time.time() - self.start_time
            print(f"Completed in {elapsed:.2f} seconds", file=sys.stderr)


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\nOperation cancelled by user (Ctrl+C)", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
