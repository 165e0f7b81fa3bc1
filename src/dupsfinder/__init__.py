"""
dupsfinder finds duplicate files by content.

Core features:
- Parallel fork/join directory walk
- Three-stage funnel: size → partial hash (first 1024 bytes) → full hash
- Pluggable digest (SHA-1 by default, xxHash64 optional)
- CLI interface: `dupsfinder [root]`
"""

# Get version
try:
    from importlib.metadata import version as _version, PackageNotFoundError
    __version__ = _version("dupsfinder")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API: only what users should import directly
from dupsfinder.commands import DeduplicationCommand
from dupsfinder.core import (
    DeduplicationParams, DeduplicationStats, HashAlgorithmName, FileRecord, DuplicateGroup, HashFailure)
from dupsfinder.utils.convert_utils import ConvertUtils

__all__ = [
    "DeduplicationCommand",
    "DeduplicationParams",
    "DeduplicationStats",
    "HashAlgorithmName",
    "FileRecord",
    "DuplicateGroup",
    "HashFailure",
    "ConvertUtils",
    "__version__",
]
