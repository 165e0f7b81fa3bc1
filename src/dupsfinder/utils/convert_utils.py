"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
"""
import math


class ConvertUtils:
    @staticmethod
    def bytes_to_human(size_bytes: int, use_si: bool = False) -> str:
        """
        Convert bytes to human-readable string.
        Binary units by default (1.50 KiB, 3.20 MiB), SI units with use_si (1.50 kB).
        """
        if size_bytes < 0:
            return "0 B"

        unit = 1000 if use_si else 1024
        if size_bytes < unit:
            return f"{size_bytes} B"

        prefixes = "kMGTPE" if use_si else "KMGTPE"
        exp = min(int(math.log(size_bytes) / math.log(unit)), len(prefixes))
        # log() rounding can be off by one near exact powers
        if size_bytes < unit ** exp:
            exp -= 1
        elif exp < len(prefixes) and size_bytes >= unit ** (exp + 1):
            exp += 1
        prefix = prefixes[exp - 1] + ("" if use_si else "i")
        return f"{size_bytes / unit ** exp:.2f} {prefix}B"

    @staticmethod
    def human_to_bytes(size_str: str) -> int:
        """
        Convert human-readable size string to bytes.
        Supports formats: '1.5GB', '2048KB', '1000', '1K', '1M', '1G', '4KiB', etc.
        All units are binary (1K = 1024).
        Raises ValueError for negative sizes or invalid formats.
        """
        size_str = size_str.strip().upper().replace("IB", "B")

        # Define units with both full (KB) and short (K) forms
        units = {
            'PB': 1024 ** 5, 'P': 1024 ** 5,
            'TB': 1024 ** 4, 'T': 1024 ** 4,
            'GB': 1024 ** 3, 'G': 1024 ** 3,
            'MB': 1024 ** 2, 'M': 1024 ** 2,
            'KB': 1024, 'K': 1024,
            'B': 1,
        }

        # Check for unit suffix (longest first to avoid 'KB' matching as 'K' + 'B')
        for unit in sorted(units.keys(), key=len, reverse=True):
            if size_str.endswith(unit):
                value_str = size_str[:-len(unit)].strip()
                try:
                    value = float(value_str)
                except ValueError:
                    raise ValueError(f"Invalid numeric value in size: '{value_str}'")

                if value < 0:
                    raise ValueError(f"Negative size not allowed: '{size_str}'")
                return int(value * units[unit])

        # No unit specified: plain bytes
        try:
            value = int(size_str)
        except ValueError:
            raise ValueError(
                f"Invalid size format: '{size_str}'. "
                f"Supported formats: 1.5GB, 2048KB, 1000, 1K, 1M, etc."
            )

        if value < 0:
            raise ValueError(f"Negative size not allowed: '{size_str}'")
        return value

