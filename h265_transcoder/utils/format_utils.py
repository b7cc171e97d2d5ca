"""
This module contains helper functions for formatting data into human-readable
strings and for simple path checks used during file discovery.
"""

from pathlib import Path
from typing import Iterable


def formatted_size(size_bytes: int) -> str:
    """
    Converts a size in bytes to a human-readable string (e.g., B, KB, MB, GB, TB).

    Args:
        size_bytes: The size in bytes.

    Returns:
        A formatted string with the appropriate unit.
        For example, 1536 becomes "1.50 KB", and 2097152 becomes "2 MB".
    """
    if size_bytes < 0:
        size_bytes = 0

    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    factor = 1024.0

    if size_bytes == 0:
        return "0 B"

    size = float(size_bytes)
    for unit in units:
        if size < factor:
            if unit == "B":
                return f"{int(size)} {unit}"
            # Clean up ".00" for whole numbers (e.g., "2.00 MB" -> "2 MB").
            return f"{size:.2f} {unit}".replace(".00", "")
        size /= factor

    return f"{size:.2f} {units[-1]}".replace(".00", "")


def size_percent(new_size: int, original_size: int) -> int:
    """Integer percentage of `new_size` relative to `original_size` (0 if unknown)."""
    if original_size <= 0:
        return 0
    return 100 * new_size // original_size


def contains_any_extensions(file_path_obj: Path, extensions_to_check: Iterable[str]) -> bool:
    """
    Checks if a file's extension is present in a given list (case-insensitive).

    Args:
        file_path_obj: A `pathlib.Path` object for the file to check.
        extensions_to_check: File extensions, with or without the leading dot.

    Returns:
        True if the file's extension is in the list, False otherwise.
    """
    normalized_extensions = {
        ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        for ext in extensions_to_check
    }
    if not normalized_extensions:
        return False
    return file_path_obj.suffix.lower() in normalized_extensions
