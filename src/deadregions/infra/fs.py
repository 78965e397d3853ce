from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Resolves source path patterns, derives stable document identities and
reads/writes source files so that every byte the analyzer does not edit
(including line endings and undecodable bytes) round-trips unchanged.
"""

import glob
import logging
import os
from typing import Iterable, List

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

SOURCE_ENCODING = "utf-8"
# Undecodable bytes map to lone surrogates and back, keeping files byte-identical
SOURCE_ERRORS = "surrogateescape"
_GLOB_CHARS = frozenset("*?[")

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def document_identity(path: str) -> str:
    """
    Return the identity used to align one document across configurations.

    Paths are made absolute and case-normalized on case-insensitive platforms.
    """
    return os.path.normcase(os.path.abspath(os.path.expanduser(path)))


def expand_source_patterns(patterns: Iterable[str], base_dir: str = "") -> List[str]:
    """
    Expand paths and glob patterns into a sorted list of existing files.

    Args:
        patterns: Plain file paths or glob patterns ('**' is recursive).
        base_dir: Directory that relative patterns are resolved against.

    Returns:
        List[str]: Unique absolute file paths, sorted.
    """
    found = set()

    for pattern in patterns:
        pattern = os.path.expanduser(pattern.strip())
        if not pattern:
            continue
        if base_dir and not os.path.isabs(pattern):
            pattern = os.path.join(base_dir, pattern)

        if _GLOB_CHARS.intersection(pattern):
            matches = [p for p in glob.glob(pattern, recursive=True) if os.path.isfile(p)]
            if not matches:
                logger.warning(f"Pattern matched no files: {pattern}")
            found.update(os.path.abspath(p) for p in matches)
        elif os.path.isfile(pattern):
            found.add(os.path.abspath(pattern))
        else:
            logger.warning(f"Source file not found: {pattern}")

    return sorted(found)


# -----------------------------------------------------------------------------
# SOURCE I/O
# -----------------------------------------------------------------------------

def read_source_text(path: str) -> str:
    """
    Read a source file without translating line endings.

    Raises:
        OSError: If the file cannot be read.
    """
    with open(path, "r", encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS, newline="") as f:
        return f.read()


def write_source_text(path: str, text: str) -> None:
    """
    Write text back to a source file through a temporary sibling file.

    Raises:
        OSError: If the file cannot be written.
    """
    tmp_path = f"{path}.deadregions.tmp"
    try:
        with open(tmp_path, "w", encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS, newline="") as f:
            f.write(text)
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
