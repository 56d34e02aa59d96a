"""
File ingestion.

Reads files from disk into immutable byte buffers, enforcing a per-file and a
total size limit. Errors are collected into a single user-facing message the
way the file list shows them; nothing here raises for an oversized file.
"""

import logging
import os
import uuid
from dataclasses import dataclass, field

from .errors import FileLoadError
from .settings import DEFAULT_SETTINGS

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = DEFAULT_SETTINGS["max_file_size"]
MAX_TOTAL_SIZE = DEFAULT_SETTINGS["max_total_size"]


@dataclass(frozen=True)
class AnalysisState:
    """AI analysis status of one file."""
    result: object = None
    is_loading: bool = False
    error: str = None


@dataclass(frozen=True)
class LoadedFile:
    """
    A file read into memory.

    Attributes:
        id: Unique identifier (uuid4 hex)
        name: Base name of the file
        size: Size in bytes
        data: File contents
        analysis: AnalysisState, or None if the file was never analyzed
    """
    id: str
    name: str
    size: int
    data: bytes = field(repr=False)
    analysis: AnalysisState = None


def _megabytes(size):
    return f"{size / 1024 / 1024:g}MB"


def read_file(path):
    """Read one file. Raises FileLoadError if it cannot be read."""
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise FileLoadError(f"Failed to read the file: {os.path.basename(path)}.") from e
    return LoadedFile(id=uuid.uuid4().hex, name=os.path.basename(path), size=len(data), data=data)


def load_files(paths, max_file_size=MAX_FILE_SIZE, max_total_size=MAX_TOTAL_SIZE):
    """
    Load several files.

    Returns:
        (files, error) where error is None or a message describing skipped
        files, an exceeded total size or the first read failure. Reading stops
        at the first failure; files read before it are kept.
    """
    paths = list(paths)
    files = []
    error = None

    sizes = {}
    for path in paths:
        try:
            sizes[path] = os.path.getsize(path)
        except OSError:
            sizes[path] = 0

    if sum(sizes.values()) > max_total_size:
        return [], f"Total file size is too large. Maximum is {_megabytes(max_total_size)}."

    for path in paths:
        if sizes[path] > max_file_size:
            logger.warning("Skipping large file: %s (%.2fMB)", path, sizes[path] / 1024 / 1024)
            if error is None:
                error = f"Skipped files larger than {_megabytes(max_file_size)}."
            continue

        try:
            files.append(read_file(path))
        except FileLoadError as e:
            logger.error("Failed to read file %s: %s", path, e.__cause__)
            error = str(e)
            break

    return files, error
