"""
Export File Access

Reading and writing export files, with one exception type per failure
kind so callers can react differently:

- AccessError: the source could not be read (ask the user to pick the
  file again)
- ParseError: the content is not a valid export (the file itself is bad)
- WriteError: the destination could not be written

Writes go through a temporary file renamed over the target; a failed
export never leaves a truncated file behind.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Optional


class ExportError(Exception):
    """Base exception for export and import failures."""
    pass


class ParseError(ExportError):
    """The document is malformed or misses required fields."""
    pass


class AccessError(ExportError):
    """The export source could not be read."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot access {self.path}: {reason}")


class WriteError(ExportError):
    """The export destination could not be written."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot write {self.path}: {reason}")


def generate_file_name(
    extension: str,
    now: datetime,
    prefix: str = "comptabilite",
) -> str:
    """Timestamped export file name, e.g. comptabilite_2024-01-31_184500.json"""
    return f"{prefix}_{now:%Y-%m-%d_%H%M%S}.{extension}"


def read_source(path: Path) -> bytes:
    """Read an export file, raising AccessError on any OS failure."""
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise AccessError(path, e.strerror or str(e)) from e


def write_destination(
    directory: Path,
    file_name: str,
    payload: bytes,
) -> Path:
    """
    Write payload to directory/file_name atomically.

    Returns the written path. Raises WriteError with the OS reason.
    """
    target = Path(directory) / file_name
    tmp_path: Optional[Path] = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = target.with_name(target.name + ".tmp")
        tmp_path.write_bytes(payload)
        os.replace(tmp_path, target)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise WriteError(target, e.strerror or str(e)) from e
    return target
