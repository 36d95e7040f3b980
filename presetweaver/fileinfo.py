"""Snapshot of a single file's metadata, used to detect changes on disk."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]

_UINT64_MASK = 0xFFFF_FFFF_FFFF_FFFF


def file_id(filepath: PathLike) -> int:
    """Return an identifier that stays with a file across renames, or 0 if unavailable."""
    try:
        stat = os.stat(filepath)
    except OSError:
        return 0
    if os.name == "nt":
        return stat.st_ino & _UINT64_MASK
    return ((stat.st_dev << 32) & _UINT64_MASK) | (stat.st_ino & _UINT64_MASK)


def content_hash(filepath: PathLike) -> str:
    """Return a 64-bit content digest of the file as a decimal string, or "" on failure."""
    digest = hashlib.blake2b(digest_size=8)
    try:
        with open(filepath, "rb") as handle:
            for chunk in iter(lambda: handle.read(1 << 16), b""):
                digest.update(chunk)
    except OSError:
        return ""
    return str(int.from_bytes(digest.digest(), "little"))


@dataclass(frozen=True)
class FileInfo:
    """Metadata of a file at the moment it was scanned."""

    last_modified: int = 0
    size: int = 0
    is_directory: bool = False
    content_hash: str = ""
    file_id: int = 0

    @classmethod
    def from_path(cls, filepath: PathLike) -> FileInfo:
        """Collect metadata for ``filepath``; a missing or unreadable path gives an empty record."""
        path = Path(filepath)
        try:
            if not path.exists():
                return cls()
            stat = path.stat()
            is_directory = path.is_dir()
            if is_directory:
                return cls(last_modified=stat.st_mtime_ns, is_directory=True)
            return cls(
                last_modified=stat.st_mtime_ns,
                size=stat.st_size,
                is_directory=False,
                content_hash=content_hash(path),
                file_id=file_id(path),
            )
        except OSError:
            return cls()

    def has_same_content(self, other: FileInfo) -> bool:
        """True when both records describe identical, hashed content."""
        return (
            bool(self.content_hash)
            and self.content_hash == other.content_hash
            and self.size == other.size
            and self.is_directory == other.is_directory
        )

    def differs_from(self, other: FileInfo) -> bool:
        """True when modification time, size or kind differ."""
        return (
            self.last_modified != other.last_modified
            or self.size != other.size
            or self.is_directory != other.is_directory
        )