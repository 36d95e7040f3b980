"""Polling monitor that reports added, modified, deleted and renamed preset files."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

from .fileinfo import FileInfo

log = logging.getLogger(__name__)

PRESET_SUFFIX = ".cus"


class ChangeType(Enum):
    """Kind of change seen between two scans."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    RENAMED = "RENAMED"


@dataclass(frozen=True)
class Change:
    """One change to a file; ``old_path`` is set for renames."""

    type: ChangeType
    path: Path
    old_path: Optional[Path] = None

    def describe(self) -> str:
        """Human-readable one-line description of the change."""
        if self.type is ChangeType.RENAMED:
            return f"[{self.type.name}] {self.old_path} -> {self.path}"
        return f"[{self.type.name}] {self.path}"


def format_changes(changes: Iterable[Change]) -> str:
    """Describe every change on its own line."""
    lines = [change.describe() for change in changes]
    if not lines:
        return "No changes detected."
    return "\n".join(lines)


class DirectoryMonitor:
    """Keeps a snapshot of ``.cus`` files under a directory and diffs it on demand."""

    def __init__(
        self, path: Union[str, "os.PathLike[str]"], recurse_subdirectories: bool = True
    ) -> None:
        self.root_path = Path(path)
        self.recurse_subdirectories = recurse_subdirectories
        if not self.root_path.is_dir():
            raise NotADirectoryError(f"Invalid directory path: {self.root_path.as_posix()}")
        self._file_cache: dict[Path, FileInfo] = self._scan_directory()

    @property
    def file_count(self) -> int:
        """Number of files in the current snapshot."""
        return len(self._file_cache)

    def reset_cache(self) -> None:
        """Take a fresh snapshot without reporting changes."""
        self._file_cache = self._scan_directory()
        log.debug("DirectoryMonitor reset. Now tracking %d items.", len(self._file_cache))

    def check_for_changes(self) -> list[Change]:
        """Rescan the directory and return changes since the previous scan."""
        current = self._scan_directory()

        old_id_to_path = {info.file_id: path for path, info in self._file_cache.items() if info.file_id}
        new_id_to_path = {info.file_id: path for path, info in current.items() if info.file_id}

        changes: list[Change] = []
        for identifier, new_path in new_id_to_path.items():
            old_path = old_id_to_path.get(identifier)
            if old_path is None:
                changes.append(Change(ChangeType.ADDED, new_path))
            elif old_path != new_path:
                changes.append(Change(ChangeType.RENAMED, new_path, old_path))
            elif self._file_cache[old_path].differs_from(current[new_path]):
                changes.append(Change(ChangeType.MODIFIED, new_path))

        changes.extend(
            Change(ChangeType.DELETED, old_path)
            for identifier, old_path in old_id_to_path.items()
            if identifier not in new_id_to_path
        )

        self._file_cache = current
        return changes

    def _candidate_paths(self):
        if self.recurse_subdirectories:
            for directory, _subdirs, names in os.walk(self.root_path):
                for name in names:
                    yield Path(directory) / name
        else:
            with os.scandir(self.root_path) as entries:
                for entry in entries:
                    yield Path(entry.path)

    def _scan_directory(self) -> dict[Path, FileInfo]:
        files: dict[Path, FileInfo] = {}
        try:
            for path in self._candidate_paths():
                try:
                    if path.suffix == PRESET_SUFFIX and path.is_file():
                        files[path] = FileInfo.from_path(path)
                except OSError as error:
                    log.debug("%s", error)
        except OSError as error:
            log.debug("%s", error)
        log.debug("Scan complete. Cached %d items.", len(files))
        return files