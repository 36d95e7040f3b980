"""Loading, tracking and region-converting the game's ``.cus`` preset files."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from .monitor import PRESET_SUFFIX, Change, ChangeType, DirectoryMonitor

log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

AVAILABLE_REGIONS = ("USA", "KOR", "RUS")
REGION_OFFSET = 0x08
REGION_LENGTH = 3
MIN_FILE_SIZE = REGION_OFFSET + REGION_LENGTH
POLL_INTERVAL = 0.1

RefreshCallback = Callable[[str, "list[CusFile]"], None]


@dataclass
class CusFile:
    """A preset file held in memory, with its path relative to the customization folder."""

    path: Path
    data: bytearray
    region: str = ""
    invalid: bool = False

    @property
    def size(self) -> int:
        """Number of bytes in the preset."""
        return len(self.data)


def read_region(data: Union[bytes, bytearray]) -> str:
    """Return the three-letter region code stored in a preset's header."""
    if len(data) < MIN_FILE_SIZE:
        raise ValueError(f"preset data too short: {len(data)} bytes, need {MIN_FILE_SIZE}")
    return bytes(data[REGION_OFFSET:MIN_FILE_SIZE]).decode("latin-1")


class CusManager:
    """Keeps presets grouped by region, converts them and follows changes on disk."""

    def __init__(
        self,
        customizing_directory: PathLike,
        selected_region: str = "USA",
        on_refresh: Optional[RefreshCallback] = None,
    ) -> None:
        self.customizing_directory = Path(customizing_directory)
        self._on_refresh = on_refresh

        self._region_lock = threading.Lock()
        self._selected_region = selected_region
        self._auto_lock = threading.Lock()
        self._automatic_conversion = False

        self._files_lock = threading.RLock()
        self.conversion_lock = threading.RLock()
        self._recent_lock = threading.Lock()
        self._recently_modified: set[Path] = set()

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._monitor = DirectoryMonitor(self.customizing_directory, True)
        self._files: dict[str, list[CusFile]] = {}
        self.load_files_from_disk()

    def __enter__(self) -> CusManager:
        self.start_monitoring()
        return self

    def __exit__(self, *args) -> None:
        self.stop_monitoring()

    @property
    def selected_region(self) -> str:
        """Region the user currently targets."""
        with self._region_lock:
            return self._selected_region

    @selected_region.setter
    def selected_region(self, region: str) -> None:
        with self._region_lock:
            self._selected_region = region

    @property
    def automatic_conversion_enabled(self) -> bool:
        """Whether detected changes are converted to the selected region right away."""
        with self._auto_lock:
            return self._automatic_conversion

    @automatic_conversion_enabled.setter
    def automatic_conversion_enabled(self, enabled: bool) -> None:
        with self._auto_lock:
            self._automatic_conversion = bool(enabled)

    @property
    def files(self) -> dict[str, list[CusFile]]:
        """Presets grouped by region (a snapshot of the current state)."""
        with self._files_lock:
            return {region: list(presets) for region, presets in self._files.items()}

    def _relative(self, full_path: Path) -> Path:
        return Path(os.path.relpath(full_path, self.customizing_directory))

    def _read_preset(self, full_path: Path, relative: Path) -> Optional[CusFile]:
        try:
            data = bytearray(full_path.read_bytes())
        except OSError:
            return None
        if len(data) < MIN_FILE_SIZE:
            return None
        preset = CusFile(path=relative, data=data, region=read_region(data))
        if preset.region not in AVAILABLE_REGIONS:
            preset.invalid = True
            log.debug("Warning: Invalid region '%s' in %s", preset.region, relative)
            return None
        return preset

    def load_files_from_disk(self) -> bool:
        """Read every preset under the customization folder; True if any was loaded."""
        loaded: dict[str, list[CusFile]] = {}
        try:
            candidates = sorted(
                path for path in self.customizing_directory.rglob(f"*{PRESET_SUFFIX}") if path.is_file()
            )
        except OSError as error:
            log.debug("Error loading files: %s", error)
            return False
        for full_path in candidates:
            preset = self._read_preset(full_path, self._relative(full_path))
            if preset is not None:
                loaded.setdefault(preset.region, []).append(preset)
        with self._files_lock:
            self._files = loaded
            return bool(self._files)

    def load_file(self, full_path: PathLike) -> bool:
        """(Re)load one preset from disk; True if it is now tracked."""
        full_path = Path(full_path)
        if full_path.suffix != PRESET_SUFFIX:
            return False
        relative = self._relative(full_path)
        with self._files_lock:
            for presets in self._files.values():
                presets[:] = [preset for preset in presets if preset.path != relative]
            preset = self._read_preset(full_path, relative)
            if preset is None:
                return False
            bucket = self._files.setdefault(preset.region, [])
            if any(existing.path == relative for existing in bucket):
                return False
            bucket.append(preset)
            return True

    def remove_file(self, full_path: PathLike) -> bool:
        """Stop tracking a preset; True if it was tracked."""
        relative = self._relative(Path(full_path))
        with self._files_lock:
            for presets in self._files.values():
                remaining = [preset for preset in presets if preset.path != relative]
                if len(remaining) != len(presets):
                    presets[:] = remaining
                    return True
        return False

    def unconverted_files(self, excluded_region: str) -> list[CusFile]:
        """Presets from every known region except ``excluded_region``."""
        with self._files_lock:
            return [
                preset
                for region in AVAILABLE_REGIONS
                if region != excluded_region
                for preset in self._files.get(region, [])
            ]

    def refresh_unconverted_files(self, excluded_region: str) -> list[CusFile]:
        """Recompute the presets not in ``excluded_region`` and report them to the callback."""
        if excluded_region not in AVAILABLE_REGIONS:
            return []
        presets = self.unconverted_files(excluded_region)
        if self._on_refresh is not None:
            self._on_refresh(excluded_region, presets)
        return presets

    def convert_files_to_region(self, region_name: str) -> bool:
        """Rewrite every preset of another region to ``region_name`` and save them."""
        if len(region_name) != REGION_LENGTH:
            log.debug("Region name must be exactly 3 characters.")
            return False
        try:
            region_bytes = region_name.encode("latin-1")
        except UnicodeEncodeError:
            log.debug("Region name must be single-byte characters.")
            return False

        to_save: list[CusFile] = []
        with self._files_lock:
            for region in AVAILABLE_REGIONS:
                if region == region_name:
                    continue
                source = self._files.get(region)
                if not source:
                    continue
                kept: list[CusFile] = []
                for preset in reversed(source):
                    if len(preset.data) < MIN_FILE_SIZE:
                        log.debug("Skipping incomplete file during conversion: %s", preset.path)
                        kept.append(preset)
                        continue
                    preset.region = region_name
                    preset.data[REGION_OFFSET:MIN_FILE_SIZE] = region_bytes
                    to_save.append(preset)
                    self._files.setdefault(region_name, []).append(preset)
                source[:] = list(reversed(kept))

        self.save_files_to_disk(to_save)
        return True

    def save_files_to_disk(self, modified_files: Iterable[CusFile]) -> int:
        """Write presets back to their files; returns how many were written."""
        saved = 0
        for preset in modified_files:
            out_path = self.customizing_directory / preset.path
            if not out_path.exists():
                log.debug("Skipping write: file was deleted -> %s", out_path)
                continue
            try:
                out_path.write_bytes(bytes(preset.data))
            except OSError as error:
                log.debug("Failed to write %s: %s", out_path, error)
                continue
            with self._recent_lock:
                self._recently_modified.add(out_path.resolve())
            saved += 1
        log.debug("Saved %d modified files to disk.", saved)
        return saved

    def _consume_recent(self, path: Path) -> bool:
        canonical = Path(path).resolve()
        with self._recent_lock:
            if canonical in self._recently_modified:
                self._recently_modified.discard(canonical)
                return True
        return False

    def process_changes(self, changes: Iterable[Change]) -> None:
        """Apply detected changes, refresh the listing and convert if enabled."""
        changes = list(changes)
        if not changes:
            return
        with self._files_lock:
            for change in changes:
                if self._consume_recent(change.path):
                    continue
                if change.type in (ChangeType.ADDED, ChangeType.MODIFIED):
                    self.load_file(change.path)
                elif change.type is ChangeType.DELETED:
                    self.remove_file(change.path)
                elif change.type is ChangeType.RENAMED:
                    if change.old_path is not None:
                        self.remove_file(change.old_path)
                    self.load_file(change.path)

        region = self.selected_region
        with self.conversion_lock:
            self.refresh_unconverted_files(region)
            if self.automatic_conversion_enabled and self.convert_files_to_region(region):
                log.debug("Converted files to region: %s", region)

    def _monitor_loop(self) -> None:
        log.debug("CusManager monitoring thread started.")
        while not self._stop.wait(POLL_INTERVAL):
            self.process_changes(self._monitor.check_for_changes())
        log.debug("CusManager monitoring thread exiting.")

    def start_monitoring(self) -> None:
        """Start watching the customization folder in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._monitor_loop, name="cus-monitor", daemon=True)
        self._thread.start()

    def stop_monitoring(self) -> None:
        """Stop the background watcher and wait for it to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None