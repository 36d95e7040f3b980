"""Locating the game's customization folder through Steam, and the user's region."""

from __future__ import annotations

import locale
import logging
import os
import sys
from pathlib import Path
from typing import Iterable, Optional, Union

log = logging.getLogger(__name__)

_STEAM_REGISTRY_KEY = r"SOFTWARE\WOW6432Node\Valve\Steam"
_TRIM = " \t\r\n"
_PATH_KEY = '"path"'
_DEFAULT_REGION = "USA"
_REGION_BY_LOCALE = (("en-US", "USA"), ("ko-KR", "KOR"), ("ru-RU", "RUS"))


def steam_install_path() -> str:
    """Return the Steam install folder from the Windows registry, or "" if unknown."""
    log.debug("Finding Windows Steam Install Path.....")
    if sys.platform != "win32":
        return ""
    import winreg

    try:
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, _STEAM_REGISTRY_KEY, 0, winreg.KEY_READ) as key:
            value, _kind = winreg.QueryValueEx(key, "InstallPath")
    except OSError:
        return ""
    return str(value)


def replace_double_backslashes(text: str) -> str:
    """Collapse every escaped backslash pair into a single backslash."""
    return text.replace("\\\\", "\\")


def parse_library_vdf(path_to_vdf: Union[str, "os.PathLike[str]"]) -> list[Path]:
    """Read Steam's libraryfolders.vdf and return each library's steamapps/common folder."""
    try:
        with open(path_to_vdf, encoding="utf-8", errors="replace") as handle:
            lines = handle.read().splitlines()
    except OSError:
        log.debug("Failed to open VDF file: %s", path_to_vdf)
        return []

    library_paths: list[Path] = []
    depth = 0
    for raw_line in lines:
        line = raw_line.strip(_TRIM)
        if not line:
            continue
        depth += line.count("{") - line.count("}")
        if depth != 2 or not line.startswith(_PATH_KEY):
            continue
        first_quote = line.find('"', len(_PATH_KEY))
        if first_quote == -1:
            continue
        second_quote = line.find('"', first_quote + 1)
        if second_quote == -1:
            continue
        raw_path = replace_double_backslashes(line[first_quote + 1 : second_quote])
        corrected = Path(raw_path) / "steamapps" / "common"
        log.debug("%s", corrected.as_posix())
        library_paths.append(corrected)
    return library_paths


def steam_library_paths() -> list[Path]:
    """Return the steamapps/common folder of every Steam library on this machine."""
    vdf_path = Path(steam_install_path()) / "steamapps" / "libraryfolders.vdf"
    log.debug("Reading: %s", vdf_path)
    return parse_library_vdf(vdf_path)


def find_customization_directory(
    paths: Optional[Iterable[Union[str, "os.PathLike[str]"]]] = None,
) -> Optional[Path]:
    """Return the first existing game customization folder among the libraries, or None."""
    if paths is None:
        paths = steam_library_paths()
    for path in paths:
        desired = Path(path) / "Lost Ark" / "EFGame" / "Customizing"
        if desired.is_dir():
            log.debug("LOA Customizing directory found in %s", desired.as_posix())
            return desired
    return None


def _system_locale_name() -> str:
    try:
        name = locale.getlocale()[0]
    except ValueError:
        name = None
    return name or ""


def localization_region(locale_name: Optional[str] = None) -> str:
    """Map a locale name (the user's own by default) to USA, KOR or RUS."""
    if locale_name is None:
        locale_name = _system_locale_name()
    normalized = locale_name.replace("_", "-")
    for tag, region in _REGION_BY_LOCALE:
        if tag in normalized:
            return region
    return _DEFAULT_REGION