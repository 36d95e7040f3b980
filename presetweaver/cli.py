"""Command line for listing, converting and watching preset files."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .cusfiles import AVAILABLE_REGIONS, CusFile, CusManager
from .steam import find_customization_directory, localization_region


def _describe(preset: CusFile) -> str:
    return f"{preset.path.as_posix()} [{preset.region}] {preset.size} bytes"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="presetweaver", description="Convert character presets between game regions."
    )
    parser.add_argument("--directory", type=Path, help="customization folder (found through Steam by default)")
    parser.add_argument("--region", choices=AVAILABLE_REGIONS, help="target region (from the locale by default)")
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="show presets not in the target region")
    commands.add_parser("convert", help="convert all presets to the target region")
    watch = commands.add_parser("watch", help="follow the folder for new and changed presets")
    watch.add_argument("--manual", action="store_true", help="report changes without converting them")
    watch.add_argument("--seconds", type=float, help="stop after this many seconds")
    return parser


def _convert(manager: CusManager, region: str) -> int:
    before = len(manager.unconverted_files(region))
    if not manager.convert_files_to_region(region):
        return 0
    return before - len(manager.unconverted_files(region))


def _watch(manager: CusManager, region: str, manual: bool, seconds: Optional[float]) -> None:
    with manager.conversion_lock:
        manager.automatic_conversion_enabled = not manual
        if not manual:
            print(f"Converted {_convert(manager, region)} file(s) to {region}.")
    with manager:
        try:
            if seconds is None:
                while True:
                    time.sleep(1)
            else:
                time.sleep(max(seconds, 0.0))
        except KeyboardInterrupt:
            pass


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line; returns the exit status."""
    args = _build_parser().parse_args(argv)

    directory = args.directory if args.directory is not None else find_customization_directory()
    if directory is None:
        print("error: customization directory not found", file=sys.stderr)
        return 1
    region = args.region or localization_region()

    on_refresh = None
    if args.command == "watch":

        def on_refresh(excluded: str, presets: list) -> None:
            print(f"{len(presets)} file(s) not in {excluded}.", flush=True)

    try:
        manager = CusManager(directory, region, on_refresh)
    except NotADirectoryError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1

    if args.command == "list":
        presets = manager.unconverted_files(region)
        for preset in presets:
            print(_describe(preset))
        print(f"{len(presets)} file(s) not in {region}.")
    elif args.command == "convert":
        print(f"Converted {_convert(manager, region)} file(s) to {region}.")
    else:
        _watch(manager, region, args.manual, args.seconds)
    return 0


if __name__ == "__main__":
    sys.exit(main())