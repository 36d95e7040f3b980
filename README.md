# presetweaver

Lost Ark stores character customization presets as `.cus` files. Each file
records the game region it was made for (`USA`, `KOR` or `RUS`) in three
bytes of its header, and the game only accepts presets for its own region.
presetweaver lists presets made for other regions and rewrites their region
tag so they load in your client.

## Installation

```
pip install .
```

presetweaver needs nothing beyond the Python standard library.

## Command line

The global options come before the command:

```
presetweaver [--directory DIR] [--region {USA,KOR,RUS}] {list,convert,watch}
```

- `--directory DIR` names the `Customizing` folder. Without it, the folder is
  looked up through the Steam libraries listed in Steam's
  `libraryfolders.vdf` (the Steam install folder is read from the Windows
  registry, so on other systems you must pass `--directory`).
- `--region` is the region to convert to. Without it, the region is guessed
  from the system locale (`en-US` → `USA`, `ko-KR` → `KOR`, `ru-RU` → `RUS`,
  anything else → `USA`).

Commands:

```
presetweaver list
```

Prints every preset that is not in the target region, one per line as
`path [REGION] N bytes`, followed by a count.

```
presetweaver convert
```

Rewrites the region tag of every preset from another region and saves it,
then prints how many were converted.

```
presetweaver watch [--manual] [--seconds N]
```

Converts the existing presets, then polls the folder for added, modified,
deleted and renamed `.cus` files and converts new ones as they appear. After
each batch of changes it prints how many presets are not in the target
region. With `--manual` nothing is converted; changes are only reported.
`--seconds N` stops watching after N seconds; otherwise it runs until
interrupted with Ctrl+C.

The command exits with status 1 if the customization folder cannot be found
or is not a directory.

## Library use

```python
from presetweaver.cusfiles import CusManager
from presetweaver.steam import find_customization_directory

directory = find_customization_directory()  # None if no library has the game
if directory is not None:
    with CusManager(directory, "USA", None) as manager:
        for preset in manager.unconverted_files("USA"):
            print(preset.path, preset.region, preset.size)
        manager.convert_files_to_region("USA")
```

- `presetweaver.cusfiles.CusManager` loads every preset under the folder,
  grouped by region (`files`), converts them (`convert_files_to_region`) and
  writes them back (`save_files_to_disk`). Used as a context manager it runs
  `start_monitoring()` / `stop_monitoring()`, which apply detected changes in
  a background thread; when `automatic_conversion_enabled` is set, new
  presets are converted to `selected_region` right away. The optional
  `on_refresh(region, presets)` callback receives the presets not in the
  selected region after each batch of changes.
- `presetweaver.cusfiles.read_region(data)` returns the region code in a
  preset's header and raises `ValueError` for data shorter than 11 bytes.
- `presetweaver.monitor.DirectoryMonitor` snapshots the `.cus` files under a
  directory; `check_for_changes()` returns a list of `Change` records
  (`ADDED`, `MODIFIED`, `DELETED`, `RENAMED`), and `format_changes()` renders
  them as text. It raises `NotADirectoryError` for a path that is not a
  directory.
- `presetweaver.steam` holds the lookup helpers: `parse_library_vdf`,
  `steam_library_paths`, `find_customization_directory` and
  `localization_region`.

## What it does not do

presetweaver is a command-line tool and library only; it has no graphical
window. Changes on disk are found by polling every tenth of a second, not
through operating-system file notifications.

## Running the tests

```
pip install .[test]
pytest
```