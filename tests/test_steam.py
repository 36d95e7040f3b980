from pathlib import Path

import pytest

from presetweaver.steam import (
    find_customization_directory,
    localization_region,
    parse_library_vdf,
    replace_double_backslashes,
)

VDF_TEXT = """"libraryfolders"
{
\t"0"
\t{
\t\t"path"\t\t"/games/steam"
\t\t"label"\t\t""
\t\t"apps"
\t\t{
\t\t\t"228980"\t\t"100"
\t\t}
\t}
\t"1"
\t{
\t\t"path"\t\t"D:\\\\SteamLibrary"
\t}
}
"""


def test_replace_double_backslashes():
    assert replace_double_backslashes("C:\\\\Games\\\\Steam") == "C:\\Games\\Steam"
    assert replace_double_backslashes("no slashes") == "no slashes"
    assert replace_double_backslashes("\\\\\\\\") == "\\\\"
    assert replace_double_backslashes("\\\\\\") == "\\\\"


def test_parse_library_vdf(tmp_path):
    vdf = tmp_path / "libraryfolders.vdf"
    vdf.write_text(VDF_TEXT, encoding="utf-8")
    assert parse_library_vdf(vdf) == [
        Path("/games/steam") / "steamapps" / "common",
        Path("D:\\SteamLibrary") / "steamapps" / "common",
    ]


def test_parse_ignores_path_at_wrong_depth(tmp_path):
    vdf = tmp_path / "libraryfolders.vdf"
    vdf.write_text('"libraryfolders"\n{\n"path" "/top"\n}\n', encoding="utf-8")
    assert parse_library_vdf(vdf) == []


def test_parse_missing_vdf_is_empty(tmp_path):
    assert parse_library_vdf(tmp_path / "missing.vdf") == []


def test_find_customization_directory(tmp_path):
    empty_library = tmp_path / "lib0"
    empty_library.mkdir()
    library = tmp_path / "lib1"
    target = library / "Lost Ark" / "EFGame" / "Customizing"
    target.mkdir(parents=True)
    assert find_customization_directory([empty_library, library]) == target


def test_find_customization_directory_prefers_first(tmp_path):
    first = tmp_path / "a" / "Lost Ark" / "EFGame" / "Customizing"
    second = tmp_path / "b" / "Lost Ark" / "EFGame" / "Customizing"
    first.mkdir(parents=True)
    second.mkdir(parents=True)
    assert find_customization_directory([tmp_path / "a", tmp_path / "b"]) == first


def test_find_customization_directory_none(tmp_path):
    assert find_customization_directory([tmp_path]) is None
    assert find_customization_directory([]) is None


@pytest.mark.parametrize(
    "name, expected",
    [
        ("en-US", "USA"),
        ("ko-KR", "KOR"),
        ("ru-RU", "RUS"),
        ("ko_KR", "KOR"),
        ("ru_RU.UTF-8", "RUS"),
        ("de-DE", "USA"),
        ("", "USA"),
    ],
)
def test_localization_region(name, expected):
    assert localization_region(name) == expected


def test_localization_region_default_is_known_region():
    assert localization_region() in {"USA", "KOR", "RUS"}