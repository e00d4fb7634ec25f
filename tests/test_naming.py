from __future__ import annotations

import pytest

from conftest import touch
from idcard_batch.naming import (
    DEFAULT_ASSET_EXTENSIONS,
    extract_identifier,
    find_asset,
    list_files,
)


@pytest.mark.parametrize(
    "name, ext",
    [("1042.psd", ".psd"), ("CS-2024-017.PSD", ".psd"), ("roll 7.Psd", ".psd"), ("a.b.psd", ".psd")],
)
def test_identifier_round_trips_with_template_extension(name: str, ext: str) -> None:
    identifier = extract_identifier(name, ext)
    assert identifier + name[len(identifier):] == name
    assert name[len(identifier):].lower() == ext


def test_identifier_strips_only_final_extension() -> None:
    assert extract_identifier("1042.backup.psd") == "1042.backup"
    assert extract_identifier("photo.JPG") == "photo"


def test_identifier_without_extension_is_unchanged() -> None:
    assert extract_identifier("1042") == "1042"
    assert extract_identifier(".hidden") == ".hidden"
    assert extract_identifier("1042.jpg", ".psd") == "1042.jpg"


def test_identifier_ignores_directories() -> None:
    assert extract_identifier("cards/2024/1042.psd", ".psd") == "1042"


def test_identifier_rejects_empty_name() -> None:
    with pytest.raises(ValueError):
        extract_identifier("")


def test_find_asset_honours_priority_order(tmp_path) -> None:
    touch(tmp_path, "a.png", "a.jpg")
    assert find_asset("a", tmp_path) == tmp_path / "a.jpg"
    assert find_asset("a", tmp_path, (".png", ".jpg")) == tmp_path / "a.png"


def test_find_asset_falls_through_to_later_extensions(tmp_path) -> None:
    touch(tmp_path, "b.tiff")
    assert find_asset("b", tmp_path) == tmp_path / "b.tiff"


def test_find_asset_returns_none_when_missing(tmp_path) -> None:
    touch(tmp_path, "other.jpg")
    (tmp_path / "c.jpg").mkdir()
    assert find_asset("c", tmp_path) is None


def test_default_extension_priority() -> None:
    assert DEFAULT_ASSET_EXTENSIONS == (".jpg", ".jpeg", ".png", ".tif", ".tiff")


def test_list_files_filters_case_insensitively_and_sorts(tmp_path) -> None:
    touch(tmp_path, "b.psd", "A.PSD", "notes.txt", "c.psb")
    (tmp_path / "dir.psd").mkdir()
    assert [p.name for p in list_files(tmp_path, (".psd",))] == ["A.PSD", "b.psd"]
