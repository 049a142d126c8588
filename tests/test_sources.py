"""Tests for key file loaders."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from keytrie.sources import KeySourceError, build_trie, load_entries
from keytrie.trie import MISSING


def test_load_entries_from_json_list(tmp_path: Path) -> None:
    path = tmp_path / "commands.json"
    path.write_text(json.dumps(["help", "hello", "exit"]), encoding="utf-8")

    assert load_entries(path) == ["help", "hello", "exit"]


def test_load_entries_from_json_mapping(tmp_path: Path) -> None:
    path = tmp_path / "locale.json"
    path.write_text(json.dumps({"menu.file": "File", "menu.edit": "Edit"}), encoding="utf-8")

    assert load_entries(path) == {"menu.file": "File", "menu.edit": "Edit"}


def test_load_entries_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "locale.yml"
    path.write_text(
        "menu.file: File\nmenu.edit: Edit\nmenu.empty:\n",
        encoding="utf-8",
    )

    assert load_entries(path) == {
        "menu.file": "File",
        "menu.edit": "Edit",
        "menu.empty": None,
    }


def test_load_entries_from_csv_with_values(tmp_path: Path) -> None:
    path = tmp_path / "locale.csv"
    path.write_text("key,value\nmenu.file,File\nmenu.edit,\n", encoding="utf-8")

    assert load_entries(path) == {"menu.file": "File", "menu.edit": None}


def test_load_entries_from_csv_keys_only(tmp_path: Path) -> None:
    path = tmp_path / "commands.csv"
    path.write_text("key\nhelp\nexit\n", encoding="utf-8")

    assert load_entries(path) == ["help", "exit"]


def test_load_entries_rejects_csv_without_key_column(tmp_path: Path) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("name,value\nhelp,Help\n", encoding="utf-8")

    with pytest.raises(KeySourceError, match="'key' column"):
        load_entries(path)


def test_load_entries_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(KeySourceError) as excinfo:
        load_entries(path)
    assert isinstance(excinfo.value.__cause__, json.JSONDecodeError)


def test_load_entries_rejects_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("key: [unterminated\n", encoding="utf-8")

    with pytest.raises(KeySourceError, match="Invalid YAML"):
        load_entries(path)


@pytest.mark.parametrize(
    "payload",
    [
        ["help", ""],
        ["help", 3],
        "help",
        42,
    ],
)
def test_load_entries_rejects_bad_shapes(tmp_path: Path, payload: object) -> None:
    path = tmp_path / "keys.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(KeySourceError):
        load_entries(path)


def test_load_entries_rejects_unknown_suffix(tmp_path: Path) -> None:
    path = tmp_path / "keys.txt"
    path.write_text("help\n", encoding="utf-8")

    with pytest.raises(KeySourceError, match="Unsupported key file format"):
        load_entries(path)


def test_load_entries_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_entries(tmp_path / "absent.json")


def test_build_trie_seeds_keys_and_logs(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    path = tmp_path / "locale.json"
    path.write_text(json.dumps({"apple": "fruit", "car": "vehicle"}), encoding="utf-8")

    with caplog.at_level(logging.INFO, logger="keytrie.sources"):
        trie = build_trie(path)

    assert trie.get("apple") == "fruit"
    assert trie.get("banana") is MISSING
    assert len(trie) == 2
    assert "Loaded 2 keys" in caplog.text


@pytest.mark.parametrize("name", ["keys.json", "keys.yaml", "keys.csv"])
def test_load_entries_rejects_invalid_utf8(tmp_path: Path, name: str) -> None:
    path = tmp_path / name
    path.write_bytes(b'key\n["\xff\xfe"]\n')

    with pytest.raises(KeySourceError, match="not valid UTF-8") as excinfo:
        load_entries(path)
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)
