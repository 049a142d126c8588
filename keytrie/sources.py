"""Key file loaders feeding :class:`keytrie.trie.Trie`.

Key files come in two shapes.  A *key list* holds bare keys such as command
names and produces a set-like trie.  A *key table* maps keys to values, for
example resource keys to translated strings.

Supported formats:

``.json``
    A JSON array of strings or a JSON object.
``.yaml`` / ``.yml``
    The same shapes, parsed with :func:`yaml.safe_load`.
``.csv``
    A table with a ``key`` column and an optional ``value`` column, parsed with
    :func:`pandas.read_csv`.  Empty cells in ``value`` become ``None``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Union

import pandas as pd
import yaml

from .trie import Trie

logger = logging.getLogger(__name__)

KEY_COLUMN = "key"
VALUE_COLUMN = "value"
SUPPORTED_SUFFIXES = (".json", ".yaml", ".yml", ".csv")

Entries = Union[List[str], Dict[str, Any]]


class KeySourceError(ValueError):
    """Raised when a key file cannot be read into trie entries."""


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise KeySourceError(f"Key file {path} is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise KeySourceError(f"Invalid JSON in key file {path}: {exc}") from exc


def _read_yaml(path: Path) -> Any:
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise KeySourceError(f"Key file {path} is not valid UTF-8: {exc}") from exc
    except yaml.YAMLError as exc:
        raise KeySourceError(f"Invalid YAML in key file {path}: {exc}") from exc


def _read_csv(path: Path) -> Entries:
    try:
        frame = pd.read_csv(path, dtype=str, encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise KeySourceError(f"Key file {path} is not valid UTF-8: {exc}") from exc
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise KeySourceError(f"Invalid CSV in key file {path}: {exc}") from exc

    if KEY_COLUMN not in frame.columns:
        raise KeySourceError(
            f"Key file {path} is missing a '{KEY_COLUMN}' column; "
            f"received columns: {sorted(frame.columns)}"
        )
    keys = frame[KEY_COLUMN].tolist()
    if VALUE_COLUMN not in frame.columns:
        return keys
    values = [None if pd.isna(value) else value for value in frame[VALUE_COLUMN].tolist()]
    return dict(zip(keys, values))


def _validate_keys(keys: Sequence[Any], path: Path) -> None:
    for index, key in enumerate(keys):
        if not isinstance(key, str) or not key:
            raise KeySourceError(
                f"Key file {path} entry {index} must be a non-empty string, got {key!r}"
            )


def _normalise_entries(payload: Any, path: Path) -> Entries:
    if isinstance(payload, Mapping):
        _validate_keys(list(payload.keys()), path)
        return dict(payload)
    if isinstance(payload, Sequence) and not isinstance(payload, (str, bytes)):
        _validate_keys(payload, path)
        return list(payload)
    raise KeySourceError(
        f"Key file {path} must contain a list of keys or a key/value mapping"
    )


def load_entries(path: Union[str, Path]) -> Entries:
    """Load keys or ``key -> value`` entries from *path*.

    Raises
    ------
    FileNotFoundError
        When *path* does not exist.
    KeySourceError
        When the file format is unsupported, unparsable or has the wrong shape.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Key file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        payload = _read_json(path)
    elif suffix in (".yaml", ".yml"):
        payload = _read_yaml(path)
    elif suffix == ".csv":
        payload = _read_csv(path)
    else:
        raise KeySourceError(
            f"Unsupported key file format '{suffix or path.name}'; "
            f"expected one of {', '.join(SUPPORTED_SUFFIXES)}"
        )
    return _normalise_entries(payload, path)


def build_trie(path: Union[str, Path]) -> Trie:
    """Return a :class:`Trie` seeded with the entries stored at *path*."""

    entries = load_entries(path)
    trie = Trie(entries)
    logger.info("Loaded %d keys from %s", len(trie), path)
    return trie


__all__ = [
    "KeySourceError",
    "build_trie",
    "load_entries",
]
