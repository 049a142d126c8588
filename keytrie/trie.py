"""Prefix tree keyed container.

This module provides the ``Trie`` structure used by command-name validation,
autocomplete and resource-key lookup.  Each stored key may carry an arbitrary
payload; keys inserted without one behave like members of a set.

The implementation favours structural correctness and debuggability:

* Nodes are created lazily on insertion and pruned eagerly on removal, so the
  tree never holds a childless node that does not terminate a stored key.
* Key count and node count are tracked eagerly so integrations can surface
  diagnostics without re-traversing the structure.
* Enumeration is lexicographic and lazy; bounded listings stop traversing as
  soon as enough keys have been produced.

Absence is never an error: queries return ``False``, an empty list or the
:data:`MISSING` sentinel.  The only domain error is :class:`InvalidKeyError`,
raised when an empty key is stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import islice
import logging
import time
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

__all__ = [
    "InvalidKeyError",
    "MISSING",
    "Trie",
    "TrieNode",
    "benchmark",
]

logger = logging.getLogger(__name__)


class InvalidKeyError(ValueError):
    """Raised when an empty key is passed to a mutating operation."""


class _Missing:
    """Marker returned by :meth:`Trie.get` for keys that are not stored."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

KeySource = Union[Iterable[str], Mapping[str, Any]]


@dataclass(slots=True)
class TrieNode:
    """A node inside the trie data structure."""

    children: Dict[str, "TrieNode"] = field(default_factory=dict)
    is_terminal: bool = False
    value: Any = None

    def __post_init__(self) -> None:
        for key, child in self.children.items():
            if not isinstance(key, str) or len(key) != 1:
                raise TypeError(
                    "TrieNode children must be keyed by single-character strings"
                )
            if not isinstance(child, TrieNode):
                raise TypeError("TrieNode children must be TrieNode instances")
        if not isinstance(self.is_terminal, bool):
            raise TypeError("TrieNode.is_terminal must be a boolean")

    def has_children(self) -> bool:
        return bool(self.children)


class Trie:
    """Trie mapping string keys to optional values.

    >>> trie = Trie({"apple": "fruit", "car": "vehicle"})
    >>> trie.get("apple")
    'fruit'
    >>> trie.list_keys_matching("a")
    ['apple']
    """

    __slots__ = ("root", "_size", "_node_count")

    def __init__(self, keys: Optional[KeySource] = None) -> None:
        self.root = TrieNode()
        self._size = 0
        self._node_count = 1
        if keys is not None:
            self.bulk_insert(keys)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def insert(self, key: Union[str, KeySource], value: Any = None) -> None:
        """Insert *key* and bind it to *value*.

        An existing key keeps its nodes and has its value replaced.  Passing an
        iterable of keys or a mapping instead of a single key delegates to
        :meth:`bulk_insert`.
        """

        if not isinstance(key, str):
            self.bulk_insert(key, value)
            return

        normalized = self._normalize_key(key)
        node = self.root
        for char in normalized:
            next_node = node.children.get(char)
            if next_node is None:
                next_node = TrieNode()
                node.children[char] = next_node
                self._node_count += 1
            node = next_node
        if not node.is_terminal:
            node.is_terminal = True
            self._size += 1
        node.value = value

    def bulk_insert(self, keys: KeySource, value: Any = None) -> None:
        """Insert every key from *keys*.

        Mappings contribute one ``key -> value`` entry each.  Any other iterable
        is treated as a collection of keys which all receive the shared *value*
        (``None`` by default).  Every key is validated before the first one is
        inserted, so an invalid element leaves the trie unchanged.
        """

        if isinstance(keys, (str, bytes)):
            raise TypeError("keys must be an iterable of strings, not a single string")
        if isinstance(keys, Mapping):
            if value is not None:
                raise TypeError("a shared value cannot be combined with a mapping")
            entries: List[Tuple[str, Any]] = list(keys.items())
        else:
            try:
                entries = [(key, value) for key in keys]
            except TypeError as exc:
                raise TypeError("keys must be an iterable of strings") from exc

        for key, _ in entries:
            self._normalize_key(key)
        for key, entry_value in entries:
            self.insert(key, entry_value)
        logger.debug("Bulk inserted %d keys (%d stored)", len(entries), self._size)

    def set(self, key: str, value: Any) -> bool:
        """Replace the value of an existing *key*.

        Returns ``False`` and leaves the trie untouched when *key* is not
        stored; unlike :meth:`insert` this never creates keys.
        """

        node = self._find_terminal(self._normalize_key(key))
        if node is None:
            return False
        node.value = value
        return True

    def remove(self, key: str) -> bool:
        """Remove *key*, pruning nodes that no longer lead to a stored key."""

        if not isinstance(key, str) or not key:
            return False

        path: List[Tuple[TrieNode, str]] = []
        node = self.root
        for char in key:
            child = node.children.get(char)
            if child is None:
                return False
            path.append((node, char))
            node = child
        if not node.is_terminal:
            return False

        node.is_terminal = False
        node.value = None
        self._size -= 1

        pruned = 0
        while path and not node.has_children() and not node.is_terminal:
            parent, char = path.pop()
            del parent.children[char]
            pruned += 1
            node = parent
        self._node_count -= pruned
        logger.debug("Removed %r, pruned %d node(s)", key, pruned)
        return True

    def remove_all(self, keys: Iterable[str]) -> bool:
        """Remove every key in *keys*.

        Returns ``True`` only when all keys were present.  Keys that were
        present are removed regardless; nothing is rolled back.
        """

        removed_all = True
        for key in keys:
            if not self.remove(key):
                removed_all = False
        return removed_all

    def clear(self) -> None:
        """Drop every stored key."""

        logger.debug("Clearing trie holding %d keys", self._size)
        self.root = TrieNode()
        self._size = 0
        self._node_count = 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def contains(self, key: str) -> bool:
        """Return ``True`` if *key* is stored."""

        return self._find_terminal(key) is not None

    def contains_all(self, keys: Iterable[str]) -> bool:
        """Return ``True`` if every key in *keys* is stored."""

        return all(self.contains(key) for key in keys)

    def contains_any(self, keys: Iterable[str]) -> bool:
        """Return ``True`` if at least one key in *keys* is stored."""

        return any(self.contains(key) for key in keys)

    def starts_with(self, prefix: str) -> bool:
        """Return ``True`` when *prefix* is a path in the trie.

        The empty prefix names the root and is therefore always present.
        """

        return self._traverse(self._normalize_prefix(prefix)) is not None

    def get(self, key: str, default: Any = MISSING) -> Any:
        """Return the value stored for *key*, or *default* when absent.

        Keys inserted without a value yield ``None``, which is distinct from
        the :data:`MISSING` default returned for keys that are not stored.
        """

        node = self._find_terminal(key)
        if node is None:
            return default
        return node.value

    def is_empty(self) -> bool:
        return not self.root.has_children()

    @property
    def node_count(self) -> int:
        """Total number of nodes currently allocated, including the root."""

        return self._node_count

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------
    def list_keys(self) -> List[str]:
        """Return all stored keys in lexicographical order."""

        return [key for key, _ in self._walk(self.root, "")]

    def list_keys_matching(self, prefix: str, limit: Optional[int] = None) -> List[str]:
        """Return stored keys starting with *prefix* in lexicographical order.

        When *limit* is given at most that many keys are returned and the
        traversal stops as soon as they have been collected.
        """

        normalized = self._normalize_prefix(prefix)
        if limit is not None:
            if isinstance(limit, bool) or not isinstance(limit, int):
                raise TypeError("limit must be an integer")
            if limit < 0:
                raise ValueError("limit must be non-negative")

        node = self._traverse(normalized)
        if node is None:
            return []
        matches = (key for key, _ in self._walk(node, normalized))
        if limit is not None:
            matches = islice(matches, limit)
        return list(matches)

    def items(self) -> Iterator[Tuple[str, Any]]:
        """Yield ``(key, value)`` pairs in lexicographical key order."""

        for key, node in self._walk(self.root, ""):
            yield key, node.value

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------
    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains(key)

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[str]:
        for key, _ in self._walk(self.root, ""):
            yield key

    def __getitem__(self, key: str) -> Any:
        value = self.get(key)
        if value is MISSING:
            raise KeyError(key)
        return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={self._size}, nodes={self._node_count})"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _normalize_key(key: str) -> str:
        if not isinstance(key, str):
            raise TypeError("key must be a string")
        if not key:
            raise InvalidKeyError("key must be a non-empty string")
        return key

    @staticmethod
    def _normalize_prefix(prefix: str) -> str:
        if not isinstance(prefix, str):
            raise TypeError("prefix must be a string")
        return prefix

    def _traverse(self, fragment: str) -> Optional[TrieNode]:
        current = self.root
        for char in fragment:
            current = current.children.get(char)
            if current is None:
                return None
        return current

    def _find_terminal(self, key: object) -> Optional[TrieNode]:
        if not isinstance(key, str) or not key:
            return None
        node = self._traverse(key)
        if node is None or not node.is_terminal:
            return None
        return node

    def _walk(self, node: TrieNode, prefix: str) -> Iterator[Tuple[str, TrieNode]]:
        stack: List[Tuple[TrieNode, str]] = [(node, prefix)]
        while stack:
            current, path = stack.pop()
            if current.is_terminal:
                yield path, current
            # reversed so the smallest symbol is popped first
            for char in sorted(current.children, reverse=True):
                stack.append((current.children[char], path + char))


def benchmark(trie: Trie, keys: Iterable[str]) -> float:
    """Return the average lookup latency for *keys* in seconds.

    The function consumes the iterable exactly once and returns ``0.0`` when no
    keys are supplied.  Time measurement uses :func:`time.perf_counter`.
    """

    key_list = list(keys)
    if not key_list:
        return 0.0

    start = time.perf_counter()
    for key in key_list:
        trie.contains(key)
    elapsed = time.perf_counter() - start
    return elapsed / len(key_list)
