"""Prefix tree container with key-file loaders and an autocomplete CLI."""

from .sources import KeySourceError, build_trie, load_entries
from .trie import MISSING, InvalidKeyError, Trie, TrieNode, benchmark

__all__ = [
    "InvalidKeyError",
    "KeySourceError",
    "MISSING",
    "Trie",
    "TrieNode",
    "benchmark",
    "build_trie",
    "load_entries",
]
