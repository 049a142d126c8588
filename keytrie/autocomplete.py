"""Command line autocomplete and lookup over a key file.

The tool loads a key list or key table through :mod:`keytrie.sources` and
prints the stored keys matching a prefix, optionally bounded by ``--limit``,
together with the values of any keys requested via ``--lookup``.

Example::

    keytrie-complete commands.yaml --prefix he --limit 5
    keytrie-complete locale.csv --lookup menu.file menu.edit --output-format json
"""

from __future__ import annotations

from collections.abc import Sequence
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .sources import KeySourceError, build_trie
from .trie import MISSING, InvalidKeyError, Trie

logger = logging.getLogger(__name__)


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("limit must be an integer") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("limit must be non-negative")
    return parsed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="List keys matching a prefix and look up stored values.",
    )
    parser.add_argument(
        "keyfile",
        type=Path,
        help="JSON, YAML or CSV file holding the keys (and optional values).",
    )
    parser.add_argument(
        "--prefix",
        default="",
        help="Only list keys starting with this prefix. Defaults to every key.",
    )
    parser.add_argument(
        "--limit",
        type=_non_negative_int,
        default=None,
        help="Maximum number of matching keys to list.",
    )
    parser.add_argument(
        "--lookup",
        nargs="+",
        default=[],
        metavar="KEY",
        help="Report the stored value for each KEY.",
    )
    parser.add_argument(
        "--output-format",
        choices={"json", "text"},
        default="text",
        help="Select whether to print results as human-readable text or JSON.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices={"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"},
        help="Configure logging verbosity for troubleshooting.",
    )
    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING))


def _lookup(trie: Trie, keys: Sequence[str]) -> Dict[str, Any]:
    return {key: trie.get(key) for key in keys}


def _render_text(matches: List[str], lookups: Dict[str, Any]) -> str:
    lines = list(matches)
    for key, value in lookups.items():
        if value is MISSING:
            lines.append(f"{key}: <missing>")
        else:
            lines.append(f"{key}={value}")
    return "\n".join(lines)


def _render_json(matches: List[str], lookups: Dict[str, Any]) -> str:
    payload = {
        "matches": matches,
        "lookups": {
            key: (None if value is MISSING else value) for key, value in lookups.items()
        },
    }
    return json.dumps(payload, sort_keys=True, default=str)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point returning a process exit status."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        trie = build_trie(args.keyfile)
    except (FileNotFoundError, KeySourceError, InvalidKeyError) as error:
        logger.error("%s", error)
        return 2
    except Exception:  # pragma: no cover - defensive guard for CLI usage
        logger.exception("Unexpected error while loading %s", args.keyfile)
        return 1

    matches = trie.list_keys_matching(args.prefix, args.limit)
    lookups = _lookup(trie, args.lookup)
    logger.debug(
        "Prefix %r matched %d key(s); %d lookup(s) requested",
        args.prefix,
        len(matches),
        len(lookups),
    )

    if args.output_format == "json":
        output = _render_json(matches, lookups)
    else:
        output = _render_text(matches, lookups)
    if output:
        print(output)
    return 0


__all__ = ["main"]


if __name__ == "__main__":  # pragma: no cover - exercised via CLI
    sys.exit(main())
