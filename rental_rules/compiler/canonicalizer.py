"""
JSON canonicalization for deterministic manifest output.

The client manifest is compared by checksum: the same rule definitions must
serialize byte-for-byte identically across processes and Python runs, or
the client form layer would reload rules that did not change.
"""

import json
from enum import Enum
from typing import Any


def _key(key: Any) -> str:
    return str(key.value) if isinstance(key, Enum) else str(key)


def canonicalize_json(obj: Any) -> dict | list | Any:
    """
    Produce a deterministic, canonical representation of a JSON-like object.

    - Dictionary keys are sorted alphabetically at every level
    - Lists and tuples keep their order; elements are canonicalized
    - Sets and frozensets become sorted lists (their iteration order is
      not stable across runs)
    - Enum members become their values

    Args:
        obj: Python object (dict, list, set, enum or primitive)

    Returns:
        Canonicalized version with sorted keys at all levels

    Example:
        >>> canonicalize_json({"z": 1, "a": {"c": frozenset({"y", "x"}), "b": 3}})
        {'a': {'b': 3, 'c': ['x', 'y']}, 'z': 1}
    """
    if isinstance(obj, Enum):
        return canonicalize_json(obj.value)

    if isinstance(obj, dict):
        items = ((_key(k), v) for k, v in obj.items())
        return {k: canonicalize_json(v) for k, v in sorted(items, key=lambda kv: kv[0])}

    if isinstance(obj, (list, tuple)):
        return [canonicalize_json(item) for item in obj]

    if isinstance(obj, (set, frozenset)):
        return sorted((canonicalize_json(item) for item in obj), key=str)

    # Primitives (str, int, float, bool, None) pass through unchanged
    return obj


def to_canonical_json_string(obj: Any) -> str:
    """
    Convert a Python object to a compact canonical JSON string.

    Used for checksums and for the published artifact.

    Example:
        >>> to_canonical_json_string({"wizard": "application", "mode": "strict"})
        '{"mode":"strict","wizard":"application"}'
    """
    canonical = canonicalize_json(obj)

    # separators=(',', ':') removes spaces after commas and colons
    return json.dumps(canonical, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def to_canonical_json_pretty(obj: Any) -> str:
    """Pretty-printed canonical JSON for logs and local inspection."""
    canonical = canonicalize_json(obj)
    return json.dumps(canonical, sort_keys=True, indent=2, ensure_ascii=False)
