"""
Cache key derivation.

A cache key is the SHA-256 digest of the ordered (name, value) pairs that
identify an AI request. Collection values are sorted first so that
callers supplying the same set in a different order share one key, and
``None`` is serialized as an explicit marker so that an absent optional
field still changes the key.
"""

import hashlib
import json
from typing import Any, Mapping


def _normalize(name: str, value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
        if not all(isinstance(item, str) for item in items):
            raise TypeError(f"Cache key field '{name}' must be a collection of strings")
        return sorted(items)
    raise TypeError(
        f"Cache key field '{name}' has unsupported type {type(value).__name__}; "
        "flatten nested values before deriving a key"
    )


def derive_cache_key(fields: Mapping[str, Any]) -> str:
    """
    Derive a deterministic cache key from request fields.

    Fields are serialized in the mapping's iteration order, which is the
    caller-specified order for a dict literal.

    Args:
        fields: Identifying request fields. Values may be strings, numbers,
            booleans, None, or collections of strings.

    Returns:
        64-character hex digest.

    Raises:
        TypeError: If a value is a nested mapping or a non-string collection.

    Example:
        >>> derive_cache_key({"plan_ids": ["b", "a"]}) == derive_cache_key({"plan_ids": ["a", "b"]})
        True
    """
    pairs = [[name, _normalize(name, value)] for name, value in fields.items()]
    canonical = json.dumps(pairs, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
