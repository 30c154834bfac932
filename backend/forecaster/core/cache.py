"""
cache.py — In-Memory Forecast Cache

Purpose:
- Memoize generated forecast series so repeated scenario evaluations of an
  unchanged (model, deltas) pair do not regenerate them.
- In-process, least-recently-used store (non-distributed, non-persistent).

Key Notes:
- Keys are derived from the full content of the inputs, never from object
  identity. Any change to any field of the model or delta set produces a new
  key, so stale entries are never served and no per-field invalidation exists.
- Keys come from client-posted content, so the store is capped at
  settings.FORECAST_CACHE_MAX_ENTRIES; the least recently used entry is
  evicted first.
- Values are treated as read-only by callers.

This module does NOT:
- Apply TTLs.
"""

import hashlib
import json
from collections import OrderedDict
from typing import Any

from forecaster.core.config import settings
from forecaster.core.logging import get_logger

logger = get_logger(__name__)

# Key: "<namespace>:<digest>"
# Value: arbitrary cached object, most recently used last
_cache_store: "OrderedDict[str, Any]" = OrderedDict()


def make_key(namespace: str, identifier: Any) -> str:
    """
    Utility to construct consistent cache keys.

    Example:
        make_key("forecast", "ab12") → "forecast:ab12"
    """
    return f"{namespace}:{identifier}"


def make_content_key(namespace: str, *payloads: Any) -> str:
    """
    Build a key from the canonical JSON form of one or more payloads.

    Payloads must be JSON-serializable (plain dicts/lists/numbers/strings).
    Dict key order does not affect the key.
    """
    canonical = json.dumps(payloads, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return make_key(namespace, digest)


def cache_get(key: str) -> Any:
    """
    Retrieve cached object if present and mark it as recently used.
    Returns None if not cached.
    """
    if key not in _cache_store:
        return None
    _cache_store.move_to_end(key)
    return _cache_store[key]


def cache_set(key: str, value: Any) -> None:
    """
    Store object in cache, evicting least recently used entries beyond
    settings.FORECAST_CACHE_MAX_ENTRIES.
    """
    _cache_store[key] = value
    _cache_store.move_to_end(key)
    while len(_cache_store) > settings.FORECAST_CACHE_MAX_ENTRIES:
        evicted, _ = _cache_store.popitem(last=False)
        logger.debug("Evicted cache entry %s", evicted)


def cache_clear(namespace: str = None) -> None:
    """
    Clears cache entirely, or optionally clears only a specific namespace.

    Example:
        cache_clear("forecast") clears keys starting with "forecast:"
    """
    if namespace is None:
        _cache_store.clear()
    else:
        prefix = f"{namespace}:"
        for key in list(_cache_store.keys()):
            if key.startswith(prefix):
                del _cache_store[key]


def cache_size(namespace: str = None) -> int:
    """Number of cached entries, optionally restricted to one namespace."""
    if namespace is None:
        return len(_cache_store)
    prefix = f"{namespace}:"
    return sum(1 for key in _cache_store if key.startswith(prefix))
