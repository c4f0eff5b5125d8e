"""Process-local read-through cache for the catalog read endpoints.

Entries are populated lazily on the first read miss and live until a mutation
invalidates them or the process restarts. There is no expiry.
"""

import copy
import logging
from collections.abc import Callable, Iterator
from typing import Any, Protocol

logger = logging.getLogger(__name__)

LATEST_PRODUCTS_KEY = "latest-products"
HIGH_PRICE_KEY = "high-price"
CATEGORIES_KEY = "categories"
ADMIN_PRODUCTS_KEY = "admin-products"

# Aggregate views that any product mutation makes stale
LIST_KEYS = frozenset(
    {
        LATEST_PRODUCTS_KEY,
        HIGH_PRICE_KEY,
        CATEGORIES_KEY,
        ADMIN_PRODUCTS_KEY,
    }
)


def product_key(product_id: object) -> str:
    """Cache key for a single product."""
    return f"product-{product_id}"


class ProductCache(Protocol):
    """Key-value cache consulted before every catalog read."""

    def has(self, key: str) -> bool: ...

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def invalidate(self, predicate: Callable[[str], bool]) -> int: ...


class InMemoryCache:
    """Dictionary-backed cache shared by all requests of one process.

    Values are copied on the way in and out, so callers mutating what they
    read cannot change the cached entry.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def has(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Any:
        """Return the cached value.

        Raises:
            KeyError: If nothing is cached under ``key``.
        """
        return copy.deepcopy(self._entries[key])

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = copy.deepcopy(value)

    def invalidate(self, predicate: Callable[[str], bool]) -> int:
        """Remove every entry whose key matches ``predicate``.

        Returns:
            Number of entries removed.
        """
        stale = [key for key in self._entries if predicate(key)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


def invalidate_product_cache(cache: ProductCache, product_id: object | None = None) -> int:
    """Drop cached views made stale by a product mutation.

    The list-style keys are always removed; the single-product entry is
    removed as well when ``product_id`` is given.

    Returns:
        Number of entries removed.
    """
    keys = set(LIST_KEYS)
    if product_id is not None:
        keys.add(product_key(product_id))

    removed = cache.invalidate(keys.__contains__)
    logger.debug("Invalidated %d cache entries (product_id=%s)", removed, product_id)
    return removed
