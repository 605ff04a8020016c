# inventory/database/product_cache.py
# In-process cache of the last known Product per productId, safe for concurrent use.

import math
from typing import Dict, Optional

from cachetools import Cache

from inventory.domain.product import Product
from inventory.utils.logger import logger
from inventory.utils.rw_lock import ReadWriteLock


class ProductCache:
    """
    Maps productId -> Product. Readers share the lock, writers hold it exclusively.

    No eviction or expiry: entries stay until remove() or clear(). Products are
    frozen dataclasses, so a reader always sees a complete value.
    The database stays the source of truth; rows changed by other processes are
    not reflected here.

    Every put() and remove() bumps a per-id generation. A reader that loads a row
    from the database takes generation() first and stores the result with
    put_if_unchanged(), so a write that landed in between is not overwritten.
    """

    def __init__(self):
        # cachetools caches are not thread-safe on their own; every access goes through _lock.
        self._entries: Cache = Cache(maxsize=math.inf)
        self._generations: Dict[int, int] = {}
        self._lock = ReadWriteLock()

    def get(self, product_id: int) -> Optional[Product]:
        with self._lock.read_locked():
            return self._entries.get(product_id)

    def generation(self, product_id: int) -> int:
        with self._lock.read_locked():
            return self._generations.get(product_id, 0)

    def put(self, product_id: int, product: Product) -> None:
        with self._lock.write_locked():
            self._entries[product_id] = product
            self._bump(product_id)
        logger.debug(f"Cache: stored product {product_id}.")

    def remove(self, product_id: int) -> None:
        with self._lock.write_locked():
            removed = self._entries.pop(product_id, None)
            self._bump(product_id)
        if removed is not None:
            logger.debug(f"Cache: removed product {product_id}.")

    def put_if_unchanged(self, product_id: int, product: Product, generation: int) -> bool:
        """Stores product only if no put/remove for product_id happened since generation was read."""
        with self._lock.write_locked():
            if self._generations.get(product_id, 0) != generation:
                stored = False
            else:
                self._entries[product_id] = product
                self._bump(product_id)
                stored = True
        if not stored:
            logger.debug(f"Cache: skipped stale load of product {product_id}.")
        return stored

    def _bump(self, product_id: int) -> None:
        # Caller holds the write lock.
        self._generations[product_id] = self._generations.get(product_id, 0) + 1

    def clear(self) -> None:
        with self._lock.write_locked():
            self._entries.clear()
        logger.info("Cache: all products cleared.")

    def __contains__(self, product_id: int) -> bool:
        with self._lock.read_locked():
            return product_id in self._entries

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)
