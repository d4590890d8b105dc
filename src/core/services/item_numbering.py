"""
Hierarchical item number allocation.

Root items are numbered ``1``, ``2``, ... and children extend their parent's
number (``1.1``, ``1.2``, ``1.2.1``). The next sibling number is one past the
highest sort order currently stored under the same parent.
"""

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from src.config import get_logger
from src.core.exceptions import BOMItemNotFoundError
from src.core.interfaces.storage import Collections, IDocumentStore, OrderBy, where

logger = get_logger(__name__)


def item_number_key(item_number: str) -> tuple[int, ...]:
    """Sort key ordering ``1.9`` before ``1.10``."""
    return tuple(int(part) if part.isdigit() else 0 for part in item_number.split("."))


@dataclass(frozen=True)
class ItemNumberAllocation:
    """Position assigned to a new item."""

    item_number: str
    level: int
    sort_order: int


class ItemNumberAllocator:
    """
    Allocates item numbers under a per-(BOM, parent) lock.

    ``allocate`` only computes the next position. Callers that go on to
    insert the item must use ``reserve`` so the insert happens before any
    other allocation under the same parent can scan the siblings.
    """

    def __init__(self, store: IDocumentStore):
        self._store = store
        # Entries disappear once no holder or waiter references the lock
        self._locks: weakref.WeakValueDictionary[tuple[str, str | None], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, bom_id: str, parent_item_id: str | None) -> asyncio.Lock:
        key = (bom_id, parent_item_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def allocate(
        self, bom_id: str, parent_item_id: str | None = None
    ) -> ItemNumberAllocation:
        """Compute the next number, level and sort order under a parent (or root)."""
        async with self._lock_for(bom_id, parent_item_id):
            return await self._next_allocation(bom_id, parent_item_id)

    @asynccontextmanager
    async def reserve(
        self, bom_id: str, parent_item_id: str | None = None
    ) -> AsyncIterator[ItemNumberAllocation]:
        """
        Hold the sibling lock while the caller persists the new item.

        Usage::

            async with allocator.reserve(bom_id, parent_id) as allocation:
                await store.insert(...)
        """
        async with self._lock_for(bom_id, parent_item_id):
            yield await self._next_allocation(bom_id, parent_item_id)

    async def _next_allocation(
        self, bom_id: str, parent_item_id: str | None
    ) -> ItemNumberAllocation:
        collection = Collections.bom_items(bom_id)

        if parent_item_id is None:
            siblings = await self._store.query(
                collection,
                filters=[where("level", "==", 0)],
                order_by=[OrderBy("sortOrder", descending=True)],
                limit=1,
            )
            sort_order = self._max_sort_order(siblings) + 1
            allocation = ItemNumberAllocation(
                item_number=str(sort_order), level=0, sort_order=sort_order
            )
        else:
            parent = await self._store.get(collection, parent_item_id)
            if parent is None:
                raise BOMItemNotFoundError(bom_id, parent_item_id)

            siblings = await self._store.query(
                collection,
                filters=[where("parentItemId", "==", parent_item_id)],
                order_by=[OrderBy("sortOrder", descending=True)],
                limit=1,
            )
            sort_order = self._max_sort_order(siblings) + 1
            allocation = ItemNumberAllocation(
                item_number=f"{parent['itemNumber']}.{sort_order}",
                level=int(parent.get("level", 0)) + 1,
                sort_order=sort_order,
            )

        logger.debug(
            "item_number_allocated",
            bom_id=bom_id,
            parent_item_id=parent_item_id,
            item_number=allocation.item_number,
        )
        return allocation

    @staticmethod
    def _max_sort_order(siblings: list[tuple[str, dict]]) -> int:
        if not siblings:
            return 0
        _, doc = siblings[0]
        return int(doc.get("sortOrder", 0))
