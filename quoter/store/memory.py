"""
In-memory keyed store.

One instance per entity type. Every method is a coroutine so callers treat the
store as an awaitable boundary even though this backend resolves immediately.

Limitations: single writer at a time, no transactions, nothing survives the
process.
"""
from __future__ import annotations

from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, TypeVar

from quoter.core.logging_config import get_logger
from quoter.domain.base import Entity
from quoter.domain.conditions import matches

T = TypeVar("T", bound=Entity)

log = get_logger("quoter.store")


def matches_criteria(item_map: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
    """All criteria must hold. A key the item does not serialize never matches."""
    for key, criterion in criteria.items():
        if key not in item_map:
            return False
        if not matches(item_map[key], criterion):
            return False
    return True


class InMemoryStore(Generic[T]):
    entity_name: str = "entity"

    def __init__(self, items: Optional[Iterable[T]] = None):
        self._items: Dict[str, T] = {}
        for item in items or []:
            self._items[item.id] = item

    async def find_by_id(self, item_id: str) -> Optional[T]:
        return self._items.get(item_id)

    async def find_all(self) -> List[T]:
        return list(self._items.values())

    async def find_where(self, criteria: Mapping[str, Any]) -> List[T]:
        return [i for i in self._items.values() if matches_criteria(i.to_map(), criteria)]

    async def save(self, item: T) -> T:
        """Upsert by id; stamps updated_at."""
        item.touch()
        self._items[item.id] = item
        log.debug("store_saved", entity=self.entity_name, id=item.id)
        return item

    async def save_all(self, items: Iterable[T]) -> List[T]:
        return [await self.save(i) for i in items]

    async def delete_by_id(self, item_id: str) -> bool:
        removed = self._items.pop(item_id, None) is not None
        if removed:
            log.debug("store_deleted", entity=self.entity_name, id=item_id)
        return removed

    async def delete(self, item: T) -> bool:
        return await self.delete_by_id(item.id)

    async def count(self) -> int:
        return len(self._items)

    async def exists(self, item_id: str) -> bool:
        return item_id in self._items

    async def clear(self) -> None:
        self._items.clear()
