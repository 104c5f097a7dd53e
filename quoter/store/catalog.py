from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, List

from quoter.domain.enums import FieldType, ProductType, RuleType
from quoter.domain.fields import FormField
from quoter.domain.products import Product
from quoter.domain.rules import BusinessRule, ContextLike
from quoter.utils.calculator import to_decimal

from .memory import InMemoryStore

D = Decimal


class ProductStore(InMemoryStore[Product]):
    entity_name = "product"

    async def find_by_type(self, product_type: ProductType) -> List[Product]:
        return await self.find_where({"type": ProductType(product_type).value})

    async def find_active(self) -> List[Product]:
        return await self.find_where({"isActive": True})

    async def find_by_category(self, category: str) -> List[Product]:
        return await self.find_where({"category": category})

    async def find_by_price_range(self, min_price: Any, max_price: Any) -> List[Product]:
        """Inclusive on both ends."""
        lo, hi = to_decimal(min_price), to_decimal(max_price)
        return [p for p in await self.find_all() if lo <= p.base_price <= hi]


class FieldStore(InMemoryStore[FormField]):
    entity_name = "field"

    async def find_by_type(self, field_type: FieldType) -> List[FormField]:
        return await self.find_where({"type": FieldType(field_type).value})

    async def find_visible(self) -> List[FormField]:
        return await self.find_where({"isVisible": True})

    async def find_required(self) -> List[FormField]:
        return await self.find_where({"isRequired": True})

    async def find_all_ordered(self) -> List[FormField]:
        return sorted(await self.find_all(), key=lambda f: f.order)

    async def find_by_names(self, names: Iterable[str]) -> List[FormField]:
        wanted = set(names)
        return [f for f in await self.find_all() if f.name in wanted]

    async def find_by_name(self, name: str) -> FormField | None:
        found = await self.find_by_names([name])
        return found[0] if found else None


class RuleStore(InMemoryStore[BusinessRule]):
    entity_name = "rule"

    async def find_by_type(self, rule_type: RuleType) -> List[BusinessRule]:
        return await self.find_where({"type": RuleType(rule_type).value})

    async def find_active(self) -> List[BusinessRule]:
        return await self.find_where({"isActive": True})

    async def find_by_priority(self, priority: int) -> List[BusinessRule]:
        return await self.find_where({"priority": int(priority)})

    async def find_all_ordered_by_priority(self) -> List[BusinessRule]:
        """Highest priority first; equal priorities keep insertion order."""
        return sorted(await self.find_all(), key=lambda r: r.priority, reverse=True)

    async def find_applicable(self, context: ContextLike) -> List[BusinessRule]:
        return [r for r in await self.find_active() if r.should_apply(context)]
