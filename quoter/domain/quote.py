from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, Mapping

from quoter.utils.calculator import money
from quoter.utils.formatting import format_currency, format_datetime

from .products import Product

D = Decimal


def _export_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, D):
        return float(value)
    if isinstance(value, Mapping):
        return {k: _export_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_export_value(v) for v in value]
    return value


@dataclass(frozen=True, eq=False)
class Quote:
    """
    A committed quote. Nothing in it points back at live form state:
    `product` and `form_data` are deep copies taken at commit time.
    Identity is the id, as for catalog entities.
    """

    id: str
    product: Product
    form_data: Mapping[str, Any]
    final_price: D
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        object.__setattr__(self, "product", copy.deepcopy(self.product))
        object.__setattr__(
            self, "form_data", MappingProxyType(copy.deepcopy(dict(self.form_data)))
        )
        object.__setattr__(self, "final_price", money(self.final_price))

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        return isinstance(other, Quote) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)

    def to_map(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "product": self.product.to_map(),
            "formData": _export_value(dict(self.form_data)),
            "finalPrice": float(self.final_price),
            "createdAt": self.created_at.isoformat(),
        }

    def summary(self) -> str:
        return (
            f"{self.product.name} - {format_currency(self.final_price)} "
            f"({format_datetime(self.created_at)})"
        )
