from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Mapping, Optional

D = Decimal

if TYPE_CHECKING:
    from quoter.domain.enums import ProductType
    from quoter.domain.products import Product


@dataclass
class RuleContext:
    """
    Facts a pass evaluates rule conditions against.

    Typed fields cover what the engine and the form controller derive; `values`
    holds the raw form data plus any extra keys a rule condition may look up.
    Rules address everything by its camelCase key through `get()`.
    """

    product: Optional["Product"] = None
    product_type: Optional["ProductType"] = None
    base_price: Optional[D] = None
    current_price: Optional[D] = None
    quantity: Optional[Any] = None
    delivery_days: Optional[int] = None
    field_visibility: Dict[str, bool] = field(default_factory=dict)
    validation_errors: List[str] = field(default_factory=list)
    values: Dict[str, Any] = field(default_factory=dict)

    # camelCase key -> typed attribute
    TYPED_KEYS: ClassVar[Dict[str, str]] = {
        "product": "product",
        "productType": "product_type",
        "basePrice": "base_price",
        "currentPrice": "current_price",
        "quantity": "quantity",
        "deliveryDays": "delivery_days",
        "fieldVisibility": "field_visibility",
        "validationErrors": "validation_errors",
    }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RuleContext":
        ctx = cls()
        for key, value in data.items():
            ctx.set(key, value)
        return ctx

    def get(self, key: str, default: Any = None) -> Any:
        attr = self.TYPED_KEYS.get(key)
        if attr is not None:
            value = getattr(self, attr)
            return default if value is None else value
        return self.values.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def set(self, key: str, value: Any) -> None:
        attr = self.TYPED_KEYS.get(key)
        if attr is not None:
            setattr(self, attr, value)
        else:
            self.values[key] = value

    def as_dict(self) -> Dict[str, Any]:
        out = dict(self.values)
        for key, attr in self.TYPED_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                out[key] = value
        return out
