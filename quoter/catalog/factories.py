from __future__ import annotations

from typing import Any, Dict, Generic, Iterable, List, Mapping, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from quoter.core.errors import MalformedRecordError, UnknownVariantError
from quoter.domain.fields import FormField
from quoter.domain.products import Product
from quoter.domain.rules import BusinessRule

from .records import (
    CorporateProductRecord,
    DateFieldRecord,
    DropdownFieldRecord,
    FieldRecord,
    IndustrialProductRecord,
    NumberFieldRecord,
    PricingRuleRecord,
    ProductRecord,
    ResidentialProductRecord,
    RuleRecord,
    TextFieldRecord,
    ValidationRuleRecord,
    VisibilityRuleRecord,
)

E = TypeVar("E")


def _problem(err: Dict[str, Any]) -> str:
    # drop the discriminant from the location: ("industrial", "voltage") -> "voltage"
    loc = [str(p) for p in err.get("loc", ())][1:] or [str(p) for p in err.get("loc", ())]
    where = ".".join(loc)
    return f"{where}: {err.get('msg')}" if where else str(err.get("msg"))


class EntityFactory(Generic[E]):
    """
    Turns a flat seed record into a typed entity.

    The only place raw catalog data is parsed. Unknown discriminants raise
    UnknownVariantError, anything else wrong with a record raises MalformedRecordError.
    """

    family: str = "entity"
    record_types: Dict[str, Type[BaseModel]] = {}
    union: Any = None

    def __init__(self) -> None:
        self._adapter = TypeAdapter(self.union)

    def can_create(self, record: Mapping[str, Any]) -> bool:
        return isinstance(record, Mapping) and record.get("type") in self.record_types

    def required_keys(self, type_name: str) -> List[str]:
        """Keys a record of this type must carry (camelCase, as in the catalog file)."""
        model = self.record_types.get(type_name)
        if model is None:
            raise UnknownVariantError(self.family, type_name)
        return [
            info.alias or name
            for name, info in model.model_fields.items()
            if info.is_required()
        ]

    def create(self, record: Mapping[str, Any]) -> E:
        if not isinstance(record, Mapping):
            raise MalformedRecordError(self.family, [f"expected a mapping, got {type(record).__name__}"])

        try:
            parsed = self._adapter.validate_python(dict(record))
        except ValidationError as e:
            errors = e.errors()
            if any(err["type"] == "union_tag_invalid" for err in errors):
                raise UnknownVariantError(self.family, record.get("type")) from e
            raise MalformedRecordError(self.family, [_problem(err) for err in errors], dict(record)) from e

        return parsed.build()

    def create_many(self, records: Iterable[Mapping[str, Any]]) -> List[E]:
        return [self.create(r) for r in records]


class ProductFactory(EntityFactory[Product]):
    family = "product"
    record_types = {
        "industrial": IndustrialProductRecord,
        "residential": ResidentialProductRecord,
        "corporate": CorporateProductRecord,
    }
    union = ProductRecord


class FormFieldFactory(EntityFactory[FormField]):
    family = "field"
    record_types = {
        "text": TextFieldRecord,
        "number": NumberFieldRecord,
        "dropdown": DropdownFieldRecord,
        "date": DateFieldRecord,
    }
    union = FieldRecord


class BusinessRuleFactory(EntityFactory[BusinessRule]):
    family = "rule"
    record_types = {
        "pricing": PricingRuleRecord,
        "validation": ValidationRuleRecord,
        "visibility": VisibilityRuleRecord,
    }
    union = RuleRecord
