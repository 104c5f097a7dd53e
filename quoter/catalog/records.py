# quoter/catalog/records.py
"""
Flat seed records, one pydantic model per variant.

Keys are camelCase as they appear in the catalog file; `type` is the
discriminant. Unknown keys are rejected.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, constr, field_validator

from quoter.domain.enums import PricingModificationType, RulePriority, ValidationType
from quoter.domain.fields import (
    DateFormField,
    DropdownFormField,
    DropdownOption,
    NumberFormField,
    TextFormField,
)
from quoter.domain.products import CorporateProduct, IndustrialProduct, ResidentialProduct
from quoter.domain.rules import PricingRule, ValidationRule, VisibilityRule

NonEmpty = constr(strip_whitespace=True, min_length=1)


class SeedRecord(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: NonEmpty  # type: ignore
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    def timestamps(self) -> Dict[str, datetime]:
        out: Dict[str, datetime] = {}
        if self.created_at is not None:
            out["created_at"] = self.created_at
        if self.updated_at is not None:
            out["updated_at"] = self.updated_at
        return out


# -----------------------------
# Products
# -----------------------------


class ProductRecordBase(SeedRecord):
    name: NonEmpty  # type: ignore
    description: str = ""
    base_price: Decimal = Field(..., alias="basePrice", ge=0)
    category: str = ""
    is_active: bool = Field(True, alias="isActive")

    def common(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "base_price": self.base_price,
            "category": self.category,
            "is_active": self.is_active,
            **self.timestamps(),
        }


class IndustrialProductRecord(ProductRecordBase):
    type: Literal["industrial"]
    voltage: int
    certification: str = ""
    power_consumption: float = Field(0.0, alias="powerConsumption")

    def build(self) -> IndustrialProduct:
        return IndustrialProduct(
            **self.common(),
            voltage=self.voltage,
            certification=self.certification,
            power_consumption=self.power_consumption,
        )


class ResidentialProductRecord(ProductRecordBase):
    type: Literal["residential"]
    color: str
    warranty: int
    energy_rating: str = Field("A", alias="energyRating")

    def build(self) -> ResidentialProduct:
        return ResidentialProduct(
            **self.common(),
            color=self.color,
            warranty=self.warranty,
            energy_rating=self.energy_rating,
        )


class CorporateProductRecord(ProductRecordBase):
    type: Literal["corporate"]
    license_type: str = Field(..., alias="licenseType")
    support_level: str = Field(..., alias="supportLevel")
    max_users: int = Field(..., alias="maxUsers")

    def build(self) -> CorporateProduct:
        return CorporateProduct(
            **self.common(),
            license_type=self.license_type,
            support_level=self.support_level,
            max_users=self.max_users,
        )


ProductRecord = Annotated[
    Union[IndustrialProductRecord, ResidentialProductRecord, CorporateProductRecord],
    Field(discriminator="type"),
]


# -----------------------------
# Form fields
# -----------------------------


class FieldRecordBase(SeedRecord):
    name: NonEmpty  # type: ignore
    label: NonEmpty  # type: ignore
    is_required: bool = Field(False, alias="isRequired")
    is_visible: bool = Field(True, alias="isVisible")
    is_enabled: bool = Field(True, alias="isEnabled")
    default_value: Any = Field(None, alias="defaultValue")
    help_text: str = Field("", alias="helpText")
    order: int = 0

    def common(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "label": self.label,
            "is_required": self.is_required,
            "is_visible": self.is_visible,
            "is_enabled": self.is_enabled,
            "default_value": self.default_value,
            "help_text": self.help_text,
            "order": self.order,
            **self.timestamps(),
        }


class TextFieldRecord(FieldRecordBase):
    type: Literal["text"]
    min_length: Optional[int] = Field(None, alias="minLength", ge=0)
    max_length: Optional[int] = Field(None, alias="maxLength", ge=0)
    pattern: Optional[str] = None
    max_lines: int = Field(1, alias="maxLines", ge=1)

    def build(self) -> TextFormField:
        return TextFormField(
            **self.common(),
            min_length=self.min_length,
            max_length=self.max_length,
            pattern=self.pattern,
            max_lines=self.max_lines,
        )


class NumberFieldRecord(FieldRecordBase):
    type: Literal["number"]
    min_value: Optional[Decimal] = Field(None, alias="minValue")
    max_value: Optional[Decimal] = Field(None, alias="maxValue")
    is_integer: bool = Field(False, alias="isInteger")
    decimal_places: Optional[int] = Field(None, alias="decimalPlaces", ge=0)

    def build(self) -> NumberFormField:
        return NumberFormField(
            **self.common(),
            min_value=self.min_value,
            max_value=self.max_value,
            is_integer=self.is_integer,
            decimal_places=self.decimal_places,
        )


class DropdownOptionRecord(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    value: Any
    label: str
    is_enabled: bool = Field(True, alias="isEnabled")


class DropdownFieldRecord(FieldRecordBase):
    type: Literal["dropdown"]
    options: List[DropdownOptionRecord] = Field(default_factory=list)
    allow_multiple: bool = Field(False, alias="allowMultiple")

    def build(self) -> DropdownFormField:
        return DropdownFormField(
            **self.common(),
            options=[DropdownOption(o.value, o.label, o.is_enabled) for o in self.options],
            allow_multiple=self.allow_multiple,
        )


class DateFieldRecord(FieldRecordBase):
    type: Literal["date"]
    min_date: Optional[datetime] = Field(None, alias="minDate")
    max_date: Optional[datetime] = Field(None, alias="maxDate")
    date_format: str = Field("dd/MM/yyyy", alias="dateFormat")
    min_offset_days: Optional[int] = Field(None, alias="minOffsetDays")
    default_offset_days: Optional[int] = Field(None, alias="defaultOffsetDays")

    def build(self) -> DateFormField:
        return DateFormField(
            **self.common(),
            min_date=self.min_date,
            max_date=self.max_date,
            date_format=self.date_format,
            min_offset_days=self.min_offset_days,
            default_offset_days=self.default_offset_days,
        )


FieldRecord = Annotated[
    Union[TextFieldRecord, NumberFieldRecord, DropdownFieldRecord, DateFieldRecord],
    Field(discriminator="type"),
]


# -----------------------------
# Business rules
# -----------------------------


class RuleRecordBase(SeedRecord):
    name: NonEmpty  # type: ignore
    description: str = ""
    priority: int = int(RulePriority.MEDIUM)
    is_active: bool = Field(True, alias="isActive")
    conditions: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("priority", mode="before")
    @classmethod
    def _named_priority(cls, v: Any) -> Any:
        # "low" | "medium" | "high" | "critical" or any int
        if isinstance(v, str) and v.strip().upper() in RulePriority.__members__:
            return int(RulePriority[v.strip().upper()])
        return v

    def common(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "priority": self.priority,
            "is_active": self.is_active,
            "conditions": dict(self.conditions),
            **self.timestamps(),
        }


class PricingRuleRecord(RuleRecordBase):
    type: Literal["pricing"]
    modification_type: PricingModificationType = Field(..., alias="modificationType")
    value: Decimal
    is_percentage: bool = Field(False, alias="isPercentage")

    def build(self) -> PricingRule:
        return PricingRule(
            **self.common(),
            modification_type=self.modification_type,
            value=self.value,
            is_percentage=self.is_percentage,
        )


class ValidationRuleRecord(RuleRecordBase):
    type: Literal["validation"]
    target_fields: List[str] = Field(..., alias="targetFields")
    validation_type: ValidationType = Field(..., alias="validationType")
    validation_params: Dict[str, Any] = Field(default_factory=dict, alias="validationParams")

    def build(self) -> ValidationRule:
        return ValidationRule(
            **self.common(),
            target_fields=list(self.target_fields),
            validation_type=self.validation_type,
            validation_params=dict(self.validation_params),
        )


class VisibilityRuleRecord(RuleRecordBase):
    type: Literal["visibility"]
    target_fields: List[str] = Field(..., alias="targetFields")
    show_fields: bool = Field(..., alias="showFields")

    def build(self) -> VisibilityRule:
        return VisibilityRule(
            **self.common(),
            target_fields=list(self.target_fields),
            show_fields=self.show_fields,
        )


RuleRecord = Annotated[
    Union[PricingRuleRecord, ValidationRuleRecord, VisibilityRuleRecord],
    Field(discriminator="type"),
]
