from __future__ import annotations

from enum import Enum, IntEnum


class ProductType(str, Enum):
    INDUSTRIAL = "industrial"
    RESIDENTIAL = "residential"
    CORPORATE = "corporate"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DROPDOWN = "dropdown"
    DATE = "date"


class RuleType(str, Enum):
    PRICING = "pricing"
    VALIDATION = "validation"
    VISIBILITY = "visibility"


class RulePriority(IntEnum):
    """Named levels for rule priority. Any int is accepted; higher runs first."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


class PricingModificationType(str, Enum):
    DISCOUNT = "discount"
    SURCHARGE = "surcharge"
    MULTIPLIER = "multiplier"
    FIXED = "fixed"


class ValidationType(str, Enum):
    REQUIRED = "required"
    MIN_VALUE = "minValue"
    MAX_VALUE = "maxValue"
    PATTERN = "pattern"
    CUSTOM = "custom"
