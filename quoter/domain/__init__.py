from .base import Entity
from .enums import (
    FieldType,
    PricingModificationType,
    ProductType,
    RulePriority,
    RuleType,
    ValidationType,
)
from .fields import (
    DateFormField,
    DropdownFormField,
    DropdownOption,
    FormField,
    NumberFormField,
    TextFormField,
)
from .products import CorporateProduct, IndustrialProduct, Product, ResidentialProduct
from .quote import Quote
from .rules import (
    BusinessRule,
    PricingRule,
    ValidationRule,
    VisibilityRule,
    register_validator,
)

__all__ = [
    "Entity",
    "FieldType",
    "PricingModificationType",
    "ProductType",
    "RulePriority",
    "RuleType",
    "ValidationType",
    "FormField",
    "TextFormField",
    "NumberFormField",
    "DropdownFormField",
    "DropdownOption",
    "DateFormField",
    "Product",
    "IndustrialProduct",
    "ResidentialProduct",
    "CorporateProduct",
    "Quote",
    "BusinessRule",
    "PricingRule",
    "ValidationRule",
    "VisibilityRule",
    "register_validator",
]
