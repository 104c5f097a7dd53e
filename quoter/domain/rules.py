from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Union

from quoter.core.errors import UnknownVariantError
from quoter.utils import calculator
from quoter.utils.calculator import HUNDRED, to_decimal
from quoter.utils.validators import (
    parse_number,
    validate_number_range,
    validate_pattern,
    validate_required,
)

from .base import Entity
from .conditions import matches
from .enums import PricingModificationType, RulePriority, RuleType, ValidationType

D = Decimal

if TYPE_CHECKING:
    from quoter.engine.context import RuleContext

# A context is a RuleContext or any plain mapping with the same camelCase keys
ContextLike = Union["RuleContext", Mapping[str, Any]]

CustomValidator = Callable[[Any, ContextLike], Optional[str]]


# -----------------------------
# Custom validators
# -----------------------------

# Registry: name -> (value, context) -> message | None
validator_registry: Dict[str, CustomValidator] = {}


def register_validator(name: str) -> Callable[[CustomValidator], CustomValidator]:
    """
    Decorator to register a custom validator usable from seed data by name.
    Fails fast on duplicate registrations.
    """

    def decorator(fn: CustomValidator) -> CustomValidator:
        if name in validator_registry and validator_registry[name] is not fn:
            raise ValueError(
                f"Duplicate validator registration for '{name}': "
                f"{validator_registry[name].__name__} vs {fn.__name__}"
            )
        validator_registry[name] = fn
        return fn

    return decorator


def resolve_validator(ref: Any) -> CustomValidator:
    if callable(ref):
        return ref
    if isinstance(ref, str) and ref in validator_registry:
        return validator_registry[ref]
    raise ValueError(f"Unknown custom validator: {ref!r}")


def context_value(context: ContextLike, key: str) -> Any:
    return context.get(key)


# -----------------------------
# Entities
# -----------------------------


@dataclass(eq=False, kw_only=True)
class BusinessRule(Entity):
    name: str
    description: str = ""
    priority: int = RulePriority.MEDIUM
    is_active: bool = True
    # context key -> literal | {"operator": ..., "value": ...}
    conditions: Dict[str, Any] = field(default_factory=dict)

    type: RuleType = field(default=None, init=False)

    def should_apply(self, context: ContextLike) -> bool:
        if not self.is_active:
            return False
        for key, condition in self.conditions.items():
            if not matches(context_value(context, key), condition):
                return False
        return True

    def execute(self, context: ContextLike) -> Any:
        return execute_rule(self, context)

    def validate_rule(self) -> List[str]:
        return check_rule(self)

    def payload(self) -> Dict[str, Any]:
        return {}

    def to_map(self) -> Dict[str, Any]:
        return {
            **super().to_map(),
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "priority": int(self.priority),
            "isActive": self.is_active,
            "conditions": dict(self.conditions),
            **self.payload(),
        }


@dataclass(eq=False, kw_only=True)
class PricingRule(BusinessRule):
    modification_type: PricingModificationType
    value: D
    is_percentage: bool = False

    type: RuleType = field(default=RuleType.PRICING, init=False)

    def __post_init__(self) -> None:
        self.value = to_decimal(self.value)

    def payload(self) -> Dict[str, Any]:
        return {
            "modificationType": self.modification_type.value,
            "value": float(self.value),
            "isPercentage": self.is_percentage,
        }


@dataclass(eq=False, kw_only=True)
class ValidationRule(BusinessRule):
    target_fields: List[str]
    validation_type: ValidationType
    validation_params: Dict[str, Any] = field(default_factory=dict)

    type: RuleType = field(default=RuleType.VALIDATION, init=False)

    def payload(self) -> Dict[str, Any]:
        params = {
            k: getattr(v, "__name__", repr(v)) if callable(v) else v
            for k, v in self.validation_params.items()
        }
        return {
            "targetFields": list(self.target_fields),
            "validationType": self.validation_type.value,
            "validationParams": params,
        }


@dataclass(eq=False, kw_only=True)
class VisibilityRule(BusinessRule):
    target_fields: List[str]
    show_fields: bool

    type: RuleType = field(default=RuleType.VISIBILITY, init=False)

    def payload(self) -> Dict[str, Any]:
        return {"targetFields": list(self.target_fields), "showFields": self.show_fields}


RULE_CLASSES: Dict[RuleType, type] = {
    RuleType.PRICING: PricingRule,
    RuleType.VALIDATION: ValidationRule,
    RuleType.VISIBILITY: VisibilityRule,
}


# -----------------------------
# Execution per variant (dispatch on the tag)
# -----------------------------


def _execute_pricing(rule: PricingRule, context: ContextLike) -> D:
    price = to_decimal(context_value(context, "currentPrice") or 0)
    v = rule.value
    kind = rule.modification_type

    if kind is PricingModificationType.DISCOUNT:
        if rule.is_percentage:
            return calculator.percentage_discount(price, v)
        return calculator.fixed_discount(price, v)

    if kind is PricingModificationType.SURCHARGE:
        if rule.is_percentage:
            return calculator.percentage_surcharge(price, v)
        return calculator.fixed_surcharge(price, v)

    if kind is PricingModificationType.MULTIPLIER:
        return price * v

    if kind is PricingModificationType.FIXED:
        return v

    raise UnknownVariantError("pricing modification", kind)


def _check_value(rule: ValidationRule, name: str, value: Any, context: ContextLike) -> List[str]:
    kind = rule.validation_type
    params = rule.validation_params

    if kind is ValidationType.REQUIRED:
        return validate_required(name, value)

    if kind is ValidationType.MIN_VALUE:
        if params.get("minValue") is None:
            return []
        return validate_number_range(
            name, parse_number(value), min_value=to_decimal(params["minValue"])
        )

    if kind is ValidationType.MAX_VALUE:
        if params.get("maxValue") is None:
            return []
        return validate_number_range(
            name, parse_number(value), max_value=to_decimal(params["maxValue"])
        )

    if kind is ValidationType.PATTERN:
        if not params.get("pattern"):
            return []
        return validate_pattern(name, value, params["pattern"], params.get("message"))

    if kind is ValidationType.CUSTOM:
        if params.get("validator") is None:
            return []
        message = resolve_validator(params["validator"])(value, context)
        return [message] if message else []

    raise UnknownVariantError("validation", kind)


def _execute_validation(rule: ValidationRule, context: ContextLike) -> List[str]:
    errors: List[str] = []
    for name in rule.target_fields:
        errors.extend(_check_value(rule, name, context_value(context, name), context))
    return errors


def _execute_visibility(rule: VisibilityRule, context: ContextLike) -> Dict[str, bool]:
    return {name: rule.show_fields for name in rule.target_fields}


_EXECUTORS: Dict[RuleType, Callable[[Any, ContextLike], Any]] = {
    RuleType.PRICING: _execute_pricing,
    RuleType.VALIDATION: _execute_validation,
    RuleType.VISIBILITY: _execute_visibility,
}


def _tag(rule: BusinessRule) -> RuleType:
    if rule.type not in _EXECUTORS:
        raise UnknownVariantError("rule", rule.type)
    return rule.type


def execute_rule(rule: BusinessRule, context: ContextLike) -> Any:
    """
    Pricing -> Decimal, Validation -> list of messages, Visibility -> {field: bool}.
    May raise; the engine records the failure against the rule id.
    """
    return _EXECUTORS[_tag(rule)](rule, context)


# -----------------------------
# Configuration self-checks
# -----------------------------


def _check_pricing(rule: PricingRule) -> List[str]:
    errors: List[str] = []
    if rule.value < 0:
        errors.append(f"Rule '{rule.id}': value cannot be negative")
    if (
        rule.is_percentage
        and rule.modification_type is PricingModificationType.DISCOUNT
        and rule.value > HUNDRED
    ):
        errors.append(f"Rule '{rule.id}': percentage discount cannot exceed 100%")
    return errors


def _check_validation(rule: ValidationRule) -> List[str]:
    errors: List[str] = []
    if not rule.target_fields:
        errors.append(f"Rule '{rule.id}': validation rule needs at least one target field")

    ref = rule.validation_params.get("validator")
    if rule.validation_type is ValidationType.CUSTOM and ref is not None:
        if not callable(ref) and ref not in validator_registry:
            errors.append(f"Rule '{rule.id}': unknown custom validator {ref!r}")
    return errors


def _check_visibility(rule: VisibilityRule) -> List[str]:
    if not rule.target_fields:
        return [f"Rule '{rule.id}': visibility rule needs at least one target field"]
    return []


_CHECKS: Dict[RuleType, Callable[[Any], List[str]]] = {
    RuleType.PRICING: _check_pricing,
    RuleType.VALIDATION: _check_validation,
    RuleType.VISIBILITY: _check_visibility,
}


def check_rule(rule: BusinessRule) -> List[str]:
    return _CHECKS[_tag(rule)](rule)
