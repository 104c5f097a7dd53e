from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from quoter.core.errors import UnknownVariantError
from quoter.utils.calculator import to_decimal
from quoter.utils.validators import (
    parse_datetime,
    parse_number,
    validate_date_range,
    validate_integer,
    validate_number_range,
    validate_pattern,
    validate_required,
    validate_text_length,
)

from .base import Entity
from .enums import FieldType

D = Decimal


@dataclass(frozen=True)
class DropdownOption:
    value: Any
    label: str
    is_enabled: bool = True

    def to_map(self) -> Dict[str, Any]:
        return {"value": self.value, "label": self.label, "isEnabled": self.is_enabled}


# -----------------------------
# Entities
# -----------------------------


@dataclass(eq=False, kw_only=True)
class FormField(Entity):
    """
    A single input on the quote form.

    `is_visible` is the only attribute that changes after construction; the
    visibility pass toggles it. `reset_visibility()` puts back the declared value.
    """

    name: str
    label: str
    is_required: bool = False
    is_visible: bool = True
    is_enabled: bool = True
    default_value: Any = None
    help_text: str = ""
    order: int = 0

    type: FieldType = field(default=None, init=False)
    _declared_visible: bool = field(default=True, init=False, repr=False)

    def __post_init__(self) -> None:
        self._declared_visible = self.is_visible

    @property
    def declared_visible(self) -> bool:
        return self._declared_visible

    def reset_visibility(self) -> None:
        self.is_visible = self._declared_visible

    def initial_value(self, now: Optional[datetime] = None) -> Any:
        return copy.deepcopy(self.default_value)

    def validate(self, value: Any, now: Optional[datetime] = None) -> List[str]:
        return validate_field(self, value, now)

    def widget_properties(self) -> Dict[str, Any]:
        """Render hints for an external UI. Not used by the engine itself."""
        return {
            "name": self.name,
            "label": self.label,
            "type": _tag(self).value,
            "isRequired": self.is_required,
            "isEnabled": self.is_enabled,
            "helpText": self.help_text,
            **self.constraints(),
        }

    def constraints(self) -> Dict[str, Any]:
        return {}

    def to_map(self) -> Dict[str, Any]:
        return {
            **super().to_map(),
            "name": self.name,
            "label": self.label,
            "type": self.type.value,
            "isRequired": self.is_required,
            "isVisible": self.is_visible,
            "isEnabled": self.is_enabled,
            "defaultValue": self.default_value,
            "helpText": self.help_text,
            "order": self.order,
            **self.constraints(),
        }


@dataclass(eq=False, kw_only=True)
class TextFormField(FormField):
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    max_lines: int = 1

    type: FieldType = field(default=FieldType.TEXT, init=False)

    def constraints(self) -> Dict[str, Any]:
        return {
            "minLength": self.min_length,
            "maxLength": self.max_length,
            "pattern": self.pattern,
            "maxLines": self.max_lines,
        }


@dataclass(eq=False, kw_only=True)
class NumberFormField(FormField):
    min_value: Optional[D] = None
    max_value: Optional[D] = None
    is_integer: bool = False
    decimal_places: Optional[int] = None

    type: FieldType = field(default=FieldType.NUMBER, init=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.min_value is not None:
            self.min_value = to_decimal(self.min_value)
        if self.max_value is not None:
            self.max_value = to_decimal(self.max_value)

    def constraints(self) -> Dict[str, Any]:
        return {
            "minValue": None if self.min_value is None else float(self.min_value),
            "maxValue": None if self.max_value is None else float(self.max_value),
            "isInteger": self.is_integer,
            "decimalPlaces": self.decimal_places,
        }


@dataclass(eq=False, kw_only=True)
class DropdownFormField(FormField):
    options: List[DropdownOption] = field(default_factory=list)
    allow_multiple: bool = False

    type: FieldType = field(default=FieldType.DROPDOWN, init=False)

    @property
    def offered_values(self) -> List[Any]:
        return [o.value for o in self.options]

    @property
    def enabled_options(self) -> List[DropdownOption]:
        return [o for o in self.options if o.is_enabled]

    def constraints(self) -> Dict[str, Any]:
        return {"allowMultiple": self.allow_multiple}

    def widget_properties(self) -> Dict[str, Any]:
        props = super().widget_properties()
        props["options"] = [{"value": o.value, "label": o.label} for o in self.enabled_options]
        return props

    def to_map(self) -> Dict[str, Any]:
        return {**super().to_map(), "options": [o.to_map() for o in self.options]}


@dataclass(eq=False, kw_only=True)
class DateFormField(FormField):
    min_date: Optional[datetime] = None
    max_date: Optional[datetime] = None
    date_format: str = "dd/MM/yyyy"
    # relative bounds, resolved against the caller's clock
    min_offset_days: Optional[int] = None
    default_offset_days: Optional[int] = None

    type: FieldType = field(default=FieldType.DATE, init=False)

    def bounds(self, now: Optional[datetime] = None) -> tuple:
        lower = self.min_date
        if self.min_offset_days is not None:
            today = (now or datetime.now()).replace(hour=0, minute=0, second=0, microsecond=0)
            relative = today + timedelta(days=self.min_offset_days)
            lower = relative if lower is None else max(lower, relative)
        return lower, self.max_date

    def initial_value(self, now: Optional[datetime] = None) -> Any:
        if self.default_offset_days is not None:
            return (now or datetime.now()) + timedelta(days=self.default_offset_days)
        return super().initial_value(now)

    def constraints(self) -> Dict[str, Any]:
        return {
            "minDate": self.min_date.isoformat() if self.min_date else None,
            "maxDate": self.max_date.isoformat() if self.max_date else None,
            "dateFormat": self.date_format,
            "minOffsetDays": self.min_offset_days,
            "defaultOffsetDays": self.default_offset_days,
        }


FIELD_CLASSES: Dict[FieldType, type] = {
    FieldType.TEXT: TextFormField,
    FieldType.NUMBER: NumberFormField,
    FieldType.DROPDOWN: DropdownFormField,
    FieldType.DATE: DateFormField,
}


# -----------------------------
# Validation per variant (dispatch on the tag)
# -----------------------------


def _validate_text(f: TextFormField, value: Any, now: Optional[datetime]) -> List[str]:
    text = str(value)
    errors = validate_text_length(
        f.label, text, min_length=f.min_length, max_length=f.max_length
    )
    if f.pattern:
        errors.extend(validate_pattern(f.label, text, f.pattern))
    return errors


def _validate_number(f: NumberFormField, value: Any, now: Optional[datetime]) -> List[str]:
    number = parse_number(value)
    if number is None:
        return [f"{f.label} must be a valid number"]

    errors: List[str] = []
    if f.is_integer:
        errors.extend(validate_integer(f.label, number))
    errors.extend(
        validate_number_range(f.label, number, min_value=f.min_value, max_value=f.max_value)
    )

    if f.decimal_places is not None and not f.is_integer:
        exponent = number.normalize().as_tuple().exponent
        if exponent < 0 and -exponent > f.decimal_places:
            errors.append(f"{f.label} must have at most {f.decimal_places} decimal places")
    return errors


def _validate_dropdown(f: DropdownFormField, value: Any, now: Optional[datetime]) -> List[str]:
    selected = list(value) if isinstance(value, (list, tuple, set)) else [value]
    errors: List[str] = []

    if len(selected) > 1 and not f.allow_multiple:
        errors.append(f"{f.label} accepts a single option")

    # disabled options still count: a value picked before an option was retired stays valid
    offered = f.offered_values
    for v in selected:
        if v not in offered:
            errors.append(f"{f.label}: '{v}' is not a valid option")
    return errors


def _validate_date(f: DateFormField, value: Any, now: Optional[datetime]) -> List[str]:
    when = parse_datetime(value)
    if when is None:
        return [f"{f.label} must be a valid date"]

    lower, upper = f.bounds(now)
    return validate_date_range(f.label, when, min_date=lower, max_date=upper)


_VALIDATORS: Dict[FieldType, Callable[[Any, Any, Optional[datetime]], List[str]]] = {
    FieldType.TEXT: _validate_text,
    FieldType.NUMBER: _validate_number,
    FieldType.DROPDOWN: _validate_dropdown,
    FieldType.DATE: _validate_date,
}


def _tag(f: FormField) -> FieldType:
    if f.type not in _VALIDATORS:
        raise UnknownVariantError("field", f.type)
    return f.type


def validate_field(f: FormField, value: Any, now: Optional[datetime] = None) -> List[str]:
    """
    Pure check of one value against one field.
    Empty values only fail when the field is required; nothing else is checked for them.
    """
    validator = _VALIDATORS[_tag(f)]

    missing = validate_required(f.label, value)
    if missing:
        return missing if f.is_required else []

    return validator(f, value, now)
