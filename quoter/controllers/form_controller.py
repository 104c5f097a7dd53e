from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from quoter.config import get_settings
from quoter.core.logging_config import get_logger
from quoter.domain.enums import ProductType, RuleType
from quoter.domain.fields import DateFormField, FormField, NumberFormField
from quoter.domain.products import Product
from quoter.engine.context import RuleContext
from quoter.engine.rules_engine import RulesEngine
from quoter.store.catalog import FieldStore
from quoter.utils.calculator import total_price
from quoter.utils.formatting import format_currency, format_days
from quoter.utils.validators import parse_datetime, parse_number

D = Decimal

log = get_logger("quoter.form")

GLOBAL_ERRORS = "_global"

_MISSING = object()


class FormState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class FormSnapshot:
    state: FormState
    product_id: Optional[str]
    form_data: Mapping[str, Any]
    field_errors: Mapping[str, List[str]]
    field_visibility: Mapping[str, bool]
    current_price: D
    has_changes: bool
    is_valid: bool


@dataclass(frozen=True)
class FormEvent:
    # loading | initialized | field_updated | validated | price_calculated | reset
    kind: str
    snapshot: FormSnapshot


FormListener = Callable[[FormEvent], None]


def shared_fields() -> List[FormField]:
    """Fields every form carries, whatever the product variant."""
    s = get_settings()
    return [
        NumberFormField(
            id="quantity",
            name="quantity",
            label="Quantity",
            is_required=True,
            default_value=s.default_quantity,
            min_value=1,
            is_integer=True,
            order=100,
        ),
        DateFormField(
            id="deliveryDate",
            name="deliveryDate",
            label="Delivery date",
            is_required=True,
            min_offset_days=0,
            default_offset_days=s.delivery_lead_days,
            order=200,
        ),
    ]


class FormController:
    """
    Runtime form state for one product variant.

    Long-lived: the coordinator keeps one per ProductType and re-initializes it
    whenever a product of that type is selected. Every field change rebuilds the
    rule context and runs the validation, visibility and pricing passes on it.

    Store access is the only suspension point. Each superseding operation
    (initialize, update, reset) bumps `_generation`; an operation that finds
    the counter moved after an await drops the rest of its work.
    """

    def __init__(
        self,
        product_type: ProductType,
        field_store: FieldStore,
        rules_engine: RulesEngine,
        *,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.product_type = ProductType(product_type)
        self.field_store = field_store
        self.rules_engine = rules_engine
        self._now = now

        self._form_data: Dict[str, Any] = {}
        self._field_errors: Dict[str, List[str]] = {}
        self._field_visibility: Dict[str, bool] = {}
        self._fields: List[FormField] = []
        self._rule_errors: Dict[str, str] = {}

        self._selected_product: Optional[Product] = None
        self._current_price: D = D("0")
        self._state = FormState.EMPTY
        self._has_changes = False

        self._generation = 0
        self._listeners: List[FormListener] = []

    # -----------------------------
    # Operations
    # -----------------------------

    async def initialize_form(self, product: Product) -> None:
        if product.type is not self.product_type:
            raise ValueError(
                f"{self.product_type.value} form cannot load {product.type.value} product '{product.id}'"
            )

        gen = self._begin()
        self._selected_product = product
        self._current_price = product.base_price
        self._set_state(FormState.LOADING)

        await self._ensure_shared_fields()
        if self._superseded(gen):
            return

        names = product.required_field_names()
        fields = await self.field_store.find_by_names(names)
        if self._superseded(gen):
            return

        for f in fields:
            f.reset_visibility()
        self._fields = sorted(fields, key=lambda f: f.order)
        self._field_visibility = {f.name: f.is_visible for f in self._fields}
        self._field_errors = {}
        self._form_data = self._initial_form_data(product)

        if not await self._apply_rules(gen):
            return

        self._has_changes = False
        self._state = FormState.READY
        log.info(
            "form_initialized",
            product_id=product.id,
            product_type=product.type.value,
            fields=len(self._fields),
        )
        self._emit("initialized")

    async def update_field(self, name: str, value: Any) -> None:
        if self._form_data.get(name, _MISSING) == value:
            return

        gen = self._begin()
        self._form_data[name] = value
        self._has_changes = True
        self._field_errors = {}
        self._validate_field(name, value)

        if self._selected_product is not None:
            self._set_state(FormState.LOADING)
            if not await self._apply_rules(gen):
                return
            self._state = FormState.READY

        self._emit("field_updated")

    async def validate_form(self) -> bool:
        gen = self._generation
        self._field_errors = {}
        now = self._now()

        for f in self._fields:
            if self.is_field_visible(f.name):
                errors = f.validate(self._form_data.get(f.name), now)
                if errors:
                    self._field_errors[f.name] = errors

        ctx = self.rule_context()
        result = await self.rules_engine.process_rules_by_type(RuleType.VALIDATION, ctx)
        if self._superseded(gen):
            return False

        global_errors = list(result.validation_errors)
        if self._selected_product is not None:
            global_errors.extend(self._selected_product.validate(self._form_data))
        if global_errors:
            self._field_errors[GLOBAL_ERRORS] = global_errors
        self._rule_errors = dict(result.errors)

        log.debug("form_validated", valid=self.is_valid, errors=len(self.all_errors))
        self._emit("validated")
        return self.is_valid

    async def calculate_final_price(self) -> D:
        if self._selected_product is None:
            return D("0")

        gen = self._generation
        ctx = self.rule_context()
        seeded = ctx.current_price

        result = await self.rules_engine.process_rules_by_type(RuleType.PRICING, ctx)
        if self._superseded(gen):
            return self._current_price

        self._current_price = result.final_price if result.final_price is not None else seeded
        self._rule_errors = dict(result.errors)
        self._emit("price_calculated")
        return self._current_price

    def reset_form(self) -> None:
        self._begin()
        for f in self._fields:
            f.reset_visibility()

        self._form_data = {}
        self._field_errors = {}
        self._field_visibility = {}
        self._fields = []
        self._rule_errors = {}
        self._selected_product = None
        self._current_price = D("0")
        self._has_changes = False
        self._state = FormState.EMPTY
        self._emit("reset")

    # -----------------------------
    # Context
    # -----------------------------

    def rule_context(self) -> RuleContext:
        """Fresh context from the current form data; never shared between operations."""
        ctx = RuleContext(
            values=dict(self._form_data),
            field_visibility=dict(self._field_visibility),
        )

        product = self._selected_product
        if product is not None:
            quantity = self._quantity()
            ctx.product = product
            ctx.product_type = product.type
            ctx.base_price = product.base_price
            ctx.quantity = quantity
            ctx.current_price = total_price(product.base_price, quantity)

        ctx.delivery_days = self._delivery_days()
        return ctx

    def _quantity(self) -> Any:
        q = parse_number(self._form_data.get("quantity"))
        if q is None or q < 0:
            return get_settings().default_quantity
        return int(q) if q == q.to_integral_value() else q

    def _delivery_days(self) -> Optional[int]:
        delivery = parse_datetime(self._form_data.get("deliveryDate"))
        if delivery is None:
            return None
        # whole days, truncated toward zero; negative when overdue
        return int((delivery - self._now()) / timedelta(days=1))

    # -----------------------------
    # Internals
    # -----------------------------

    async def _ensure_shared_fields(self) -> None:
        for f in shared_fields():
            if not await self.field_store.exists(f.id):
                await self.field_store.save(f)
                log.debug("shared_field_created", field=f.name)

    def _initial_form_data(self, product: Product) -> Dict[str, Any]:
        attributes = product.variant_attributes()
        now = self._now()
        data: Dict[str, Any] = {}
        for f in self._fields:
            if f.name in attributes:
                value = copy.deepcopy(attributes[f.name])
            else:
                value = f.initial_value(now)
            if value is not None:
                data[f.name] = value
        return data

    def _field(self, name: str) -> Optional[FormField]:
        for f in self._fields:
            if f.name == name:
                return f
        return None

    def _validate_field(self, name: str, value: Any) -> None:
        f = self._field(name)
        if f is None:
            log.debug("field_validation_skipped", field=name)
            return
        errors = f.validate(value, self._now())
        if errors:
            self._field_errors[name] = errors

    async def _apply_rules(self, gen: int) -> bool:
        """Validation, visibility and pricing passes over one context. False when superseded."""
        ctx = self.rule_context()

        validation = await self.rules_engine.process_rules_by_type(RuleType.VALIDATION, ctx)
        if self._superseded(gen):
            return False
        visibility = await self.rules_engine.process_rules_by_type(RuleType.VISIBILITY, ctx)
        if self._superseded(gen):
            return False
        pricing = await self.rules_engine.process_rules_by_type(RuleType.PRICING, ctx)
        if self._superseded(gen):
            return False

        self._field_errors.pop(GLOBAL_ERRORS, None)
        if validation.validation_errors:
            self._field_errors[GLOBAL_ERRORS] = list(validation.validation_errors)

        for name, shown in visibility.field_visibility.items():
            f = self._field(name)
            if f is None:
                continue
            f.is_visible = shown
            self._field_visibility[name] = shown

        if pricing.final_price is not None:
            self._current_price = pricing.final_price
        elif ctx.current_price is not None:
            self._current_price = ctx.current_price

        self._rule_errors = {**validation.errors, **visibility.errors, **pricing.errors}
        return True

    def _begin(self) -> int:
        self._generation += 1
        return self._generation

    def _superseded(self, gen: int) -> bool:
        if gen != self._generation:
            log.debug("form_operation_superseded", generation=gen, current=self._generation)
            return True
        return False

    def _set_state(self, state: FormState) -> None:
        if self._state is not state:
            self._state = state
            self._emit(state.value)

    # -----------------------------
    # Notifications
    # -----------------------------

    def subscribe(self, listener: FormListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: str) -> None:
        if not self._listeners:
            return
        event = FormEvent(kind=kind, snapshot=self.snapshot())
        for listener in list(self._listeners):
            listener(event)

    def snapshot(self) -> FormSnapshot:
        return FormSnapshot(
            state=self._state,
            product_id=self._selected_product.id if self._selected_product else None,
            form_data=MappingProxyType(copy.deepcopy(self._form_data)),
            field_errors=MappingProxyType({k: list(v) for k, v in self._field_errors.items()}),
            field_visibility=MappingProxyType(dict(self._field_visibility)),
            current_price=self._current_price,
            has_changes=self._has_changes,
            is_valid=self.is_valid,
        )

    # -----------------------------
    # Queries
    # -----------------------------

    @property
    def form_data(self) -> Mapping[str, Any]:
        return MappingProxyType(self._form_data)

    @property
    def field_errors(self) -> Dict[str, List[str]]:
        return {k: list(v) for k, v in self._field_errors.items()}

    @property
    def field_visibility(self) -> Dict[str, bool]:
        return dict(self._field_visibility)

    @property
    def fields(self) -> List[FormField]:
        return list(self._fields)

    @property
    def visible_fields(self) -> List[FormField]:
        return [f for f in self._fields if self.is_field_visible(f.name)]

    @property
    def selected_product(self) -> Optional[Product]:
        return self._selected_product

    @property
    def current_price(self) -> D:
        return self._current_price

    @property
    def formatted_price(self) -> str:
        return format_currency(self._current_price)

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state is FormState.LOADING

    @property
    def has_changes(self) -> bool:
        return self._has_changes

    @property
    def is_valid(self) -> bool:
        return all(not errors for errors in self._field_errors.values())

    @property
    def can_submit(self) -> bool:
        return not self.is_loading and self.is_valid and self._selected_product is not None

    @property
    def all_errors(self) -> List[str]:
        return [e for errors in self._field_errors.values() for e in errors]

    @property
    def rule_errors(self) -> Dict[str, str]:
        """Rules that raised during the last pass, by rule id."""
        return dict(self._rule_errors)

    @property
    def delivery_date(self) -> Optional[datetime]:
        return self.get_field_value("deliveryDate", datetime)

    @property
    def delivery_summary(self) -> Optional[str]:
        days = self._delivery_days()
        if days is None:
            return None
        if days < 0:
            return f"Overdue by {format_days(-days)}"
        if days == 0:
            return "Delivery today"
        return f"Delivery in {format_days(days)}"

    def has_field_error(self, name: str) -> bool:
        return bool(self._field_errors.get(name))

    def get_field_errors(self, name: str) -> List[str]:
        return list(self._field_errors.get(name, []))

    def is_field_visible(self, name: str) -> bool:
        if name not in self._field_visibility:
            return False
        return self._field_visibility[name]

    def get_field_value(self, name: str, as_type: Optional[type] = None) -> Any:
        value = self._form_data.get(name)
        if as_type is None or isinstance(value, as_type):
            return value
        if as_type is datetime:
            return parse_datetime(value)
        return None
