from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from quoter.core.errors import UnknownVariantError
from quoter.core.logging_config import get_logger
from quoter.domain.enums import ProductType
from quoter.domain.products import Product
from quoter.domain.quote import Quote
from quoter.engine.rules_engine import RulesEngine
from quoter.store.catalog import FieldStore, ProductStore, RuleStore
from quoter.utils.calculator import average, money

from .form_controller import FormController

if TYPE_CHECKING:
    from quoter.catalog.loader import Catalog

D = Decimal

log = get_logger("quoter.coordinator")


@dataclass(frozen=True)
class CoordinatorEvent:
    # initialized | product_selected | quote_created | quote_removed | quotes_cleared
    kind: str
    selected_product_id: Optional[str]
    quote_count: int


CoordinatorListener = Callable[[CoordinatorEvent], None]


class QuoteCoordinator:
    """
    Top-level orchestrator: owns the catalog stores, one FormController per
    product variant and the list of committed quotes.
    """

    def __init__(
        self,
        product_store: Optional[ProductStore] = None,
        field_store: Optional[FieldStore] = None,
        rule_store: Optional[RuleStore] = None,
        *,
        engine: Optional[RulesEngine] = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.product_store = product_store if product_store is not None else ProductStore()
        self.field_store = field_store if field_store is not None else FieldStore()
        self.rule_store = rule_store if rule_store is not None else RuleStore()
        self.engine = engine if engine is not None else RulesEngine(self.rule_store)
        self._now = now

        self._controllers: Dict[ProductType, FormController] = {
            pt: FormController(pt, self.field_store, self.engine, now=now) for pt in ProductType
        }

        self._available_products: List[Product] = []
        self._quotes: List[Quote] = []
        self._selected_product: Optional[Product] = None
        self._current: Optional[FormController] = None
        self._last_quote_ms = 0
        self._listeners: List[CoordinatorListener] = []

    # -----------------------------
    # Lifecycle
    # -----------------------------

    async def initialize(self, catalog: Optional["Catalog"] = None) -> None:
        if catalog is None:
            from quoter.catalog.loader import load_catalog

            catalog = load_catalog()

        await self.product_store.save_all(catalog.products)
        await self.field_store.save_all(catalog.fields)
        await self.rule_store.save_all(catalog.rules)
        self._available_products = await self.product_store.find_active()

        problems = await self.engine.validate_all_rules()
        for p in problems:
            log.warning("rule_misconfigured", problem=p)

        log.info(
            "catalog_loaded",
            products=len(catalog.products),
            fields=len(catalog.fields),
            rules=len(catalog.rules),
        )
        self._emit("initialized")

    async def select_product(self, product: Product) -> None:
        if self._selected_product is not None and self._selected_product == product:
            return

        controller = self._controllers.get(product.type)
        if controller is None:
            raise UnknownVariantError("product", product.type)

        self._selected_product = product
        self._current = controller
        await controller.initialize_form(product)
        if self._selected_product is not product:
            # a later selection replaced this one while the form loaded
            return

        log.info("product_selected", product_id=product.id, product_type=product.type.value)
        self._emit("product_selected")

    async def create_quote(self) -> Optional[Quote]:
        controller = self._current
        if controller is None or controller.selected_product is None:
            return None

        if not await controller.validate_form():
            log.info(
                "quote_rejected",
                product_id=controller.selected_product.id,
                errors=len(controller.all_errors),
            )
            return None

        price = await controller.calculate_final_price()
        quote = Quote(
            id=self._next_quote_id(),
            product=controller.selected_product,
            form_data=controller.form_data,
            final_price=price,
            created_at=self._now(),
        )
        self._quotes.append(quote)

        controller.reset_form()
        self._selected_product = None
        self._current = None

        log.info(
            "quote_created",
            quote_id=quote.id,
            product_id=quote.product.id,
            final_price=str(quote.final_price),
        )
        self._emit("quote_created")
        return quote

    def remove_quote(self, quote_id: str) -> bool:
        before = len(self._quotes)
        self._quotes = [q for q in self._quotes if q.id != quote_id]
        removed = len(self._quotes) != before
        if removed:
            self._emit("quote_removed")
        return removed

    def clear_quotes(self) -> None:
        self._quotes = []
        self._emit("quotes_cleared")

    def _next_quote_id(self) -> str:
        # milliseconds since epoch, bumped when two quotes land in the same ms
        ms = int(self._now().timestamp() * 1000)
        if ms <= self._last_quote_ms:
            ms = self._last_quote_ms + 1
        self._last_quote_ms = ms
        return str(ms)

    # -----------------------------
    # Notifications
    # -----------------------------

    def subscribe(self, listener: CoordinatorListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: str) -> None:
        event = CoordinatorEvent(
            kind=kind,
            selected_product_id=self._selected_product.id if self._selected_product else None,
            quote_count=len(self._quotes),
        )
        for listener in list(self._listeners):
            listener(event)

    # -----------------------------
    # Queries
    # -----------------------------

    @property
    def available_products(self) -> List[Product]:
        return list(self._available_products)

    @property
    def quotes(self) -> List[Quote]:
        return list(self._quotes)

    @property
    def selected_product(self) -> Optional[Product]:
        return self._selected_product

    @property
    def current_form_controller(self) -> Optional[FormController]:
        return self._current

    @property
    def has_selected_product(self) -> bool:
        return self._selected_product is not None

    @property
    def can_create_quote(self) -> bool:
        return self._current is not None and self._current.can_submit

    def form_controller_for(self, product_type: ProductType) -> FormController:
        return self._controllers[ProductType(product_type)]

    def is_field_visible(self, name: str) -> bool:
        return self._current is not None and self._current.is_field_visible(name)

    def get_products_by_type(self, product_type: ProductType) -> List[Product]:
        return [p for p in self._available_products if p.type is ProductType(product_type)]

    def get_products_by_category(self, category: str) -> List[Product]:
        return [p for p in self._available_products if p.category == category]

    def search_products(self, term: str) -> List[Product]:
        if not term:
            return list(self._available_products)
        needle = term.lower()
        return [
            p
            for p in self._available_products
            if needle in p.name.lower()
            or needle in p.description.lower()
            or needle in p.category.lower()
        ]

    def get_quote_statistics(self) -> Dict[str, Any]:
        if not self._quotes:
            return {
                "totalQuotes": 0,
                "totalValue": D("0.00"),
                "averageValue": D("0.00"),
                "mostUsedProduct": None,
                "productTypeDistribution": {},
            }

        prices = [q.final_price for q in self._quotes]
        by_product = Counter(q.product.name for q in self._quotes)
        by_type = Counter(q.product.type.display_name for q in self._quotes)

        return {
            "totalQuotes": len(self._quotes),
            "totalValue": money(sum(prices, D("0"))),
            "averageValue": money(average(prices)),
            # ties: the product quoted first wins
            "mostUsedProduct": by_product.most_common(1)[0][0],
            "productTypeDistribution": dict(by_type),
        }

    def export_quotes(self) -> List[Dict[str, Any]]:
        return [q.to_map() for q in self._quotes]

    async def applied_rule_names(self) -> List[str]:
        """Names of the active rules whose conditions hold for the current form."""
        if self._current is None:
            return []
        rules = await self.rule_store.find_applicable(self._current.rule_context())
        return [r.name for r in rules]
