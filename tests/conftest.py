from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

import pytest
import structlog

from quoter.catalog.loader import load_catalog
from quoter.controllers.quote_coordinator import QuoteCoordinator
from quoter.domain.enums import PricingModificationType
from quoter.domain.products import CorporateProduct, IndustrialProduct, ResidentialProduct
from quoter.domain.rules import PricingRule
from quoter.store.catalog import FieldStore, ProductStore, RuleStore


@pytest.fixture
def anyio_backend():
    # asyncio only, no trio needed
    return "asyncio"


@pytest.fixture
def fixed_now():
    return datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture
def clock(fixed_now):
    return lambda: fixed_now


@pytest.fixture
def catalog():
    # fresh entities per test: fields carry mutable visibility
    return load_catalog()


@pytest.fixture
def product_store():
    return ProductStore()


@pytest.fixture
def field_store():
    return FieldStore()


@pytest.fixture
def rule_store():
    return RuleStore()


@pytest.fixture
def coordinator(clock):
    return QuoteCoordinator(now=clock)


@pytest.fixture
def motor():
    # 380V and no certification: the certification rule applies
    return IndustrialProduct(
        id="ind_test",
        name="Test Motor",
        description="Motor used in tests",
        base_price=Decimal("100"),
        category="Motors",
        voltage=380,
        certification="",
        power_consumption=15.0,
    )


@pytest.fixture
def air_conditioner():
    return ResidentialProduct(
        id="res_test",
        name="Test Air Conditioner",
        description="Split unit used in tests",
        base_price=Decimal("1000"),
        category="Climate",
        color="White",
        warranty=24,
        energy_rating="B",
    )


@pytest.fixture
def erp():
    return CorporateProduct(
        id="corp_test",
        name="Test ERP",
        description="ERP used in tests",
        base_price=Decimal("5000"),
        category="Software",
        license_type="Professional",
        support_level="Advanced",
        max_users=50,
    )


def make_pricing_rule(rule_id, *, priority=2, kind="discount", value="10", pct=True, conditions=None, active=True):
    return PricingRule(
        id=rule_id,
        name=rule_id.replace("_", " ").title(),
        priority=priority,
        is_active=active,
        conditions=conditions or {},
        modification_type=PricingModificationType(kind),
        value=Decimal(value),
        is_percentage=pct,
    )


@pytest.fixture
def pricing_rule():
    return make_pricing_rule


@pytest.fixture
def isolated_logging():
    # setup_logging replaces root handlers; put pytest's back afterwards
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)
    structlog.reset_defaults()
