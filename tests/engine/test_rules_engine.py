from decimal import Decimal

import pytest

from quoter.core.errors import UnsupportedRuleTypeError
from quoter.domain.enums import RuleType, ValidationType
from quoter.domain.rules import BusinessRule, ValidationRule, VisibilityRule
from quoter.engine.context import RuleContext
from quoter.engine.processors import PricingRuleProcessor, RuleProcessor
from quoter.engine.rules_engine import RulesEngine

pytestmark = pytest.mark.anyio

D = Decimal


class BoomRule(BusinessRule):
    """A rule whose execution always fails."""

    def __init__(self, rule_id, priority=2):
        super().__init__(id=rule_id, name="Boom", priority=priority)
        self.type = RuleType.PRICING

    def execute(self, context):
        raise RuntimeError("kaboom")


class BoomProcessor(RuleProcessor):
    rule_class = BoomRule


async def test_volume_discount_scenario(rule_store, pricing_rule):
    await rule_store.save(
        pricing_rule("volume_discount", value="15", conditions={"quantity": {"operator": ">=", "value": 50}})
    )
    engine = RulesEngine(rule_store)

    ctx = RuleContext(base_price=D("100"), quantity=50, current_price=D("100") * 50)
    result = await engine.process_rules(ctx)

    assert result.final_price == D("4250.00")
    assert ctx.current_price == D("4250.00")


async def test_urgency_fee_scenario(rule_store, pricing_rule):
    await rule_store.save(
        pricing_rule(
            "urgency_fee", kind="surcharge", value="20",
            conditions={"deliveryDays": {"operator": "<", "value": 7}},
        )
    )
    engine = RulesEngine(rule_store)

    result = await engine.process_rules_by_type(
        RuleType.PRICING, RuleContext(current_price=D("1000"), delivery_days=5)
    )
    assert result.final_price == D("1200.00")


async def test_priority_order_is_a_left_fold(rule_store, pricing_rule):
    # saved low first: order must come from priority, not insertion
    await rule_store.save(pricing_rule("fixed_fee", priority=1, kind="surcharge", value="100", pct=False))
    await rule_store.save(pricing_rule("double", priority=3, kind="multiplier", value="2", pct=False))
    engine = RulesEngine(rule_store)

    result = await engine.process_rules(RuleContext(current_price=D("1000")))

    assert list(result.results) == ["double", "fixed_fee"]
    assert result.results["double"] == D("2000")
    assert result.final_price == D("2100")


async def test_equal_priorities_keep_store_order(rule_store, pricing_rule):
    await rule_store.save(pricing_rule("first", priority=2, kind="surcharge", value="10", pct=False))
    await rule_store.save(pricing_rule("second", priority=2, kind="multiplier", value="3", pct=False))
    engine = RulesEngine(rule_store)

    result = await engine.process_rules(RuleContext(current_price=D("10")))
    assert list(result.results) == ["first", "second"]
    assert result.final_price == D("60")


async def test_inactive_and_non_matching_rules_are_not_evaluated(rule_store, pricing_rule):
    await rule_store.save(pricing_rule("off", active=False))
    await rule_store.save(pricing_rule("big_orders", conditions={"quantity": {"operator": ">=", "value": 50}}))
    engine = RulesEngine(rule_store)

    result = await engine.process_rules(RuleContext(current_price=D("100"), quantity=10))

    assert result.results == {}
    assert result.final_price is None
    assert result.total_rules_processed == 0


async def test_failed_rule_is_recorded_and_the_pass_continues(rule_store, pricing_rule):
    await rule_store.save(pricing_rule("bad_discount", priority=3, value="150"))
    await rule_store.save(pricing_rule("fee", priority=1, kind="surcharge", value="10", pct=False))
    engine = RulesEngine(rule_store)

    result = await engine.process_rules(RuleContext(current_price=D("100")))

    assert result.has_errors
    assert not result.is_success
    assert result.errors["bad_discount"].startswith("Error processing rule Bad Discount:")
    assert result.final_price == D("110")
    assert result.total_rules_processed == 2


async def test_folding_by_rule_type(rule_store):
    await rule_store.save_all([
        ValidationRule(
            id="cert", name="Cert", priority=4,
            target_fields=["certification"], validation_type=ValidationType.REQUIRED,
        ),
        VisibilityRule(id="show", name="Show", priority=1, target_fields=["voltage"], show_fields=True),
        VisibilityRule(id="hide", name="Hide", priority=0, target_fields=["voltage", "color"], show_fields=False),
    ])
    engine = RulesEngine(rule_store)

    ctx = RuleContext(values={"certification": ""}, validation_errors=["earlier"])
    result = await engine.process_rules(ctx)

    assert ctx.validation_errors == ["earlier", "certification is required"]
    assert result.validation_errors == ["certification is required"]
    # last write wins
    assert result.field_visibility == {"voltage": False, "color": False}
    assert ctx.field_visibility == {"voltage": False, "color": False}


async def test_later_rule_sees_earlier_visibility(rule_store, pricing_rule):
    await rule_store.save(VisibilityRule(id="show", name="Show", priority=5, target_fields=["gift"], show_fields=True))
    engine = RulesEngine(rule_store)
    ctx = RuleContext()
    await engine.process_rules(ctx)

    late = pricing_rule("gift_wrap", priority=1, kind="fixed", value="7", pct=False,
                        conditions={"fieldVisibility": {"gift": True}})
    assert late.should_apply(ctx)


async def test_mapping_context_is_accepted(rule_store, pricing_rule):
    await rule_store.save(pricing_rule("p", value="50"))
    engine = RulesEngine(rule_store)

    result = await engine.process_rules({"currentPrice": D("10")})
    assert result.final_price == D("5")


async def test_rule_without_processor_is_fatal(rule_store):
    await rule_store.save(BoomRule("boom"))
    engine = RulesEngine(rule_store)

    with pytest.raises(UnsupportedRuleTypeError):
        await engine.process_rules(RuleContext())


async def test_add_processor_enables_custom_rules(rule_store):
    await rule_store.save(BoomRule("boom"))
    engine = RulesEngine(rule_store)
    engine.add_processor(BoomProcessor())

    result = await engine.process_rules(RuleContext())
    assert result.errors == {"boom": "Error processing rule Boom: kaboom"}


async def test_remove_processor(rule_store, pricing_rule):
    await rule_store.save(pricing_rule("p"))
    engine = RulesEngine(rule_store)
    engine.remove_processor(PricingRuleProcessor)

    assert not any(isinstance(p, PricingRuleProcessor) for p in engine.processors)
    with pytest.raises(UnsupportedRuleTypeError):
        await engine.process_rules(RuleContext(current_price=D("1")))


async def test_validate_all_rules_checks_active_rules_only(rule_store, pricing_rule):
    await rule_store.save_all([
        pricing_rule("neg", value="-5", pct=False),
        pricing_rule("neg_but_off", value="-5", pct=False, active=False),
        VisibilityRule(id="empty", name="Empty", target_fields=[], show_fields=True),
    ])
    engine = RulesEngine(rule_store)

    assert await engine.validate_all_rules() == [
        "Rule 'neg': value cannot be negative",
        "Rule 'empty': visibility rule needs at least one target field",
    ]
