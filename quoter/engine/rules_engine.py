from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Type, Union

from quoter.core.errors import UnsupportedRuleTypeError
from quoter.core.logging_config import get_logger
from quoter.domain.enums import RuleType
from quoter.domain.rules import BusinessRule
from quoter.store.catalog import RuleStore
from quoter.utils.validators import is_numeric

from .context import RuleContext
from .processors import RuleProcessor, default_processors
from .result import ExecutionResult

log = get_logger("quoter.engine")


class RulesEngine:
    """
    Runs rules from a RuleStore against a RuleContext.

    A pass is a left fold: rules run highest priority first and each result is
    written back into the context before the next rule is evaluated, so a later
    rule prices on top of an earlier one. A rule that raises is recorded in
    `ExecutionResult.errors` and the pass goes on; nothing is rolled back.
    """

    def __init__(self, rule_store: RuleStore, processors: Optional[Iterable[RuleProcessor]] = None):
        self.rule_store = rule_store
        self._processors: List[RuleProcessor] = (
            list(processors) if processors is not None else default_processors()
        )

    # -----------------------------
    # Passes
    # -----------------------------

    async def process_rules(self, context: Union[RuleContext, Mapping[str, Any]]) -> ExecutionResult:
        ctx = _as_context(context)
        rules = await self.rule_store.find_applicable(ctx)
        return self._run(rules, ctx, scope="all")

    async def process_rules_by_type(
        self, rule_type: RuleType, context: Union[RuleContext, Mapping[str, Any]]
    ) -> ExecutionResult:
        ctx = _as_context(context)
        rules = [r for r in await self.rule_store.find_by_type(rule_type) if r.should_apply(ctx)]
        return self._run(rules, ctx, scope=RuleType(rule_type).value)

    def _run(self, rules: List[BusinessRule], ctx: RuleContext, *, scope: str) -> ExecutionResult:
        # sorted() is stable: equal priorities keep store order
        ordered = sorted(rules, key=lambda r: r.priority, reverse=True)
        result = ExecutionResult()

        for rule in ordered:
            processor = self._processor_for(rule)
            try:
                outcome = processor.process(rule, ctx)
            except Exception as e:
                log.warning("rule_failed", rule_id=rule.id, rule_type=getattr(rule.type, "value", rule.type), error=str(e))
                result.add_error(rule.id, f"Error processing rule {rule.name}: {e}")
                continue

            result.add_result(rule.id, outcome)
            _fold(ctx, rule, outcome)

        log.debug(
            "rules_pass_completed",
            scope=scope,
            processed=result.total_rules_processed,
            errors=len(result.errors),
        )
        return result

    # -----------------------------
    # Processors
    # -----------------------------

    def _processor_for(self, rule: BusinessRule) -> RuleProcessor:
        for p in self._processors:
            if p.can_process(rule):
                return p
        raise UnsupportedRuleTypeError(rule.id, rule.type)

    def add_processor(self, processor: RuleProcessor) -> None:
        self._processors.append(processor)

    def remove_processor(self, processor_cls: Type[RuleProcessor]) -> None:
        self._processors = [p for p in self._processors if type(p) is not processor_cls]

    @property
    def processors(self) -> List[RuleProcessor]:
        return list(self._processors)

    # -----------------------------
    # Configuration check
    # -----------------------------

    async def validate_all_rules(self) -> List[str]:
        errors: List[str] = []
        for rule in await self.rule_store.find_active():
            errors.extend(rule.validate_rule())
        if errors:
            log.warning("rule_configuration_problems", count=len(errors))
        return errors


def _as_context(context: Union[RuleContext, Mapping[str, Any]]) -> RuleContext:
    if isinstance(context, RuleContext):
        return context
    return RuleContext.from_mapping(context)


def _fold(ctx: RuleContext, rule: BusinessRule, outcome: Any) -> None:
    if rule.type is RuleType.PRICING and is_numeric(outcome):
        ctx.current_price = outcome
    elif rule.type is RuleType.VALIDATION and isinstance(outcome, list):
        ctx.validation_errors.extend(outcome)
    elif rule.type is RuleType.VISIBILITY and isinstance(outcome, dict):
        ctx.field_visibility.update(outcome)
