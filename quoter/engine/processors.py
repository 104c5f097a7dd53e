from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Type

from quoter.domain.rules import BusinessRule, PricingRule, ValidationRule, VisibilityRule

if TYPE_CHECKING:
    from .context import RuleContext


class RuleProcessor:
    """
    Executes one kind of rule. Dispatch is a capability check: the engine
    uses the first processor whose `can_process(rule)` is true.
    """

    rule_class: Type[BusinessRule] = BusinessRule

    def can_process(self, rule: BusinessRule) -> bool:
        return isinstance(rule, self.rule_class)

    def process(self, rule: BusinessRule, context: "RuleContext") -> Any:
        if not self.can_process(rule):
            raise TypeError(
                f"{type(self).__name__} cannot process {type(rule).__name__} '{rule.id}'"
            )
        return rule.execute(context)


# Registry of the processors every engine starts with
processor_registry: List[Type[RuleProcessor]] = []


def register(processor_cls: Type[RuleProcessor]) -> Type[RuleProcessor]:
    """
    Decorator to register a default processor.
    Fails fast when a rule class already has one.
    """
    for existing in processor_registry:
        if existing.rule_class is processor_cls.rule_class and existing is not processor_cls:
            raise ValueError(
                f"Duplicate processor for {processor_cls.rule_class.__name__}: "
                f"{existing.__name__} vs {processor_cls.__name__}"
            )
    if processor_cls not in processor_registry:
        processor_registry.append(processor_cls)
    return processor_cls


@register
class PricingRuleProcessor(RuleProcessor):
    rule_class = PricingRule


@register
class ValidationRuleProcessor(RuleProcessor):
    rule_class = ValidationRule


@register
class VisibilityRuleProcessor(RuleProcessor):
    rule_class = VisibilityRule


def default_processors() -> List[RuleProcessor]:
    return [cls() for cls in processor_registry]
