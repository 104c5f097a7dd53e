from .context import RuleContext
from .processors import (
    PricingRuleProcessor,
    RuleProcessor,
    ValidationRuleProcessor,
    VisibilityRuleProcessor,
    default_processors,
)
from .result import ExecutionResult
from .rules_engine import RulesEngine

__all__ = [
    "RuleContext",
    "ExecutionResult",
    "RulesEngine",
    "RuleProcessor",
    "PricingRuleProcessor",
    "ValidationRuleProcessor",
    "VisibilityRuleProcessor",
    "default_processors",
]
