from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from quoter.utils.validators import is_numeric

D = Decimal


@dataclass
class ExecutionResult:
    """
    Outcome of one pass.
    - results: rule id -> raw result, in execution order
    - errors: rule id -> message, for rules that raised
    """

    results: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    def add_result(self, rule_id: str, result: Any) -> None:
        self.results[rule_id] = result

    def add_error(self, rule_id: str, message: str) -> None:
        self.errors[rule_id] = message

    def get_result(self, rule_id: str, expected_type: Optional[type] = None) -> Any:
        result = self.results.get(rule_id)
        if expected_type is not None and not isinstance(result, expected_type):
            return None
        return result

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def is_success(self) -> bool:
        return not self.errors

    @property
    def total_rules_processed(self) -> int:
        return len(self.results) + len(self.errors)

    @property
    def validation_errors(self) -> List[str]:
        out: List[str] = []
        for r in self.results.values():
            if isinstance(r, list):
                out.extend(r)
        return out

    @property
    def final_price(self) -> Optional[D]:
        """Last numeric result: the last pricing rule executed wins."""
        for r in reversed(list(self.results.values())):
            if is_numeric(r):
                return r
        return None

    @property
    def field_visibility(self) -> Dict[str, bool]:
        out: Dict[str, bool] = {}
        for r in self.results.values():
            if isinstance(r, dict):
                out.update(r)
        return out

    def __repr__(self) -> str:
        return f"ExecutionResult(results={len(self.results)}, errors={len(self.errors)})"
