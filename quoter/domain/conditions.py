"""
Condition evaluation shared by rule matching and store criteria.

A condition is either a literal (equality) or a mapping
{"operator": "<op>", "value": <literal>}.
"""
from __future__ import annotations

import operator as op
from typing import Any, Callable, Dict, Mapping

from quoter.utils.validators import is_numeric

NUMERIC_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    ">=": op.ge,
    "<=": op.le,
    ">": op.gt,
    "<": op.lt,
}

EQUALITY_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": op.eq,
    "!=": op.ne,
}

STRING_OPERATORS: Dict[str, Callable[[str, str], bool]] = {
    "contains": lambda actual, expected: expected in actual,
    "startsWith": lambda actual, expected: actual.startswith(expected),
    "endsWith": lambda actual, expected: actual.endswith(expected),
}


def is_operator_condition(condition: Any) -> bool:
    return isinstance(condition, Mapping) and "operator" in condition


def compare(actual: Any, operator: str, expected: Any) -> bool:
    """
    Numeric operators fail safe: a non-numeric side is a non-match, never an error.
    Unknown operators fall back to equality.
    """
    if operator in NUMERIC_OPERATORS:
        if not (is_numeric(actual) and is_numeric(expected)):
            return False
        return NUMERIC_OPERATORS[operator](actual, expected)

    if operator in EQUALITY_OPERATORS:
        return EQUALITY_OPERATORS[operator](actual, expected)

    if operator in STRING_OPERATORS:
        if actual is None or expected is None:
            return False
        return STRING_OPERATORS[operator](str(actual), str(expected))

    return actual == expected


def matches(actual: Any, condition: Any) -> bool:
    """
    Rule conditions and store criteria share these semantics.
    A missing value (None) never matches an operator condition.
    """
    if is_operator_condition(condition):
        if actual is None:
            return False
        return compare(actual, str(condition.get("operator")), condition.get("value"))
    return actual == condition
