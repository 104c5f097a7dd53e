# quoter/core/errors.py
from __future__ import annotations

from typing import Any, Dict, List, Optional


class QuoterError(Exception):
    """Base class for everything the quote engine raises on purpose."""


class ConfigurationError(QuoterError):
    """
    Fatal: the catalog or the engine wiring is wrong.
    Never retried, never turned into user-facing validation messages.
    """


class UnknownVariantError(ConfigurationError):
    def __init__(self, family: str, discriminant: Any):
        self.family = str(family)
        self.discriminant = discriminant
        super().__init__(f"Unknown {self.family} type: {discriminant!r}")


class UnsupportedRuleTypeError(ConfigurationError):
    def __init__(self, rule_id: str, rule_type: Any):
        self.rule_id = str(rule_id)
        self.rule_type = rule_type
        super().__init__(
            f"No processor registered for rule '{self.rule_id}' of type {rule_type!r}"
        )


class MalformedRecordError(ConfigurationError):
    """
    A seed record could not be turned into an entity.
    `problems` keeps the individual messages (missing keys, bad values).
    """

    def __init__(
        self,
        family: str,
        problems: List[str],
        record: Optional[Dict[str, Any]] = None,
    ):
        self.family = str(family)
        self.problems = list(problems)
        self.record = dict(record or {})
        record_id = self.record.get("id", "?")
        super().__init__(
            f"Invalid {self.family} record '{record_id}': {', '.join(self.problems)}"
        )


class CatalogError(ConfigurationError):
    """The catalog document itself (envelope) is invalid or missing."""
