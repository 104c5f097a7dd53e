from .catalog import FieldStore, ProductStore, RuleStore
from .memory import InMemoryStore, matches_criteria

__all__ = [
    "InMemoryStore",
    "matches_criteria",
    "ProductStore",
    "FieldStore",
    "RuleStore",
]
