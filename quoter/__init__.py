# quoter: rule-driven quote, form and pricing engine
from .catalog import Catalog, load_catalog
from .controllers import FormController, QuoteCoordinator
from .engine import ExecutionResult, RuleContext, RulesEngine

__version__ = "0.1.0"

__all__ = [
    "Catalog",
    "load_catalog",
    "FormController",
    "QuoteCoordinator",
    "RulesEngine",
    "RuleContext",
    "ExecutionResult",
]
