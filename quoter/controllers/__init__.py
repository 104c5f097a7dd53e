from .form_controller import (
    GLOBAL_ERRORS,
    FormController,
    FormEvent,
    FormSnapshot,
    FormState,
    shared_fields,
)
from .quote_coordinator import CoordinatorEvent, QuoteCoordinator

__all__ = [
    "GLOBAL_ERRORS",
    "FormController",
    "FormEvent",
    "FormSnapshot",
    "FormState",
    "shared_fields",
    "QuoteCoordinator",
    "CoordinatorEvent",
]
