from .errors import (  # noqa
    CatalogError,
    ConfigurationError,
    MalformedRecordError,
    QuoterError,
    UnknownVariantError,
    UnsupportedRuleTypeError,
)
