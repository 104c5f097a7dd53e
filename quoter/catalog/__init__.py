from .factories import BusinessRuleFactory, EntityFactory, FormFieldFactory, ProductFactory
from .loader import DEFAULT_CATALOG_PATH, Catalog, catalog_from_dict, load_catalog

__all__ = [
    "Catalog",
    "catalog_from_dict",
    "load_catalog",
    "DEFAULT_CATALOG_PATH",
    "EntityFactory",
    "ProductFactory",
    "FormFieldFactory",
    "BusinessRuleFactory",
]
