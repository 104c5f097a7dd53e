from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from jsonschema import ValidationError, validate

from quoter.config import get_settings
from quoter.core.errors import CatalogError
from quoter.core.logging_config import get_logger
from quoter.domain.fields import FormField
from quoter.domain.products import Product
from quoter.domain.rules import BusinessRule

from .factories import BusinessRuleFactory, FormFieldFactory, ProductFactory

log = get_logger("quoter.catalog")

CATALOG_DIR = Path(__file__).resolve().parent
DEFAULT_CATALOG_PATH = CATALOG_DIR / "data" / "catalog.yaml"
SCHEMA_PATH = CATALOG_DIR / "schemas" / "catalog.schema.json"


@dataclass(frozen=True)
class Catalog:
    version: str
    products: List[Product] = field(default_factory=list)
    fields: List[FormField] = field(default_factory=list)
    rules: List[BusinessRule] = field(default_factory=list)


@lru_cache(maxsize=1)
def _schema() -> Dict[str, Any]:
    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)


def _check_unique(kind: str, ids: List[str]) -> None:
    seen, dups = set(), []
    for i in ids:
        if i in seen and i not in dups:
            dups.append(i)
        seen.add(i)
    if dups:
        raise CatalogError(f"Duplicate {kind} ids in catalog: {dups}")


def catalog_from_dict(doc: Any) -> Catalog:
    """
    Validate the document envelope against the JSON schema, then build every
    record through its factory. Factory errors (unknown type, malformed record)
    propagate unchanged.
    """
    try:
        validate(instance=doc, schema=_schema())
    except ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise CatalogError(f"Catalog document is invalid at {where}: {e.message}") from e

    for kind in ("products", "fields", "rules"):
        _check_unique(kind[:-1], [str(r["id"]) for r in doc[kind]])

    return Catalog(
        version=str(doc["catalogVersion"]),
        products=ProductFactory().create_many(doc["products"]),
        fields=FormFieldFactory().create_many(doc["fields"]),
        rules=BusinessRuleFactory().create_many(doc["rules"]),
    )


def load_catalog(path: Optional[Union[str, Path]] = None) -> Catalog:
    """Read a YAML catalog; `Settings.catalog_path` or the bundled seed when no path is given."""
    catalog_path = Path(path or get_settings().catalog_path or DEFAULT_CATALOG_PATH)
    if not catalog_path.is_file():
        raise CatalogError(f"Catalog file not found: {catalog_path}")

    try:
        with catalog_path.open("r", encoding="utf-8") as f:
            doc = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogError(f"Catalog file is not valid YAML: {catalog_path}: {e}") from e

    catalog = catalog_from_dict(doc)
    log.info(
        "catalog_read",
        path=str(catalog_path),
        version=catalog.version,
        products=len(catalog.products),
        fields=len(catalog.fields),
        rules=len(catalog.rules),
    )
    return catalog
