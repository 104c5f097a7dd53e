import pytest
import yaml

from quoter.catalog.loader import DEFAULT_CATALOG_PATH, catalog_from_dict, load_catalog
from quoter.core.errors import CatalogError, UnknownVariantError
from quoter.domain.enums import ProductType


def minimal_doc():
    return {
        "catalogVersion": "7",
        "products": [
            {
                "id": "corp_x", "type": "corporate", "name": "Seats", "basePrice": 10,
                "licenseType": "Standard", "supportLevel": "Basic", "maxUsers": 5,
            },
        ],
        "fields": [],
        "rules": [],
    }


def test_bundled_seed():
    catalog = load_catalog()

    assert catalog.version == "1"
    assert len(catalog.products) == 6
    assert len(catalog.fields) == 11
    assert len(catalog.rules) == 9
    assert {p.type for p in catalog.products} == set(ProductType)
    assert DEFAULT_CATALOG_PATH.is_file()


def test_load_from_path(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(yaml.safe_dump(minimal_doc()), encoding="utf-8")

    catalog = load_catalog(path)
    assert catalog.version == "7"
    assert [p.id for p in catalog.products] == ["corp_x"]
    assert catalog.fields == [] and catalog.rules == []


def test_settings_catalog_path(tmp_path, monkeypatch):
    from quoter.config import get_settings

    path = tmp_path / "other.yaml"
    path.write_text(yaml.safe_dump(minimal_doc()), encoding="utf-8")
    monkeypatch.setenv("QUOTER_CATALOG_PATH", str(path))
    get_settings.cache_clear()
    try:
        assert load_catalog().version == "7"
    finally:
        monkeypatch.delenv("QUOTER_CATALOG_PATH")
        get_settings.cache_clear()


def test_missing_file(tmp_path):
    with pytest.raises(CatalogError):
        load_catalog(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("products: [unclosed\n", encoding="utf-8")
    with pytest.raises(CatalogError):
        load_catalog(path)


def test_envelope_is_checked_against_the_schema():
    doc = minimal_doc()
    del doc["rules"]
    with pytest.raises(CatalogError):
        catalog_from_dict(doc)

    doc = minimal_doc()
    doc["products"][0].pop("id")
    with pytest.raises(CatalogError) as exc:
        catalog_from_dict(doc)
    assert "products/0" in str(exc.value)


def test_duplicate_ids():
    doc = minimal_doc()
    doc["products"].append(dict(doc["products"][0]))
    with pytest.raises(CatalogError) as exc:
        catalog_from_dict(doc)
    assert "corp_x" in str(exc.value)


def test_record_errors_propagate_unchanged():
    doc = minimal_doc()
    doc["products"][0]["type"] = "spaceship"
    with pytest.raises(UnknownVariantError):
        catalog_from_dict(doc)
