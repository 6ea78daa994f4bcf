import json

import pytest

from grocery_match.catalog import Catalog, default_catalog, load_catalog
from grocery_match.match import match_item
from grocery_match.models import CatalogEntry, GroceryItem, RetailerProduct


def _variant(**kw):
    row = {"retailer": "walmart", "title": "Great Value Eggs", "brand": "Great Value", "size": "12 count", "price": 2.99}
    row.update(kw)
    return row


def test_lookup_exact_before_substring():
    catalog = Catalog([
        CatalogEntry(name="almond milk"),
        CatalogEntry(name="milk"),
    ])
    assert catalog.lookup("Milk").name == "milk"
    assert catalog.lookup("almond milk").name == "almond milk"


def test_lookup_substring_and_miss():
    catalog = Catalog([CatalogEntry(name="paper towels")])
    assert catalog.lookup("towels").name == "paper towels"
    assert catalog.lookup("bounty paper towels").name == "paper towels"
    assert catalog.lookup("napkins") is None
    assert catalog.lookup("") is None


def test_catalog_is_read_only():
    catalog = Catalog([CatalogEntry(name="eggs")])
    with pytest.raises(TypeError):
        catalog._entries["milk"] = CatalogEntry(name="milk")


def test_all_products_flattened():
    p1 = RetailerProduct(retailer="walmart", title="A", price=1.0)
    p2 = RetailerProduct(retailer="costco", title="B", price=2.0)
    catalog = Catalog([CatalogEntry(name="a", variants=(p1,)), CatalogEntry(name="b", variants=(p2,))])
    assert catalog.all_products() == (p1, p2)
    assert len(catalog) == 2
    assert "A" in catalog
    assert catalog.names() == ["a", "b"]


def test_from_dict_both_shapes():
    flat = Catalog.from_dict({"eggs": [_variant(stockStatus="low-stock")]})
    nested = Catalog.from_dict({"products": [{"name": "eggs", "variants": [_variant(stock_status="low-stock")]}]})
    assert flat.lookup("eggs").variants == nested.lookup("eggs").variants
    assert flat.lookup("eggs").variants[0].stock_status == "low-stock"


def test_load_catalog(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"eggs": [_variant()]}))
    catalog = load_catalog(path)
    assert catalog.lookup("eggs").variants[0].price == 2.99


def test_load_catalog_missing_file(tmp_path):
    with pytest.raises(RuntimeError, match="not found"):
        load_catalog(tmp_path / "nope.json")


def test_load_catalog_bad_json(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text("{not json")
    with pytest.raises(RuntimeError, match="not valid JSON"):
        load_catalog(path)


def test_load_catalog_bad_entry(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"eggs": [{"title": "no retailer"}]}))
    with pytest.raises(RuntimeError, match="Malformed"):
        load_catalog(path)


def test_default_catalog_loaded_once():
    assert default_catalog() is default_catalog()
    assert default_catalog().lookup("milk") is not None


def test_product_validation():
    with pytest.raises(ValueError):
        RetailerProduct(retailer="walmart", title="x", price=-1.0)
    with pytest.raises(ValueError):
        RetailerProduct(retailer="walmart", title="x", stock_status="gone")


def test_product_to_dict_camel_case():
    d = RetailerProduct.from_dict(_variant(productUrl="https://example.com/p/1")).to_dict()
    assert d["productUrl"] == "https://example.com/p/1"
    assert d["stockStatus"] == "in-stock"


def test_grocery_item_from_dict():
    item = GroceryItem.from_dict({
        "name": " eggs ",
        "quantity": "2",
        "unit": "",
        "brand": None,
        "size": "dozen",
        "notes": ["organic"],
        "retailer": "Whole Foods",
    })
    assert item == GroceryItem(name="eggs", quantity=2, size="dozen", notes=("organic",), retailer="wholefoods")


def test_grocery_item_from_dict_bad_quantity():
    assert GroceryItem.from_dict({"name": "milk", "quantity": "lots"}).quantity == 1
    assert GroceryItem.from_dict({"name": "milk", "quantity": 0}).quantity == 1


def test_blank_entry_name_is_skipped():
    blank = CatalogEntry(name=" ", variants=(RetailerProduct(retailer="walmart", title="X", price=1.0),))
    catalog = Catalog([blank, CatalogEntry(name="eggs")])
    assert len(catalog) == 1
    assert catalog.lookup("caviar") is None
    assert match_item(GroceryItem(name="caviar"), catalog=catalog) == []


def test_load_catalog_unreadable(tmp_path):
    with pytest.raises(RuntimeError, match="Cannot read"):
        load_catalog(tmp_path)

    path = tmp_path / "catalog.json"
    path.write_bytes(b"\xff\xfe{\x00}")
    with pytest.raises(RuntimeError, match="not UTF-8"):
        load_catalog(path)


def test_product_rejects_non_finite_price():
    with pytest.raises(ValueError):
        RetailerProduct(retailer="walmart", title="x", price=float("nan"))
    with pytest.raises(ValueError):
        RetailerProduct(retailer="walmart", title="x", price=float("inf"))


def test_grocery_item_from_dict_infinite_quantity():
    assert GroceryItem.from_dict({"name": "eggs", "quantity": float("inf")}).quantity == 1
