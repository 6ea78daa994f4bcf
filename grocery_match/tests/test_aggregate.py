from grocery_match.aggregate import (
    best_price_matches,
    calculate_total_price,
    find_best_retailer_combination,
    group_matches_by_retailer,
    match_list,
)
from grocery_match.catalog import Catalog
from grocery_match.models import CatalogEntry, GroceryItem, RetailerProduct


def _prod(title, price, retailer, brand=""):
    return RetailerProduct(retailer=retailer, title=title, brand=brand, price=price)


def _catalog():
    return Catalog([
        CatalogEntry(
            name="eggs",
            variants=(
                _prod("Walmart Eggs", 2.99, "walmart"),
                _prod("Costco Eggs", 5.49, "costco"),
            ),
        ),
        CatalogEntry(
            name="milk",
            variants=(
                _prod("Walmart Milk", 3.18, "walmart"),
                _prod("Costco Milk", 4.99, "costco"),
                _prod("Walgreens Milk", 2.50, "walgreens"),
            ),
        ),
    ])


def test_match_list_preserves_order():
    items = [GroceryItem(name="milk"), GroceryItem(name="eggs"), GroceryItem(name="caviar")]
    result = match_list(items, catalog=_catalog())
    assert list(result) == ["milk", "eggs", "caviar"]
    assert result["caviar"] == []
    assert [p.price for p in result["milk"]] == [2.50, 3.18, 4.99]


def test_match_list_last_duplicate_wins():
    catalog = Catalog([
        CatalogEntry(
            name="eggs",
            variants=(_prod("A", 1.0, "walmart", brand="A"), _prod("B", 2.0, "costco", brand="B")),
        )
    ])
    items = [GroceryItem(name="eggs", brand="B"), GroceryItem(name="eggs")]
    result = match_list(items, catalog=catalog)
    assert len(result) == 1
    assert [p.title for p in result["eggs"]] == ["A", "B"]


def test_best_price_matches_skips_unmatched():
    items = [GroceryItem(name="eggs"), GroceryItem(name="milk"), GroceryItem(name="caviar")]
    best = best_price_matches(items, catalog=_catalog())
    assert set(best) == {"eggs", "milk"}
    assert best["eggs"].price == 2.99
    assert best["milk"].retailer == "walgreens"


def test_total_price():
    assert calculate_total_price([]) == 0
    products = [_prod("a", 1.25, "walmart"), _prod("b", 2.50, "costco")]
    assert abs(calculate_total_price(products) - 3.75) < 1e-9


def test_group_by_retailer():
    assert group_matches_by_retailer({}) == {}

    match_map = match_list([GroceryItem(name="eggs"), GroceryItem(name="milk")], catalog=_catalog())
    grouped = group_matches_by_retailer(match_map)
    assert [p.title for p in grouped["walmart"]] == ["Walmart Eggs", "Walmart Milk"]
    assert [p.title for p in grouped["costco"]] == ["Costco Eggs", "Costco Milk"]
    assert [p.title for p in grouped["walgreens"]] == ["Walgreens Milk"]


def test_best_retailer_cheaper_store_first():
    items = [GroceryItem(name="eggs"), GroceryItem(name="milk")]
    options = find_best_retailer_combination(items, catalog=_catalog(), retailers=["costco", "walmart"])
    assert [o.retailer for o in options] == ["walmart", "costco"]
    assert abs(options[0].total_price - (2.99 + 3.18)) < 1e-9
    assert options[0].covers_all


def test_best_retailer_partial_coverage_reported():
    items = [GroceryItem(name="eggs"), GroceryItem(name="milk")]
    options = find_best_retailer_combination(items, catalog=_catalog())
    # walgreens only carries milk, so it looks cheapest
    assert options[0].retailer == "walgreens"
    assert options[0].missing == ("eggs",)
    assert not options[0].covers_all
    # retailers with nothing are left out
    assert "marianos" not in [o.retailer for o in options]


def test_best_retailer_full_coverage():
    items = [GroceryItem(name="eggs"), GroceryItem(name="milk")]
    options = find_best_retailer_combination(items, catalog=_catalog(), require_full_coverage=True)
    assert [o.retailer for o in options] == ["walmart", "costco"]


def test_best_retailer_empty_list():
    assert find_best_retailer_combination([], catalog=_catalog()) == []
