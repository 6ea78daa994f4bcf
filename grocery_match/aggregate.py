from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from .catalog import Catalog, default_catalog
from .log import get_logger
from .match import DEFAULT_MAX_RESULTS, match_item
from .models import GroceryItem, RetailerProduct
from .retailers import COMBINATION_RETAILERS

logger = get_logger(__name__)

# Wider net when we only care about the cheapest option.
BEST_PRICE_MAX_RESULTS = 10


@dataclass(frozen=True)
class RetailerOption:
    """What one retailer can supply from the list, and for how much."""

    retailer: str
    products: tuple[RetailerProduct, ...]
    total_price: float

    # Item names this retailer had nothing for.
    missing: tuple[str, ...] = field(default_factory=tuple)

    @property
    def covers_all(self) -> bool:
        return not self.missing


def match_list(
    items: Iterable[GroceryItem],
    *,
    catalog: Catalog | None = None,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> dict[str, list[RetailerProduct]]:
    """Match every item. Keyed by item name; a repeated name overwrites the earlier one."""
    cat = catalog if catalog is not None else default_catalog()
    out: dict[str, list[RetailerProduct]] = {}
    for item in items:
        out[item.name] = match_item(item, max_results, catalog=cat)
    return out


def best_price_matches(
    items: Iterable[GroceryItem],
    *,
    catalog: Catalog | None = None,
) -> dict[str, RetailerProduct]:
    cat = catalog if catalog is not None else default_catalog()
    out: dict[str, RetailerProduct] = {}
    for item in items:
        matches = match_item(item, BEST_PRICE_MAX_RESULTS, catalog=cat)
        if not matches:
            continue
        # min() keeps the first of equally cheap products
        out[item.name] = min(matches, key=lambda p: p.price)
    return out


def calculate_total_price(products: Iterable[RetailerProduct]) -> float:
    """Plain sum of prices; quantities are the caller's business."""
    return sum((p.price for p in products), 0.0)


def group_matches_by_retailer(
    match_map: Mapping[str, Sequence[RetailerProduct]],
) -> dict[str, list[RetailerProduct]]:
    grouped: dict[str, list[RetailerProduct]] = {}
    for products in match_map.values():
        for p in products:
            grouped.setdefault(p.retailer, []).append(p)
    return grouped


def find_best_retailer_combination(
    items: Sequence[GroceryItem],
    *,
    catalog: Catalog | None = None,
    retailers: Sequence[str] | None = None,
    require_full_coverage: bool = False,
) -> list[RetailerOption]:
    """Rank retailers by what the list would cost there, cheapest first.

    A retailer is priced on the items it actually carries, so by default a
    cheap retailer can rank first while missing items; check ``missing`` /
    ``covers_all``, or pass ``require_full_coverage=True`` to drop those.
    Retailers that carry none of the items are never returned.
    """
    match_map = match_list(items, catalog=catalog)
    stores = tuple(retailers) if retailers is not None else COMBINATION_RETAILERS

    options: list[RetailerOption] = []
    for retailer in stores:
        products: list[RetailerProduct] = []
        missing: list[str] = []
        for name, matches in match_map.items():
            found = next((m for m in matches if m.retailer == retailer), None)
            if found is None:
                missing.append(name)
            else:
                products.append(found)

        if not products:
            continue
        if require_full_coverage and missing:
            logger.debug("dropping %s: missing %s", retailer, ", ".join(missing))
            continue

        options.append(
            RetailerOption(
                retailer=retailer,
                products=tuple(products),
                total_price=calculate_total_price(products),
                missing=tuple(missing),
            )
        )

    options.sort(key=lambda o: o.total_price)
    return options
