from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from .catalog import Catalog, default_catalog
from .log import get_logger
from .models import CatalogEntry, GroceryItem, RetailerProduct

logger = get_logger(__name__)

EXACT_SCORE = 1.0
CONTAINS_SCORE = 0.8
OVERLAP_WEIGHT = 0.6

# Fuzzy candidates must score strictly above this.
FUZZY_THRESHOLD = 0.3

DEFAULT_MAX_RESULTS = 5


def score_similarity(query: str, candidate: str) -> float:
    """Cheap relevance score in [0, 1] between a query and a product title.

    First rule that applies wins: exact match (1.0), one string contains the
    other (0.8), otherwise shared whitespace tokens over the longer token
    list, scaled by 0.6.
    """
    q = query.strip().lower()
    c = candidate.strip().lower()

    if q == c:
        return EXACT_SCORE
    if not q or not c:
        return 0.0
    if q in c or c in q:
        return CONTAINS_SCORE

    q_tokens = q.split()
    c_tokens = c.split()
    c_set = set(c_tokens)
    common = sum(1 for tok in q_tokens if tok in c_set)
    return common / max(len(q_tokens), len(c_tokens)) * OVERLAP_WEIGHT


def filter_or_keep_all(
    products: Sequence[RetailerProduct],
    keep: Callable[[RetailerProduct], bool],
) -> list[RetailerProduct]:
    """Narrow *products* with *keep*, unless that would leave nothing."""
    narrowed = [p for p in products if keep(p)]
    return narrowed if narrowed else list(products)


def _brand_matches(brand: str) -> Callable[[RetailerProduct], bool]:
    wanted = brand.lower()
    return lambda p: wanted in p.brand.lower()


def _size_matches(size: str) -> Callable[[RetailerProduct], bool]:
    wanted = size.lower()

    def keep(p: RetailerProduct) -> bool:
        have = p.size.lower()
        return wanted in have or have in wanted

    return keep


@dataclass(frozen=True)
class DirectMatch:
    """Catalog hit: variants after advisory brand/size filtering, cheapest first."""

    entry: CatalogEntry
    candidates: tuple[RetailerProduct, ...]

    def products(self, limit: int = DEFAULT_MAX_RESULTS) -> list[RetailerProduct]:
        if limit <= 0:
            return []
        return sorted(self.candidates, key=lambda p: p.price)[:limit]


@dataclass(frozen=True)
class FuzzyMatch:
    """Catalog miss: (product, score) pairs above the threshold, best first."""

    scored: tuple[tuple[RetailerProduct, float], ...]

    def products(self, limit: int = DEFAULT_MAX_RESULTS) -> list[RetailerProduct]:
        if limit <= 0:
            return []
        return [p for p, _ in self.scored[:limit]]


def direct_match(item: GroceryItem, entry: CatalogEntry) -> DirectMatch:
    candidates = list(entry.variants)
    if item.brand:
        candidates = filter_or_keep_all(candidates, _brand_matches(item.brand))
    if item.size:
        candidates = filter_or_keep_all(candidates, _size_matches(item.size))
    return DirectMatch(entry=entry, candidates=tuple(candidates))


def fuzzy_match(item: GroceryItem, products: Sequence[RetailerProduct]) -> FuzzyMatch:
    scored = [(p, score_similarity(item.name, p.title)) for p in products]
    kept = [(p, s) for p, s in scored if s > FUZZY_THRESHOLD]
    kept.sort(key=lambda x: -x[1])
    return FuzzyMatch(scored=tuple(kept))


def find_candidates(item: GroceryItem, catalog: Catalog) -> DirectMatch | FuzzyMatch:
    entry = catalog.lookup(item.name)
    if entry is not None:
        logger.debug("catalog hit for %r -> %r", item.name, entry.name)
        return direct_match(item, entry)

    logger.debug("catalog miss for %r, scoring %d products", item.name, len(catalog.all_products()))
    return fuzzy_match(item, catalog.all_products())


def match_item(
    item: GroceryItem,
    max_results: int = DEFAULT_MAX_RESULTS,
    *,
    catalog: Catalog | None = None,
) -> list[RetailerProduct]:
    """Ranked retailer products for one grocery item. No match is an empty list."""
    if not item.name.strip() or max_results <= 0:
        return []
    cat = catalog if catalog is not None else default_catalog()
    return find_candidates(item, cat).products(max_results)
