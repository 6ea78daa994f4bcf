from __future__ import annotations

import re

KNOWN_RETAILERS: frozenset[str] = frozenset({
    # warehouse clubs
    "costco", "samsclub", "bjs",
    # supermarkets
    "walmart", "target", "kroger", "publix", "safeway", "albertsons",
    "heb", "meijer", "wegmans", "gianteagle", "foodlion", "stopandshop",
    "giantfood", "marianos", "harristeeter", "shoprite", "ralphs",
    "fredmeyer", "qfc", "kingsoopers", "smiths", "frys", "dillons",
    "marketbasket", "wincofoods", "lidl",
    # specialty grocers
    "wholefoods", "traderjoes", "aldi", "sprouts", "freshthyme",
    # pharmacies
    "cvs", "walgreens", "riteaid", "duanereade",
    "other",
})

# Retailers the combination search prices a whole basket at.
COMBINATION_RETAILERS: tuple[str, ...] = ("walmart", "walgreens", "marianos", "costco", "samsclub")

_ALIASES: dict[str, str] = {
    "costco": "costco",
    "samsclub": "samsclub",
    "sam'sclub": "samsclub",
    "sams": "samsclub",
    "bjs": "bjs",
    "bj's": "bjs",
    "bjswholesale": "bjs",
    "walmart": "walmart",
    "target": "target",
    "kroger": "kroger",
    "krogers": "kroger",
    "publix": "publix",
    "safeway": "safeway",
    "albertsons": "albertsons",
    "albertson's": "albertsons",
    "heb": "heb",
    "h-e-b": "heb",
    "meijer": "meijer",
    "meijers": "meijer",
    "wegmans": "wegmans",
    "wegman's": "wegmans",
    "gianteagle": "gianteagle",
    "foodlion": "foodlion",
    "stopandshop": "stopandshop",
    "stop&shop": "stopandshop",
    "giantfood": "giantfood",
    "giant": "giantfood",
    "marianos": "marianos",
    "mariano's": "marianos",
    "harristeeter": "harristeeter",
    "harris-teeter": "harristeeter",
    "shoprite": "shoprite",
    "ralphs": "ralphs",
    "ralph's": "ralphs",
    "fredmeyer": "fredmeyer",
    "fred-meyer": "fredmeyer",
    "qfc": "qfc",
    "kingsoopers": "kingsoopers",
    "king-soopers": "kingsoopers",
    "smiths": "smiths",
    "smith's": "smiths",
    "frys": "frys",
    "fry's": "frys",
    "dillons": "dillons",
    "dillon's": "dillons",
    "marketbasket": "marketbasket",
    "market-basket": "marketbasket",
    "wincofoods": "wincofoods",
    "winco": "wincofoods",
    "lidl": "lidl",
    "wholefoods": "wholefoods",
    "whole-foods": "wholefoods",
    "wholefoodsmarket": "wholefoods",
    "traderjoes": "traderjoes",
    "trader-joes": "traderjoes",
    "traderjoe's": "traderjoes",
    "tj's": "traderjoes",
    "tjs": "traderjoes",
    "aldi": "aldi",
    "sprouts": "sprouts",
    "sproutsfarmersmarket": "sprouts",
    "freshthyme": "freshthyme",
    "fresh-thyme": "freshthyme",
    "cvs": "cvs",
    "cvspharmacy": "cvs",
    "walgreens": "walgreens",
    "walgreen's": "walgreens",
    "riteaid": "riteaid",
    "rite-aid": "riteaid",
    "duanereade": "duanereade",
    "duane-reade": "duanereade",
}


def normalize_retailer_name(text: str | None) -> str | None:
    """Map a spoken/typed store name ("Sam's Club", "trader joes") to a retailer id.

    Unknown names come back squashed (lower-case, no spaces) so callers can
    still display them; blank input gives None.
    """
    if not text:
        return None

    squashed = re.sub(r"\s+", "", text.strip().lower())
    if squashed in _ALIASES:
        return _ALIASES[squashed]

    # Try again without hyphens/apostrophes ("Trader Joe's" -> "traderjoes")
    bare = re.sub(r"[\s\-'’]", "", text.lower())
    if bare in _ALIASES:
        return _ALIASES[bare]

    return squashed or None


def is_known_retailer(retailer_id: str | None) -> bool:
    if not retailer_id:
        return False
    return retailer_id.strip().lower() in KNOWN_RETAILERS
