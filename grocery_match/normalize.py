from __future__ import annotations

import re

from .models import GroceryItem
from .retailers import normalize_retailer_name

_FRACTION_RE = re.compile(r"^(?:(\d+)\s+)?(\d+)\/(\d+)$")

_WORD_NUMBERS: dict[str, int] = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
}

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")

_UNIT_ALIASES: dict[str, str] = {
    "gallon": "gallon",
    "gallons": "gallon",
    "gal": "gallon",
    "carton": "carton",
    "cartons": "carton",
    "bottle": "bottle",
    "bottles": "bottle",
    "box": "box",
    "boxes": "box",
    "bag": "bag",
    "bags": "bag",
    "can": "can",
    "cans": "can",
    "jar": "jar",
    "jars": "jar",
    "loaf": "loaf",
    "loaves": "loaf",
    "pack": "pack",
    "packs": "pack",
    "dozen": "dozen",
    "oz": "oz",
    "ounce": "oz",
    "ounces": "oz",
    "lb": "lb",
    "lbs": "lb",
    "pound": "lb",
    "pounds": "lb",
    "g": "g",
    "gram": "g",
    "grams": "g",
    "kg": "kg",
    "l": "l",
    "liter": "l",
    "liters": "l",
}

# Units that describe the package size rather than a count of things.
_SIZE_UNITS = {"gallon", "dozen", "oz", "lb", "g", "kg", "l"}

_NOTE_WORDS = (
    "organic",
    "unsalted",
    "salted",
    "low-fat",
    "fat-free",
    "gluten-free",
    "sugar-free",
    "whole",
    "skim",
    "cage-free",
    "unsweetened",
)

_RETAILER_RE = re.compile(r"\s+(?:from|at|get at|buy at)\s+(.+)$", re.IGNORECASE)

_SPLIT_RE = re.compile(r"\s*(?:[,;\n]|\band\b)\s*", re.IGNORECASE)


def parse_quantity_token(tok: str) -> float | None:
    """Parse tokens like '2', '1/2', '2 1/2' or 'two'."""
    tok = tok.strip()
    if not tok:
        return None

    # plain digits only; float() would also take "inf" and "nan"
    if _NUMBER_RE.fullmatch(tok):
        return float(tok)

    m = _FRACTION_RE.match(tok)
    if m:
        whole, num, den = m.groups()
        if int(den) == 0:
            return None
        val = int(num) / int(den)
        if whole:
            val += int(whole)
        return float(val)

    word = _WORD_NUMBERS.get(tok.lower())
    if word is not None:
        return float(word)

    unicode_map = {
        "½": 0.5,
        "¼": 0.25,
        "¾": 0.75,
    }
    return unicode_map.get(tok)


def _leading_amount(text: str) -> tuple[float | None, str]:
    parts = text.strip().split(None, 1)
    if not parts:
        return None, ""
    amount = parse_quantity_token(parts[0])
    if amount is None:
        return None, text.strip()
    return amount, parts[1] if len(parts) > 1 else ""


def extract_quantity(text: str) -> tuple[int, str]:
    """Split a leading count ("3 apples", "two milks") off *text*; defaults to 1.

    Fractions ("1/2 gallon") are not counts and stay in the text.
    """
    amount, rest = _leading_amount(text)
    if amount is None or amount < 1 or amount != int(amount):
        return 1, text.strip()
    return int(amount), rest


def _split_retailer(text: str) -> tuple[str, str | None]:
    m = _RETAILER_RE.search(text)
    if not m:
        return text, None
    return text[: m.start()].strip(), normalize_retailer_name(m.group(1))


def _extract_notes(text: str) -> tuple[str, tuple[str, ...]]:
    notes: list[str] = []
    for word in _NOTE_WORDS:
        pattern = re.compile(r"\b" + re.escape(word) + r"\b", re.IGNORECASE)
        if pattern.search(text):
            notes.append(word)
            text = pattern.sub("", text)
    return re.sub(r"\s{2,}", " ", text).strip(), tuple(notes)


def parse_line(raw: str) -> GroceryItem:
    """Best-effort structure for one typed line, without a language model.

    "2 gallons of organic milk from costco" ->
    name="milk", quantity=2, unit="gallon", size="gallon",
    notes=("organic",), retailer="costco".
    """
    text = raw.strip().rstrip(".")
    text, retailer = _split_retailer(text)

    unit: str | None = None
    size: str | None = None

    quantity, text = extract_quantity(text)

    # Whatever amount is still in front ("1/2 gallon milk") is part of the size
    amount, rest = _leading_amount(text)
    if amount is not None:
        size = text.split()[0]
        text = rest

    tokens = text.split()
    if tokens and tokens[0].lower() in ("a", "an"):
        tokens = tokens[1:]

    if tokens and tokens[0].lower() in _UNIT_ALIASES:
        unit = _UNIT_ALIASES[tokens[0].lower()]
        tokens = tokens[1:]
        if unit in _SIZE_UNITS:
            size = f"{size} {unit}" if size else unit
        if tokens and tokens[0].lower() == "of":
            tokens = tokens[1:]

    name, notes = _extract_notes(" ".join(tokens))

    return GroceryItem(
        name=name.lower(),
        quantity=quantity,
        unit=unit,
        size=size,
        notes=notes,
        retailer=retailer,
    )


def parse_text(text: str) -> list[GroceryItem]:
    """Split free text on commas, semicolons, newlines and "and", then parse each part."""
    items: list[GroceryItem] = []
    for part in _SPLIT_RE.split(text):
        if not part.strip():
            continue
        item = parse_line(part)
        if item.name:
            items.append(item)
    return items
