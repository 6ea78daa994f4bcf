from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from .retailers import normalize_retailer_name

IN_STOCK = "in-stock"
LOW_STOCK = "low-stock"
OUT_OF_STOCK = "out-of-stock"

STOCK_STATUSES = (IN_STOCK, LOW_STOCK, OUT_OF_STOCK)


def _opt_str(val: Any) -> str | None:
    if val is None:
        return None
    s = str(val).strip()
    return s or None


@dataclass(frozen=True)
class GroceryItem:
    """One thing the user wants to buy, as parsed from free text."""

    name: str
    quantity: int = 1

    # Unit as written, e.g. "gallon", "carton".
    unit: str | None = None

    # Brand/size are hints for the matcher, not hard filters.
    brand: str | None = None
    size: str | None = None

    # Qualifiers such as "organic" or "unsalted".
    notes: tuple[str, ...] = ()

    # Normalised retailer id when the user said "from costco" etc.
    retailer: str | None = None

    @staticmethod
    def from_dict(row: dict[str, Any]) -> "GroceryItem":
        qty = row.get("quantity")
        try:
            quantity = max(1, int(qty)) if qty is not None else 1
        except (TypeError, ValueError, OverflowError):
            quantity = 1

        notes = row.get("notes") or ()
        if isinstance(notes, str):
            notes = [n.strip() for n in notes.split(",")]

        return GroceryItem(
            name=str(row.get("name") or "").strip(),
            quantity=quantity,
            unit=_opt_str(row.get("unit")),
            brand=_opt_str(row.get("brand")),
            size=_opt_str(row.get("size")),
            notes=tuple(str(n) for n in notes if str(n).strip()),
            retailer=normalize_retailer_name(_opt_str(row.get("retailer"))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "brand": self.brand,
            "size": self.size,
            "notes": list(self.notes),
            "retailer": self.retailer,
        }


@dataclass(frozen=True)
class RetailerProduct:
    """A single retailer-specific product offering."""

    retailer: str
    title: str
    brand: str = ""
    size: str = ""
    price: float = 0.0              # USD
    stock_status: str = IN_STOCK
    product_url: str = ""
    image_url: str = ""

    def __post_init__(self) -> None:
        if not math.isfinite(self.price) or self.price < 0:
            raise ValueError(f"Invalid price for {self.title!r}: {self.price}")
        if self.stock_status not in STOCK_STATUSES:
            raise ValueError(f"Unknown stock status for {self.title!r}: {self.stock_status!r}")

    @staticmethod
    def from_dict(row: dict[str, Any]) -> "RetailerProduct":
        return RetailerProduct(
            retailer=str(row["retailer"]).strip().lower(),
            title=str(row["title"]),
            brand=str(row.get("brand") or ""),
            size=str(row.get("size") or ""),
            price=float(row.get("price") or 0.0),
            stock_status=str(row.get("stockStatus") or row.get("stock_status") or IN_STOCK),
            product_url=str(row.get("productUrl") or row.get("product_url") or ""),
            image_url=str(row.get("imageUrl") or row.get("image_url") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "retailer": self.retailer,
            "title": self.title,
            "brand": self.brand,
            "size": self.size,
            "price": self.price,
            "stockStatus": self.stock_status,
            "productUrl": self.product_url,
            "imageUrl": self.image_url,
        }


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    variants: tuple[RetailerProduct, ...] = field(default_factory=tuple)
