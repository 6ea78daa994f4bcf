from __future__ import annotations

import functools
import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from .log import get_logger
from .models import CatalogEntry, RetailerProduct

logger = get_logger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "catalog.json"


def _key(name: str) -> str:
    return name.strip().lower()


class Catalog:
    """Read-only snapshot of known products and their retailer variants.

    Built once and passed to the matcher; nothing here mutates after
    construction, so one instance can be shared freely.
    """

    def __init__(self, entries: Iterable[CatalogEntry]):
        by_name: dict[str, CatalogEntry] = {}
        for entry in entries:
            key = _key(entry.name)
            if not key:
                # a blank name would substring-match every query
                logger.warning("Skipping catalog entry with blank name (%d variants)", len(entry.variants))
                continue
            by_name[key] = entry
        self._entries: Mapping[str, CatalogEntry] = MappingProxyType(by_name)
        self._products: tuple[RetailerProduct, ...] = tuple(
            v for e in by_name.values() for v in e.variants
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _key(name) in self._entries

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries.values())

    def names(self) -> list[str]:
        return [e.name for e in self._entries.values()]

    def all_products(self) -> tuple[RetailerProduct, ...]:
        return self._products

    def lookup(self, name: str) -> CatalogEntry | None:
        """Exact name first, then the first entry whose name contains (or is contained in) *name*."""
        q = _key(name)
        if not q:
            return None

        hit = self._entries.get(q)
        if hit is not None:
            return hit

        for key, entry in self._entries.items():
            if q in key or key in q:
                return entry
        return None

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Catalog":
        """Accepts ``{name: [variant, ...]}`` or ``{"products": [{"name", "variants"}]}``."""
        entries: list[CatalogEntry] = []
        if isinstance(data.get("products"), list):
            rows = [(row["name"], row.get("variants") or []) for row in data["products"]]
        else:
            rows = list(data.items())

        for name, variants in rows:
            entries.append(
                CatalogEntry(
                    name=str(name),
                    variants=tuple(RetailerProduct.from_dict(v) for v in variants),
                )
            )
        return Catalog(entries)


def load_catalog(path: str | Path) -> Catalog:
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise RuntimeError(f"Catalog file not found: {p}")
    except UnicodeDecodeError as e:
        raise RuntimeError(f"Catalog file {p} is not UTF-8 text: {e}")
    except OSError as e:
        raise RuntimeError(f"Cannot read catalog file {p}: {e}")
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Catalog file {p} is not valid JSON: {e}")

    if not isinstance(data, dict):
        raise RuntimeError(f"Catalog file {p} must contain a JSON object")

    try:
        catalog = Catalog.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise RuntimeError(f"Malformed catalog entry in {p}: {e}")

    logger.debug("Loaded %d catalog entries (%d products) from %s", len(catalog), len(catalog.all_products()), p)
    return catalog


@functools.lru_cache(maxsize=1)
def default_catalog() -> Catalog:
    """The bundled sample catalog, loaded on first use."""
    return load_catalog(DEFAULT_CATALOG_PATH)
