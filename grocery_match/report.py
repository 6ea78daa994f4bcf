from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

from .aggregate import RetailerOption
from .models import GroceryItem, RetailerProduct


def format_price(amount: float) -> str:
    return f"${amount:,.2f}"


@dataclass
class ItemReport:
    item: GroceryItem
    matches: list[RetailerProduct]
    best: RetailerProduct | None

    @property
    def status(self) -> str:
        return "MATCHED" if self.matches else "NO_MATCH"


@dataclass
class MatchReport:
    timestamp: str
    total: int
    matched: int
    unmatched: int
    items: list[ItemReport]
    retailers: list[RetailerOption]

    def summary_text(self) -> str:
        lines = [
            f"Run: {self.timestamp}",
            f"Total: {self.total}  Matched: {self.matched}  No match: {self.unmatched}",
            "",
        ]
        for i, it in enumerate(self.items, 1):
            qty = f"{it.item.quantity} x " if it.item.quantity > 1 else ""
            lines.append(f"  {i}. [{it.status}] {qty}{it.item.name}")
            if it.best is not None:
                lines.append(f"     → {it.best.title}  {format_price(it.best.price)} @ {it.best.retailer}")

        if self.retailers:
            lines.append("")
            lines.append("Retailers (cheapest first):")
            for opt in self.retailers:
                tag = "all items" if opt.covers_all else f"missing: {', '.join(opt.missing)}"
                lines.append(f"  {opt.retailer:<12} {format_price(opt.total_price):>10}  ({tag})")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "total": self.total,
            "matched": self.matched,
            "unmatched": self.unmatched,
            "items": [
                {
                    "item": it.item.to_dict(),
                    "status": it.status,
                    "matches": [p.to_dict() for p in it.matches],
                    "best": it.best.to_dict() if it.best is not None else None,
                }
                for it in self.items
            ],
            "retailers": [
                {
                    "retailer": o.retailer,
                    "totalPrice": round(o.total_price, 2),
                    "products": [p.to_dict() for p in o.products],
                    "missing": list(o.missing),
                }
                for o in self.retailers
            ],
        }

    def write_json(self, path: str = "artifacts/match_report.json") -> str:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(self.to_dict(), indent=2))
        return str(out)


def build_report(
    items: Sequence[GroceryItem],
    match_map: Mapping[str, list[RetailerProduct]],
    best: Mapping[str, RetailerProduct],
    retailers: Sequence[RetailerOption],
) -> MatchReport:
    reports = [
        ItemReport(item=i, matches=list(match_map.get(i.name, [])), best=best.get(i.name))
        for i in items
    ]
    return MatchReport(
        timestamp=datetime.now(timezone.utc).isoformat(),
        total=len(reports),
        matched=sum(1 for r in reports if r.matches),
        unmatched=sum(1 for r in reports if not r.matches),
        items=reports,
        retailers=list(retailers),
    )
