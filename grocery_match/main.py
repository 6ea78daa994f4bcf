from __future__ import annotations

import argparse

from .aggregate import best_price_matches, find_best_retailer_combination, match_list
from .catalog import Catalog, default_catalog, load_catalog
from .config import OPTIONAL_KEYS, REQUIRED_KEYS, Config
from .log import get_logger, setup_logging
from .match import match_item
from .models import GroceryItem
from .normalize import parse_text
from .parser import AnthropicClient, GroceryParser
from .report import build_report, format_price
from .retailers import is_known_retailer, normalize_retailer_name

logger = get_logger(__name__)

VERSION = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="grocery-match")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("--log-level", default=None, help="Override GROCERY_MATCH_LOG_LEVEL")

    sub = p.add_subparsers(dest="cmd", required=False)

    p_config = sub.add_parser("config", help="Config commands")
    sub_config = p_config.add_subparsers(dest="config_cmd", required=True)
    sub_config.add_parser("keys", help="List environment variables")
    sub_config.add_parser("check", help="Validate the environment is filled")

    p_match = sub.add_parser("match", help="Match a single item against the catalog")
    p_match.add_argument("name", help="Item name (e.g. 'eggs')")
    p_match.add_argument("--brand", default=None)
    p_match.add_argument("--size", default=None)
    p_match.add_argument("--limit", type=int, default=5, help="Max results")
    p_match.add_argument("--catalog", default=None, help="Catalog JSON path")

    p_list = sub.add_parser("list", help="Parse a grocery list and match every item")
    p_list.add_argument("text", help="Free-form list, e.g. '2 gallons of milk and eggs from costco'")
    p_list.add_argument("--offline", action="store_true", help="Parse locally instead of calling the language model")
    p_list.add_argument("--full-coverage", action="store_true", help="Only rank retailers that carry every item")
    p_list.add_argument("--catalog", default=None, help="Catalog JSON path")
    p_list.add_argument("--out", default=None, help="Write a JSON report here")

    p_retailer = sub.add_parser("retailer", help="Normalise a store name")
    p_retailer.add_argument("name")

    return p


def _catalog(path: str | None, cfg: Config) -> Catalog:
    path = path or cfg.catalog_path
    return load_catalog(path) if path else default_catalog()


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    if args.version:
        print(VERSION)
        return 0

    if args.cmd is None:
        p.print_help()
        return 0

    try:
        cfg = Config.offline()
        setup_logging(args.log_level or cfg.log_level)
        return _dispatch(args, cfg)
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1


def _dispatch(args: argparse.Namespace, cfg: Config) -> int:
    if args.cmd == "config":
        if args.config_cmd == "keys":
            for k in REQUIRED_KEYS + OPTIONAL_KEYS:
                print(k)
            return 0

        if args.config_cmd == "check":
            # Intentionally do not print secret values
            Config.load_from_env()
            print("OK: environment config present")
            return 0

    if args.cmd == "match":
        catalog = _catalog(args.catalog, cfg)
        item = GroceryItem(name=args.name, brand=args.brand, size=args.size)
        results = match_item(item, args.limit, catalog=catalog)
        if not results:
            print("No results found.")
            return 1
        for i, r in enumerate(results, 1):
            print(f"{i}. {r.title}")
            print(f"   Retailer: {r.retailer}  Price: {format_price(r.price)}  Size: {r.size or 'N/A'}  ({r.stock_status})")
            if r.product_url:
                print(f"   URL: {r.product_url}")
            print()
        return 0

    if args.cmd == "list":
        return _run_list(args, cfg)

    if args.cmd == "retailer":
        rid = normalize_retailer_name(args.name)
        if rid is None:
            print("No retailer given.")
            return 1
        known = "known" if is_known_retailer(rid) else "unknown"
        print(f"{rid} ({known})")
        return 0

    raise RuntimeError("unreachable")


def _run_list(args: argparse.Namespace, cfg: Config) -> int:
    catalog = _catalog(args.catalog, cfg)

    if args.offline:
        items = parse_text(args.text)
    else:
        cfg = Config.load_from_env()
        client = AnthropicClient(
            api_key=cfg.anthropic_api_key or "",
            base_url=cfg.anthropic_api_url,
            timeout_s=cfg.request_timeout_s,
        )
        items = GroceryParser(client, model=cfg.model).parse(args.text)

    if not items:
        print("No grocery items found in input.")
        return 1

    print(f"Parsed {len(items)} items.")
    match_map = match_list(items, catalog=catalog)
    best = best_price_matches(items, catalog=catalog)
    retailers = find_best_retailer_combination(
        items, catalog=catalog, require_full_coverage=args.full_coverage
    )

    report = build_report(items, match_map, best, retailers)
    print("\n" + report.summary_text())
    if args.out:
        path = report.write_json(args.out)
        print(f"\nReport written to {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
