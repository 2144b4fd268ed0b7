#!/usr/bin/env python
"""
Price a package from the command line.

Usage:
    python scripts/price_package.py ITEM=QTY [ITEM=QTY ...] \
        [--catalog catalog.csv] [--personalized 18000] [--base-hours 7] [--hours 8]
"""
import argparse
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from package_pricing.config.settings import get_settings
from package_pricing.data.load_catalog import load_catalog, load_price_config, line_items_from_catalog
from package_pricing.engine import PackagePriceEngine, Package, PricingError
from package_pricing.pricing.rounding import format_price


def parse_items(values: list[str]) -> dict[str, int]:
    items = {}
    for value in values:
        item_id, _, qty = value.partition('=')
        items[item_id.strip()] = int(qty) if qty else 1
    return items


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Resolve the price of a package")
    parser.add_argument("items", nargs="*", help="ITEM_ID=QUANTITY pairs")
    parser.add_argument("--catalog", type=Path, default=settings.catalog_csv)
    parser.add_argument("--config", type=Path, default=settings.price_config_json)
    parser.add_argument("--package-id", default="cli-package")
    parser.add_argument("--personalized", type=float, default=0.0, help="Personalized price (0 = unset)")
    parser.add_argument("--base-hours", type=float, default=None)
    parser.add_argument("--hours", type=float, default=None, help="Event duration in hours")
    parser.add_argument("--rounding", default=settings.rounding_strategy)
    args = parser.parse_args()

    try:
        catalog = load_catalog(args.catalog)
        if args.config is not None:
            config = load_price_config(args.config, fallback=settings.default_price_config())
        else:
            config = settings.default_price_config()

        engine = PackagePriceEngine(rounding_strategy=args.rounding)
        package = Package(id=args.package_id, personalized_price=args.personalized, base_hours=args.base_hours)

        # Unknown items only matter when the package is recalculated
        line_items = []
        if not engine.uses_personalized_price(package, args.hours):
            line_items = line_items_from_catalog(catalog, parse_items(args.items))

        result = engine.price(package, args.hours, line_items, catalog, config)
    except (PricingError, FileNotFoundError) as e:
        print(f"❌ Unable to compute price: {e}")
        sys.exit(1)

    print(result.get_trace_text())
    print()
    for warning in result.warnings:
        print(f"WARNING: {warning}")
    print(f"Final price: {format_price(result.final_price)} ({result.price_source})")


if __name__ == "__main__":
    main()
