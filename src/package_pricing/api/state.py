"""
Shared API state - settings, catalog and engine for the running process.

The catalog is loaded on first use so the app can start before the
catalog file exists.
"""
from typing import Optional

from ..config.settings import get_settings
from ..data.load_catalog import load_catalog, load_price_config
from ..engine import Catalog, PackagePriceEngine, PriceConfig

settings = get_settings()
engine = PackagePriceEngine(rounding_strategy=settings.rounding_strategy)

_catalog: Optional[Catalog] = None


def get_catalog() -> Catalog:
    """Get the loaded catalog, reading it from disk on first use."""
    global _catalog
    if _catalog is None:
        _catalog = load_catalog(settings.catalog_csv)
    return _catalog


def set_catalog(catalog: Optional[Catalog]):
    """Replace the loaded catalog (None forces a reload on next use)."""
    global _catalog
    _catalog = catalog


def catalog_loaded() -> bool:
    return _catalog is not None


def get_price_config() -> PriceConfig:
    """Price config from price_config.json, or the default margins."""
    if settings.price_config_json is not None:
        return load_price_config(settings.price_config_json, fallback=settings.default_price_config())
    return settings.default_price_config()
