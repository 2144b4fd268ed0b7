import math
import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from package_pricing.engine import PackagePriceEngine
from package_pricing.engine.models import (
    Catalog,
    CatalogCategory,
    CatalogItem,
    CatalogSection,
    Package,
    PackageLineItem,
    PriceConfig,
)


def simple_calculator(cost, expense, utility_type, config):
    """Test double: a flat 1.3 margin multiplier."""
    return (cost + expense) * 1.3


def ceil_hundred_rounder(price, strategy):
    """Test double: charm rounds up to the next hundred."""
    if strategy == 'charm':
        return math.ceil(price / 100) * 100
    return price


def make_catalog(*items: tuple[str, str]) -> Catalog:
    """Build a one-section, one-category catalog from (item_id, billing_type) pairs."""
    return Catalog(sections=[
        CatalogSection(name="Coverage", categories=[
            CatalogCategory(name="Photography", items=[
                CatalogItem(id=item_id, billing_type=billing_type)
                for item_id, billing_type in items
            ]),
        ]),
    ])


@pytest.fixture
def base_config():
    return PriceConfig(
        service_margin=0.30,
        product_margin=0.20,
        sales_commission=0.10,
        markup=0.05,
    )


@pytest.fixture
def base_package():
    return Package(id="test-package", personalized_price=18000, base_hours=7)


@pytest.fixture
def base_items():
    return [PackageLineItem(item_id="item-1", quantity=1, cost=1000, expense=200, utility_type="service")]


@pytest.fixture
def hourly_catalog():
    return make_catalog(("item-1", "HOUR"))


@pytest.fixture
def service_catalog():
    return make_catalog(("item-1", "SERVICE"))


@pytest.fixture
def engine():
    """Engine wired with the test doubles."""
    return PackagePriceEngine(margin_calculator=simple_calculator, rounder=ceil_hundred_rounder)
