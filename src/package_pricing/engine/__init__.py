"""Engine subpackage - core package price resolution logic."""
from .package_price_engine import PackagePriceEngine, calculate_package_price
from .models import Package, PackageLineItem, PriceConfig, PriceResult, Catalog
from .errors import PricingError, ClassificationNotFound, InvalidInput

__all__ = [
    'PackagePriceEngine', 'calculate_package_price',
    'Package', 'PackageLineItem', 'PriceConfig', 'PriceResult', 'Catalog',
    'PricingError', 'ClassificationNotFound', 'InvalidInput',
]
