"""
Data models for the package pricing engine.

Uses dataclasses for structured, type-safe data representation.
"""
from dataclasses import dataclass, field, asdict
from typing import Iterator, Optional

from .errors import InvalidInput


# Billing classification of a catalog item
BILLING_HOUR = "HOUR"
BILLING_SERVICE = "SERVICE"
BILLING_TYPES = (BILLING_HOUR, BILLING_SERVICE)

# Utility classification used to pick the profit margin
UTILITY_SERVICE = "service"
UTILITY_PRODUCT = "product"
UTILITY_ALIASES = {
    "service": UTILITY_SERVICE,
    "servicio": UTILITY_SERVICE,
    "product": UTILITY_PRODUCT,
    "producto": UTILITY_PRODUCT,
}

# Provenance of a resolved package price
SOURCE_PERSONALIZED = "personalized"
SOURCE_RECALCULATED = "recalculated"


def normalize_billing_type(value: str) -> str:
    """Normalize a billing type to HOUR or SERVICE."""
    billing_type = str(value).strip().upper()
    if billing_type not in BILLING_TYPES:
        raise InvalidInput(f"Unknown billing type '{value}' (expected HOUR or SERVICE)")
    return billing_type


def normalize_utility_type(value: str) -> str:
    """Normalize a utility type to 'service' or 'product'."""
    utility_type = UTILITY_ALIASES.get(str(value).strip().lower())
    if utility_type is None:
        raise InvalidInput(f"Unknown utility type '{value}' (expected service or product)")
    return utility_type


# Accepted keys for PriceConfig.from_dict, including the studio's stored names
_CONFIG_KEYS = {
    "service_margin": ("service_margin", "utilidad_servicio"),
    "product_margin": ("product_margin", "utilidad_producto"),
    "sales_commission": ("sales_commission", "comision_venta"),
    "markup": ("markup", "sobreprecio"),
}


@dataclass(frozen=True)
class PriceConfig:
    """Margin configuration, every rate a fraction in [0, 1)."""
    service_margin: float
    product_margin: float
    sales_commission: float
    markup: float

    def __post_init__(self):
        for name in _CONFIG_KEYS:
            raw = getattr(self, name)
            try:
                value = float(raw)
            except (TypeError, ValueError):
                raise InvalidInput(f"{name} must be a number, got {raw!r}")
            if not 0 <= value < 1:
                raise InvalidInput(f"{name} must be a fraction in [0, 1), got {value}")
            object.__setattr__(self, name, value)

    @classmethod
    def from_dict(cls, data: dict) -> 'PriceConfig':
        """Build a config from a dict using either English or studio key names."""
        values = {}
        for name, keys in _CONFIG_KEYS.items():
            for key in keys:
                if data.get(key) is not None:
                    values[name] = data[key]
                    break
            else:
                raise InvalidInput(f"Price config is missing '{name}'")
        return cls(**values)

    def margin_for(self, utility_type: str) -> float:
        """Profit margin that applies to a utility type."""
        if normalize_utility_type(utility_type) == UTILITY_SERVICE:
            return self.service_margin
        return self.product_margin

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CatalogItem:
    """A catalog entry and its billing classification."""
    id: str
    billing_type: str
    name: Optional[str] = None
    cost: float = 0.0
    expense: float = 0.0
    utility_type: str = UTILITY_SERVICE


@dataclass
class CatalogCategory:
    name: str
    items: list[CatalogItem] = field(default_factory=list)


@dataclass
class CatalogSection:
    name: str
    categories: list[CatalogCategory] = field(default_factory=list)


@dataclass
class Catalog:
    """Read-only catalog tree: sections -> categories -> items."""
    sections: list[CatalogSection] = field(default_factory=list)

    def iter_items(self) -> Iterator[CatalogItem]:
        """Yield every item in traversal order."""
        for section in self.sections:
            for category in section.categories:
                yield from category.items

    def __len__(self) -> int:
        return sum(1 for _ in self.iter_items())


@dataclass
class PackageLineItem:
    """A single item bundled in a package."""
    item_id: str
    quantity: int
    cost: float
    expense: float = 0.0
    utility_type: str = UTILITY_SERVICE
    name: Optional[str] = None


@dataclass
class Package:
    """
    A bundled package.

    personalized_price of 0 means no personalized price was set;
    base_hours of 0 or None means no duration assumption was made.
    """
    id: str
    personalized_price: float = 0.0
    base_hours: Optional[float] = None
    name: Optional[str] = None


@dataclass
class TraceStep:
    """A single step in the price resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class LinePrice:
    """Recalculated price of one package line."""
    item_id: str
    billing_type: str
    unit_price: float
    quantity: int
    multiplier: float
    line_total: float


@dataclass
class PriceResult:
    """Complete result of a package price resolution."""
    final_price: float
    base_price: float
    recalculated_price: Optional[float]
    hours_match: bool
    price_source: str  # "personalized" or "recalculated"
    constraint_set: bool = False
    lines: list[LinePrice] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the resolution trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a warning, ignoring duplicates."""
        if warning not in self.warnings:
            self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return asdict(self)
