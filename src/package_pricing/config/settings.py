"""
Centralized settings and path configuration for package pricing.

Settings are read by the API and UI adapters only. The engine never looks
them up itself: callers pass the price config and catalog explicitly.
"""
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from ..engine.models import PriceConfig


def get_project_root() -> Path:
    """Get the project root directory (where catalog.csv or pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'catalog.csv').exists() or (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Input files
    catalog_csv: Path
    price_config_json: Optional[Path] = None

    # Presentation rounding for recalculated prices
    rounding_strategy: str = "charm"

    # Studio defaults, used when no price_config.json is present
    service_margin: float = 0.30
    product_margin: float = 0.20
    sales_commission: float = 0.10
    markup: float = 0.05

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure."""
        root = project_root or get_project_root()

        price_config_json = root / 'price_config.json'

        return cls(
            project_root=root,
            catalog_csv=root / 'catalog.csv',
            price_config_json=price_config_json if price_config_json.exists() else None,
        )

    def default_price_config(self) -> PriceConfig:
        """PriceConfig built from the default margins."""
        return PriceConfig(
            service_margin=self.service_margin,
            product_margin=self.product_margin,
            sales_commission=self.sales_commission,
            markup=self.markup,
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
