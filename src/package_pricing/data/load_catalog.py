"""
Catalog Loader - Builds the nested catalog from a flat CSV export.

Expected columns:
    section, category, item_id, billing_type
Optional columns:
    name, cost, expense, utility_type

Rows keep their file order; sections and categories are created the first
time they appear.
"""
import json
import hashlib
from pathlib import Path
from typing import Optional

import pandas as pd

from ..engine.errors import ClassificationNotFound, InvalidInput
from ..engine.models import (
    BILLING_TYPES,
    UTILITY_ALIASES,
    UTILITY_SERVICE,
    Catalog,
    CatalogCategory,
    CatalogItem,
    CatalogSection,
    PackageLineItem,
    PriceConfig,
    normalize_billing_type,
    normalize_utility_type,
)

REQUIRED_COLUMNS = ['section', 'category', 'item_id', 'billing_type']
OPTIONAL_COLUMNS = ['name', 'cost', 'expense', 'utility_type']


def get_file_hash(path: Path) -> str:
    """Get SHA256 hash of a file."""
    if not path.exists():
        return ""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()[:12]


def _prepare_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Normalize column names, strip text and fill optional columns."""
    df = df.copy()
    df.columns = [str(c).strip().lower() for c in df.columns]

    for col in OPTIONAL_COLUMNS:
        if col not in df.columns:
            df[col] = None

    for col in ['section', 'category', 'item_id', 'billing_type', 'name', 'utility_type']:
        df[col] = df[col].map(lambda v: None if pd.isna(v) else str(v).strip())

    df['cost'] = pd.to_numeric(df['cost'], errors='coerce').fillna(0.0)
    df['expense'] = pd.to_numeric(df['expense'], errors='coerce').fillna(0.0)
    df['utility_type'] = df['utility_type'].fillna(UTILITY_SERVICE)
    return df


def validate_catalog_frame(df: pd.DataFrame) -> dict:
    """
    Check a catalog frame before building the tree.

    Returns:
        Report dict with status, errors, warnings and metrics
    """
    report = {
        "status": "pending",
        "errors": [],
        "warnings": [],
        "metrics": {},
    }

    columns = [str(c).strip().lower() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    if missing:
        report["errors"].append(f"Missing required columns: {', '.join(missing)}")
        report["status"] = "failed"
        return report

    df = _prepare_frame(df)
    report["metrics"]["item_count"] = len(df)

    missing_ids = df['item_id'].isna().sum()
    if missing_ids > 0:
        report["errors"].append(f"{missing_ids} rows have no item_id")

    billing = df['billing_type'].fillna('').str.upper()
    unknown_billing = df.loc[~billing.isin(BILLING_TYPES), 'item_id'].tolist()
    if unknown_billing:
        report["errors"].append(f"Unknown billing type for items: {', '.join(map(str, unknown_billing))}")

    utility = df['utility_type'].str.lower()
    unknown_utility = df.loc[~utility.isin(list(UTILITY_ALIASES)), 'item_id'].tolist()
    if unknown_utility:
        report["errors"].append(f"Unknown utility type for items: {', '.join(map(str, unknown_utility))}")

    negative = df.loc[(df['cost'] < 0) | (df['expense'] < 0), 'item_id'].tolist()
    if negative:
        report["errors"].append(f"Negative cost or expense for items: {', '.join(map(str, negative))}")

    duplicates = df.loc[df['item_id'].notna() & df['item_id'].duplicated(), 'item_id'].unique().tolist()
    report["metrics"]["duplicates"] = len(duplicates)
    if duplicates:
        report["warnings"].append(f"Duplicate item ids (first occurrence wins): {', '.join(duplicates)}")

    report["metrics"]["hourly_items"] = int((billing == 'HOUR').sum())
    report["metrics"]["section_count"] = int(df['section'].nunique())
    report["status"] = "failed" if report["errors"] else "success"
    return report


def catalog_from_dataframe(df: pd.DataFrame) -> Catalog:
    """Build the nested catalog from a flat frame; raises InvalidInput on bad rows."""
    report = validate_catalog_frame(df)
    if report["status"] != "success":
        raise InvalidInput("Invalid catalog: " + "; ".join(report["errors"]))

    df = _prepare_frame(df)
    sections: dict[str, CatalogSection] = {}
    categories: dict[tuple[str, str], CatalogCategory] = {}

    for row in df.itertuples(index=False):
        section = sections.get(row.section)
        if section is None:
            section = sections[row.section] = CatalogSection(name=row.section)

        category = categories.get((row.section, row.category))
        if category is None:
            category = categories[(row.section, row.category)] = CatalogCategory(name=row.category)
            section.categories.append(category)

        category.items.append(CatalogItem(
            id=row.item_id,
            billing_type=normalize_billing_type(row.billing_type),
            name=row.name,
            cost=float(row.cost),
            expense=float(row.expense),
            utility_type=normalize_utility_type(row.utility_type),
        ))

    return Catalog(sections=list(sections.values()))


def load_catalog(path: Path) -> Catalog:
    """Load a catalog CSV from disk."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog not found at {path}.")

    df = pd.read_csv(path, dtype=str)
    return catalog_from_dataframe(df)


def validate_catalog_file(path: Path) -> dict:
    """Validate a catalog CSV on disk; the report also records the file hash."""
    path = Path(path)
    if not path.exists():
        return {
            "status": "failed",
            "errors": [f"Catalog not found at {path}."],
            "warnings": [],
            "metrics": {},
        }

    report = validate_catalog_frame(pd.read_csv(path, dtype=str))
    report["input_file"] = {"path": str(path), "hash": get_file_hash(path)}
    return report


def catalog_to_dataframe(catalog: Catalog) -> pd.DataFrame:
    """Flatten a catalog back to one row per item."""
    rows = []
    for section in catalog.sections:
        for category in section.categories:
            for item in category.items:
                rows.append({
                    'section': section.name,
                    'category': category.name,
                    'item_id': item.id,
                    'billing_type': item.billing_type,
                    'name': item.name,
                    'cost': item.cost,
                    'expense': item.expense,
                    'utility_type': item.utility_type,
                })
    return pd.DataFrame(rows, columns=REQUIRED_COLUMNS + OPTIONAL_COLUMNS)


def line_items_from_catalog(catalog: Catalog, quantities: dict[str, int]) -> list[PackageLineItem]:
    """
    Build package lines from catalog cost data.

    Args:
        catalog: Catalog holding cost, expense and utility type per item
        quantities: Dict of {item_id: quantity}
    """
    items = {}
    for item in catalog.iter_items():
        items.setdefault(item.id, item)

    lines = []
    for item_id, qty in quantities.items():
        item = items.get(str(item_id).strip())
        if item is None:
            raise ClassificationNotFound(str(item_id))
        lines.append(PackageLineItem(
            item_id=item.id,
            quantity=int(qty),
            cost=item.cost,
            expense=item.expense,
            utility_type=item.utility_type,
            name=item.name,
        ))
    return lines


def load_price_config(path: Path, fallback: Optional[PriceConfig] = None) -> PriceConfig:
    """Read a margin configuration from JSON; missing keys are an error."""
    path = Path(path)
    if not path.exists():
        if fallback is not None:
            return fallback
        raise FileNotFoundError(f"Price config not found at {path}.")

    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return PriceConfig.from_dict(data)
