from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import pandas as pd
from typing import List, Optional
import sys
from pathlib import Path

# Add src to path for internal imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from package_pricing.engine import (
    Catalog,
    ClassificationNotFound,
    InvalidInput,
    Package,
    PackageLineItem,
    PackagePriceEngine,
    PriceConfig,
)
from package_pricing.data.load_catalog import (
    catalog_from_dataframe,
    catalog_to_dataframe,
    get_file_hash,
    line_items_from_catalog,
)
from package_pricing.api import state

app = FastAPI(
    title="Package Pricing API",
    description="Resolves studio package prices from personalized prices or item recalculation",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class PackageIn(BaseModel):
    id: str
    personalized_price: float = 0.0
    base_hours: Optional[float] = None
    name: Optional[str] = None


class LineItemIn(BaseModel):
    """A package line. Cost data left out is taken from the catalog."""
    item_id: str
    quantity: int = 1
    cost: Optional[float] = None
    expense: Optional[float] = None
    utility_type: Optional[str] = None


class CatalogItemIn(BaseModel):
    section: str
    category: str
    item_id: str
    billing_type: str
    name: Optional[str] = None
    cost: float = 0.0
    expense: float = 0.0
    utility_type: str = "service"


class PriceConfigIn(BaseModel):
    service_margin: float
    product_margin: float
    sales_commission: float
    markup: float


class PriceRequest(BaseModel):
    package: PackageIn
    duration_hours: Optional[float] = None
    line_items: List[LineItemIn]
    config: Optional[PriceConfigIn] = None
    catalog: Optional[List[CatalogItemIn]] = None
    rounding_strategy: Optional[str] = None


def _build_line_items(items: List[LineItemIn], catalog: Catalog) -> list[PackageLineItem]:
    lines = []
    for item in items:
        if item.cost is None:
            line = line_items_from_catalog(catalog, {item.item_id: item.quantity})[0]
            if item.expense is not None:
                line.expense = item.expense
            if item.utility_type is not None:
                line.utility_type = item.utility_type
        else:
            line = PackageLineItem(
                item_id=item.item_id,
                quantity=item.quantity,
                cost=item.cost,
                expense=item.expense or 0.0,
                utility_type=item.utility_type or "service",
            )
        lines.append(line)
    return lines


@app.get("/")
async def root():
    return {"status": "online", "message": "Package Pricing API Active"}


@app.post("/price")
async def price_package(req: PriceRequest):
    try:
        config = PriceConfig(**req.config.model_dump()) if req.config else state.get_price_config()

        engine = state.engine
        if req.rounding_strategy:
            engine = PackagePriceEngine(rounding_strategy=req.rounding_strategy)

        package = Package(**req.package.model_dump())

        # The personalized price never reads the catalog or the lines
        if engine.uses_personalized_price(package, req.duration_hours):
            catalog, line_items = Catalog(), []
        else:
            if req.catalog is not None:
                catalog = catalog_from_dataframe(pd.DataFrame([c.model_dump() for c in req.catalog]))
            else:
                catalog = state.get_catalog()
            line_items = _build_line_items(req.line_items, catalog)

        result = engine.price(package, req.duration_hours, line_items, catalog, config)
        return jsonable_encoder(result)
    except ClassificationNotFound as e:
        raise HTTPException(status_code=422, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FileNotFoundError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Unable to compute price: {e}")


@app.get("/catalog")
async def get_catalog(search: Optional[str] = None):
    try:
        df = catalog_to_dataframe(state.get_catalog())
        if search:
            mask = (
                df['item_id'].str.contains(search, case=False, na=False) |
                df['name'].astype(str).str.contains(search, case=False, na=False)
            )
            df = df[mask]

        df = df.astype(object).where(df.notna(), None)
        return df.to_dict(orient="records")
    except FileNotFoundError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/system/status")
async def get_status():
    settings = state.settings
    loaded = state.catalog_loaded()
    return {
        "engine_active": True,
        "catalog_loaded": loaded,
        "catalog_items": len(state.get_catalog()) if loaded else 0,
        "catalog_hash": get_file_hash(settings.catalog_csv) or None,
        "rounding_strategy": state.engine.rounding_strategy,
        "price_config": state.get_price_config().to_dict(),
    }
