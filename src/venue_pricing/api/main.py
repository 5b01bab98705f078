import logging
from typing import Optional, Union

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from venue_pricing import __version__
from venue_pricing.engine import PricingCalculator, PricingRequest
from venue_pricing.services.catalog_store import CatalogStore
from venue_pricing.api.catalog_api import packages_router, services_router
from venue_pricing.api.tax_settings_api import router as tax_settings_router
from venue_pricing.api.state import get_calculator, get_store

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Venue Pricing API",
    description="Tax, fee and catalog pricing for the venue back office",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tax_settings_router)
app.include_router(packages_router)
app.include_router(services_router)


class CalcRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Raw form input; blank or non-numeric prices are priced as 0
    base_price: Optional[Union[str, float, int]] = Field(default=None, alias="basePrice")
    selected_fee_ids: list[str] = Field(default_factory=list, alias="selectedFeeIds")
    selected_tax_ids: list[str] = Field(default_factory=list, alias="selectedTaxIds")


@app.get("/")
async def root():
    return {"status": "online", "message": "Venue Pricing API Active"}


@app.post("/calculate")
async def calculate(
    req: CalcRequest,
    store: CatalogStore = Depends(get_store),
    calculator: PricingCalculator = Depends(get_calculator),
):
    try:
        request = PricingRequest(
            base_price=req.base_price,
            selected_fee_ids=req.selected_fee_ids,
            selected_tax_ids=req.selected_tax_ids,
        )
        breakdown = calculator.calculate(request, store.list_definitions())
        return breakdown.to_dict()
    except Exception as e:
        logger.exception("Breakdown calculation failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/system/status")
async def get_status(store: CatalogStore = Depends(get_store)):
    return {
        "engine_active": True,
        "data_dir": str(store.settings.data_dir),
        **store.get_stats(),
    }
