"""
Shared API state - one store and calculator per process.

Routes take these through FastAPI dependencies so tests can override them.
"""
from ..config.settings import get_settings
from ..engine.pricing_calculator import PricingCalculator
from ..services.catalog_store import CatalogStore

settings = get_settings()
store = CatalogStore(settings)
calculator = PricingCalculator()


def get_store() -> CatalogStore:
    return store


def get_calculator() -> PricingCalculator:
    return calculator
