import pytest
import sys
import os
from decimal import Decimal

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from venue_pricing.config.settings import Settings
from venue_pricing.engine import CalculationMethod, DefinitionKind, TaxFeeDefinition
from venue_pricing.services.catalog_store import CatalogStore


def make_definition(id, kind, calculation, value, name=None, **kwargs):
    return TaxFeeDefinition(
        id=id,
        name=name or id,
        kind=DefinitionKind(kind),
        calculation=CalculationMethod(calculation),
        value=Decimal(str(value)),
        **kwargs,
    )


@pytest.fixture
def make_def():
    return make_definition


@pytest.fixture
def definitions():
    """The tax settings from the reception scenario."""
    return [
        make_definition("svc", "service_charge", "fixed", "25", name="Service Charge"),
        make_definition("grat", "fee", "percentage", "18", name="Gratuity"),
        make_definition("sales", "tax", "percentage", "8.5", name="Sales Tax"),
    ]


@pytest.fixture
def store(tmp_path):
    """A CatalogStore writing to a temporary data directory."""
    settings = Settings.load(project_root=tmp_path, data_dir=tmp_path / 'data')
    return CatalogStore(settings)


@pytest.fixture
def seeded_store(store):
    store.create_definition({"id": "svc", "name": "Service Charge", "type": "service_charge",
                             "calculation": "fixed", "value": "25"})
    store.create_definition({"id": "grat", "name": "Gratuity", "type": "fee",
                             "calculation": "percentage", "value": "18"})
    store.create_definition({"id": "sales", "name": "Sales Tax", "type": "tax",
                             "calculation": "percentage", "value": "8.5"})
    return store
