#!/usr/bin/env python
"""
Load sample tax settings, a package and a service into the data directory.

Usage:
    python scripts/seed_catalog.py
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from venue_pricing.config.settings import get_settings
from venue_pricing.engine import format_amount
from venue_pricing.services.catalog_store import CatalogStore

TAX_SETTINGS = [
    {"id": "service-charge", "name": "Service Charge", "type": "service_charge",
     "calculation": "fixed", "value": "25", "apply_to": "both"},
    {"id": "gratuity", "name": "Gratuity", "type": "fee",
     "calculation": "percentage", "value": "18", "apply_to": "both"},
    {"id": "sales-tax", "name": "Sales Tax", "type": "tax",
     "calculation": "percentage", "value": "8.5", "apply_to": "all"},
]

ITEMS = {
    "packages": [
        {"id": "evening-reception", "name": "Evening Reception", "category": "wedding",
         "price": "500", "pricing_model": "fixed",
         "enabled_fee_ids": ["service-charge", "gratuity"], "enabled_tax_ids": ["sales-tax"]},
    ],
    "services": [
        {"id": "plated-dinner", "name": "Plated Dinner", "category": "catering",
         "price": "65", "pricing_model": "per_person",
         "enabled_fee_ids": ["gratuity"], "enabled_tax_ids": ["sales-tax"]},
    ],
}


def main():
    settings = get_settings()
    store = CatalogStore(settings)
    print(f"Seeding catalog in {settings.data_dir}")

    existing = {d.id for d in store.list_definitions()}
    for record in TAX_SETTINGS:
        if record["id"] in existing:
            print(f"  skip tax setting {record['id']} (exists)")
            continue
        store.create_definition(record)
        print(f"  ✅ tax setting {record['id']}")

    for collection, records in ITEMS.items():
        for record in records:
            if store.get_item(collection, record["id"]):
                print(f"  skip {collection} {record['id']} (exists)")
                continue
            store.create_item(collection, record)
            print(f"  ✅ {collection} {record['id']}")

    quote = store.quote_item("packages", "evening-reception")
    print()
    for label, amount in quote.to_display_rows(settings.currency_symbol, settings.display_places):
        print(f"  {label:<20} {amount:>12}")
    print(f"\nEvening Reception total: {format_amount(quote.total, settings.currency_symbol, settings.display_places)}")


if __name__ == "__main__":
    main()
