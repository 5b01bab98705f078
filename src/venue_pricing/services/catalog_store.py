"""
Catalog Store - CRUD operations for tax settings, packages and services.

Each collection lives in its own CSV file under the data directory.
Reads go through pandas; writes rewrite the whole file with csv.DictWriter.
List columns (enabled tax/fee ids etc.) are stored ';'-joined.
"""
import csv
import logging
import re
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import Settings, get_settings
from ..engine.models import (
    CalculationMethod,
    DefinitionKind,
    PricingBreakdown,
    TaxFeeDefinition,
    parse_bool,
    parse_id_list,
)
from ..engine.money import ZERO, to_decimal
from ..engine.pricing_calculator import compute_breakdown

logger = logging.getLogger(__name__)


COLLECTIONS = ('packages', 'services')
PRICING_MODELS = ('fixed', 'per_person')


@dataclass
class ValidationResult:
    """Result of record validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def fail(self, message: str):
        self.errors.append(message)
        self.valid = False


@dataclass
class CatalogItem:
    """A priced package or service and the taxes/fees that apply to it."""
    id: str
    name: str
    price: str
    category: str = ""
    description: Optional[str] = None
    pricing_model: str = "fixed"
    enabled_tax_ids: list[str] = field(default_factory=list)
    enabled_fee_ids: list[str] = field(default_factory=list)
    included_service_ids: list[str] = field(default_factory=list)  # packages only
    is_active: bool = True

    def base_price(self, guest_count: int = 1) -> Decimal:
        """Price for one booking; per-person items scale with guest count."""
        price = to_decimal(self.price)
        if self.pricing_model == 'per_person':
            return price * max(int(guest_count or 0), 0)
        return price

    def to_csv_row(self) -> dict:
        """Convert to CSV row format."""
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category or '',
            'description': self.description or '',
            'price': str(self.price),
            'pricing_model': self.pricing_model,
            'enabled_tax_ids': ';'.join(self.enabled_tax_ids),
            'enabled_fee_ids': ';'.join(self.enabled_fee_ids),
            'included_service_ids': ';'.join(self.included_service_ids),
            'is_active': 'true' if self.is_active else 'false',
        }

    @classmethod
    def from_record(cls, row: dict) -> 'CatalogItem':
        """Create a CatalogItem from a CSV row or a camelCase REST payload."""
        def pick(*keys, default=None):
            for key in keys:
                if key in row and row[key] is not None:
                    return row[key]
            return default

        return cls(
            id=str(pick('id', default='')),
            name=str(pick('name', default='')),
            price=str(pick('price', default='')),
            category=str(pick('category', default='')),
            description=pick('description') or None,
            pricing_model=str(pick('pricing_model', 'pricingModel', default='fixed')) or 'fixed',
            enabled_tax_ids=parse_id_list(pick('enabled_tax_ids', 'enabledTaxIds')),
            enabled_fee_ids=parse_id_list(pick('enabled_fee_ids', 'enabledFeeIds')),
            included_service_ids=parse_id_list(pick('included_service_ids', 'includedServiceIds')),
            is_active=parse_bool(pick('is_active', 'isActive')),
        )

    def to_dict(self) -> dict:
        """REST representation."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "price": self.price,
            "pricingModel": self.pricing_model,
            "enabledTaxIds": list(self.enabled_tax_ids),
            "enabledFeeIds": list(self.enabled_fee_ids),
            "includedServiceIds": list(self.included_service_ids),
            "isActive": self.is_active,
        }


def _definition_row(definition: TaxFeeDefinition) -> dict:
    return {
        'id': definition.id,
        'name': definition.name,
        'type': definition.kind.value,
        'calculation': definition.calculation.value,
        'value': str(definition.value),
        'apply_to': definition.apply_to,
        'is_active': 'true' if definition.is_active else 'false',
        'is_taxable': 'true' if definition.is_taxable else 'false',
        'applicable_tax_ids': ';'.join(definition.applicable_tax_ids),
        'description': definition.description or '',
    }


class CatalogStore:
    """Service for managing tax settings and the priced catalog."""

    DEFINITION_COLUMNS = [
        'id', 'name', 'type', 'calculation', 'value', 'apply_to',
        'is_active', 'is_taxable', 'applicable_tax_ids', 'description'
    ]
    ITEM_COLUMNS = [
        'id', 'name', 'category', 'description', 'price', 'pricing_model',
        'enabled_tax_ids', 'enabled_fee_ids', 'included_service_ids', 'is_active'
    ]

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._paths = {
            'tax_settings': self.settings.tax_settings_csv,
            'packages': self.settings.packages_csv,
            'services': self.settings.services_csv,
        }
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # File access
    # ------------------------------------------------------------------

    def _load_rows(self, path: Path) -> list[dict]:
        """Read a collection CSV as a list of string dicts."""
        if not path.exists():
            return []
        try:
            df = pd.read_csv(path, dtype=str).fillna('')
        except pd.errors.EmptyDataError:
            return []
        df.columns = [c.strip() for c in df.columns]
        for col in df.columns:
            df[col] = df[col].astype(str).str.strip()
        return df.to_dict(orient='records')

    def _write_rows(self, path: Path, columns: list[str], rows: list[dict]):
        """Write rows back to CSV."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=columns)
            writer.writeheader()
            for row in rows:
                writer.writerow(row)

    def _collection_path(self, collection: str) -> Path:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection '{collection}'")
        return self._paths[collection]

    @staticmethod
    def _generate_id(name: str, existing_ids: set[str]) -> str:
        """Generate a readable unique id from a name."""
        base = re.sub(r'[^a-z0-9]+', '-', name.lower()).strip('-') or 'item'
        candidate = base
        counter = 1
        while candidate in existing_ids:
            candidate = f"{base}-{counter}"
            counter += 1
        return candidate

    # ------------------------------------------------------------------
    # Tax settings
    # ------------------------------------------------------------------

    def list_definitions(self, include_inactive: bool = True) -> list[TaxFeeDefinition]:
        """List all tax/fee definitions."""
        definitions = []
        for row in self._load_rows(self._paths['tax_settings']):
            if not row.get('id'):
                continue
            try:
                definition = TaxFeeDefinition.from_record(row)
            except ValueError:
                logger.warning("Skipping malformed tax setting row %s", row.get('id'))
                continue
            if include_inactive or definition.is_active:
                definitions.append(definition)
        return definitions

    def selectable_definitions(
        self,
        kind: Optional[DefinitionKind] = None,
        apply_to: Optional[str] = None,
    ) -> list[TaxFeeDefinition]:
        """
        Active definitions offered for selection in a pricing form.

        `kind=DefinitionKind.FEE` returns fees and service charges.
        `apply_to` keeps definitions scoped to that label, 'both' or 'all'.
        """
        selectable = []
        for definition in self.list_definitions(include_inactive=False):
            if kind is not None:
                if kind.is_fee != definition.kind.is_fee:
                    continue
            if apply_to and definition.apply_to not in (apply_to, 'both', 'all'):
                continue
            selectable.append(definition)
        return selectable

    def get_definition(self, definition_id: str) -> Optional[TaxFeeDefinition]:
        """Get a single definition by ID."""
        for definition in self.list_definitions():
            if definition.id == definition_id:
                return definition
        return None

    def validate_definition(self, record: dict) -> ValidationResult:
        """Validate a raw tax setting record before saving."""
        result = ValidationResult(valid=True)

        if not str(record.get('name') or '').strip():
            result.fail("Name is required")

        kind = str(record.get('type') or record.get('kind') or '').strip().lower()
        if kind not in {k.value for k in DefinitionKind}:
            result.fail(f"Type must be one of: {', '.join(k.value for k in DefinitionKind)}")

        calculation = str(record.get('calculation') or '').strip().lower()
        if calculation not in {c.value for c in CalculationMethod}:
            result.fail(f"Calculation must be one of: {', '.join(c.value for c in CalculationMethod)}")

        value = to_decimal(record.get('value'), default=None)
        if value is None:
            result.fail("Value must be a number")
        else:
            if value < ZERO:
                result.warnings.append("Negative value will reduce the total")
            if calculation == CalculationMethod.PERCENTAGE.value and value > 100:
                result.warnings.append("Percentage is greater than 100%")

        known_ids = {d.id for d in self.list_definitions()}
        for tax_id in parse_id_list(record.get('applicable_tax_ids', record.get('applicableTaxIds'))):
            if tax_id not in known_ids:
                result.warnings.append(f"Tax '{tax_id}' not found")

        return result

    def create_definition(self, record: dict) -> TaxFeeDefinition:
        """Create a new tax/fee definition."""
        validation = self.validate_definition(record)
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))

        with self._lock:
            definitions = self.list_definitions()
            existing_ids = {d.id for d in definitions}

            record = dict(record)
            if not record.get('id'):
                record['id'] = self._generate_id(str(record['name']), existing_ids)
            elif record['id'] in existing_ids:
                raise ValueError(f"Tax setting with ID '{record['id']}' already exists")

            definition = TaxFeeDefinition.from_record(record)
            definitions.append(definition)
            self._write_definitions(definitions)

        logger.info("Created tax setting %s (%s)", definition.id, definition.kind.value)
        return definition

    def update_definition(self, definition_id: str, updates: dict) -> TaxFeeDefinition:
        """Update an existing definition with a partial record."""
        with self._lock:
            definitions = self.list_definitions()
            for i, definition in enumerate(definitions):
                if definition.id == definition_id:
                    break
            else:
                raise ValueError(f"Tax setting with ID '{definition_id}' not found")

            merged = definition.to_dict()
            merged.update({k: v for k, v in updates.items() if k != 'id'})
            validation = self.validate_definition(merged)
            if not validation.valid:
                raise ValueError("; ".join(validation.errors))

            definitions[i] = TaxFeeDefinition.from_record(merged)
            self._write_definitions(definitions)

        logger.info("Updated tax setting %s", definition_id)
        return definitions[i]

    def delete_definition(self, definition_id: str) -> bool:
        """Delete a definition. Items referencing it keep the stale id."""
        with self._lock:
            definitions = self.list_definitions()
            remaining = [d for d in definitions if d.id != definition_id]
            if len(remaining) == len(definitions):
                raise ValueError(f"Tax setting with ID '{definition_id}' not found")
            self._write_definitions(remaining)

        logger.info("Deleted tax setting %s", definition_id)
        return True

    def _write_definitions(self, definitions: list[TaxFeeDefinition]):
        self._write_rows(
            self._paths['tax_settings'],
            self.DEFINITION_COLUMNS,
            [_definition_row(d) for d in definitions],
        )

    # ------------------------------------------------------------------
    # Packages and services
    # ------------------------------------------------------------------

    def list_items(self, collection: str, include_inactive: bool = True) -> list[CatalogItem]:
        """List packages or services."""
        items = []
        for row in self._load_rows(self._collection_path(collection)):
            if not row.get('id'):
                continue
            item = CatalogItem.from_record(row)
            if include_inactive or item.is_active:
                items.append(item)
        return items

    def get_item(self, collection: str, item_id: str) -> Optional[CatalogItem]:
        """Get a single package or service by ID."""
        for item in self.list_items(collection):
            if item.id == item_id:
                return item
        return None

    def validate_item(self, record: dict) -> ValidationResult:
        """Validate a package/service record before saving."""
        result = ValidationResult(valid=True)

        if not str(record.get('name') or '').strip():
            result.fail("Name is required")

        price = to_decimal(record.get('price'), default=None)
        if price is None:
            result.fail("Price is required and must be a number")
        elif price < ZERO:
            result.fail("Price cannot be negative")

        pricing_model = record.get('pricing_model', record.get('pricingModel')) or 'fixed'
        if pricing_model not in PRICING_MODELS:
            result.fail(f"Pricing model must be one of: {', '.join(PRICING_MODELS)}")

        definitions = {d.id: d for d in self.list_definitions()}
        selected = (
            parse_id_list(record.get('enabled_tax_ids', record.get('enabledTaxIds')))
            + parse_id_list(record.get('enabled_fee_ids', record.get('enabledFeeIds')))
        )
        for definition_id in selected:
            if definition_id not in definitions:
                result.warnings.append(f"Tax/fee '{definition_id}' not found")
            elif not definitions[definition_id].is_active:
                result.warnings.append(f"Tax/fee '{definition_id}' is inactive")

        return result

    def create_item(self, collection: str, record: dict) -> CatalogItem:
        """Create a new package or service."""
        path = self._collection_path(collection)
        validation = self.validate_item(record)
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))

        with self._lock:
            items = self.list_items(collection)
            existing_ids = {i.id for i in items}

            item = CatalogItem.from_record(record)
            if not item.id:
                item.id = self._generate_id(item.name, existing_ids)
            elif item.id in existing_ids:
                raise ValueError(f"Item with ID '{item.id}' already exists in {collection}")

            items.append(item)
            self._write_rows(path, self.ITEM_COLUMNS, [i.to_csv_row() for i in items])

        logger.info("Created %s item %s", collection, item.id)
        return item

    def update_item(self, collection: str, item_id: str, updates: dict) -> CatalogItem:
        """Update an existing package or service with a partial record."""
        path = self._collection_path(collection)
        with self._lock:
            items = self.list_items(collection)
            for i, item in enumerate(items):
                if item.id == item_id:
                    break
            else:
                raise ValueError(f"Item with ID '{item_id}' not found in {collection}")

            merged = item.to_dict()
            merged.update({k: v for k, v in updates.items() if k != 'id'})
            validation = self.validate_item(merged)
            if not validation.valid:
                raise ValueError("; ".join(validation.errors))

            items[i] = CatalogItem.from_record(merged)
            self._write_rows(path, self.ITEM_COLUMNS, [it.to_csv_row() for it in items])

        logger.info("Updated %s item %s", collection, item_id)
        return items[i]

    def delete_item(self, collection: str, item_id: str) -> bool:
        """Delete a package or service."""
        path = self._collection_path(collection)
        with self._lock:
            items = self.list_items(collection)
            remaining = [i for i in items if i.id != item_id]
            if len(remaining) == len(items):
                raise ValueError(f"Item with ID '{item_id}' not found in {collection}")
            self._write_rows(path, self.ITEM_COLUMNS, [i.to_csv_row() for i in remaining])

        logger.info("Deleted %s item %s", collection, item_id)
        return True

    def quote_item(self, collection: str, item_id: str, guest_count: int = 1) -> PricingBreakdown:
        """Price a stored package or service with its enabled taxes and fees."""
        item = self.get_item(collection, item_id)
        if item is None:
            raise ValueError(f"Item with ID '{item_id}' not found in {collection}")

        return compute_breakdown(
            item.base_price(guest_count),
            item.enabled_fee_ids,
            item.enabled_tax_ids,
            self.list_definitions(),
        )

    def get_stats(self) -> dict:
        """Get counts for the status page."""
        definitions = self.list_definitions()
        by_type = {}
        for d in definitions:
            by_type[d.kind.value] = by_type.get(d.kind.value, 0) + 1

        return {
            'tax_settings': len(definitions),
            'active_tax_settings': sum(1 for d in definitions if d.is_active),
            'by_type': by_type,
            'packages': len(self.list_items('packages')),
            'services': len(self.list_items('services')),
        }
