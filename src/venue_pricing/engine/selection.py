"""
Tax/fee selection state for a package or service being edited.

Holds the two id lists the UI toggles with checkboxes and the shape they are
persisted in (`enabledTaxIds`, `enabledFeeIds`).
"""
from dataclasses import dataclass, field
from typing import Any

from .models import PricingBreakdown, TaxFeeDefinition, parse_id_list
from .pricing_calculator import Definitions, compute_breakdown


@dataclass
class TaxFeeSelection:
    """Which taxes and fees apply to one package or service."""
    enabled_tax_ids: list[str] = field(default_factory=list)
    enabled_fee_ids: list[str] = field(default_factory=list)

    def _bucket(self, definition: TaxFeeDefinition) -> list[str]:
        return self.enabled_fee_ids if definition.kind.is_fee else self.enabled_tax_ids

    def is_enabled(self, definition: TaxFeeDefinition) -> bool:
        return definition.id in self._bucket(definition)

    def set_enabled(self, definition: TaxFeeDefinition, enabled: bool):
        """Check or uncheck a definition. Only its own list is touched."""
        bucket = self._bucket(definition)
        if enabled and definition.id not in bucket:
            bucket.append(definition.id)
        elif not enabled and definition.id in bucket:
            bucket.remove(definition.id)

    def toggle(self, definition: TaxFeeDefinition) -> bool:
        """Flip a definition's checkbox. Returns the new state."""
        enabled = not self.is_enabled(definition)
        self.set_enabled(definition, enabled)
        return enabled

    def breakdown(self, base_price: Any, definitions: Definitions) -> PricingBreakdown:
        """Live breakdown for the current selection."""
        return compute_breakdown(base_price, self.enabled_fee_ids, self.enabled_tax_ids, definitions)

    @classmethod
    def from_record(cls, record: dict) -> 'TaxFeeSelection':
        """Read the selection off a stored package/service record."""
        return cls(
            enabled_tax_ids=parse_id_list(record.get('enabledTaxIds', record.get('enabled_tax_ids'))),
            enabled_fee_ids=parse_id_list(record.get('enabledFeeIds', record.get('enabled_fee_ids'))),
        )

    def to_payload(self) -> dict:
        """Shape sent with a package/service save."""
        return {
            "enabledTaxIds": list(self.enabled_tax_ids),
            "enabledFeeIds": list(self.enabled_fee_ids),
        }
