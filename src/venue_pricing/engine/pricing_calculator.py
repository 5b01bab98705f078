"""
Pricing Calculator - cascading fee and tax resolution with traceability.

Resolution order:
1. Coerce the base price (blank/invalid/negative → 0)
2. Each selected fee is computed against the base price (fees never compound)
3. Taxable amount = base price + fee subtotal
4. Each selected tax is computed against the taxable amount
5. Total = base price + fee subtotal + tax subtotal

Amounts stay at full Decimal precision; rounding is left to display.
"""
from decimal import Decimal
from typing import Iterable, Mapping, Sequence, Union

from .models import (
    BreakdownLine,
    PricingBreakdown,
    PricingRequest,
    TaxFeeDefinition,
)
from .money import ZERO, parse_money_or_zero


Definitions = Union[Iterable[TaxFeeDefinition], Mapping[str, TaxFeeDefinition]]


def _index_definitions(definitions: Definitions) -> dict[str, TaxFeeDefinition]:
    if definitions is None:
        return {}
    if isinstance(definitions, Mapping):
        return dict(definitions)
    return {d.id: d for d in definitions}


def _unique(ids: Sequence[str]) -> list[str]:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(str(i) for i in (ids or [])))


class PricingCalculator:
    """
    Stateless calculator for the base price → fees → taxes cascade.

    Safe to share across threads and requests; it holds no mutable state.
    """

    def calculate(self, request: PricingRequest, definitions: Definitions) -> PricingBreakdown:
        """
        Calculate a breakdown with full traceability.

        Args:
            request: PricingRequest with the raw base price and selected ids
            definitions: candidate TaxFeeDefinitions (iterable or id mapping)

        Returns:
            PricingBreakdown with lines, subtotals, warnings and trace
        """
        by_id = _index_definitions(definitions)
        base_price = parse_money_or_zero(request.base_price)

        breakdown = PricingBreakdown(base_price=base_price)
        breakdown.add_trace("Base Price", "Parsed base price", str(base_price))

        # Fees: each one against the original base price
        for fee_id in _unique(request.selected_fee_ids):
            definition = by_id.get(fee_id)
            if definition is None:
                breakdown.add_trace("Fee Lookup", f"Unknown fee id {fee_id} skipped")
                continue
            if not definition.kind.is_fee:
                breakdown.add_warning(f"'{definition.name}' is a {definition.kind.label}, not a fee; skipped")
                continue

            line = self._line(definition, base_price)
            breakdown.fee_lines.append(line)
            breakdown.add_trace(
                "Fee Applied",
                f"{definition.name} ({definition.describe_rate()}) on {base_price}",
                str(line.amount),
            )

        breakdown.fee_subtotal = sum((l.amount for l in breakdown.fee_lines), ZERO)
        breakdown.taxable_amount = base_price + breakdown.fee_subtotal
        breakdown.add_trace("Taxable Amount", "Base price + fee subtotal", str(breakdown.taxable_amount))

        # Taxes: each one against the fee-inclusive subtotal
        for tax_id in _unique(request.selected_tax_ids):
            definition = by_id.get(tax_id)
            if definition is None:
                breakdown.add_trace("Tax Lookup", f"Unknown tax id {tax_id} skipped")
                continue
            if definition.kind.is_fee:
                breakdown.add_warning(f"'{definition.name}' is a {definition.kind.label}, not a tax; skipped")
                continue

            line = self._line(definition, breakdown.taxable_amount)
            breakdown.tax_lines.append(line)
            breakdown.add_trace(
                "Tax Applied",
                f"{definition.name} ({definition.describe_rate()}) on {breakdown.taxable_amount}",
                str(line.amount),
            )

        breakdown.tax_subtotal = sum((l.amount for l in breakdown.tax_lines), ZERO)
        breakdown.total = base_price + breakdown.fee_subtotal + breakdown.tax_subtotal
        breakdown.add_trace("Total", "Base price + fees + taxes", str(breakdown.total))

        return breakdown

    @staticmethod
    def _line(definition: TaxFeeDefinition, basis: Decimal) -> BreakdownLine:
        return BreakdownLine(
            definition_id=definition.id,
            name=definition.name,
            kind=definition.kind,
            amount=definition.amount_against(basis),
        )


_default_calculator = PricingCalculator()


def compute_breakdown(
    base_price,
    selected_fee_ids: Sequence[str],
    selected_tax_ids: Sequence[str],
    definitions: Definitions,
) -> PricingBreakdown:
    """Compute a PricingBreakdown. Never raises on bad input."""
    request = PricingRequest(
        base_price=base_price,
        selected_fee_ids=selected_fee_ids,
        selected_tax_ids=selected_tax_ids,
    )
    return _default_calculator.calculate(request, definitions)
