"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Sequence

from .money import ZERO, format_amount, round_money, to_decimal


class DefinitionKind(str, Enum):
    """What a tax/fee definition represents."""
    TAX = "tax"
    FEE = "fee"
    SERVICE_CHARGE = "service_charge"

    @property
    def is_fee(self) -> bool:
        """Fees and service charges are both additive pre-tax charges."""
        return self in (DefinitionKind.FEE, DefinitionKind.SERVICE_CHARGE)

    @property
    def label(self) -> str:
        if self is DefinitionKind.TAX:
            return "Tax"
        if self is DefinitionKind.SERVICE_CHARGE:
            return "Service Charge"
        return "Fee"


class CalculationMethod(str, Enum):
    """How a definition's value is turned into an amount."""
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def _pick(record: dict, *keys: str, default: Any = None) -> Any:
    """Return the first key present in record (camelCase or snake_case)."""
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return default


def parse_bool(value: Any, default: bool = True) -> bool:
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('true', '1', 'yes', 'on')


def parse_id_list(value: Any) -> list[str]:
    """Accept a list of ids or a ';'-joined string."""
    if value is None or value == '':
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(';') if v.strip()]
    return [str(v) for v in value]


@dataclass(frozen=True)
class TaxFeeDefinition:
    """A configured tax, fee or service charge."""
    id: str
    name: str
    kind: DefinitionKind
    calculation: CalculationMethod
    value: Decimal
    apply_to: str = "all"  # advisory scope label, never filtered on by the calculator
    is_active: bool = True

    # Stored metadata, not used in the calculation
    is_taxable: bool = False
    applicable_tax_ids: tuple[str, ...] = ()
    description: Optional[str] = None

    def amount_against(self, basis: Decimal) -> Decimal:
        """Contribution of this definition against `basis`."""
        if self.calculation is CalculationMethod.PERCENTAGE:
            return basis * self.value / 100
        return self.value

    def describe_rate(self, currency_symbol: str = "$") -> str:
        """Short rate label, e.g. '8.5%' or '$25.00'."""
        if self.calculation is CalculationMethod.PERCENTAGE:
            return f"{self.value.normalize():f}%"
        return format_amount(self.value, currency_symbol)

    @classmethod
    def from_record(cls, record: dict) -> 'TaxFeeDefinition':
        """
        Build a definition from a raw record.

        Accepts the REST shape (`type`, `calculation`, `applyTo`, `isActive`)
        and the snake_case CSV shape. An unparseable value becomes 0;
        an unknown type or calculation raises ValueError.
        """
        return cls(
            id=str(_pick(record, 'id', default='')),
            name=str(_pick(record, 'name', default='')),
            kind=DefinitionKind(str(_pick(record, 'type', 'kind', default='')).strip().lower()),
            calculation=CalculationMethod(
                str(_pick(record, 'calculation', 'calculation_method', 'calculationMethod', default='')).strip().lower()
            ),
            value=to_decimal(_pick(record, 'value')),
            apply_to=str(_pick(record, 'apply_to', 'applyTo', default='all')) or 'all',
            is_active=parse_bool(_pick(record, 'is_active', 'isActive')),
            is_taxable=parse_bool(_pick(record, 'is_taxable', 'isTaxable'), default=False),
            applicable_tax_ids=tuple(parse_id_list(_pick(record, 'applicable_tax_ids', 'applicableTaxIds'))),
            description=_pick(record, 'description') or None,
        )

    def to_dict(self) -> dict:
        """REST representation (camelCase, value as string)."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.kind.value,
            "calculation": self.calculation.value,
            "value": str(self.value),
            "applyTo": self.apply_to,
            "isActive": self.is_active,
            "isTaxable": self.is_taxable,
            "applicableTaxIds": list(self.applicable_tax_ids),
            "description": self.description,
        }


@dataclass
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class PricingRequest:
    """A pricing request: raw base price plus the selected definition ids."""
    base_price: Any = None  # raw form input; coerced with parse_money_or_zero
    selected_fee_ids: Sequence[str] = field(default_factory=list)
    selected_tax_ids: Sequence[str] = field(default_factory=list)


@dataclass
class BreakdownLine:
    """One fee or tax line in a breakdown, at full precision."""
    definition_id: str
    name: str
    kind: DefinitionKind
    amount: Decimal

    def to_dict(self) -> dict:
        return {
            "definitionId": self.definition_id,
            "name": self.name,
            "type": self.kind.value,
            "amount": str(self.amount),
        }


@dataclass
class PricingBreakdown:
    """Complete result of a pricing calculation."""
    base_price: Decimal
    fee_lines: list[BreakdownLine] = field(default_factory=list)
    fee_subtotal: Decimal = ZERO
    taxable_amount: Decimal = ZERO
    tax_lines: list[BreakdownLine] = field(default_factory=list)
    tax_subtotal: Decimal = ZERO
    total: Decimal = ZERO
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    @property
    def display_total(self) -> Decimal:
        """Total rounded half-up to cents."""
        return round_money(self.total)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the breakdown trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a breakdown-level warning."""
        if warning not in self.warnings:
            self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_display_rows(self, currency_symbol: str = "$", places: int = 2) -> list[tuple[str, str]]:
        """Itemized rows for rendering: Base Price, + fees, + taxes, Total Price."""
        rows = [("Base Price", format_amount(self.base_price, currency_symbol, places))]
        for line in self.fee_lines + self.tax_lines:
            rows.append((f"+ {line.name}", f"+{format_amount(line.amount, currency_symbol, places)}"))
        rows.append(("Total Price", format_amount(self.total, currency_symbol, places)))
        return rows

    def to_dict(self) -> dict:
        """JSON-friendly representation with full-precision amounts as strings."""
        return {
            "basePrice": str(self.base_price),
            "feeLines": [line.to_dict() for line in self.fee_lines],
            "feeSubtotal": str(self.fee_subtotal),
            "taxableAmount": str(self.taxable_amount),
            "taxLines": [line.to_dict() for line in self.tax_lines],
            "taxSubtotal": str(self.tax_subtotal),
            "total": str(self.total),
            "displayTotal": str(self.display_total),
            "warnings": list(self.warnings),
        }
