"""Engine subpackage - core pricing logic and resolution."""
from .pricing_calculator import PricingCalculator, compute_breakdown
from .models import (
    BreakdownLine,
    CalculationMethod,
    DefinitionKind,
    PricingBreakdown,
    PricingRequest,
    TaxFeeDefinition,
)
from .money import format_amount, parse_money_or_zero, round_money
from .selection import TaxFeeSelection

__all__ = [
    'PricingCalculator', 'compute_breakdown',
    'BreakdownLine', 'CalculationMethod', 'DefinitionKind',
    'PricingBreakdown', 'PricingRequest', 'TaxFeeDefinition',
    'format_amount', 'parse_money_or_zero', 'round_money',
    'TaxFeeSelection',
]
