"""
Pricing calculator behavior: fee/tax ordering, percentage vs fixed,
lenient base price parsing and display rounding.
"""
from decimal import Decimal, ROUND_HALF_UP
from itertools import permutations

import pytest

from venue_pricing.engine import (
    PricingCalculator,
    PricingRequest,
    compute_breakdown,
    format_amount,
)


@pytest.mark.parametrize("base_price", ["0", "1", "99.99", "500", "12345.678"])
def test_no_selection_total_is_base_price(definitions, base_price):
    breakdown = compute_breakdown(base_price, [], [], definitions)
    assert breakdown.total == Decimal(base_price)
    assert breakdown.fee_lines == []
    assert breakdown.tax_lines == []


def test_fixed_fee_only(make_def):
    defs = [make_def("f", "fee", "fixed", 10)]
    breakdown = compute_breakdown(100, ["f"], [], defs)
    assert breakdown.fee_subtotal == Decimal("10")
    assert breakdown.taxable_amount == Decimal("110")
    assert breakdown.total == Decimal("110")


def test_percentage_fee_only(make_def):
    defs = [make_def("f", "fee", "percentage", 10)]
    breakdown = compute_breakdown(100, ["f"], [], defs)
    assert breakdown.fee_subtotal == Decimal("10")
    assert breakdown.total == Decimal("110")


def test_tax_applies_to_fee_inclusive_amount(make_def):
    defs = [
        make_def("f", "fee", "fixed", 10),
        make_def("t", "tax", "percentage", 10),
    ]
    breakdown = compute_breakdown(100, ["f"], ["t"], defs)
    assert breakdown.taxable_amount == Decimal("110")
    assert breakdown.tax_lines[0].amount == Decimal("11")
    assert breakdown.total == Decimal("121")


def test_fees_do_not_compound(make_def):
    defs = [
        make_def("a", "fee", "percentage", 10),
        make_def("b", "fee", "percentage", 10),
    ]
    breakdown = compute_breakdown(100, ["a", "b"], [], defs)
    assert [line.amount for line in breakdown.fee_lines] == [Decimal("10"), Decimal("10")]
    assert breakdown.fee_subtotal == Decimal("20")
    assert breakdown.taxable_amount == Decimal("120")


def test_taxes_do_not_compound(make_def):
    defs = [
        make_def("t1", "tax", "percentage", 10),
        make_def("t2", "tax", "percentage", 5),
    ]
    breakdown = compute_breakdown(200, [], ["t1", "t2"], defs)
    assert [line.amount for line in breakdown.tax_lines] == [Decimal("20"), Decimal("10")]
    assert breakdown.total == Decimal("230")


def test_fixed_tax_is_not_scaled(make_def):
    defs = [
        make_def("f", "fee", "percentage", 50),
        make_def("t", "tax", "fixed", 3),
    ]
    breakdown = compute_breakdown(100, ["f"], ["t"], defs)
    assert breakdown.tax_subtotal == Decimal("3")
    assert breakdown.total == Decimal("153")


def test_unknown_id_is_ignored(definitions):
    with_unknown = compute_breakdown(500, ["svc", "deleted-fee"], ["sales", "gone"], definitions)
    without = compute_breakdown(500, ["svc"], ["sales"], definitions)
    assert with_unknown.total == without.total
    assert with_unknown.fee_lines == without.fee_lines
    assert with_unknown.warnings == []


@pytest.mark.parametrize("raw", [
    "", "abc", None, "   ", "NaN", "Infinity", "-50", -50, True, "1e",
    "1e1000000", "9" * 30, "1" + "0" * 26, 10 ** 40,
])
def test_invalid_base_price_is_zero(definitions, raw):
    breakdown = compute_breakdown(raw, [], [], definitions)
    assert breakdown.base_price == Decimal("0")
    assert breakdown.total == Decimal("0")


@pytest.mark.parametrize("raw", ["1e1000000", "9" * 30, "1" + "0" * 26])
def test_out_of_range_base_price_with_charges(definitions, raw):
    breakdown = compute_breakdown(raw, ["svc", "grat"], ["sales"], definitions)
    assert breakdown.base_price == Decimal("0")
    assert breakdown.total == Decimal("27.125")

    data = breakdown.to_dict()
    assert data["basePrice"] == "0"
    assert data["displayTotal"] == "27.13"


def test_largest_accepted_base_price(definitions):
    base = "9" * 16
    breakdown = compute_breakdown(base, ["svc", "grat"], ["sales"], definitions)
    assert breakdown.base_price == Decimal(base)
    assert breakdown.total == breakdown.taxable_amount + breakdown.tax_subtotal

    data = breakdown.to_dict()
    assert Decimal(data["total"]) == breakdown.total
    assert Decimal(data["displayTotal"]) == breakdown.total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    assert breakdown.to_display_rows()[-1][1].startswith("$")


def test_invalid_base_price_still_applies_fixed_charges(definitions):
    breakdown = compute_breakdown("", ["svc", "grat"], ["sales"], definitions)
    assert breakdown.fee_subtotal == Decimal("25")
    assert breakdown.taxable_amount == Decimal("25")
    assert breakdown.tax_subtotal == Decimal("2.125")


def test_order_does_not_change_totals(make_def):
    defs = [
        make_def("f1", "fee", "percentage", "7.25"),
        make_def("f2", "fee", "fixed", "13.10"),
        make_def("f3", "service_charge", "percentage", "3"),
        make_def("t1", "tax", "percentage", "6.35"),
        make_def("t2", "tax", "fixed", "1.99"),
    ]
    reference = compute_breakdown("349.95", ["f1", "f2", "f3"], ["t1", "t2"], defs)

    for fees in permutations(["f1", "f2", "f3"]):
        for taxes in permutations(["t1", "t2"]):
            breakdown = compute_breakdown("349.95", list(fees), list(taxes), defs)
            assert breakdown.fee_subtotal == reference.fee_subtotal
            assert breakdown.tax_subtotal == reference.tax_subtotal
            assert breakdown.total == reference.total
            assert [l.definition_id for l in breakdown.fee_lines] == list(fees)
            assert [l.definition_id for l in breakdown.tax_lines] == list(taxes)


def test_reception_scenario(definitions):
    breakdown = compute_breakdown("500", ["svc", "grat"], ["sales"], definitions)

    assert [line.amount for line in breakdown.fee_lines] == [Decimal("25"), Decimal("90")]
    assert breakdown.fee_subtotal == Decimal("115")
    assert breakdown.taxable_amount == Decimal("615")
    assert breakdown.tax_lines[0].amount == Decimal("52.275")
    assert breakdown.total == Decimal("667.275")
    assert breakdown.display_total == Decimal("667.28")
    assert format_amount(breakdown.total) == "$667.28"


def test_total_is_sum_of_parts(definitions):
    breakdown = compute_breakdown("1234.56", ["svc", "grat"], ["sales"], definitions)
    assert breakdown.total == breakdown.base_price + breakdown.fee_subtotal + breakdown.tax_subtotal
    assert breakdown.total == breakdown.taxable_amount + breakdown.tax_subtotal


def test_float_base_price_has_no_binary_drift(make_def):
    defs = [make_def("t", "tax", "percentage", 10)]
    breakdown = compute_breakdown(0.1, [], ["t"], defs)
    assert breakdown.base_price == Decimal("0.1")
    assert breakdown.total == Decimal("0.11")


def test_repeated_id_applies_once(definitions):
    breakdown = compute_breakdown(100, ["svc", "svc"], ["sales", "sales"], definitions)
    assert len(breakdown.fee_lines) == 1
    assert len(breakdown.tax_lines) == 1


def test_kind_mismatch_is_skipped_with_warning(definitions):
    breakdown = compute_breakdown(100, ["sales"], ["grat"], definitions)
    assert breakdown.fee_lines == []
    assert breakdown.tax_lines == []
    assert breakdown.total == Decimal("100")
    assert len(breakdown.warnings) == 2


def test_negative_definition_value_passes_through(make_def):
    defs = [make_def("d", "fee", "fixed", "-15")]
    breakdown = compute_breakdown(100, ["d"], [], defs)
    assert breakdown.fee_subtotal == Decimal("-15")
    assert breakdown.total == Decimal("85")


def test_inactive_definition_is_still_applied_when_selected(make_def):
    defs = [make_def("old", "fee", "fixed", 5, is_active=False)]
    breakdown = compute_breakdown(100, ["old"], [], defs)
    assert breakdown.total == Decimal("105")


def test_definitions_as_mapping(definitions):
    by_id = {d.id: d for d in definitions}
    assert compute_breakdown(500, ["svc"], ["sales"], by_id).total == \
        compute_breakdown(500, ["svc"], ["sales"], definitions).total


def test_calculator_request_and_trace(definitions):
    calculator = PricingCalculator()
    request = PricingRequest(base_price="500", selected_fee_ids=["svc"], selected_tax_ids=["sales"])
    breakdown = calculator.calculate(request, definitions)

    steps = [t.step for t in breakdown.trace]
    assert steps[0] == "Base Price"
    assert "Fee Applied" in steps
    assert "Tax Applied" in steps
    assert steps[-1] == "Total"
    assert "Sales Tax (8.5%)" in breakdown.get_trace_text()


def test_display_rows(definitions):
    breakdown = compute_breakdown("500", ["svc", "grat"], ["sales"], definitions)
    assert breakdown.to_display_rows() == [
        ("Base Price", "$500.00"),
        ("+ Service Charge", "+$25.00"),
        ("+ Gratuity", "+$90.00"),
        ("+ Sales Tax", "+$52.28"),
        ("Total Price", "$667.28"),
    ]


def test_to_dict_keeps_full_precision(definitions):
    data = compute_breakdown("500", ["svc", "grat"], ["sales"], definitions).to_dict()
    assert data["taxLines"][0] == {
        "definitionId": "sales", "name": "Sales Tax", "type": "tax", "amount": "52.275",
    }
    assert Decimal(data["total"]) == Decimal("667.275")
    assert data["displayTotal"] == "667.28"


def test_display_rows_with_whole_currency_units(definitions):
    breakdown = compute_breakdown("500", ["svc", "grat"], ["sales"], definitions)
    assert breakdown.to_display_rows("¥", places=0) == [
        ("Base Price", "¥500"),
        ("+ Service Charge", "+¥25"),
        ("+ Gratuity", "+¥90"),
        ("+ Sales Tax", "+¥52"),
        ("Total Price", "¥667"),
    ]
