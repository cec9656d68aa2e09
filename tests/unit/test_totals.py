"""Unit tests for GST totals and payment status."""

from decimal import Decimal

import pytest

from billing.models.invoices import InvoiceOut, ResolvedItem
from billing.services.totals import compute_totals, derive_status, is_inter_state, recompute


def item(quantity, price, rate, product_id=None):
    return ResolvedItem(
        product_id=product_id,
        product_name="Item",
        quantity=Decimal(str(quantity)),
        price=Decimal(str(price)),
        gst_rate=Decimal(str(rate)),
    )


def test_inter_state_sale_goes_to_igst():
    totals = compute_totals([item(2, 100, 18)], True, "Maharashtra", "Gujarat")

    assert totals.subtotal == Decimal("200")
    assert totals.total_tax == Decimal("36")
    assert totals.total == Decimal("236")
    assert totals.igst == Decimal("36")
    assert totals.cgst == 0
    assert totals.sgst == 0


def test_intra_state_sale_splits_cgst_and_sgst():
    totals = compute_totals([item(2, 100, 18)], True, "Maharashtra", "Maharashtra")

    assert totals.cgst == Decimal("18")
    assert totals.sgst == Decimal("18")
    assert totals.igst == 0
    assert totals.total == Decimal("236")


def test_state_comparison_ignores_case_and_whitespace():
    assert not is_inter_state("Maharashtra", "  maharashtra ")
    assert is_inter_state("maharashtra", "GUJARAT")


@pytest.mark.parametrize("business_state, customer_state", [
    (None, "Gujarat"),
    ("Maharashtra", None),
    ("", "Gujarat"),
    (None, None),
])
def test_unknown_state_defaults_to_split(business_state, customer_state):
    totals = compute_totals([item(1, 100, 18)], True, business_state, customer_state)

    assert totals.igst == 0
    assert totals.cgst == Decimal("9")
    assert totals.sgst == Decimal("9")


def test_line_amounts():
    totals = compute_totals([item(3, "12.50", 5), item(1, 40, 12)], True, "MH", "MH")
    first, second = totals.items

    assert first.amount == Decimal("37.50")
    assert first.gst_amount == Decimal("1.875")
    assert first.total_amount == Decimal("39.375")
    assert second.amount == Decimal("40")
    assert second.gst_amount == Decimal("4.80")

    assert totals.subtotal == first.amount + second.amount
    assert totals.total_tax == first.gst_amount + second.gst_amount
    assert totals.total == totals.subtotal + totals.total_tax


def test_gst_disabled_charges_no_tax():
    totals = compute_totals([item(2, 100, 18)], False, "Maharashtra", "Gujarat")

    assert totals.total_tax == 0
    assert totals.igst == 0
    assert totals.total == Decimal("200")
    assert all(i.gst_amount == 0 for i in totals.items)


def test_odd_paise_tax_splits_into_equal_halves():
    totals = compute_totals([item(1, "1", 5)], True, "MH", "MH")

    assert totals.total_tax == Decimal("0.05")
    assert totals.cgst == totals.sgst == totals.total_tax / 2 == Decimal("0.025")
    assert totals.cgst + totals.sgst == totals.total_tax


def test_line_amount_is_not_rounded():
    totals = compute_totals([item("1.5", "10.33", 18)], True, "MH", "Gujarat")
    line = totals.items[0]

    assert line.amount == Decimal("1.5") * Decimal("10.33") == Decimal("15.495")
    assert line.gst_amount == line.amount * 18 / 100
    assert totals.igst == totals.total_tax == Decimal("2.7891")
    assert totals.total == Decimal("18.2841")


def test_recompute_is_idempotent_and_ignores_stored_totals():
    totals = compute_totals([item(2, 100, 18)], True, "Maharashtra", "Gujarat")
    document = InvoiceOut(
        id=1, owner_id="o", business_id=1, customer_id=1, invoice_number="INV-0001",
        type="INVOICE", invoice_date="2026-01-01", items=totals.items,
        subtotal=Decimal("999"), cgst=0, sgst=0, igst=0, total_tax=Decimal("1"),
        total=Decimal("1000"), paid_amount=0, balance_amount=Decimal("1000"),
        status="UNPAID", gst_enabled=True,
    )

    first = recompute(document, "Maharashtra", "Gujarat")
    second = recompute(document, "Maharashtra", "Gujarat")

    assert first == second == totals


@pytest.mark.parametrize("paid, total, expected", [
    ("0", "236", "UNPAID"),
    ("100", "236", "PARTIAL"),
    ("236", "236", "PAID"),
    ("300", "236", "PAID"),
    ("236.00", "236.0041", "PAID"),
    ("235.99", "236.0041", "PARTIAL"),
    ("0", "0", "UNPAID"),
])
def test_derive_status(paid, total, expected):
    assert derive_status(Decimal(paid), Decimal(total)) == expected
