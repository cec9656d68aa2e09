# billing/services/totals.py
"""
GST arithmetic for sales documents.

Everything here is pure: the same items, flag and states always give the
same totals, whatever is currently stored on a document.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from billing.models.invoices import InvoiceOut, LineItemOut, ResolvedItem, Totals

ZERO = Decimal("0.00")
CENT = Decimal("0.01")
MILLI = Decimal("0.001")


def round_money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_quantity(value) -> Decimal:
    return Decimal(value).quantize(MILLI, rounding=ROUND_HALF_UP)


def _normalize_state(state: Optional[str]) -> Optional[str]:
    if state is None:
        return None
    state = state.strip().lower()
    return state or None


def is_inter_state(business_state: Optional[str], customer_state: Optional[str]) -> bool:
    """Unknown states fall back to the intra-state (CGST + SGST) regime."""
    b = _normalize_state(business_state)
    c = _normalize_state(customer_state)
    return b is not None and c is not None and b != c


def price_item(item: ResolvedItem, gst_enabled: bool) -> LineItemOut:
    # line figures stay exact; only entered prices and payments are in paise
    amount = item.quantity * item.price
    gst_amount = amount * item.gst_rate / 100 if gst_enabled else ZERO
    return LineItemOut(
        **item.model_dump(),
        amount=amount,
        gst_amount=gst_amount,
        total_amount=amount + gst_amount,
    )


def compute_totals(
    items: Iterable[ResolvedItem],
    gst_enabled: bool,
    business_state: Optional[str],
    customer_state: Optional[str],
) -> Totals:
    priced = [price_item(item, gst_enabled) for item in items]

    subtotal = sum((i.amount for i in priced), ZERO)
    total_tax = sum((i.gst_amount for i in priced), ZERO)

    if is_inter_state(business_state, customer_state):
        cgst, sgst, igst = ZERO, ZERO, total_tax
    else:
        cgst = sgst = total_tax / 2
        igst = ZERO

    return Totals(
        items=priced,
        subtotal=subtotal,
        total_tax=total_tax,
        cgst=cgst,
        sgst=sgst,
        igst=igst,
        total=subtotal + total_tax,
    )


def recompute(
    document: InvoiceOut,
    business_state: Optional[str],
    customer_state: Optional[str],
) -> Totals:
    """Recompute totals from a stored document's own items."""
    items = [ResolvedItem(**i.model_dump(include=set(ResolvedItem.model_fields))) for i in document.items]
    return compute_totals(items, document.gst_enabled, business_state, customer_state)


def derive_status(paid_amount: Decimal, total: Decimal) -> str:
    """Settlement is judged to the paisa."""
    if paid_amount <= 0:
        return "UNPAID"
    if round_money(paid_amount) >= round_money(total):
        return "PAID"
    return "PARTIAL"
