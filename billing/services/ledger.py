# billing/services/ledger.py

import logging
from decimal import Decimal
from typing import Iterable

from billing.config import INVOICE
from billing.db.store import InvoiceStore, document_type
from billing.models.invoices import InvoiceOut, ResolvedItem

logger = logging.getLogger(__name__)

COMMIT = 1
REVERT = -1


class LedgerReconciler:
    """
    Applies or reverses the stock and outstanding-balance effects of a document.

    Only INVOICE documents move the ledgers; quotations are a no-op. Every
    adjustment is a single arithmetic UPDATE, so concurrent documents touching
    the same product or customer cannot lose each other's changes.
    """

    def __init__(self, store: InvoiceStore):
        self.store = store

    def apply(
        self,
        doc_type: str,
        items: Iterable[ResolvedItem],
        customer_id: int,
        balance_amount: Decimal,
        sign: int,
    ) -> None:
        if sign not in (COMMIT, REVERT):
            raise ValueError(f"sign must be +1 or -1, got {sign!r}")
        if document_type(doc_type) != INVOICE:
            return

        for item in items:
            if item.product_id is None:
                continue
            row = self.store.adjust_stock(item.product_id, -sign * item.quantity)
            if row is None:
                logger.debug("Product %s no longer exists, stock untouched", item.product_id)
            elif row["stock"] <= row["low_stock_threshold"]:
                logger.warning(
                    "Low stock: %s has %s left (threshold %s)",
                    row["name"], row["stock"], row["low_stock_threshold"],
                )

        if not self.store.adjust_customer_balance(customer_id, sign * balance_amount):
            logger.debug("Customer %s no longer exists, balance untouched", customer_id)

    def commit(self, document: InvoiceOut) -> None:
        self.apply(document.type, document.items, document.customer_id, document.balance_amount, COMMIT)

    def revert(self, document: InvoiceOut) -> None:
        self.apply(document.type, document.items, document.customer_id, document.balance_amount, REVERT)
