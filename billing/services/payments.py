# billing/services/payments.py

import logging
from datetime import date
from decimal import Decimal
from typing import List

from sqlalchemy.engine import RowMapping

from billing.config import INVOICE
from billing.db.store import InvoiceStore
from billing.errors import NotFoundError, UnauthorizedError, ValidationError
from billing.models.invoices import InvoiceOut
from billing.models.payments import PaymentIn, PaymentOut
from billing.services.lifecycle import load_owned_invoice, settlement_values
from billing.services.totals import round_money

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Records payments against invoices.

    After every change the invoice's paid amount is the sum of its payments;
    the balance, status and customer's outstanding balance follow from it.
    """

    def __init__(self, store: InvoiceStore):
        self.store = store

    def _owned_payment(self, owner_id: str, payment_id: int) -> RowMapping:
        payment = self.store.get_payment(payment_id)
        if payment is None:
            raise NotFoundError("Payment not found")
        if payment["owner_id"] != owner_id:
            raise UnauthorizedError("Not authorized")
        return payment

    def _validated_amount(self, amount: Decimal) -> Decimal:
        amount = round_money(amount)
        if amount <= 0:
            raise ValidationError("Invalid payment amount")
        return amount

    def _settle(self, invoice: InvoiceOut) -> None:
        """Bring the invoice and its customer in line with the payments on record."""
        paid = self.store.total_paid(invoice.id)
        applied = paid - invoice.paid_amount

        self.store.update_invoice(invoice.id, settlement_values(invoice.total, paid))
        self.store.adjust_customer_balance(invoice.customer_id, -applied)

    def list(self, owner_id: str) -> List[PaymentOut]:
        return self.store.list_payments(owner_id)

    def list_for_invoice(self, owner_id: str, invoice_id: int) -> List[PaymentOut]:
        load_owned_invoice(self.store, owner_id, invoice_id)
        return self.store.list_payments(owner_id, invoice_id)

    def create(self, owner_id: str, invoice_id: int, payload: PaymentIn) -> PaymentOut:
        invoice = load_owned_invoice(self.store, owner_id, invoice_id, for_update=True)
        if invoice.type != INVOICE:
            raise ValidationError("Payments can only be recorded against invoices")

        amount = self._validated_amount(payload.amount)
        if amount > round_money(invoice.balance_amount):
            raise ValidationError("Payment amount cannot exceed balance amount")

        payment_id = self.store.insert_payment({
            "owner_id": owner_id,
            "invoice_id": invoice.id,
            "customer_id": invoice.customer_id,
            "amount": amount,
            "payment_mode": payload.payment_mode,
            "payment_date": payload.payment_date or date.today(),
            "transaction_id": payload.transaction_id,
            "notes": payload.notes,
        })
        self._settle(invoice)

        logger.info("Recorded payment of %s against %s", amount, invoice.invoice_number)
        return PaymentOut(**self.store.get_payment(payment_id))

    def update(self, owner_id: str, payment_id: int, payload: PaymentIn) -> PaymentOut:
        payment = self._owned_payment(owner_id, payment_id)
        amount = self._validated_amount(payload.amount)

        invoice = self.store.get_invoice(payment["invoice_id"], for_update=True)
        delta = amount - payment["amount"]
        if invoice is not None and delta > 0 and delta > round_money(invoice.balance_amount):
            raise ValidationError("Payment amount cannot exceed balance amount")

        values = {
            "amount": amount,
            "payment_mode": payload.payment_mode,
            "transaction_id": payload.transaction_id,
            "notes": payload.notes,
        }
        if payload.payment_date:
            values["payment_date"] = payload.payment_date
        self.store.update_payment(payment_id, values)
        if invoice is not None:
            self._settle(invoice)

        logger.info("Updated payment %s: %s -> %s", payment_id, payment["amount"], amount)
        return PaymentOut(**self.store.get_payment(payment_id))

    def delete(self, owner_id: str, payment_id: int) -> None:
        payment = self._owned_payment(owner_id, payment_id)

        invoice = self.store.get_invoice(payment["invoice_id"], for_update=True)
        self.store.delete_payment(payment_id)
        if invoice is not None:
            self._settle(invoice)

        logger.info("Deleted payment %s of %s", payment_id, payment["amount"])
