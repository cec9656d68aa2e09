# billing/services/lifecycle.py

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.engine import RowMapping

from billing.config import INVOICE, QUOTATION, Settings, get_settings
from billing.db.store import InvoiceStore
from billing.errors import (
    InvalidTransitionError, NotFoundError, UnauthorizedError, ValidationError
)
from billing.models.invoices import (
    InvoiceIn, InvoiceOut, InvoiceStatsOut, InvoiceSummaryOut, Totals
)
from billing.services.items import ItemResolver
from billing.services.ledger import LedgerReconciler
from billing.services.numbering import DocumentNumberAllocator
from billing.services.totals import ZERO, compute_totals, derive_status, recompute

logger = logging.getLogger(__name__)


def load_owned_invoice(
    store: InvoiceStore, owner_id: str, invoice_id: int, for_update: bool = False
) -> InvoiceOut:
    invoice = store.get_invoice(invoice_id, for_update=for_update)
    if invoice is None:
        raise NotFoundError("Invoice not found")
    if invoice.owner_id != owner_id:
        raise UnauthorizedError("Not authorized")
    return invoice


def settlement_values(total: Decimal, paid_amount: Decimal) -> Dict:
    return {
        "paid_amount": paid_amount,
        "balance_amount": total - paid_amount,
        "status": derive_status(paid_amount, total),
    }


def _totals_values(totals: Totals, paid_amount: Decimal) -> Dict:
    values = {
        "subtotal": totals.subtotal,
        "cgst": totals.cgst,
        "sgst": totals.sgst,
        "igst": totals.igst,
        "total_tax": totals.total_tax,
        "total": totals.total,
    }
    values.update(settlement_values(totals.total, paid_amount))
    return values


def _state(record: Optional[RowMapping]) -> Optional[str]:
    return record["state"] if record is not None else None


class InvoiceLifecycle:
    """
    Create, update, delete and convert sales documents.

    Each call must run inside one transaction (see ``run_in_transaction``):
    numbering, document writes and ledger adjustments either all land or
    none do.
    """

    def __init__(self, store: InvoiceStore, settings: Settings = None):
        self.store = store
        self.settings = settings or get_settings()
        self.numbers = DocumentNumberAllocator(store, self.settings)
        self.ledger = LedgerReconciler(store)

    # ---- Lookups ----

    def _business(self, owner_id: str) -> RowMapping:
        business = self.store.get_business_for_owner(owner_id)
        if business is None:
            raise NotFoundError(
                "Business profile not found. Please complete business profile first."
            )
        return business

    def _customer(self, owner_id: str, customer_id: Optional[int]) -> RowMapping:
        if customer_id is None:
            raise ValidationError("Customer is required")
        customer = self.store.get_customer(customer_id)
        if customer is None:
            raise NotFoundError("Customer not found")
        if customer["owner_id"] != owner_id:
            raise UnauthorizedError("Not authorized")
        return customer

    def _resolver(self, owner_id: str) -> ItemResolver:
        def lookup(product_id: int) -> Optional[RowMapping]:
            product = self.store.get_product(product_id)
            if product is not None and product["owner_id"] != owner_id:
                raise UnauthorizedError("Not authorized")
            return product

        return ItemResolver(lookup, self.settings)

    # ---- Reads ----

    def get(self, owner_id: str, invoice_id: int) -> InvoiceOut:
        return load_owned_invoice(self.store, owner_id, invoice_id)

    def list(self, owner_id: str, doc_type: Optional[str] = None) -> List[InvoiceSummaryOut]:
        return self.store.list_invoices(owner_id, doc_type)

    def stats(self, owner_id: str) -> InvoiceStatsOut:
        return self.store.invoice_stats(owner_id)

    # ---- Mutations ----

    def create(self, owner_id: str, payload: InvoiceIn) -> InvoiceOut:
        business = self._business(owner_id)
        customer = self._customer(owner_id, payload.customer_id)
        doc_type = payload.type or INVOICE
        gst_enabled = True if payload.gst_enabled is None else payload.gst_enabled

        items = self._resolver(owner_id).resolve_all(payload.items)
        totals = compute_totals(items, gst_enabled, _state(business), _state(customer))

        number = self.numbers.allocate(business, doc_type)

        values = {
            "owner_id": owner_id,
            "business_id": business["id"],
            "customer_id": customer["id"],
            "invoice_number": number,
            "type": doc_type,
            "invoice_date": payload.invoice_date or date.today(),
            "due_date": payload.due_date,
            "notes": payload.notes,
            "terms_and_conditions": business["terms_and_conditions"],
            "gst_enabled": gst_enabled,
        }
        values.update(payload.eway_fields())
        values["transport_mode"] = values["transport_mode"] or ""
        values.update(_totals_values(totals, ZERO))

        invoice_id = self.store.insert_invoice(values, totals.items)
        document = self.store.get_invoice(invoice_id)
        self.ledger.commit(document)

        logger.info("Created document %s type %s total %s", number, doc_type, document.total)
        return document

    def update(self, owner_id: str, invoice_id: int, payload: InvoiceIn) -> InvoiceOut:
        existing = load_owned_invoice(self.store, owner_id, invoice_id, for_update=True)
        if payload.type is not None and payload.type != existing.type:
            raise InvalidTransitionError(
                f"Cannot change a {existing.type} into a {payload.type}; convert the quotation instead"
            )

        customer = self._customer(owner_id, payload.customer_id or existing.customer_id)
        business = self.store.get_business(existing.business_id)
        gst_enabled = existing.gst_enabled if payload.gst_enabled is None else payload.gst_enabled

        items = self._resolver(owner_id).resolve_all(payload.items)
        totals = compute_totals(items, gst_enabled, _state(business), _state(customer))

        # stored items, balance and customer are what the ledgers currently hold
        self.ledger.revert(existing)

        values = {
            "customer_id": customer["id"],
            "invoice_date": payload.invoice_date or existing.invoice_date,
            "due_date": payload.due_date or existing.due_date,
            "notes": payload.notes if payload.notes is not None else existing.notes,
            "gst_enabled": gst_enabled,
        }
        for field, value in payload.eway_fields().items():
            values[field] = value if value is not None else getattr(existing, field)
        values.update(_totals_values(totals, existing.paid_amount))

        self.store.update_invoice(invoice_id, values, totals.items)
        if customer["id"] != existing.customer_id:
            self.store.reassign_payments(invoice_id, customer["id"])

        document = self.store.get_invoice(invoice_id)
        self.ledger.commit(document)

        logger.info("Updated document %s type %s total %s", document.invoice_number, document.type, document.total)
        return document

    def delete(self, owner_id: str, invoice_id: int) -> None:
        existing = load_owned_invoice(self.store, owner_id, invoice_id, for_update=True)

        self.ledger.revert(existing)
        # payments are already netted into balance_amount, so they go with the document
        removed = self.store.delete_payments_for_invoice(invoice_id)
        self.store.delete_invoice(invoice_id)

        logger.info(
            "Deleted document %s type %s (%s payments removed)",
            existing.invoice_number, existing.type, removed,
        )

    def convert(self, owner_id: str, quotation_id: int) -> InvoiceOut:
        quotation = load_owned_invoice(self.store, owner_id, quotation_id, for_update=True)
        if quotation.type != QUOTATION:
            raise InvalidTransitionError("Only quotations can be converted to invoices")

        converted_id = self.store.find_conversion(quotation.id)
        if converted_id is not None:
            raise InvalidTransitionError(
                f"Quotation {quotation.invoice_number} has already been converted"
            )

        business = self.store.get_business(quotation.business_id)
        if business is None:
            raise NotFoundError("Business profile not found")

        customer = self.store.get_customer(quotation.customer_id)
        totals = recompute(quotation, _state(business), _state(customer))

        number = self.numbers.allocate(business, INVOICE)

        values = {
            "owner_id": quotation.owner_id,
            "business_id": quotation.business_id,
            "customer_id": quotation.customer_id,
            "invoice_number": number,
            "type": INVOICE,
            "invoice_date": date.today(),
            "due_date": quotation.due_date,
            "notes": quotation.notes,
            "terms_and_conditions": quotation.terms_and_conditions,
            "gst_enabled": quotation.gst_enabled,
            "eway_bill_no": quotation.eway_bill_no,
            "transport_mode": quotation.transport_mode or "",
            "vehicle_no": quotation.vehicle_no,
            "transporter_name": quotation.transporter_name,
            "transporter_id": quotation.transporter_id,
            "distance": quotation.distance,
            "source_quotation_id": quotation.id,
        }
        values.update(_totals_values(totals, ZERO))

        invoice_id = self.store.insert_invoice(values, totals.items)
        document = self.store.get_invoice(invoice_id)
        self.ledger.commit(document)

        logger.info("Converted quotation %s into invoice %s", quotation.invoice_number, number)
        return document
