# billing/api/invoices.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from billing.api.deps import get_owner_id
from billing.db.engine import run_in_transaction
from billing.models.invoices import (
    DocumentType,
    InvoiceIn,
    InvoiceOut,
    InvoiceStatsOut,
    InvoiceSummaryOut,
    MessageOut,
)
from billing.services.lifecycle import InvoiceLifecycle

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get("", response_model=List[InvoiceSummaryOut])
def list_invoices(
    type: Optional[DocumentType] = Query(
        default=None,
        description="INVOICE | QUOTATION; INVOICE also returns legacy untyped documents",
    ),
    owner_id: str = Depends(get_owner_id),
) -> List[InvoiceSummaryOut]:
    """
    Return the owner's documents, newest first.
    """
    return run_in_transaction(lambda store: InvoiceLifecycle(store).list(owner_id, type))


@router.get("/stats/summary", response_model=InvoiceStatsOut)
def invoice_stats(owner_id: str = Depends(get_owner_id)) -> InvoiceStatsOut:
    """
    Totals and status counts across all of the owner's documents.
    """
    return run_in_transaction(lambda store: InvoiceLifecycle(store).stats(owner_id))


@router.get("/{invoice_id}", response_model=InvoiceOut)
def get_invoice(invoice_id: int, owner_id: str = Depends(get_owner_id)) -> InvoiceOut:
    return run_in_transaction(lambda store: InvoiceLifecycle(store).get(owner_id, invoice_id))


@router.post("", response_model=InvoiceOut, status_code=201)
def create_invoice(payload: InvoiceIn, owner_id: str = Depends(get_owner_id)) -> InvoiceOut:
    """
    Create an invoice or quotation. Invoices commit stock and customer balance.
    """
    return run_in_transaction(lambda store: InvoiceLifecycle(store).create(owner_id, payload))


@router.put("/{invoice_id}", response_model=InvoiceOut)
def update_invoice(
    invoice_id: int, payload: InvoiceIn, owner_id: str = Depends(get_owner_id)
) -> InvoiceOut:
    return run_in_transaction(
        lambda store: InvoiceLifecycle(store).update(owner_id, invoice_id, payload)
    )


@router.delete("/{invoice_id}", response_model=MessageOut)
def delete_invoice(invoice_id: int, owner_id: str = Depends(get_owner_id)) -> MessageOut:
    run_in_transaction(lambda store: InvoiceLifecycle(store).delete(owner_id, invoice_id))
    return MessageOut(message="Invoice removed")


@router.post("/{invoice_id}/convert", response_model=InvoiceOut, status_code=201)
def convert_to_invoice(invoice_id: int, owner_id: str = Depends(get_owner_id)) -> InvoiceOut:
    """
    Turn a quotation into a new invoice. The quotation itself is left as it was.
    """
    return run_in_transaction(lambda store: InvoiceLifecycle(store).convert(owner_id, invoice_id))
