# billing/api/payments.py

from typing import List

from fastapi import APIRouter, Depends

from billing.api.deps import get_owner_id
from billing.db.engine import run_in_transaction
from billing.models.invoices import MessageOut
from billing.models.payments import PaymentIn, PaymentOut
from billing.services.payments import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("", response_model=List[PaymentOut])
def list_payments(owner_id: str = Depends(get_owner_id)) -> List[PaymentOut]:
    return run_in_transaction(lambda store: PaymentService(store).list(owner_id))


@router.get("/invoice/{invoice_id}", response_model=List[PaymentOut])
def list_invoice_payments(invoice_id: int, owner_id: str = Depends(get_owner_id)) -> List[PaymentOut]:
    return run_in_transaction(
        lambda store: PaymentService(store).list_for_invoice(owner_id, invoice_id)
    )


@router.post("/{invoice_id}", response_model=PaymentOut, status_code=201)
def create_payment(
    invoice_id: int, payload: PaymentIn, owner_id: str = Depends(get_owner_id)
) -> PaymentOut:
    """
    Record a payment; the amount may not exceed the invoice's balance.
    """
    return run_in_transaction(
        lambda store: PaymentService(store).create(owner_id, invoice_id, payload)
    )


@router.put("/{payment_id}", response_model=PaymentOut)
def update_payment(
    payment_id: int, payload: PaymentIn, owner_id: str = Depends(get_owner_id)
) -> PaymentOut:
    return run_in_transaction(
        lambda store: PaymentService(store).update(owner_id, payment_id, payload)
    )


@router.delete("/{payment_id}", response_model=MessageOut)
def delete_payment(payment_id: int, owner_id: str = Depends(get_owner_id)) -> MessageOut:
    run_in_transaction(lambda store: PaymentService(store).delete(owner_id, payment_id))
    return MessageOut(message="Payment removed")
