# billing/models/payments.py

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

PaymentMode = Literal["CASH", "UPI", "BANK", "CARD", "CHEQUE", "ACH"]


class PaymentIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: Decimal
    payment_mode: PaymentMode = Field(
        validation_alias=AliasChoices("paymentMode", "payment_mode", "mode")
    )
    transaction_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("transactionId", "transaction_id")
    )
    notes: Optional[str] = None
    payment_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("paymentDate", "payment_date", "date")
    )


class PaymentOut(BaseModel):
    id: int
    invoice_id: int
    invoice_number: Optional[str] = None
    customer_id: int
    amount: Decimal
    payment_mode: PaymentMode
    payment_date: date
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
