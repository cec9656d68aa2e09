# billing/models/invoices.py

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DocumentType = Literal["INVOICE", "QUOTATION"]
InvoiceStatus = Literal["UNPAID", "PARTIAL", "PAID"]
TransportMode = Literal["", "Road", "Rail", "Air", "Ship"]


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ProcessCharge(BaseModel):
    name: str = ""
    price: Decimal = Decimal("0")

    @field_validator("price", mode="before")
    @classmethod
    def _price_default(cls, value):
        return Decimal("0") if _blank_to_none(value) is None else value


# ---- Requests ----

class LineItemIn(BaseModel):
    """
    A raw line item as posted by clients. Both the camelCase names used by
    the web client and snake_case are accepted.
    """

    model_config = ConfigDict(populate_by_name=True)

    product: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("product", "product_id", "productId")
    )
    product_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("productName", "product_name")
    )
    name: Optional[str] = None
    description: Optional[str] = None
    hsn_code: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("hsnCode", "hsn_code")
    )
    part_no: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("partNo", "part_no")
    )
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None
    price: Optional[Decimal] = None
    gst_rate: Optional[Decimal] = Field(
        default=None, validation_alias=AliasChoices("gstRate", "gst_rate")
    )
    # legacy name for gst_rate
    tax_rate: Optional[Decimal] = Field(
        default=None, validation_alias=AliasChoices("taxRate", "tax_rate")
    )
    processes: List[ProcessCharge] = Field(default_factory=list)
    tool: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("tool", "toolDetails")
    )

    @field_validator("product", "quantity", "price", "gst_rate", "tax_rate", mode="before")
    @classmethod
    def _blank_numbers(cls, value):
        return _blank_to_none(value)

    @field_validator("processes", mode="before")
    @classmethod
    def _null_processes(cls, value):
        return [] if value is None else value


class InvoiceIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_id: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("customerId", "customer_id", "customer")
    )
    items: List[LineItemIn] = Field(min_length=1)
    type: Optional[DocumentType] = None
    notes: Optional[str] = None
    invoice_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("date", "invoiceDate", "invoice_date")
    )
    due_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("dueDate", "due_date")
    )
    gst_enabled: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("gstEnabled", "gst_enabled")
    )
    eway_bill_no: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ewayBillNo", "eway_bill_no")
    )
    transport_mode: Optional[TransportMode] = Field(
        default=None, validation_alias=AliasChoices("transportMode", "transport_mode")
    )
    vehicle_no: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("vehicleNo", "vehicle_no")
    )
    transporter_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("transporterName", "transporter_name")
    )
    transporter_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("transporterId", "transporter_id")
    )
    distance: Optional[Decimal] = None

    @field_validator("customer_id", "invoice_date", "due_date", "distance", mode="before")
    @classmethod
    def _blank_values(cls, value):
        return _blank_to_none(value)

    def eway_fields(self) -> dict:
        return {
            "eway_bill_no": self.eway_bill_no,
            "transport_mode": self.transport_mode,
            "vehicle_no": self.vehicle_no,
            "transporter_name": self.transporter_name,
            "transporter_id": self.transporter_id,
            "distance": self.distance,
        }


# ---- Resolved items and totals ----

class ResolvedItem(BaseModel):
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    hsn_code: Optional[str] = None
    quantity: Decimal
    unit: Optional[str] = None
    price: Decimal
    gst_rate: Decimal
    processes: List[ProcessCharge] = Field(default_factory=list)
    tool: Optional[str] = None


class LineItemOut(ResolvedItem):
    amount: Decimal
    gst_amount: Decimal
    total_amount: Decimal


class Totals(BaseModel):
    items: List[LineItemOut]
    subtotal: Decimal
    total_tax: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    total: Decimal


# ---- Responses ----

class InvoiceOut(BaseModel):
    id: int
    owner_id: str
    business_id: int
    customer_id: int
    customer_name: Optional[str] = None
    invoice_number: str
    type: DocumentType
    invoice_date: date
    due_date: Optional[date] = None
    items: List[LineItemOut]
    subtotal: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    total_tax: Decimal
    total: Decimal
    paid_amount: Decimal
    balance_amount: Decimal
    status: InvoiceStatus
    gst_enabled: bool
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    eway_bill_no: Optional[str] = None
    transport_mode: Optional[str] = None
    vehicle_no: Optional[str] = None
    transporter_name: Optional[str] = None
    transporter_id: Optional[str] = None
    distance: Optional[Decimal] = None
    source_quotation_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InvoiceSummaryOut(BaseModel):
    id: int
    invoice_number: str
    type: DocumentType
    customer_id: int
    customer_name: Optional[str] = None
    invoice_date: date
    due_date: Optional[date] = None
    total: Decimal
    paid_amount: Decimal
    balance_amount: Decimal
    status: InvoiceStatus


class InvoiceStatsOut(BaseModel):
    total_invoices: int
    total_sales: Decimal
    total_paid: Decimal
    total_outstanding: Decimal
    total_gst: Decimal
    total_cgst: Decimal
    total_sgst: Decimal
    total_igst: Decimal
    paid_invoices: int
    unpaid_invoices: int
    partial_invoices: int


class MessageOut(BaseModel):
    message: str
