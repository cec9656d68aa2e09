# billing/db/schema.py

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey,
    Integer, MetaData, Numeric, String, Table, Text, UniqueConstraint, func
)

metadata = MetaData()

businesses = Table(
    "businesses",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", String, nullable=False, unique=True),
    Column("business_name", String, nullable=False),
    Column("gstin", String, nullable=True),
    Column("street", String, nullable=True),
    Column("city", String, nullable=True),
    Column("state", String, nullable=True),
    Column("pincode", String, nullable=True),
    Column("terms_and_conditions", Text, nullable=True),
    Column("invoice_prefix", String, nullable=False, server_default="INV"),
    Column("invoice_counter", Integer, nullable=False, server_default="0"),
    Column("quotation_prefix", String, nullable=False, server_default="QTN"),
    Column("quotation_counter", Integer, nullable=False, server_default="0"),
)

customers = Table(
    "customers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", String, nullable=False, index=True),
    Column("name", String, nullable=False),
    Column("phone", String, nullable=True),
    Column("email", String, nullable=True),
    Column("gstin", String, nullable=True),
    Column("state", String, nullable=True),
    Column("outstanding_balance", Numeric(20, 8), nullable=False, server_default="0"),
)

products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", String, nullable=False, index=True),
    Column("name", String, nullable=False),
    Column("hsn_code", String, nullable=True),
    Column("unit", String, nullable=False, server_default="PCS"),
    Column("price", Numeric(18, 2), nullable=False, server_default="0"),
    Column("gst_rate", Numeric(5, 2), nullable=False, server_default="18"),
    Column("stock", Numeric(18, 3), nullable=False, server_default="0"),
    Column("low_stock_threshold", Numeric(18, 3), nullable=False, server_default="10"),
    Column("is_active", Boolean, nullable=False, server_default="1"),
)

invoices = Table(
    "invoices",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("owner_id", String, nullable=False, index=True),
    Column("business_id", Integer, ForeignKey("businesses.id"), nullable=False),
    Column("customer_id", Integer, ForeignKey("customers.id"), nullable=False),
    Column("invoice_number", Text, nullable=False),
    # NULL marks a legacy record created before documents were typed
    Column("type", String, nullable=True),
    Column("invoice_date", Date, nullable=False),
    Column("due_date", Date, nullable=True),
    # computed figures are stored unrounded; entered prices and payments are in paise
    Column("subtotal", Numeric(20, 8), nullable=False),
    Column("cgst", Numeric(20, 8), nullable=False, server_default="0"),
    Column("sgst", Numeric(20, 8), nullable=False, server_default="0"),
    Column("igst", Numeric(20, 8), nullable=False, server_default="0"),
    Column("total_tax", Numeric(20, 8), nullable=False),
    Column("total", Numeric(20, 8), nullable=False),
    Column("paid_amount", Numeric(18, 2), nullable=False, server_default="0"),
    Column("balance_amount", Numeric(20, 8), nullable=False, server_default="0"),
    Column("status", String, nullable=False, server_default="UNPAID"),
    Column("gst_enabled", Boolean, nullable=False, server_default="1"),
    Column("notes", Text),
    Column("terms_and_conditions", Text),
    Column("eway_bill_no", String),
    Column("transport_mode", String, server_default=""),
    Column("vehicle_no", String),
    Column("transporter_name", String),
    Column("transporter_id", String),
    Column("distance", Numeric(10, 2)),
    Column("source_quotation_id", Integer, nullable=True),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    UniqueConstraint("business_id", "invoice_number", name="uq_invoices_business_number"),
    CheckConstraint("total >= 0", name="ck_invoices_total_nonneg"),
    CheckConstraint("paid_amount >= 0", name="ck_invoices_paid_nonneg"),
)

invoice_items = Table(
    "invoice_items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("invoice_id", Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("position", Integer, nullable=False),
    Column("product_id", Integer, nullable=True),
    Column("product_name", String),
    Column("hsn_code", String),
    Column("quantity", Numeric(18, 3), nullable=False),
    Column("unit", String),
    Column("price", Numeric(18, 2), nullable=False),
    Column("gst_rate", Numeric(5, 2), nullable=False),
    Column("processes", JSON, nullable=False),
    Column("tool", String),
    Column("amount", Numeric(20, 8), nullable=False),
    Column("gst_amount", Numeric(20, 8), nullable=False),
    Column("total_amount", Numeric(20, 8), nullable=False),
    CheckConstraint("quantity > 0", name="ck_invoice_items_quantity_pos"),
)

payments = Table(
    "payments",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("owner_id", String, nullable=False, index=True),
    Column("invoice_id", Integer, ForeignKey("invoices.id"), nullable=False, index=True),
    Column("customer_id", Integer, ForeignKey("customers.id"), nullable=False),
    Column("amount", Numeric(18, 2), nullable=False),
    Column("payment_mode", String, nullable=False),
    Column("payment_date", Date, nullable=False),
    Column("transaction_id", String),
    Column("notes", Text),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    CheckConstraint("amount > 0", name="ck_payments_amount_pos"),
)
