# billing/db/store.py

from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import and_, case, delete, func, or_, select, update
from sqlalchemy.engine import Connection, RowMapping

from billing.config import INVOICE, QUOTATION
from billing.db.schema import (
    businesses, customers, invoice_items, invoices, payments, products
)
from billing.models.invoices import (
    InvoiceOut,
    InvoiceStatsOut,
    InvoiceSummaryOut,
    LineItemOut,
    ProcessCharge,
)
from billing.models.payments import PaymentOut

_COUNTER_COLUMNS = {
    INVOICE: ("invoice_prefix", "invoice_counter"),
    QUOTATION: ("quotation_prefix", "quotation_counter"),
}


def document_type(value: Optional[str]) -> str:
    """Legacy documents have no type and are invoices."""
    return value or INVOICE


def type_filter(doc_type: str):
    if doc_type == INVOICE:
        return or_(invoices.c.type == INVOICE, invoices.c.type.is_(None))
    return invoices.c.type == doc_type


def _row_to_item(row) -> LineItemOut:
    return LineItemOut(
        product_id=row["product_id"],
        product_name=row["product_name"],
        hsn_code=row["hsn_code"],
        quantity=row["quantity"],
        unit=row["unit"],
        price=row["price"],
        gst_rate=row["gst_rate"],
        processes=[ProcessCharge(**p) for p in (row["processes"] or [])],
        tool=row["tool"],
        amount=row["amount"],
        gst_amount=row["gst_amount"],
        total_amount=row["total_amount"],
    )


def _item_values(invoice_id: int, position: int, item: LineItemOut) -> Dict:
    return {
        "invoice_id": invoice_id,
        "position": position,
        "product_id": item.product_id,
        "product_name": item.product_name,
        "hsn_code": item.hsn_code,
        "quantity": item.quantity,
        "unit": item.unit,
        "price": item.price,
        "gst_rate": item.gst_rate,
        "processes": [p.model_dump(mode="json") for p in item.processes],
        "tool": item.tool,
        "amount": item.amount,
        "gst_amount": item.gst_amount,
        "total_amount": item.total_amount,
    }


class InvoiceStore:
    """
    Persistence boundary for the billing core.

    A store wraps one connection that is already inside a transaction; it
    never commits on its own.
    """

    def __init__(self, conn: Connection):
        self.conn = conn

    # ---- Businesses ----

    def get_business_for_owner(self, owner_id: str) -> Optional[RowMapping]:
        stmt = select(businesses).where(businesses.c.owner_id == owner_id)
        return self.conn.execute(stmt).mappings().first()

    def get_business(self, business_id: int) -> Optional[RowMapping]:
        stmt = select(businesses).where(businesses.c.id == business_id)
        return self.conn.execute(stmt).mappings().first()

    def increment_counter(self, business_id: int, doc_type: str) -> Tuple[str, int]:
        """
        Atomically bump the counter for doc_type and return (prefix, new value).
        """
        prefix_col, counter_col = _COUNTER_COLUMNS[doc_type]
        counter = businesses.c[counter_col]

        self.conn.execute(
            update(businesses)
            .where(businesses.c.id == business_id)
            .values({counter_col: counter + 1})
        )
        row = self.conn.execute(
            select(businesses.c[prefix_col], counter).where(businesses.c.id == business_id)
        ).first()
        return row[0], row[1]

    def set_counter(self, business_id: int, doc_type: str, value: int) -> None:
        _, counter_col = _COUNTER_COLUMNS[doc_type]
        self.conn.execute(
            update(businesses)
            .where(businesses.c.id == business_id)
            .values({counter_col: value})
        )

    # ---- Customers ----

    def get_customer(self, customer_id: int) -> Optional[RowMapping]:
        stmt = select(customers).where(customers.c.id == customer_id)
        return self.conn.execute(stmt).mappings().first()

    def list_customers(self, owner_id: str) -> Sequence[RowMapping]:
        stmt = (
            select(customers)
            .where(customers.c.owner_id == owner_id)
            .order_by(customers.c.name)
        )
        return self.conn.execute(stmt).mappings().all()

    def adjust_customer_balance(self, customer_id: int, delta: Decimal) -> bool:
        result = self.conn.execute(
            update(customers)
            .where(customers.c.id == customer_id)
            .values(outstanding_balance=customers.c.outstanding_balance + delta)
        )
        return result.rowcount > 0

    # ---- Products ----

    def get_product(self, product_id: int) -> Optional[RowMapping]:
        stmt = select(products).where(products.c.id == product_id)
        return self.conn.execute(stmt).mappings().first()

    def list_products(self, owner_id: str) -> Sequence[RowMapping]:
        stmt = (
            select(products)
            .where(products.c.owner_id == owner_id)
            .order_by(products.c.name)
        )
        return self.conn.execute(stmt).mappings().all()

    def adjust_stock(self, product_id: int, delta: Decimal) -> Optional[RowMapping]:
        """
        Add delta to a product's stock. Returns the updated stock and
        threshold, or None when the product does not exist.
        """
        result = self.conn.execute(
            update(products)
            .where(products.c.id == product_id)
            .values(stock=products.c.stock + delta)
        )
        if result.rowcount == 0:
            return None
        stmt = select(
            products.c.name, products.c.stock, products.c.low_stock_threshold
        ).where(products.c.id == product_id)
        return self.conn.execute(stmt).mappings().first()

    # ---- Invoices ----

    def _invoice_select(self):
        return (
            select(invoices, customers.c.name.label("customer_name"))
            .select_from(invoices.outerjoin(customers, invoices.c.customer_id == customers.c.id))
        )

    def get_invoice(self, invoice_id: int, for_update: bool = False) -> Optional[InvoiceOut]:
        stmt = self._invoice_select().where(invoices.c.id == invoice_id)
        if for_update:
            stmt = stmt.with_for_update(of=invoices)
        row = self.conn.execute(stmt).mappings().first()
        if row is None:
            return None

        item_rows = self.conn.execute(
            select(invoice_items)
            .where(invoice_items.c.invoice_id == invoice_id)
            .order_by(invoice_items.c.position)
        ).mappings().all()

        data = dict(row)
        data["type"] = document_type(data["type"])
        data["items"] = [_row_to_item(r) for r in item_rows]
        return InvoiceOut(**data)

    def list_invoices(self, owner_id: str, doc_type: Optional[str] = None) -> List[InvoiceSummaryOut]:
        conditions = [invoices.c.owner_id == owner_id]
        if doc_type:
            conditions.append(type_filter(doc_type))

        stmt = (
            self._invoice_select()
            .where(and_(*conditions))
            .order_by(invoices.c.created_at.desc(), invoices.c.id.desc())
        )
        rows = self.conn.execute(stmt).mappings().all()

        return [
            InvoiceSummaryOut(
                id=row["id"],
                invoice_number=row["invoice_number"],
                type=document_type(row["type"]),
                customer_id=row["customer_id"],
                customer_name=row["customer_name"],
                invoice_date=row["invoice_date"],
                due_date=row["due_date"],
                total=row["total"],
                paid_amount=row["paid_amount"],
                balance_amount=row["balance_amount"],
                status=row["status"],
            )
            for row in rows
        ]

    def list_document_ids(self, business_id: int, doc_type: str) -> List[int]:
        stmt = (
            select(invoices.c.id)
            .where(invoices.c.business_id == business_id, type_filter(doc_type))
            .order_by(invoices.c.created_at, invoices.c.id)
        )
        return list(self.conn.execute(stmt).scalars())

    def find_conversion(self, quotation_id: int) -> Optional[int]:
        stmt = select(invoices.c.id).where(invoices.c.source_quotation_id == quotation_id)
        return self.conn.execute(stmt).scalars().first()

    def insert_invoice(self, values: Dict, items: List[LineItemOut]) -> int:
        result = self.conn.execute(invoices.insert().values(**values))
        invoice_id = result.inserted_primary_key[0]
        self._insert_items(invoice_id, items)
        return invoice_id

    def update_invoice(self, invoice_id: int, values: Dict, items: Optional[List[LineItemOut]] = None) -> None:
        self.conn.execute(
            update(invoices)
            .where(invoices.c.id == invoice_id)
            .values(updated_at=func.current_timestamp(), **values)
        )
        if items is not None:
            self.conn.execute(delete(invoice_items).where(invoice_items.c.invoice_id == invoice_id))
            self._insert_items(invoice_id, items)

    def set_invoice_number(self, invoice_id: int, number: str) -> None:
        self.conn.execute(
            update(invoices).where(invoices.c.id == invoice_id).values(invoice_number=number)
        )

    def normalize_legacy_types(self) -> int:
        result = self.conn.execute(
            update(invoices).where(invoices.c.type.is_(None)).values(type=INVOICE)
        )
        return result.rowcount

    def delete_invoice(self, invoice_id: int) -> None:
        self.conn.execute(delete(invoice_items).where(invoice_items.c.invoice_id == invoice_id))
        self.conn.execute(delete(invoices).where(invoices.c.id == invoice_id))

    def _insert_items(self, invoice_id: int, items: List[LineItemOut]) -> None:
        if not items:
            return
        self.conn.execute(
            invoice_items.insert(),
            [_item_values(invoice_id, pos, item) for pos, item in enumerate(items)],
        )

    def invoice_stats(self, owner_id: str) -> InvoiceStatsOut:
        def total(column):
            return func.coalesce(func.sum(column), 0)

        def count_status(status):
            return func.coalesce(func.sum(case((invoices.c.status == status, 1), else_=0)), 0)

        stmt = select(
            func.count().label("total_invoices"),
            total(invoices.c.total).label("total_sales"),
            total(invoices.c.paid_amount).label("total_paid"),
            total(invoices.c.balance_amount).label("total_outstanding"),
            total(invoices.c.total_tax).label("total_gst"),
            total(invoices.c.cgst).label("total_cgst"),
            total(invoices.c.sgst).label("total_sgst"),
            total(invoices.c.igst).label("total_igst"),
            count_status("PAID").label("paid_invoices"),
            count_status("UNPAID").label("unpaid_invoices"),
            count_status("PARTIAL").label("partial_invoices"),
        ).where(invoices.c.owner_id == owner_id)

        row = self.conn.execute(stmt).mappings().first()
        return InvoiceStatsOut(**row)

    # ---- Payments ----

    def _payment_select(self):
        return (
            select(payments, invoices.c.invoice_number)
            .select_from(payments.outerjoin(invoices, payments.c.invoice_id == invoices.c.id))
        )

    def get_payment(self, payment_id: int) -> Optional[RowMapping]:
        stmt = self._payment_select().where(payments.c.id == payment_id)
        return self.conn.execute(stmt).mappings().first()

    def list_payments(self, owner_id: str, invoice_id: Optional[int] = None) -> List[PaymentOut]:
        conditions = [payments.c.owner_id == owner_id]
        if invoice_id is not None:
            conditions.append(payments.c.invoice_id == invoice_id)

        stmt = (
            self._payment_select()
            .where(and_(*conditions))
            .order_by(payments.c.created_at.desc(), payments.c.id.desc())
        )
        rows = self.conn.execute(stmt).mappings().all()
        return [PaymentOut(**row) for row in rows]

    def insert_payment(self, values: Dict) -> int:
        result = self.conn.execute(payments.insert().values(**values))
        return result.inserted_primary_key[0]

    def update_payment(self, payment_id: int, values: Dict) -> None:
        self.conn.execute(update(payments).where(payments.c.id == payment_id).values(**values))

    def delete_payment(self, payment_id: int) -> None:
        self.conn.execute(delete(payments).where(payments.c.id == payment_id))

    def total_paid(self, invoice_id: int) -> Decimal:
        stmt = select(func.coalesce(func.sum(payments.c.amount), 0)).where(
            payments.c.invoice_id == invoice_id
        )
        return Decimal(str(self.conn.execute(stmt).scalar_one()))

    def delete_payments_for_invoice(self, invoice_id: int) -> int:
        result = self.conn.execute(delete(payments).where(payments.c.invoice_id == invoice_id))
        return result.rowcount

    def reassign_payments(self, invoice_id: int, customer_id: int) -> None:
        self.conn.execute(
            update(payments)
            .where(payments.c.invoice_id == invoice_id)
            .values(customer_id=customer_id)
        )
