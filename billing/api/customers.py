# billing/api/customers.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from billing.api.deps import get_owner_id
from billing.db.engine import get_engine
from billing.db.store import InvoiceStore
from billing.models.customers import CustomerOut, ProductOut

router = APIRouter(tags=["ledgers"])


def _row_to_product(row) -> ProductOut:
    return ProductOut(
        id=row["id"],
        name=row["name"],
        hsn_code=row["hsn_code"],
        unit=row["unit"],
        price=row["price"],
        gst_rate=row["gst_rate"],
        stock=row["stock"],
        low_stock_threshold=row["low_stock_threshold"],
        is_low_stock=row["stock"] <= row["low_stock_threshold"],
        is_active=row["is_active"],
    )


@router.get("/customers", response_model=List[CustomerOut])
def list_customers(owner_id: str = Depends(get_owner_id)) -> List[CustomerOut]:
    """
    Return the owner's customers with their outstanding balances.
    """
    engine = get_engine()

    with engine.connect() as conn:
        rows = InvoiceStore(conn).list_customers(owner_id)

    return [CustomerOut.model_validate(dict(row)) for row in rows]


@router.get("/customers/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: int, owner_id: str = Depends(get_owner_id)) -> CustomerOut:
    engine = get_engine()

    with engine.connect() as conn:
        row = InvoiceStore(conn).get_customer(customer_id)

    if row is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    if row["owner_id"] != owner_id:
        raise HTTPException(status_code=401, detail="Not authorized")

    return CustomerOut.model_validate(dict(row))


@router.get("/products", response_model=List[ProductOut])
def list_products(owner_id: str = Depends(get_owner_id)) -> List[ProductOut]:
    """
    Return the owner's catalog with current stock levels.
    """
    engine = get_engine()

    with engine.connect() as conn:
        rows = InvoiceStore(conn).list_products(owner_id)

    return [_row_to_product(row) for row in rows]


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, owner_id: str = Depends(get_owner_id)) -> ProductOut:
    engine = get_engine()

    with engine.connect() as conn:
        row = InvoiceStore(conn).get_product(product_id)

    if row is None:
        raise HTTPException(status_code=404, detail="Product not found")
    if row["owner_id"] != owner_id:
        raise HTTPException(status_code=401, detail="Not authorized")

    return _row_to_product(row)
