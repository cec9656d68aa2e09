"""Test configuration and shared fixtures."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from billing.config import get_settings
from billing.db.engine import get_engine, init_db
from billing.db.schema import businesses, customers, products
from billing.main import app

OWNER = "owner-1"
OTHER_OWNER = "owner-2"


@pytest.fixture
def engine(tmp_path, monkeypatch):
    """A fresh file-backed SQLite database per test."""
    monkeypatch.setenv("BILLING_DATABASE_URL", f"sqlite:///{tmp_path / 'billing.sqlite'}")
    get_settings.cache_clear()
    get_engine.cache_clear()

    engine = get_engine()
    init_db(engine)
    yield engine

    engine.dispose()
    get_settings.cache_clear()
    get_engine.cache_clear()


@pytest.fixture
def seeded(engine):
    """
    One business in Maharashtra with a local and an out-of-state customer and
    two catalog products, plus a second owner's records.
    """
    with engine.begin() as conn:
        business_id = conn.execute(
            businesses.insert().values(
                owner_id=OWNER,
                business_name="Shree Engineering Works",
                state="Maharashtra",
                terms_and_conditions="Payment due within 30 days.",
                invoice_prefix="INV",
                quotation_prefix="QTN",
            )
        ).inserted_primary_key[0]
        local_id = conn.execute(
            customers.insert().values(owner_id=OWNER, name="Pune Traders", state="Maharashtra")
        ).inserted_primary_key[0]
        remote_id = conn.execute(
            customers.insert().values(owner_id=OWNER, name="Surat Textiles", state="Gujarat")
        ).inserted_primary_key[0]
        widget_id = conn.execute(
            products.insert().values(
                owner_id=OWNER, name="Hydraulic Pump", hsn_code="8413", unit="PCS",
                price=Decimal("100"), gst_rate=Decimal("18"), stock=Decimal("50"),
            )
        ).inserted_primary_key[0]
        bolt_id = conn.execute(
            products.insert().values(
                owner_id=OWNER, name="Steel Bolt", hsn_code="7318", unit="BOX",
                price=Decimal("40"), gst_rate=Decimal("12"), stock=Decimal("20"),
                low_stock_threshold=Decimal("5"),
            )
        ).inserted_primary_key[0]

        conn.execute(
            businesses.insert().values(owner_id=OTHER_OWNER, business_name="Other Co", state="Karnataka")
        )
        foreign_customer_id = conn.execute(
            customers.insert().values(owner_id=OTHER_OWNER, name="Bengaluru Stores", state="Karnataka")
        ).inserted_primary_key[0]
        foreign_product_id = conn.execute(
            products.insert().values(owner_id=OTHER_OWNER, name="Other Pump", stock=Decimal("5"))
        ).inserted_primary_key[0]

    return {
        "business": business_id,
        "local_customer": local_id,
        "remote_customer": remote_id,
        "widget": widget_id,
        "bolt": bolt_id,
        "foreign_customer": foreign_customer_id,
        "foreign_product": foreign_product_id,
    }


@pytest.fixture
def client(seeded):
    return TestClient(app, headers={"X-Owner-Id": OWNER})


@pytest.fixture
def stock(engine):
    def read(product_id):
        with engine.connect() as conn:
            return conn.execute(
                select(products.c.stock).where(products.c.id == product_id)
            ).scalar_one()

    return read


@pytest.fixture
def balance(engine):
    def read(customer_id):
        with engine.connect() as conn:
            return conn.execute(
                select(customers.c.outstanding_balance).where(customers.c.id == customer_id)
            ).scalar_one()

    return read


@pytest.fixture
def counters(engine):
    def read():
        with engine.connect() as conn:
            row = conn.execute(
                select(businesses.c.invoice_counter, businesses.c.quotation_counter)
                .where(businesses.c.owner_id == OWNER)
            ).first()
        return row[0], row[1]

    return read
