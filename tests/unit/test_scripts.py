"""Tests for the maintenance scripts."""

from datetime import date
from decimal import Decimal

from sqlalchemy import select

from billing.db.engine import run_in_transaction
from billing.db.schema import invoices
from scripts import normalize_types
from scripts.renumber import renumber


def legacy_document(conn, seeded, number):
    return conn.execute(invoices.insert().values(
        owner_id="owner-1", business_id=seeded["business"], customer_id=seeded["local_customer"],
        invoice_number=number, type=None, invoice_date=date(2024, 1, 1),
        subtotal=Decimal("10"), total_tax=0, total=Decimal("10"), balance_amount=Decimal("10"),
    )).inserted_primary_key[0]


def numbers(engine):
    with engine.connect() as conn:
        return list(conn.execute(
            select(invoices.c.invoice_number).order_by(invoices.c.id)
        ).scalars())


def test_renumber_closes_gaps_and_resets_counter(client, engine, seeded, counters):
    item = {"product": seeded["widget"], "quantity": 1, "price": 100}
    ids = [
        client.post("/invoices", json={"customerId": seeded["local_customer"], "items": [item]}).json()["id"]
        for _ in range(3)
    ]
    client.delete(f"/invoices/{ids[1]}")
    assert numbers(engine) == ["INV-0001", "INV-0003"]

    count = run_in_transaction(lambda store: renumber(store, seeded["business"], "INVOICE", 4))

    assert count == 2
    assert numbers(engine) == ["INV-0001", "INV-0002"]
    assert counters() == (2, 0)
    created = client.post("/invoices", json={"customerId": seeded["local_customer"], "items": [item]})
    assert created.json()["invoice_number"] == "INV-0003"


def test_renumber_includes_legacy_invoices(engine, seeded, counters):
    with engine.begin() as conn:
        legacy_document(conn, seeded, "OLD-7")
        legacy_document(conn, seeded, "OLD-9")

    run_in_transaction(lambda store: renumber(store, seeded["business"], "INVOICE", 3))

    assert numbers(engine) == ["INV-001", "INV-002"]
    assert counters() == (2, 0)


def test_normalize_types_fills_missing_type(engine, seeded):
    with engine.begin() as conn:
        legacy_id = legacy_document(conn, seeded, "OLD-1")

    normalize_types.main()

    with engine.connect() as conn:
        stored = conn.execute(select(invoices.c.type).where(invoices.c.id == legacy_id)).scalar_one()
    assert stored == "INVOICE"
