# scripts/renumber.py
"""
Renumber one business's invoices or quotations from 1, oldest first, and
reset the matching counter.

Usage:
    python -m scripts.renumber --business-id 1 --type QUOTATION
"""

import argparse
import logging

from billing.config import DOCUMENT_TYPES, get_settings
from billing.db.engine import run_in_transaction
from billing.db.store import InvoiceStore
from billing.services.numbering import format_number

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def renumber(store: InvoiceStore, business_id: int, doc_type: str, width: int) -> int:
    business = store.get_business(business_id)
    if business is None:
        raise SystemExit(f"No business with id {business_id}")

    prefix = business["invoice_prefix"] if doc_type == "INVOICE" else business["quotation_prefix"]
    ids = store.list_document_ids(business_id, doc_type)

    # numbers are unique per business, so move everything aside first
    for doc_id in ids:
        store.set_invoice_number(doc_id, f"RENUMBER-{doc_id}")

    for position, doc_id in enumerate(ids, start=1):
        number = format_number(prefix, position, width)
        store.set_invoice_number(doc_id, number)
        logger.info("%s %s -> %s", doc_type, doc_id, number)

    store.set_counter(business_id, doc_type, len(ids))
    return len(ids)


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--business-id", type=int, required=True)
    parser.add_argument("--type", choices=DOCUMENT_TYPES, required=True)
    parser.add_argument("--width", type=int, default=None, help="zero-pad width (defaults to settings)")
    args = parser.parse_args()

    width = args.width or get_settings().number_width(args.type)
    count = run_in_transaction(lambda store: renumber(store, args.business_id, args.type, width))
    logger.info("Renumbered %s %s documents; counter set to %s", count, args.type, count)


if __name__ == "__main__":
    main()
