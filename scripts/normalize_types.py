# scripts/normalize_types.py
"""
Give every legacy document without a type the explicit INVOICE type.

Usage:
    python -m scripts.normalize_types
"""

import logging

from billing.db.engine import run_in_transaction

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def main():
    updated = run_in_transaction(lambda store: store.normalize_legacy_types())
    logger.info("Typed %s legacy documents as INVOICE", updated)


if __name__ == "__main__":
    main()
