# scripts/init_db.py
"""
Create the billing tables. Pass --reset to drop existing tables first.

Usage:
    python -m scripts.init_db [--reset]
"""

import argparse
import logging

from billing.db.engine import get_engine, init_db
from billing.db.schema import metadata

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reset", action="store_true", help="drop all billing tables first")
    args = parser.parse_args()

    engine = get_engine()
    if args.reset:
        metadata.drop_all(engine)
        logger.warning("Dropped existing billing tables")

    init_db(engine)
    logger.info("Billing schema ready at %s", engine.url.render_as_string(hide_password=True))


if __name__ == "__main__":
    main()
