# billing/services/numbering.py

import logging

from sqlalchemy.engine import RowMapping

from billing.config import DOCUMENT_TYPES, Settings, get_settings
from billing.db.store import InvoiceStore

logger = logging.getLogger(__name__)


def format_number(prefix: str, counter: int, width: int) -> str:
    return f"{prefix}-{str(counter).zfill(width)}"


class DocumentNumberAllocator:
    """
    Hands out the next human-readable number for a document type.

    The counter is bumped with a single UPDATE inside the caller's
    transaction, so two documents can never share a number. A number whose
    document is later deleted is not reused.
    """

    def __init__(self, store: InvoiceStore, settings: Settings = None):
        self.store = store
        self.settings = settings or get_settings()

    def allocate(self, business: RowMapping, doc_type: str) -> str:
        if doc_type not in DOCUMENT_TYPES:
            raise ValueError(f"unknown document type {doc_type!r}")

        prefix, counter = self.store.increment_counter(business["id"], doc_type)
        number = format_number(prefix, counter, self.settings.number_width(doc_type))
        logger.debug("Allocated %s for business %s", number, business["id"])
        return number
