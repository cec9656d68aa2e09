# billing/config.py

import os
from decimal import Decimal
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

INVOICE = "INVOICE"
QUOTATION = "QUOTATION"
DOCUMENT_TYPES = (INVOICE, QUOTATION)

ALLOWED_GST_RATES = frozenset({0, 5, 12, 18, 28})


class Settings(BaseModel):
    database_url: str = "sqlite:///db.sqlite"
    invoice_number_width: int = 4
    quotation_number_width: int = 3
    default_gst_rate: Decimal = Decimal("18")
    transaction_attempts: int = 3
    log_level: str = "INFO"

    def number_width(self, document_type: str) -> int:
        if document_type == QUOTATION:
            return self.quotation_number_width
        return self.invoice_number_width


@lru_cache
def get_settings() -> Settings:
    """
    Read settings from BILLING_* environment variables (a .env file is honoured).
    """
    env = {
        "database_url": os.getenv("BILLING_DATABASE_URL"),
        "invoice_number_width": os.getenv("BILLING_INVOICE_NUMBER_WIDTH"),
        "quotation_number_width": os.getenv("BILLING_QUOTATION_NUMBER_WIDTH"),
        "default_gst_rate": os.getenv("BILLING_DEFAULT_GST_RATE"),
        "transaction_attempts": os.getenv("BILLING_TRANSACTION_ATTEMPTS"),
        "log_level": os.getenv("BILLING_LOG_LEVEL"),
    }
    return Settings(**{k: v.strip() for k, v in env.items() if v and v.strip()})
