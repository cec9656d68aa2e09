# billing/db/engine.py

import logging
import time
from functools import lru_cache
from typing import Callable, Optional, TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from billing.config import get_settings
from billing.db.schema import metadata
from billing.db.store import InvoiceStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _serialize_sqlite_writers(engine: Engine) -> None:
    # pysqlite's own transaction handling defers locking until the first
    # write; take the write lock at BEGIN so every operation is serialized.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


@lru_cache
def get_engine() -> Engine:
    db_url = get_settings().database_url
    if db_url.startswith("sqlite"):
        # echo=True if you want to see SQL printed in the terminal
        engine = create_engine(
            db_url, future=True, connect_args={"timeout": 30, "check_same_thread": False}
        )
        _serialize_sqlite_writers(engine)
    else:
        engine = create_engine(db_url, future=True, pool_pre_ping=True)
    return engine


def init_db(engine: Optional[Engine] = None) -> None:
    metadata.create_all(engine or get_engine())


def run_in_transaction(
    operation: Callable[[InvoiceStore], T],
    engine: Optional[Engine] = None,
) -> T:
    """
    Run one billing operation inside a single database transaction.

    Every write the operation makes (counter, stock, balances, document) is
    committed together or rolled back together. Lock conflicts are retried.
    """
    engine = engine or get_engine()
    attempts = max(1, get_settings().transaction_attempts)

    for attempt in range(1, attempts + 1):
        try:
            with engine.begin() as conn:
                return operation(InvoiceStore(conn))
        except OperationalError as exc:
            if attempt == attempts:
                raise
            logger.warning(
                "Transaction conflict (attempt %s/%s), retrying: %s",
                attempt, attempts, exc.orig,
            )
            time.sleep(0.05 * attempt)

    raise RuntimeError("unreachable")
