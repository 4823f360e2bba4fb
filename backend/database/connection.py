"""SQLite connection handling shared by the table classes."""

import os
import sqlite3
import logging
from contextlib import contextmanager
from typing import Iterator

from ..exceptions import StoreUnavailable

logger = logging.getLogger(__name__)


def ensure_parent_dir(db_path: str):
    parent = os.path.dirname(db_path)
    if parent:
        os.makedirs(parent, exist_ok=True)


@contextmanager
def get_connection(db_path: str) -> Iterator[sqlite3.Connection]:
    """
    Open a connection with dict-like rows, commit on success and close.
    Any sqlite3 error is re-raised as StoreUnavailable.
    """
    if not db_path:
        raise StoreUnavailable("No database path configured")

    try:
        conn = sqlite3.connect(db_path, timeout=30)
    except sqlite3.Error as e:
        raise StoreUnavailable(f"Cannot open {db_path}: {e}") from e

    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        raise StoreUnavailable(f"Database error on {db_path}: {e}") from e
    finally:
        conn.close()
