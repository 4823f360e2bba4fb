from typing import Optional, Dict, Any
import logging

from .connection import ensure_parent_dir, get_connection
from ..models.contact import Contact, ContactKind

logger = logging.getLogger(__name__)


class ContactDB:
    """Patient and doctor profiles, as far as messaging needs them."""

    def __init__(self, db_path: str = "data/portal.db"):
        self.db_path = db_path
        ensure_parent_dir(db_path)
        self._init_db()

    def _init_db(self):
        """Initialize contacts table"""
        with get_connection(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS contacts (
                    contact_id TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    name TEXT,
                    phone TEXT,
                    PRIMARY KEY (contact_id, kind)
                )
            """)

    def upsert_contact(self, contact: Contact):
        """Create or replace a contact"""
        row = contact.to_dict()
        with get_connection(self.db_path) as conn:
            conn.execute("""
                INSERT INTO contacts (contact_id, kind, name, phone)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (contact_id, kind) DO UPDATE SET
                    name = excluded.name,
                    phone = excluded.phone
            """, (row["contact_id"], row["kind"], row["name"], row["phone"]))

    def update_contact(self, contact_id: str, kind: ContactKind, updates: Dict[str, Any]) -> bool:
        """Partial update of name/phone. Returns False when the contact does not exist."""
        set_clauses = []
        values = []

        for field, value in updates.items():
            if field in ['name', 'phone']:
                set_clauses.append(f"{field} = ?")
                values.append(value)

        if not set_clauses:
            return False

        values.extend([contact_id, ContactKind(kind).value])
        with get_connection(self.db_path) as conn:
            cursor = conn.execute(
                f"UPDATE contacts SET {', '.join(set_clauses)} WHERE contact_id = ? AND kind = ?",
                values,
            )
            return cursor.rowcount > 0

    def get_contact(self, contact_id: str, kind: ContactKind) -> Optional[Contact]:
        """Get a patient or doctor contact, read fresh on every call"""
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM contacts WHERE contact_id = ? AND kind = ?",
                (contact_id, ContactKind(kind).value),
            ).fetchone()

        if row is None:
            return None
        return Contact.from_row(row)
