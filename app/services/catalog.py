"""SQLite-backed appliance catalog with insert-or-update on ``external_id``."""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from app.models.product import CatalogEntry, ProductRecord

_FIELDS = (
    "external_id",
    "title",
    "description",
    "product_url",
    "image_asset_key",
    "image_source_url",
    "category",
    "price_amount",
    "price_currency",
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS appliances (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    external_id TEXT UNIQUE,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    product_url TEXT NOT NULL,
    image_asset_key TEXT,
    image_source_url TEXT NOT NULL,
    category TEXT NOT NULL,
    price_amount INTEGER NOT NULL,
    price_currency TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class SqliteCatalog:
    """Catalog store keyed by the vendor's product identifier."""

    def __init__(self, db_path: str | Path = ":memory:"):
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute(_SCHEMA)
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    def update_or_create(self, external_id: Optional[str], record: ProductRecord) -> CatalogEntry:
        """Insert *record*, or overwrite every field of the row matching *external_id*.

        Matching uses SQL ``IS`` so a *None* key matches the existing
        null-keyed row instead of adding another one.
        """
        values = record.model_dump(include=set(_FIELDS))
        values["external_id"] = external_id
        now = datetime.now(timezone.utc).isoformat()

        with self.conn:
            row = self.conn.execute(
                "SELECT id FROM appliances WHERE external_id IS ?", (external_id,)
            ).fetchone()
            if row is not None:
                assignments = ", ".join(f"{name} = :{name}" for name in _FIELDS)
                self.conn.execute(
                    f"UPDATE appliances SET {assignments}, updated_at = :now WHERE id = :id",
                    {**values, "now": now, "id": row["id"]},
                )
                entry_id = row["id"]
            else:
                columns = ", ".join(_FIELDS)
                placeholders = ", ".join(f":{name}" for name in _FIELDS)
                cursor = self.conn.execute(
                    f"INSERT INTO appliances ({columns}, created_at, updated_at) "
                    f"VALUES ({placeholders}, :now, :now)",
                    {**values, "now": now},
                )
                entry_id = cursor.lastrowid

        return self.get(entry_id)

    def get(self, entry_id: int) -> CatalogEntry:
        row = self.conn.execute("SELECT * FROM appliances WHERE id = ?", (entry_id,)).fetchone()
        if row is None:
            raise KeyError(entry_id)
        return CatalogEntry(**dict(row))

    def find_by_external_id(self, external_id: Optional[str]) -> Optional[CatalogEntry]:
        row = self.conn.execute(
            "SELECT * FROM appliances WHERE external_id IS ?", (external_id,)
        ).fetchone()
        return CatalogEntry(**dict(row)) if row is not None else None

    def all(self) -> List[CatalogEntry]:
        rows = self.conn.execute("SELECT * FROM appliances ORDER BY id").fetchall()
        return [CatalogEntry(**dict(row)) for row in rows]

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM appliances").fetchone()[0]
