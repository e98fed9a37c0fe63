"""Repository for name lookup tables (curriculum_components, series)."""

from __future__ import annotations

import structlog

from schoolshelf.core.models import LookupRecord
from schoolshelf.db.database import Database
from schoolshelf.db.schema import new_id

logger = structlog.get_logger(__name__)

LOOKUP_TABLES = frozenset({"curriculum_components", "series"})


class LookupRepository:
    """CRUD for a ``(id, name, created_at)`` table with case-insensitive names."""

    def __init__(self, db: Database, table: str):
        if table not in LOOKUP_TABLES:
            raise ValueError(f"Unknown lookup table '{table}'")
        self.db = db
        self.table = table

    def list_all(self) -> list[LookupRecord]:
        rows = self.db.query(f"SELECT id, name, created_at FROM {self.table} ORDER BY name ASC")
        return [LookupRecord.from_row(r) for r in rows]

    def get_by_id(self, record_id: str) -> LookupRecord | None:
        rows = self.db.query(
            f"SELECT id, name, created_at FROM {self.table} WHERE id = :id", {"id": record_id}
        )
        return LookupRecord.from_row(rows[0]) if rows else None

    def get_by_name(self, name: str) -> LookupRecord | None:
        """Exact (case-sensitive) name match."""
        rows = self.db.query(
            f"SELECT id, name, created_at FROM {self.table} WHERE name = :name COLLATE BINARY",
            {"name": name},
        )
        return LookupRecord.from_row(rows[0]) if rows else None

    def name_taken(self, name: str, exclude_id: str | None = None) -> bool:
        """Case-insensitive collision check, optionally ignoring one row."""
        sql = f"SELECT id FROM {self.table} WHERE LOWER(name) = LOWER(:name)"
        params = {"name": name}
        if exclude_id is not None:
            sql += " AND id != :exclude_id"
            params["exclude_id"] = exclude_id
        return bool(self.db.query(sql, params))

    def insert(self, name: str) -> LookupRecord:
        rows = self.db.query(
            f"INSERT INTO {self.table} (id, name) VALUES (:id, :name) "
            "RETURNING id, name, created_at",
            {"id": new_id(), "name": name},
        )
        logger.debug("lookups.inserted", table=self.table, name=name)
        return LookupRecord.from_row(rows[0])

    def rename(self, record_id: str, name: str) -> LookupRecord | None:
        rows = self.db.query(
            f"UPDATE {self.table} SET name = :name WHERE id = :id RETURNING id, name, created_at",
            {"name": name, "id": record_id},
        )
        return LookupRecord.from_row(rows[0]) if rows else None

    def delete(self, record_id: str) -> bool:
        rows = self.db.query(
            f"DELETE FROM {self.table} WHERE id = :id RETURNING id", {"id": record_id}
        )
        return bool(rows)

    def replace_all(self, names: list[str]) -> list[LookupRecord]:
        """Replace every row with ``names`` in one transaction."""

        def _replace(tx) -> None:
            tx.query(f"DELETE FROM {self.table}")
            for name in names:
                tx.query(
                    f"INSERT INTO {self.table} (id, name) VALUES (:id, :name)",
                    {"id": new_id(), "name": name},
                )

        self.db.with_transaction(_replace)
        logger.info("lookups.replaced", table=self.table, count=len(names))
        return self.list_all()
