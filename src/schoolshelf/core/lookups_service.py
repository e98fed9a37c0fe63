"""Curriculum components and series: admin-managed name lookups."""

from __future__ import annotations

import structlog

from schoolshelf.core.errors import BadRequestError, ConflictError, NotFoundError
from schoolshelf.core.models import LookupRecord
from schoolshelf.db.books_repository import BooksRepository
from schoolshelf.db.database import Database
from schoolshelf.db.lookups_repository import LookupRepository

logger = structlog.get_logger(__name__)


class LookupService:
    """Name-unique CRUD shared by curriculum components and series."""

    table = ""
    label = ""

    def __init__(self, db: Database):
        self.repo = LookupRepository(db, self.table)

    def list_all(self) -> list[LookupRecord]:
        return self.repo.list_all()

    def get(self, record_id: str) -> LookupRecord:
        record = self.repo.get_by_id(record_id)
        if record is None:
            raise NotFoundError(f"{self.label} not found")
        return record

    def create(self, name: str | None) -> LookupRecord:
        name = self._clean_name(name)
        if self.repo.name_taken(name):
            raise ConflictError(f"{self.label} already exists")
        record = self.repo.insert(name)
        logger.info("lookups.created", table=self.table, id=record.id)
        return record

    def rename(self, record_id: str, name: str | None) -> LookupRecord:
        name = self._clean_name(name)
        if self.repo.name_taken(name, exclude_id=record_id):
            raise ConflictError(f"{self.label} already exists with this name")
        record = self.repo.rename(record_id, name)
        if record is None:
            raise NotFoundError(f"{self.label} not found")
        return record

    def delete(self, record_id: str) -> None:
        if not self.repo.delete(record_id):
            raise NotFoundError(f"{self.label} not found")
        logger.info("lookups.deleted", table=self.table, id=record_id)

    def _clean_name(self, name: str | None) -> str:
        name = (name or "").strip()
        if not name:
            raise BadRequestError("Name is required")
        return name


class CurriculumService(LookupService):
    table = "curriculum_components"
    label = "Curriculum component"

    def __init__(self, db: Database):
        super().__init__(db)
        self.books = BooksRepository(db)

    def delete(self, record_id: str) -> None:
        """Refuse to delete a component that books still reference by name."""
        if self.books.count_by_component(record_id) > 0:
            raise ConflictError(
                "Cannot delete: there are books using this curriculum component"
            )
        super().delete(record_id)


class SeriesService(LookupService):
    table = "series"
    label = "Series"

    def sync(self, names: list[str]) -> list[LookupRecord]:
        """Replace all series with ``names``."""
        cleaned = [self._clean_name(n) for n in names]
        return self.repo.replace_all(cleaned)
