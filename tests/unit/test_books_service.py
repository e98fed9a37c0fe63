"""Tests for BooksService write paths that are hard to reach over HTTP."""

import pytest

from schoolshelf.core.books_service import BooksService
from schoolshelf.core.errors import BadRequestError, NotFoundError
from schoolshelf.core.models import BookType
from schoolshelf.core.storage import FileStorage, UploadKind
from schoolshelf.db.books_repository import BooksRepository


@pytest.fixture
def storage(tmp_path):
    store = FileStorage(tmp_path / "files", max_bytes=1024)
    store.ensure_dirs()
    return store


@pytest.fixture
def service(database, storage):
    return BooksService(database, storage)


def _count(database, table):
    return database.query(f"SELECT COUNT(*) AS n FROM {table}")[0]["n"]


class TestCreateBook:
    def test_book_and_tags_written_together(self, service, database, monkeypatch):
        """If tagging fails the book row is rolled back too."""

        def _fail(self, executor, book_id, groups):
            raise RuntimeError("tag insert failed")

        monkeypatch.setattr(BooksRepository, "add_class_groups", _fail)

        with pytest.raises(RuntimeError):
            service.create_book("Algebra", "Ana", "Mathematics", class_groups=["1st Year A"])

        assert _count(database, "books") == 0
        assert _count(database, "book_class_groups") == 0

    def test_defaults(self, service):
        book = service.create_book("Algebra", "Ana", "Mathematics")
        assert book.book_type is BookType.STUDENT
        assert book.description == ""
        assert book.cover_url == ""
        assert book.pdf_url is None
        assert book.class_groups == []

    def test_unknown_component(self, service):
        with pytest.raises(BadRequestError):
            service.create_book("Algebra", "Ana", "Alchemy")


class TestUpdateBook:
    def test_tags_untouched_on_failed_update(self, service, database, monkeypatch):
        book = service.create_book("Algebra", "Ana", "Mathematics", class_groups=["1st Year A"])

        def _fail(self, executor, book_id, groups):
            raise RuntimeError("replace failed")

        monkeypatch.setattr(BooksRepository, "replace_class_groups", _fail)

        with pytest.raises(RuntimeError):
            service.update_book(book.id, {"title": "Geometry", "class_groups": ["2nd Year B"]})

        current = service.get_book(book.id)
        assert current.title == "Algebra"
        assert current.class_groups == ["1st Year A"]

    def test_missing_book(self, service):
        with pytest.raises(NotFoundError):
            service.update_book("missing", {"title": "X"})

    def test_empty_required_field(self, service):
        book = service.create_book("Algebra", "Ana", "Mathematics")
        with pytest.raises(BadRequestError):
            service.update_book(book.id, {"title": ""})

    def test_replaced_upload_removed_after_commit(self, service, storage):
        old = storage.save(UploadKind.PDF, "pdf", "old.pdf", "application/pdf", b"old")
        new = storage.save(UploadKind.PDF, "pdf", "new.pdf", "application/pdf", b"new")
        book = service.create_book("Algebra", "Ana", "Mathematics", pdf_url=old.url)

        service.update_book(book.id, {"pdf_url": new.url})

        assert not (storage.root / "pdfs" / old.filename).exists()
        assert (storage.root / "pdfs" / new.filename).exists()

    def test_external_cover_left_alone(self, service):
        book = service.create_book(
            "Algebra", "Ana", "Mathematics", cover_url="https://example.com/c.png"
        )
        updated = service.update_book(book.id, {"cover_url": None})
        assert updated.cover_url == ""


class TestDeleteBook:
    def test_removes_uploads(self, service, storage):
        pdf = storage.save(UploadKind.PDF, "pdf", "b.pdf", "application/pdf", b"pdf")
        book = service.create_book("Algebra", "Ana", "Mathematics", pdf_url=pdf.url)

        service.delete_book(book.id)

        assert not (storage.root / "pdfs" / pdf.filename).exists()
        with pytest.raises(NotFoundError):
            service.get_book(book.id)

    def test_missing(self, service):
        with pytest.raises(NotFoundError):
            service.delete_book("missing")
