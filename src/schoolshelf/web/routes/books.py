"""Book endpoints. Reads need a token; mutations are admin-only."""

from fastapi import APIRouter, Depends, status

from schoolshelf.core.books_service import BooksService
from schoolshelf.core.models import BookRecord, Page
from schoolshelf.web.deps import get_books_service, require_admin, require_auth
from schoolshelf.web.schemas import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookUpdate,
    MessageResponse,
)

router = APIRouter(prefix="/api/books", tags=["books"], dependencies=[Depends(require_auth)])


@router.get("", response_model=BookListResponse)
def list_books(
    search: str | None = None,
    curriculum_component: str | None = None,
    class_group: str | None = None,
    professor_id: str | None = None,
    student_id: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    books: BooksService = Depends(get_books_service),
) -> Page:
    """List books ordered by title. A filter value of ``all`` is ignored."""
    return books.list_books(
        search=search,
        curriculum_component=curriculum_component,
        class_group=class_group,
        professor_id=professor_id,
        student_id=student_id,
        limit=limit,
        offset=offset,
    )


@router.get("/student/{user_id}", response_model=list[BookResponse])
def books_for_student(
    user_id: str, books: BooksService = Depends(get_books_service)
) -> list[BookRecord]:
    """Student books tagged with the user's class group."""
    return books.books_for_student(user_id)


@router.get("/component/{component}", response_model=list[BookResponse])
def books_by_component(
    component: str, books: BooksService = Depends(get_books_service)
) -> list[BookRecord]:
    return books.books_by_component(component)


@router.get("/class/{class_group}", response_model=list[BookResponse])
def books_by_class(
    class_group: str, books: BooksService = Depends(get_books_service)
) -> list[BookRecord]:
    return books.books_by_class(class_group)


@router.get("/{book_id}", response_model=BookResponse)
def get_book(book_id: str, books: BooksService = Depends(get_books_service)) -> BookRecord:
    return books.get_book(book_id)


@router.post(
    "",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_book(body: BookCreate, books: BooksService = Depends(get_books_service)) -> BookRecord:
    return books.create_book(
        title=body.title,
        author=body.author,
        curriculum_component=body.curriculum_component,
        description=body.description,
        cover_url=body.cover_url,
        pdf_url=body.pdf_url,
        book_type=body.book_type,
        class_groups=body.class_groups,
    )


@router.put("/{book_id}", response_model=BookResponse, dependencies=[Depends(require_admin)])
def update_book(
    book_id: str, body: BookUpdate, books: BooksService = Depends(get_books_service)
) -> BookRecord:
    """Patch supplied fields; ``class_groups`` (even empty) replaces all tags."""
    return books.update_book(book_id, body.model_dump(exclude_unset=True))


@router.delete("/{book_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
def delete_book(book_id: str, books: BooksService = Depends(get_books_service)) -> MessageResponse:
    books.delete_book(book_id)
    return MessageResponse(message="Book deleted successfully")
