"""Assignment endpoints.

Create and delete are open to admins and professors; progress updates to
any authenticated user.
"""

from fastapi import APIRouter, Depends, status

from schoolshelf.core.assignments_service import AssignmentsService
from schoolshelf.core.models import AssignmentRecord, Page
from schoolshelf.web.deps import get_assignments_service, require_auth, require_staff
from schoolshelf.web.schemas import (
    AssignmentCreate,
    AssignmentListResponse,
    AssignmentResponse,
    MessageResponse,
    ProgressUpdate,
)

router = APIRouter(
    prefix="/api/assignments", tags=["assignments"], dependencies=[Depends(require_auth)]
)

REMOVED = "Assignment removed successfully"


@router.get("", response_model=AssignmentListResponse)
def list_assignments(
    book_id: str | None = None,
    user_id: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    assignments: AssignmentsService = Depends(get_assignments_service),
) -> Page:
    """List assignments newest first with book title and user details."""
    return assignments.list_assignments(book_id, user_id, limit, offset)


@router.get("/user/{user_id}", response_model=list[AssignmentResponse])
def assignments_for_user(
    user_id: str, assignments: AssignmentsService = Depends(get_assignments_service)
) -> list[AssignmentRecord]:
    return assignments.assignments_for_user(user_id)


@router.get("/book/{book_id}", response_model=list[AssignmentResponse])
def assignments_for_book(
    book_id: str, assignments: AssignmentsService = Depends(get_assignments_service)
) -> list[AssignmentRecord]:
    return assignments.assignments_for_book(book_id)


@router.put("/book/{book_id}/user/{user_id}/progress", response_model=AssignmentResponse)
def update_progress_by_pair(
    book_id: str,
    user_id: str,
    body: ProgressUpdate,
    assignments: AssignmentsService = Depends(get_assignments_service),
) -> AssignmentRecord:
    return assignments.update_progress_by_pair(book_id, user_id, body.progress)


@router.delete(
    "/book/{book_id}/user/{user_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_staff)],
)
def delete_by_pair(
    book_id: str,
    user_id: str,
    assignments: AssignmentsService = Depends(get_assignments_service),
) -> MessageResponse:
    assignments.unassign_pair(book_id, user_id)
    return MessageResponse(message=REMOVED)


@router.get("/{assignment_id}", response_model=AssignmentResponse)
def get_assignment(
    assignment_id: str, assignments: AssignmentsService = Depends(get_assignments_service)
) -> AssignmentRecord:
    return assignments.get_assignment(assignment_id)


@router.post(
    "",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_staff)],
)
def create_assignment(
    body: AssignmentCreate, assignments: AssignmentsService = Depends(get_assignments_service)
) -> AssignmentRecord:
    """Assign a book to a user. The same pair twice is a 409."""
    return assignments.assign(body.book_id, body.user_id)


@router.put("/{assignment_id}", response_model=AssignmentResponse)
def update_progress(
    assignment_id: str,
    body: ProgressUpdate,
    assignments: AssignmentsService = Depends(get_assignments_service),
) -> AssignmentRecord:
    return assignments.update_progress(assignment_id, body.progress)


@router.delete(
    "/{assignment_id}", response_model=MessageResponse, dependencies=[Depends(require_staff)]
)
def delete_assignment(
    assignment_id: str, assignments: AssignmentsService = Depends(get_assignments_service)
) -> MessageResponse:
    assignments.unassign(assignment_id)
    return MessageResponse(message=REMOVED)
