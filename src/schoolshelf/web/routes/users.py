"""User endpoints. Reads need a token; mutations are admin-only."""

from fastapi import APIRouter, Depends, status

from schoolshelf.core.models import Page, Role, UserRecord
from schoolshelf.core.users_service import UsersService
from schoolshelf.web.deps import get_users_service, require_admin, require_auth
from schoolshelf.web.schemas import (
    MessageResponse,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserUpdate,
)

router = APIRouter(prefix="/api/users", tags=["users"], dependencies=[Depends(require_auth)])


@router.get("", response_model=UserListResponse)
def list_users(
    role: Role | None = None,
    professor_id: str | None = None,
    class_group: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    users: UsersService = Depends(get_users_service),
) -> Page:
    """List users ordered by name, optionally filtered."""
    return users.list_users(role, professor_id, class_group, limit, offset)


@router.get("/role/{role}", response_model=list[UserResponse])
def users_by_role(role: str, users: UsersService = Depends(get_users_service)) -> list[UserRecord]:
    return users.users_by_role(role)


@router.get("/professor/{professor_id}/students", response_model=list[UserResponse])
def students_by_professor(
    professor_id: str, users: UsersService = Depends(get_users_service)
) -> list[UserRecord]:
    return users.students_by_professor(professor_id)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: str, users: UsersService = Depends(get_users_service)) -> UserRecord:
    return users.get_user(user_id)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_user(body: UserCreate, users: UsersService = Depends(get_users_service)) -> UserRecord:
    """Create a user. A duplicate email is reported as 409."""
    return users.create_user(
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
        professor_id=body.professor_id,
        class_group=body.class_group,
    )


@router.put("/{user_id}", response_model=UserResponse, dependencies=[Depends(require_admin)])
def update_user(
    user_id: str, body: UserUpdate, users: UsersService = Depends(get_users_service)
) -> UserRecord:
    return users.update_user(user_id, body.model_dump(exclude_unset=True))


@router.delete("/{user_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
def delete_user(user_id: str, users: UsersService = Depends(get_users_service)) -> MessageResponse:
    users.delete_user(user_id)
    return MessageResponse(message="User deleted successfully")
