"""Curriculum component and series endpoints.

Both resources share the same shape, so one factory builds both routers.
"""

from typing import Callable

from fastapi import APIRouter, Depends, status

from schoolshelf.core.lookups_service import LookupService
from schoolshelf.core.models import LookupRecord
from schoolshelf.web.deps import (
    get_curriculum_service,
    get_series_service,
    require_admin,
    require_auth,
)
from schoolshelf.web.schemas import LookupResponse, LookupWrite, MessageResponse


def build_lookup_router(
    prefix: str, tag: str, provider: Callable[..., LookupService], deleted_message: str
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag], dependencies=[Depends(require_auth)])

    @router.get("", response_model=list[LookupResponse])
    def list_all(service: LookupService = Depends(provider)) -> list[LookupRecord]:
        return service.list_all()

    @router.get("/{record_id}", response_model=LookupResponse)
    def get_one(record_id: str, service: LookupService = Depends(provider)) -> LookupRecord:
        return service.get(record_id)

    @router.post(
        "",
        response_model=LookupResponse,
        status_code=status.HTTP_201_CREATED,
        dependencies=[Depends(require_admin)],
    )
    def create(body: LookupWrite, service: LookupService = Depends(provider)) -> LookupRecord:
        return service.create(body.name)

    @router.put("/{record_id}", response_model=LookupResponse, dependencies=[Depends(require_admin)])
    def update(
        record_id: str, body: LookupWrite, service: LookupService = Depends(provider)
    ) -> LookupRecord:
        return service.rename(record_id, body.name)

    @router.delete(
        "/{record_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)]
    )
    def delete(record_id: str, service: LookupService = Depends(provider)) -> MessageResponse:
        service.delete(record_id)
        return MessageResponse(message=deleted_message)

    return router


curriculum_router = build_lookup_router(
    "/api/curriculum-components",
    "curriculum-components",
    get_curriculum_service,
    "Curriculum component deleted successfully",
)
series_router = build_lookup_router(
    "/api/series", "series", get_series_service, "Series deleted successfully"
)
