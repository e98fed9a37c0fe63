"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from schoolshelf import __version__
from schoolshelf.db.database import Database
from schoolshelf.web.deps import get_database
from schoolshelf.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
@router.get("/api/health", response_model=HealthResponse, include_in_schema=False)
def health_check(db: Database = Depends(get_database)) -> HealthResponse:
    """Check API health and database connectivity."""
    return HealthResponse(
        status="ok",
        database="connected" if db.check_connection() else "disconnected",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
    )
