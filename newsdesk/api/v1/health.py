"""Health check endpoint with optional database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from newsdesk.api.deps import get_components
from newsdesk.api.responses import envelope
from newsdesk.core.container import Components
from newsdesk.core.database import check_db_connected, get_db
from newsdesk.schemas.common import ApiResponse
from newsdesk.schemas.health import HealthResponse

router = APIRouter()

API_VERSION = "0.1.0"


@router.get("/", response_model=ApiResponse[HealthResponse])
def get_health(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    components: Annotated[Components, Depends(get_components)],
) -> ApiResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"
    payload = HealthResponse(
        environment=components.settings.APP_ENV,
        version=API_VERSION,
        database=db_status,
    )
    return envelope(request, payload, "Service healthy")
