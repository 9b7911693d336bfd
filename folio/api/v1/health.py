"""Health check endpoint: process up, database reachable, permission cache mode."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from folio import __version__
from folio.core.database import check_db_connected, get_db
from folio.schemas.common import ApiResponse, ok
from folio.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=ApiResponse[HealthResponse])
def get_health(request: Request, db: Annotated[Session, Depends(get_db)]) -> ApiResponse[HealthResponse]:
    """
    Public liveness probe for load balancers. Reports "disconnected" rather
    than failing when the database is unreachable.
    """
    settings = request.app.state.settings
    return ok(
        HealthResponse(
            version=__version__,
            environment=settings.APP_ENV,
            database="connected" if check_db_connected(db) else "disconnected",
            permission_cache="enabled" if request.app.state.permission_catalog.cache is not None else "disabled",
        )
    )
