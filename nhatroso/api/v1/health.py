"""Health check endpoint with database connectivity check."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nhatroso import __version__
from nhatroso.core.config import get_settings
from nhatroso.core.database import check_db_connected, get_db
from nhatroso.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """Report service status and whether the database answers. Used by load balancers."""
    db_status = "connected" if check_db_connected(db) else "disconnected"
    return HealthResponse(
        status="ok",
        version=__version__,
        environment=get_settings().APP_ENV,
        database=db_status,
    )
