# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""System endpoints: health, readiness, metrics."""
from fastapi import APIRouter, Depends, HTTPException
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import Response

from devtrack.core.config import settings
from devtrack.core.database import Database
from devtrack.core.dependencies import get_database, get_relay
from devtrack.services.event_relay import EventRelay

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check(relay: EventRelay = Depends(get_relay)):
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "realtimeConnections": relay.channel_count,
    }


@router.get("/health/ready")
def readiness_check(database: Database = Depends(get_database)):
    if not database.connected:
        raise HTTPException(status_code=503, detail="Database not connected yet")
    try:
        database.verify_connection()
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=503, detail=f"Database unavailable: {exc}")
    return {"status": "ok", "database": "connected"}


@router.get("/metrics")
def prometheus_metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
