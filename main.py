# type: ignore
# pyright: reportGeneralTypeIssues=false
# pyright: reportOptionalMemberAccess=false
"""
DevTrack API
============
Project and ticket tracking for small teams: users register and log in,
create projects, manage team membership, and file, assign, update and
comment on tickets. Connected clients join project rooms over ``/ws`` and
receive ticket events as they happen.

Access rules:
    project read / ticket CRUD / comment  -> project creator or team member
    project update / delete / members     -> project creator only
    ticket delete                         -> project creator or ticket creator

Port: 5000
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from devtrack.controllers import (
    auth_controller, project_controller, realtime_controller,
    system_controller, ticket_controller,
)
from devtrack.core.config import settings
from devtrack.core.dependencies import get_database, get_retry_policy
from devtrack.core.errors import DevTrackError
from devtrack.core.logging import get_logger
from devtrack.middleware import MetricsMiddleware, RequestIDMiddleware
from devtrack.schemas import ErrorResponse

logger = get_logger(__name__)


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    database = get_database()
    # Serve health/metrics while the store is still coming up.
    connect_task = asyncio.create_task(database.connect(get_retry_policy()))
    logger.info("%s v%s starting on port %d", settings.SERVICE_NAME, settings.SERVICE_VERSION, settings.PORT)
    yield
    if not connect_task.done():
        connect_task.cancel()
        try:
            await connect_task
        except asyncio.CancelledError:
            logger.info("Store connection attempt cancelled")
    database.dispose()
    logger.info("Shutting down, connection pool disposed")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="DevTrack API",
    description="Projects, team membership and tickets with realtime project rooms.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error rendering ───────────────────────────────────────────────────────
def _error_body(error: str, message: str, detail: Optional[str] = None) -> dict:
    return ErrorResponse(error=error, message=message, detail=detail).model_dump(exclude_none=True)


@app.exception_handler(DevTrackError)
async def devtrack_error_handler(request: Request, exc: DevTrackError):
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.error, exc.message))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        message = str(first.get("msg", message)).removeprefix("Value error, ")
        field = next((p for p in reversed(first.get("loc", ())) if isinstance(p, str) and p != "body"), None)
        if field and first.get("type") in ("missing", "enum", "string_type"):
            message = f"{field}: {message}"
    return JSONResponse(status_code=400, content=_error_body("validation_error", message))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"message": "Route not found"})
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("http_error", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    detail = str(exc) if settings.is_development else None
    return JSONResponse(
        status_code=500,
        content=_error_body("internal_server_error", "Something went wrong!", detail),
    )


# ── Routes ────────────────────────────────────────────────────────────────
@app.get("/", tags=["System"])
def welcome():
    return {"message": "Welcome to DevTrack API"}


app.include_router(system_controller.router)
app.include_router(auth_controller.router)
app.include_router(project_controller.router)
app.include_router(ticket_controller.router)
app.include_router(realtime_controller.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT)
