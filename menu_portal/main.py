"""FastAPI entrypoint for the multi-restaurant menu portal."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from menu_portal.api.v1.api import api_router
from menu_portal.core.config import settings
from menu_portal.core.errors import PortalError
from menu_portal.db import session as db_session
from menu_portal.db.base import Base
from menu_portal.services.account_service import ensure_default_superadmin
from menu_portal.services.events import OrderEventBroadcaster

logger = logging.getLogger(__name__)

DEV_ORIGIN_REGEX = r"https?://(localhost|127\.0\.0\.1)(:\d+)?"

app = FastAPI(title=settings.app_name, version=settings.app_version, debug=settings.debug)
app.state.broadcaster = OrderEventBroadcaster()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_origin_regex=DEV_ORIGIN_REGEX if settings.is_dev else None,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix="/api")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return _error(status.HTTP_400_BAD_REQUEST, f"{location}: {message}" if location else message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("[API] Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.get("/api")
def api_root() -> dict[str, object]:
    return {
        "success": True,
        "data": {"name": settings.app_name, "version": settings.app_version, "environment": settings.app_env},
    }


@app.get("/api/health")
def health() -> dict[str, object]:
    return {"success": True, "data": {"status": "ok"}}


@app.on_event("startup")
def startup() -> None:
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    if not settings.jwt_secret:
        logger.warning("JWT_SECRET not set; legacy JWT verification is disabled.")
    Base.metadata.create_all(bind=db_session.engine)
    if settings.is_dev:
        with db_session.SessionLocal() as session:
            existed = ensure_default_superadmin(session)
            logger.info("[BOOTSTRAP] default superadmin present before startup: %s", "yes" if existed else "no")


def run() -> None:
    uvicorn.run("menu_portal.main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)
