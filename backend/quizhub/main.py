from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from quizhub.core.config import settings
from quizhub.core.logging import setup_logging
from quizhub.api.routes.health import router as health_router
from quizhub.api.routes.auth import router as auth_router
from quizhub.api.routes.exams import router as exams_router
from quizhub.api.routes.questions import router as questions_router
from quizhub.api.routes.results import router as results_router
from quizhub.api.routes.users import router as users_router
from quizhub.db.base import Base
from quizhub.db.session import SessionLocal, engine
from quizhub.schemas.common import Envelope, ErrorOut
from quizhub.services.user_service import ensure_admin


setup_logging()
logger = logging.getLogger(__name__)


def envelope(request_id: str, data: Any = None, error: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    err = ErrorOut(**error) if error is not None else None
    out = Envelope(
        request_id=request_id,
        success=err is None,
        data=data,
        message=err.message if err else None,
    ).model_dump()
    out["error"] = err.model_dump(exclude_none=True) if err else None
    return jsonable_encoder(out)


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = req_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = req_id
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    req_id = getattr(request.state, "request_id", str(uuid.uuid4()))

    detail = exc.detail
    # Domain errors (core.errors) carry {"code", "message", "details"?}
    if isinstance(detail, dict):
        code = str(detail.get("code") or "HTTP_ERROR")
        message = detail.get("message") or str(detail)
        error = {"code": code, "message": message}
        if detail.get("details"):
            error["details"] = detail["details"]
    else:
        error = {"code": "HTTP_ERROR", "message": str(detail)}

    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(request_id=req_id, data=None, error=error),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    req_id = getattr(request.state, "request_id", str(uuid.uuid4()))
    return JSONResponse(
        status_code=422,
        content=envelope(
            request_id=req_id,
            data=None,
            error={
                "code": "VALIDATION_ERROR",
                "message": "Invalid request",
                "details": {"errors": exc.errors()},
            },
        ),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", str(uuid.uuid4()))
    logger.exception("unhandled error on %s %s (request_id=%s)", request.method, request.url.path, req_id)
    return JSONResponse(
        status_code=500,
        content=envelope(
            request_id=req_id,
            data=None,
            error={"code": "INTERNAL_ERROR", "message": "Internal server error"},
        ),
    )


@app.on_event("startup")
def bootstrap():
    """Create tables (dev) and the configured admin account. Safe to run repeatedly."""
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)

    if settings.ADMIN_USERNAME and settings.ADMIN_PASSWORD:
        db = SessionLocal()
        try:
            ensure_admin(
                db,
                username=settings.ADMIN_USERNAME,
                password=settings.ADMIN_PASSWORD,
                full_name=settings.ADMIN_FULL_NAME,
            )
        finally:
            db.close()

    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENV)


app.include_router(health_router, prefix="/api")
app.include_router(auth_router, prefix="/api")
app.include_router(exams_router, prefix="/api")
app.include_router(questions_router, prefix="/api")
app.include_router(results_router, prefix="/api")
app.include_router(users_router, prefix="/api")
