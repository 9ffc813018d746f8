import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from compass.api.admin.audit import router as audit_router
from compass.api.admin.providers import router as admin_providers_router
from compass.api.admin.services import router as admin_services_router
from compass.api.auth import router as auth_router
from compass.api.events import router as events_router
from compass.api.open_data import router as open_data_router
from compass.api.providers import router as providers_router
from compass.api.services import router as services_router
from compass.core.config import get_settings
from compass.core.logging_config import setup_logging
from compass.db.mongo import ensure_indexes, get_db

logger = logging.getLogger(__name__)


def _field_name(loc) -> str:
    # drop the "body" / "query" prefix FastAPI puts in front of the field path
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"message": exc.detail}},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": _field_name(e.get("loc", ())), "message": e.get("msg", "")}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": {"message": "Validation failed", "errors": errors}},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = {"message": "Internal server error"}
    if get_settings().is_development:
        error["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content={"error": error})


@asynccontextmanager
async def lifespan(app: FastAPI):
    await ensure_indexes(get_db())
    logger.info("Indexes ensured")
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    api = APIRouter(prefix="/api")

    @api.get("/health")
    async def health():
        return {"status": "ok", "message": settings.app_name}

    # public + provider routers
    api.include_router(auth_router)
    api.include_router(providers_router)
    api.include_router(services_router)
    api.include_router(events_router)
    api.include_router(open_data_router)

    # admin routers
    api.include_router(admin_providers_router)
    api.include_router(admin_services_router)
    api.include_router(audit_router)

    app.include_router(api)
    return app


app = create_app()
