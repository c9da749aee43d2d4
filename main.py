import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from pymongo.errors import ConnectionFailure, PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from database import DatabaseUnavailable, DocumentStore
from dependencies import close_connections, get_store
from media import InvalidImageError, MediaError
from middleware import RateLimitMiddleware, SecurityHeadersMiddleware
from routers import api_router
from settings import Settings, configure_logging, get_settings

logger = logging.getLogger(__name__)

# Request locations that carry no meaning for the client.
_LOCATIONS = ("body", "query", "path", "header")


# ===============
# Error envelopes
# ===============
def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


def validation_errors(errors) -> list:
    out = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in _LOCATIONS]
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        out.append({"field": ".".join(loc) or "body", "message": message})
    return out


def install_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 404 and message == "Not Found":
            message = f"Route {request.url.path} not found"
        return error_response(exc.status_code, message)

    @app.exception_handler(RequestValidationError)
    async def request_invalid(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"success": False, "errors": validation_errors(exc.errors())},
        )

    @app.exception_handler(ValidationError)
    async def payload_invalid(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=400,
            content={"success": False, "errors": validation_errors(exc.errors())},
        )

    @app.exception_handler(InvalidImageError)
    async def image_invalid(request: Request, exc: InvalidImageError):
        return error_response(400, str(exc))

    @app.exception_handler(DatabaseUnavailable)
    @app.exception_handler(ConnectionFailure)
    async def database_down(request: Request, exc: Exception):
        logger.error("Database unavailable: %s", exc)
        return error_response(503, "Database connection failed")

    @app.exception_handler(MediaError)
    async def media_failed(request: Request, exc: MediaError):
        logger.error("Media host error: %s", exc)
        return error_response(502, "Image upload failed")

    @app.exception_handler(PyMongoError)
    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        if settings.is_production:
            return error_response(500, "Server error")
        return error_response(500, "Server error", error=str(exc))


# ==================
# FastAPI app config
# ==================
@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_connections()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title="Portfolio API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    prefix = settings.api_prefix.rstrip("/")
    if settings.rate_limit_enabled:
        app.add_middleware(
            RateLimitMiddleware,
            limit=settings.rate_limit_max_requests,
            window=max(1, settings.rate_limit_window_ms // 1000),
            path_prefix=f"{prefix}/",
        )
    if settings.security_headers_enabled:
        app.add_middleware(SecurityHeadersMiddleware)
    install_error_handlers(app, settings)

    # ======
    # Health
    # ======
    @app.get("/")
    def root():
        return {"success": True, "service": "portfolio-api", "message": "Portfolio API is running"}

    @app.get(f"{prefix}/health")
    def health(current: Settings = Depends(get_settings)):
        return {
            "success": True,
            "status": "ok",
            "environment": current.environment,
            "database_configured": bool(current.mongodb_uri),
        }

    @app.get(f"{prefix}/health/db")
    def health_db(store: DocumentStore = Depends(get_store)):
        try:
            store.ping()
        except PyMongoError as exc:
            logger.error("Database ping failed: %s", exc)
            return error_response(503, "Database connection failed")
        return {"success": True, "database": "connected"}

    @app.get(f"{prefix}/test")
    def test_database(store: DocumentStore = Depends(get_store)):
        try:
            collections = store.collection_names()
        except PyMongoError as exc:
            logger.warning("Listing collections failed: %s", exc)
            return {"backend": "running", "database": "not-available", "collections": []}
        return {"backend": "running", "database": "connected", "collections": collections[:10]}

    app.include_router(api_router, prefix=prefix)
    logger.info("Portfolio API configured (%s)", settings.environment)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
