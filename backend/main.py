"""Main FastAPI application: the diagram record service."""

import logging
import sqlite3
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from backend.api.routes import children, config, diagrams
from backend.config import settings
from backend.dependencies import get_database, get_config_service
from backend.models.responses import HealthResponse
from DIAGRAMSTORE.utils.error_handling import (
    ErrorContext,
    NotFoundError,
    StorageError,
    ValidationError,
    create_error_response,
    log_error_with_context,
)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ],
)

# Disable uvicorn access logs (we use our own)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def _resolve(app: FastAPI, dependency):
    """Honour dependency overrides outside of a request (startup)."""
    return app.dependency_overrides.get(dependency, dependency)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the relational schema and the config singleton on startup."""
    database = _resolve(app, get_database)()
    database.init_schema()
    _resolve(app, get_config_service)(database).ensure_config()
    logger.info("Record service is ready to receive requests")
    yield
    logger.info("Record service shutting down")


app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    lifespan=lifespan
)


# Request logging middleware
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({process_time:.3f}s)")
        return response


app.add_middleware(RequestLoggingMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "PUT", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type"],
)


# ============================================================================
# Error responses: always `{"error": message}`
# ============================================================================

def _error(status_code: int, error: BaseException, message: str = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=create_error_response(error, message))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return _error(400, exc, f"{location}: {message}" if location else message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, exc, str(exc.detail))


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error(400, exc)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(404, exc)


@app.exception_handler(sqlite3.IntegrityError)
async def integrity_error_handler(request: Request, exc: sqlite3.IntegrityError):
    return _error(400, exc, f"Duplicate record: {exc}")


@app.exception_handler(StorageError)
@app.exception_handler(sqlite3.Error)
async def internal_error_handler(request: Request, exc: Exception):
    log_error_with_context(exc, ErrorContext(operation=f"{request.method} {request.url.path}"))
    return _error(500, exc, "Internal server error")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log_error_with_context(exc, ErrorContext(operation=f"{request.method} {request.url.path}"), level="critical")
    return _error(500, exc, "Internal server error")


# Routes
app.include_router(config.router)
app.include_router(diagrams.router)
for router in children.routers:
    app.include_router(router)


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=3000, workers=1, access_log=False)
