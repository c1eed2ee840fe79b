"""BarFlow Venues API - Main Application"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from barflow import __version__
from barflow.config import settings
from barflow.errors import APIError
from barflow.routes import venues
from barflow.services.redis_service import redis_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"Starting {settings.app_name} API...")
    await redis_service.connect()
    yield
    logger.info(f"Shutting down {settings.app_name} API...")
    await redis_service.disconnect()


app = FastAPI(
    title=f"{settings.app_name} API",
    description="Venue, member and invitation management",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(message: str, status_code: int, headers: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"message": message, "status": status_code},
        headers=headers
    )


def format_validation_error(exc: RequestValidationError) -> str:
    """Describe the first validation error, e.g. '"email" is required'"""
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    error = errors[0]
    if error.get("type") == "json_invalid":
        return "Invalid JSON body"

    # Integer parts of loc are list indexes or JSON positions, not field names
    fields = [
        str(part) for part in error.get("loc", ())
        if not isinstance(part, int) and part not in ("body", "query", "path")
    ]
    field = fields[-1] if fields else "body"

    if error.get("type") == "missing":
        return f'"{field}" is required'

    message = error.get("msg", "is invalid")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f'"{field}" {message}'


# Exception handlers
@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(str(exc.detail), exc.status_code, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(format_validation_error(exc), 400)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return error_response("Internal Server Error", 500)


# Include routers
app.include_router(venues.router, prefix="/venues", tags=["Venues"])


@app.get("/health-check", response_class=PlainTextResponse, tags=["Health"])
async def health_check():
    """Check service health"""
    return "OK"
