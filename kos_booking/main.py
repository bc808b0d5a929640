"""
Kos Booking application entry point
"""
import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from kos_booking import __version__
from kos_booking.config import settings
from kos_booking.database import init_db
from kos_booking.errors import BookingError, InternalError
from kos_booking.models.schemas import validation_message
from kos_booking.responses import failure
from kos_booking.routers import bookings, kos

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    """Setup logging configuration"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan"""
    setup_logging(settings.LOG_LEVEL)
    init_db()
    logger.info(f"{settings.APP_NAME} started")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Kos boarding-house booking backend",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.error(f"{request.method} {request.url.path} -> unhandled error ({elapsed_ms:.1f} ms)")
        raise
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response


# ============== Error envelope ==============

@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return failure(exc.message, exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    message = validation_message(exc)
    logger.warning(f"{request.method} {request.url.path} validation failed: {message}")
    return failure(message, 400)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return failure(str(exc.detail), exc.status_code)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"{request.method} {request.url.path} store failure: {exc}")
    return failure(InternalError.default_message, InternalError.status_code)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} unexpected failure")
    return failure(InternalError.default_message, InternalError.status_code)


# Routers
app.include_router(kos.router)
app.include_router(bookings.router)


@app.get("/")
def root():
    return {
        "name": settings.APP_NAME,
        "version": __version__,
    }


@app.get("/health")
def health_check():
    return {"status": "healthy"}
