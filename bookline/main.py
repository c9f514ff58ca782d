import logging
import time
from contextlib import asynccontextmanager

import redis
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import all models to ensure they're registered with SQLAlchemy Base
from . import models, models_workflows  # noqa: F401
from .config import ALLOWED_ORIGINS, REDIS_URL
from .database import Base, engine
from .domain.apps import router as apps_router
from .domain.bookings import router as bookings_router
from .domain.routing_forms import router as routing_forms_router
from .domain.slots import router as slots_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Another worker may have created the tables first
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Bookline API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Missing or malformed Authorization headers are reported as 401,
    every other validation error as 422
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(slots_router)
app.include_router(bookings_router)
app.include_router(routing_forms_router)
app.include_router(apps_router)


@app.get("/")
def root():
    return {"message": "Bookline API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/health/redis")
async def redis_health_check():
    """Check Redis connectivity for the background worker"""
    if not REDIS_URL:
        return {"status": "unhealthy", "redis": {"connected": False, "error": "REDIS_URL not set"}}

    try:
        client = redis.from_url(REDIS_URL, socket_connect_timeout=5)
        start_time = time.time()
        client.ping()
        response_time = (time.time() - start_time) * 1000
        info = client.info()
        return {
            "status": "healthy",
            "redis": {
                "connected": True,
                "response_time_ms": round(response_time, 2),
                "version": info.get("redis_version", "unknown"),
            },
        }
    except redis.RedisError as e:
        return {"status": "unhealthy", "redis": {"connected": False, "error": str(e)}}
