# main.py

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import OperationFailure
from contextlib import asynccontextmanager
import logging
from logging.handlers import RotatingFileHandler
import time

# --- Core Application Imports ---
from app.db import db, ensure_indexes
from app.routers import config, profile, roll
from app.core.config import settings

# --- Rate Limiting Imports (Conditional) ---
from app.core.rate_limiter import limiter, limiter_decorator
if limiter:
    from slowapi.errors import RateLimitExceeded

# --- Logging Setup ---
logger = logging.getLogger("api_logger")
logger.setLevel(logging.INFO)
handler = RotatingFileHandler("api.log", maxBytes=5*1024*1024, backupCount=5)
formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
handler.setFormatter(formatter)
logger.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application startup and shutdown logic.
    """
    logger.info("Application startup: creating database indexes...")
    try:
        await ensure_indexes(db)
        logger.info("Database indexes created successfully.")
    except OperationFailure as e:
        logger.error(f"An error occurred during index creation: {e}")
    logger.info(f"Boost levels: {settings.boost_levels_list} (prune={settings.BOOST_PRUNE_UNREACHABLE}, fallback={settings.BOOST_FALLBACK_ON_EMPTY})")
    yield
    logger.info("Application shutdown.")


app = FastAPI(
    title="Title Roll API",
    description="Backend API for rolling weighted titles with milestone boosts.",
    version="1.0.0",
    lifespan=lifespan
)

# --- Rate Limiting Setup (Conditional) ---
if settings.RATE_LIMITING_ENABLED and limiter:
    logger.info(f"Rate limiting is ENABLED. Storage: {settings.REDIS_URL}")
    app.state.limiter = limiter

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
        logger.warning(f"Rate limit exceeded for IP {request.client.host} on path {request.url.path}")
        return JSONResponse(
            status_code=429,
            content={"detail": f"Rate limit exceeded: {exc.detail}"},
        )
else:
    logger.info("Rate limiting is DISABLED.")

# --- Logging Middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000
    ip_address = request.client.host if request.client else "unknown"

    log_message = (
        f'ip="{ip_address}" '
        f'method="{request.method}" '
        f'path="{request.url.path}" '
        f'status={response.status_code} '
        f'duration={process_time:.2f}ms'
    )
    logger.info(log_message)
    return response

# --- CORS Middleware Configuration ---
logger.info(f"CORS origins configured for: {settings.CORS_ORIGINS}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- API Routers ---
app.include_router(roll.router)
app.include_router(profile.router)
app.include_router(config.router)

# --- Root Endpoint ---
@app.get("/")
@limiter_decorator("100/minute")
def read_root(request: Request):
    """
    Root endpoint for health checks and welcome message.
    """
    return {"message": "Welcome to the Title Roll API!"}
