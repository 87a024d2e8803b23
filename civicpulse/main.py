from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import logging
import time

from civicpulse.database.connection import close_db, init_db
from civicpulse.middleware.error_handler import error_handler_middleware, setup_error_handlers
from civicpulse.middleware.request_id import RequestIDMiddleware
from civicpulse.routers import admin_router, complaints_router, geocoding_router, reference_router

logger = logging.getLogger("civicpulse.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("🚀 CivicPulse API started")
    yield
    await close_db()
    logger.info("🛑 CivicPulse API stopped")


app = FastAPI(
    title="CivicPulse API",
    description="Citizen reporting of civic issues: submission, geocoding, map markers and authority follow-up",
    version="0.1.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with its status and duration."""
    start_time = time.time()
    path = request.url.path
    method = request.method

    # Health probes are too frequent to log
    skip_logging = path == "/health"

    if not skip_logging:
        logger.info(f"🔔 {method} {path}")

    try:
        response = await call_next(request)
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"💥 {method} {path} - Exception: {e} - {process_time:.4f}s")
        raise

    process_time = time.time() - start_time
    status_code = response.status_code

    if status_code < 400:
        status_str = f"✅ {status_code}"
    elif status_code < 500:
        status_str = f"⚠️ {status_code}"
    else:
        status_str = f"❌ {status_code}"

    if not skip_logging:
        logger.info(f"🏁 {method} {path} - {status_str} - {process_time:.3f}s")
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.middleware("http")(error_handler_middleware)

# Outermost, so every log line of the request carries its id
app.add_middleware(RequestIDMiddleware)

setup_error_handlers(app)

app.include_router(reference_router.router)
app.include_router(complaints_router.router)
app.include_router(admin_router.router)
app.include_router(geocoding_router.router)


@app.get("/")
async def root():
    return {"message": "Welcome to the CivicPulse API"}


@app.get("/health")
async def health_check():
    return {"status": "ok"}
