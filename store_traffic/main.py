# store_traffic/main.py
"""
FastAPI application entry point.
Wires the traffic generator to its two sinks (database + live feed),
registers middleware, global error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from store_traffic.routers import traffic, live, occupancy, health
from store_traffic.database import create_tables, SessionLocal
from store_traffic.config import settings
from store_traffic.services.broadcaster import EventBroadcaster
from store_traffic.services.event_sink import DatabaseEventSink
from store_traffic.services.traffic_generator import TrafficGenerator
from store_traffic.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Store Traffic API",
    description="Simulated customer traffic — live feed, recent events and hourly rollup.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (dashboard origins) ─────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# ── Traffic pipeline ─────────────────────────────────────────────────────────
app.state.broadcaster = EventBroadcaster()
app.state.sink = DatabaseEventSink(SessionLocal)
app.state.generator = TrafficGenerator(
    store_ids=settings.STORE_IDS,
    persistence=app.state.sink,
    broadcaster=app.state.broadcaster,
    max_in=settings.MAX_CUSTOMERS_PER_EVENT,
    zero_weight=settings.ZERO_WEIGHT,
)
app.state.started_at = time.monotonic()


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(traffic.router,   prefix="/api/v1", tags=["📊 Traffic"])
app.include_router(live.router,      prefix="/api/v1", tags=["📡 Live Feed"])
app.include_router(occupancy.router, prefix="/api/v1", tags=["🏬 Occupancy"])
app.include_router(health.router,    prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Store Traffic Backend starting up...")
    app.state.started_at = time.monotonic()
    try:
        create_tables()
        logger.info("✅ Database tables ready")
        await app.state.generator.restore_occupancy()
    except SQLAlchemyError as e:
        # Keep serving the live feed; the storage watch resumes writes later
        app.state.sink.mark_degraded(str(e))

    app.state.generator.start(
        interval=settings.GENERATOR_INTERVAL_SECONDS,
        storage_check_interval=settings.STORAGE_CHECK_INTERVAL_SECONDS,
    )
    logger.info(f"🏬 Stores simulated: {settings.STORE_IDS}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Store Traffic Backend shutting down...")
    await app.state.generator.stop()
