from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from litejira.api.middleware import RequestTimingMiddleware
from litejira.api.v1.router import v1_router
from litejira.common.logging import get_logger, setup_logging
from litejira.config import settings
from litejira.core.reporting.scheduler import ReportScheduler, SchedulerState

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    scheduler = ReportScheduler()
    state = SchedulerState()
    if settings.REPORT_SCHEDULER_ENABLED:
        state = scheduler.start(state)
    else:
        logger.info("Report scheduler disabled")
    app.state.report_scheduler = scheduler

    yield

    scheduler.stop(state)
    scheduler.shutdown()


app = FastAPI(
    title="LiteJira API",
    description="Lightweight task tracking with AI-generated activity reports",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
origins = settings.ALLOWED_ORIGINS.split(",") if settings.ALLOWED_ORIGINS != "*" else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestTimingMiddleware)

# API routes
app.include_router(v1_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "litejira",
        "version": "1.0.0",
        "env": settings.APP_ENV,
    }
