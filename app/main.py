"""Main FastAPI application."""
import logging
from time import perf_counter
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.core.config import settings
from app.core.database import SessionLocal
from app.core.errors import register_error_handlers
from app.core.limiter import limiter
from app.core.ops_metrics import get_ops_metrics, observe_latency
from app.api import groups, notifications, posts, reactions, subscriptions

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(
    title="Community Engagement API",
    description="Reactions, notifications, subscriptions and feeds for community groups",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.middleware("http")
async def request_context_and_metrics(request: Request, call_next):
    request.state.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    start = perf_counter()

    response = await call_next(request)

    observe_latency(request.url.path, (perf_counter() - start) * 1000)
    response.headers["X-Request-Id"] = request.state.request_id
    return response


register_error_handlers(app)

# Rate limiter
app.state.limiter = limiter

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With", "X-Request-Id"],
)

# Routers
app.include_router(posts.router)           # Feed, posts, comments, post reactions, search
app.include_router(reactions.router)       # Generic post/comment reactions
app.include_router(notifications.router)   # Inbox + preferences
app.include_router(subscriptions.router)
app.include_router(groups.router)


@app.get("/")
def root():
    return {
        "message": "Community Engagement API",
        "status": "running",
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health")
def health():
    """Liveness plus a real round trip to the database."""
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except Exception as exc:
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "database": f"error: {str(exc)[:120]}"},
        )
    finally:
        db.close()
    return {"status": "healthy", "database": "connected"}


@app.get("/ops/metrics")
def ops_metrics():
    """In-process latency and notification dispatch counters."""
    return get_ops_metrics()
