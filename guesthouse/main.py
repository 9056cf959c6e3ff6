import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import OperationalError

from .config import settings
from .db import SessionLocal, ensure_mvp_schema
from .limiter import limiter
from .routers import rooms_api, guests_api, expenses_api, analytics_api, admin_api
from .security import ensure_admin_password
from .services.auto_checkout import run_auto_checkout
from .services.events import bus, ENTITIES

# --- Logging configuration ---
_level = logging.DEBUG if getattr(settings, "DEBUG", False) else logging.INFO
logging.basicConfig(
    level=_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# Align uvicorn loggers with our level (useful under Docker Compose)
for _name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(_name).setLevel(_level)
logger = logging.getLogger("guesthouse.startup")
logger.info("Starting %s (DEBUG=%s)", settings.APP_NAME, getattr(settings, "DEBUG", False))

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        f"{settings.APP_NAME}: rooms, guest bookings, payments and expenses for a guest house.\n\n"
        "All endpoints live under /api/v1."
    ),
)

# Change-event logging hooks, held so shutdown can drop them
_debug_subscriptions = []

@app.on_event("startup")
def startup_event():
    """Runs startup tasks: schema, admin secret, and a checkout reconciliation pass."""
    logger.info("Running startup tasks...")
    ensure_mvp_schema()

    db = SessionLocal()
    try:
        ensure_admin_password(db)
        if settings.AUTO_CHECKOUT_ON_STARTUP:
            try:
                result = run_auto_checkout(db)
                logger.info("Startup auto-checkout: %d checked out", len(result.checked_out))
            except Exception:
                db.rollback()
                logger.exception("Startup auto-checkout failed")
    finally:
        db.close()

    if settings.DEBUG and not _debug_subscriptions:
        for entity in ENTITIES:
            _debug_subscriptions.append(bus.subscribe(entity, lambda evt: logger.debug("%s changed", evt.entity)))
    logger.info("Startup tasks complete.")

@app.on_event("shutdown")
def shutdown_event():
    while _debug_subscriptions:
        _debug_subscriptions.pop().unsubscribe()


@app.exception_handler(OperationalError)
async def store_unavailable_handler(request: Request, exc: OperationalError):
    logger.error("Database unavailable for %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(content={"detail": "Database temporarily unavailable"}, status_code=503)


# Add the limiter to the app state
app.state.limiter = limiter
# Add the exception handler for rate limit exceeded errors
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(rooms_api.router)
app.include_router(guests_api.router)
app.include_router(expenses_api.router)
app.include_router(analytics_api.router)
app.include_router(admin_api.router)

@app.get("/healthz")
@limiter.exempt
def healthz():
    return {"status": "ok"}
