# src/main.py
import logging
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from config import settings
from database import init_db
from errors import (
    http_exception_handler, validation_exception_handler, storage_exception_handler, unhandled_exception_handler,
)
from middleware.rate_limiter import rate_limit_requests
from middleware.request_log import log_requests
from auth.routes import router as auth_router
from subscription.routes import router as users_router
from catalog.routes import packages_router, channels_router
from resellers.routes import router as resellers_router
from admin.routes import router as admin_router
from player.routes import router as player_router
from scheduler.tasks import start_scheduler

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="OTT Panel Backend",
    description="Subscriber, package, reseller and channel management with M3U and player API export",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(rate_limit_requests)
app.middleware("http")(log_requests)

# Exception handlers
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, storage_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Include routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(packages_router)
app.include_router(channels_router)
app.include_router(resellers_router)
app.include_router(admin_router)
app.include_router(player_router)


@app.on_event("startup")
def startup_event():
    """Create tables, seed the default admin and start background jobs."""
    init_db()
    app.state.scheduler = start_scheduler()
    logger.info(f"OTT Panel started on port {settings.PORT}")


@app.on_event("shutdown")
def shutdown_event():
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        scheduler.shutdown(wait=False)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "OTT Panel backend is running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT)
