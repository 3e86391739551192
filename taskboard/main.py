"""Main FastAPI application for the Taskboard API."""
import logging
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from taskboard import __version__
from taskboard.config import UPLOAD_DIR, UPLOAD_URL_PREFIX
from taskboard.db.init import init_db
from taskboard.middleware.cors import add_cors_middleware
from taskboard.routers import calendar_router, categories_router, events_router, tasks_router
from taskboard.services.errors import (
    DuplicateNameError,
    InvalidReferenceError,
    NotFoundError,
    StorageUnavailableError,
    TaskboardError,
    ValidationError,
)
from taskboard.utils.logger import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DuplicateNameError: status.HTTP_400_BAD_REQUEST,
    InvalidReferenceError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StorageUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}

# Create FastAPI application
app = FastAPI(
    title="Taskboard API",
    description="Personal task management with categories, attachments, calendar sync and live updates",
    version=__version__,
)

# Add CORS middleware
add_cors_middleware(app)


@app.exception_handler(TaskboardError)
async def taskboard_error_handler(request: Request, exc: TaskboardError):
    """Map service errors to a single typed JSON error body."""
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"message": exc.message, "code": exc.code},
    )


@app.on_event("startup")
async def startup_event():
    """Initialize database tables and the upload directory on startup."""
    Path(UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    try:
        init_db()
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise
    logger.info("Application startup complete.")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


app.include_router(tasks_router, prefix="/api")  # /api/tasks
app.include_router(categories_router, prefix="/api")  # /api/categories
app.include_router(calendar_router, prefix="/api")  # /api/calendar
app.include_router(events_router)  # /ws

# Uploaded attachments are served read-only
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=UPLOAD_DIR, check_dir=False), name="uploads")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
