"""
Blog Service
Main FastAPI application over the JSON record store
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from .config import settings
from .infrastructure.storage import record_store
from .domain.errors import (
    AuthenticationError,
    BlogError,
    CycleDetectedError,
    ForbiddenError,
    NotFoundError,
    PageSizeError,
    StorageError,
    ValidationError,
)
from .api.routes import auth_router, comments_router, posts_router
from .schemas import ErrorResponse

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Most specific first
ERROR_STATUS = [
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (ValidationError, 400),
    (PageSizeError, 400),
    (AuthenticationError, 401),
    (StorageError, 503),
    (CycleDetectedError, 500),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Starting Blog Service...")
    await record_store.initialize()
    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} started")

    yield

    # Shutdown
    logger.info("Shutting down Blog Service...")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Blog posts, threaded comments and profiles over a JSON file store",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


def status_for(exc: BlogError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 500


@app.exception_handler(BlogError)
async def blog_error_handler(request: Request, exc: BlogError):
    """Translate domain errors into HTTP responses"""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    body = ErrorResponse(error=type(exc).__name__, detail=exc.message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


app.include_router(auth_router)
app.include_router(posts_router)
app.include_router(comments_router)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint"""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("blog_service.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
