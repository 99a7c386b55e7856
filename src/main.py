"""
Grand Gate Listings API - Main Application Entry Point
"""

import logging
from contextlib import asynccontextmanager

import pydantic
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.v1.endpoints import agents, listings, users
from src.core.config import settings
from src.db.base import Base, engine
from src.utils.errors import GrandGateError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup, release the connection pool on shutdown"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")

    # Import models so their tables are registered on the metadata
    import src.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Application startup complete")
    yield

    logger.info("Shutting down application")
    await engine.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Real-estate listings backend: accounts, agent profiles and property listings.

    ## Media
    Images and brochure PDFs live on the remote media host. Every create,
    update and delete keeps the stored references and the hosted assets in
    step: new files are uploaded, references dropped from a field are deleted
    from the host once the change is saved, and externally hosted URLs are
    never touched.

    ## Authentication
    Sign in via `/api/v1/users/login`; the token travels in an HTTP-only
    cookie (a Bearer header is accepted too).
    """,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GrandGateError)
async def grandgate_error_handler(request: Request, exc: GrandGateError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def _validation_message(errors) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(parts) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"message": _validation_message(exc.errors())})


@app.exception_handler(pydantic.ValidationError)
async def schema_validation_handler(request: Request, exc: pydantic.ValidationError):
    return JSONResponse(status_code=400, content={"message": _validation_message(exc.errors())})


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=400, content={"message": "Record conflicts with existing data"}
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"message": str(exc) or "Internal server error"})


# Include routers
app.include_router(users.router, prefix=settings.API_V1_PREFIX)
app.include_router(agents.router, prefix=settings.API_V1_PREFIX)
app.include_router(listings.router, prefix=settings.API_V1_PREFIX)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - API health check"""
    return {
        "status": "ok",
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "grandgate-listings-api",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


if __name__ == "__main__":
    # Multiple workers need an import string, not the app object
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        workers=settings.worker_count,
        log_level=settings.LOG_LEVEL.lower(),
    )
