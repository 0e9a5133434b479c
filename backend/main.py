"""
Coursework Assignment Backend - Reference API

FastAPI application entry point. Serves the assignment, file and submission
routes backed by the in-memory store, for local development and tests.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coursework import __version__
from coursework.api import api_router
from coursework.core.config import get_config, get_log_path
from coursework.core.logging import setup_logging, get_logger


# Record startup time globally
_startup_time = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    """
    global _startup_time
    _startup_time = datetime.now(timezone.utc).isoformat()
    logger = setup_logging()
    logger.info("Starting coursework reference API...")
    logger.debug("Log level: %s, log file: %s", get_config().logging.level, get_log_path())
    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")


app = FastAPI(
    title="Coursework Assignment Backend",
    description="Assignment lifecycle and attachment storage reference API",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request, call_next):
    logger = get_logger()
    method = request.method
    path = request.url.path
    logger.debug("Request started: %s %s", method, path)
    response = await call_next(request)
    logger.debug("Request completed: %s %s -> %s", method, path, response.status_code)
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "name": "Coursework Assignment Backend",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint with startup time."""
    return {
        "status": "healthy",
        "startup_time": _startup_time,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(
        "main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.debug,
    )
