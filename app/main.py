"""
FastAPI application for ferry.

This is the main entry point that mounts the upload API.

Usage:
    uvicorn app.main:app --reload --port 8081
"""

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.upload.factory import get_upload_config
from app.upload.routes import router as upload_router
from ferry_core.config import UploadConfig, settings
from ferry_core.logging import setup_logging

# Initialize logging
setup_logging(settings.LOG_LEVEL)


def ensure_upload_root(config: UploadConfig) -> Path | None:
    """Create the default local upload root, which the local backend never creates."""
    if config.get_string("upload.default.storage", "local") != "local":
        return None
    root_dir = config.get_string("upload.default.dir")
    if not root_dir:
        return None
    path = Path(root_dir)
    path.mkdir(parents=True, exist_ok=True)
    logger.info(f"Upload root ready at {path}")
    return path


ensure_upload_root(get_upload_config())

app = FastAPI(
    title="Ferry",
    description="AJAX file upload API with pluggable storage",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",  # Vite dev server
        "http://localhost:3000",  # Alternative frontend
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount the upload router under /upload prefix
app.include_router(upload_router, prefix="/upload", tags=["Upload"])


@app.get("/health")
def health():
    """
    Health check endpoint for the application.

    Returns:
        dict: Status and service information.
    """
    return {"status": "ok", "service": settings.SERVICE_NAME, "version": "1.0.0"}
