"""
FastAPI application for the translation pipeline.

Two parameterless trigger endpoints; every target comes from the pipeline
configuration.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from polypage.config import configure_logging, get_settings
from polypage.config_loader import load_pipeline_config
from polypage.core.errors import PolypageError
from polypage.pipeline import Pipeline, create_pipeline

logger = logging.getLogger(__name__)


# =============================================================================
# App State
# =============================================================================


class AppState:
    """Application state - initialized at startup."""

    pipeline: Pipeline | None = None


state = AppState()


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup app resources."""
    settings = get_settings()
    configure_logging(settings.log_level)

    config = load_pipeline_config(settings.pipeline_config_path)
    state.pipeline = create_pipeline(config, settings)
    logger.info(f"polypage API starting in {settings.environment} mode")

    yield

    await state.pipeline.aclose()
    state.pipeline = None
    logger.info("polypage API shutting down")


# =============================================================================
# App Setup
# =============================================================================


app = FastAPI(
    title="polypage API",
    description="On-demand translation and replication of Notion pages",
    version="0.1.0",
    lifespan=lifespan,
)


# =============================================================================
# Dependencies
# =============================================================================


def get_pipeline() -> Pipeline:
    return state.pipeline


def _error(e: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"message": "error", "error": str(e)})


# =============================================================================
# Routes
# =============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "polypage"}


@app.get("/translate-and-duplicate-page")
async def translate_and_duplicate_page(pipeline: Pipeline = Depends(get_pipeline)):
    """
    Replicate the configured documents into the configured languages.

    Per-language failures are reported in errorMessages with a 200; only a
    failure of the run itself (source database unreachable) returns 500.
    """
    try:
        report = await pipeline.run_server_targets()
    except PolypageError as e:
        logger.error(f"Error: {e}")
        return _error(e)
    except Exception as e:
        logger.exception(f"Unexpected error during translation run: {e}")
        return _error(e)
    return report.summary()


@app.get("/get-block-children")
async def get_block_children(pipeline: Pipeline = Depends(get_pipeline)):
    """Raw child blocks of the configured block."""
    block_id = pipeline.config.server.inspect_block_id
    logger.info(f"Fetching child blocks for block ID: {block_id}")
    try:
        children = await pipeline.storage.documents.list_raw_children(block_id)
    except PolypageError as e:
        logger.error(f"Error fetching block children: {e}")
        return _error(e)
    except Exception as e:
        logger.exception(f"Unexpected error fetching block children: {e}")
        return _error(e)
    return {"message": "success", "children": children}
