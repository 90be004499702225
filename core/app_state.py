"""
Inkwell AI Editing Engine - Editor API
======================================

FastAPI application backing the collaborative editor: AI chat and selection
edits with a guaranteed offline fallback, provider health reporting, and the
in-memory document store reached over the ``/ws`` sync WebSocket.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from ai_service import AIOrchestrator, build_orchestrator
from config import Config, config
from document_store import DocumentStore, router as document_router

# Setup logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
    ]
)

# Silence noisy third-party loggers to avoid cluttering output
_noisy_loggers = [
    'httpcore',
    'httpcore.connection',
    'httpcore.http11',
    'httpx',
    'aiohttp.access',
    'openai._base_client',
    'anthropic._base_client',
]
for _logger_name in _noisy_loggers:
    logging.getLogger(_logger_name).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

TRUTHY_ENV_VALUES = {"1", "true", "yes", "on"}
FORCE_VERBOSE_ENV_VAR = "INKWELL_FORCE_VERBOSE"
FORCE_EXTRA_VERBOSE_ENV_VAR = "INKWELL_FORCE_EXTRA_VERBOSE"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in TRUTHY_ENV_VALUES


app = FastAPI(
    title="Inkwell AI Editing Engine",
    description="AI chat and selection editing with provider fallback and document sync",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(document_router)

app.state.document_store = DocumentStore()
app.state.orchestrator = None


def get_orchestrator() -> AIOrchestrator:
    """Return the orchestrator owned by the application, building it on first use."""
    if app.state.orchestrator is None:
        app.state.orchestrator = build_orchestrator(
            config,
            verbose=_env_flag(FORCE_VERBOSE_ENV_VAR) or _env_flag(FORCE_EXTRA_VERBOSE_ENV_VAR),
            extra_verbose=_env_flag(FORCE_EXTRA_VERBOSE_ENV_VAR),
        )
    return app.state.orchestrator


def get_document_store() -> DocumentStore:
    return app.state.document_store


def install_orchestrator(orchestrator: Optional[AIOrchestrator]) -> None:
    """Replace the application's orchestrator (used by tests and embedders)."""
    app.state.orchestrator = orchestrator


@app.on_event("startup")
async def startup_event():
    """Build the orchestrator early so configuration problems show up at boot"""
    orchestrator = get_orchestrator()
    active = orchestrator.selector.select()
    logger.info("Inkwell AI Editing Engine ready (active provider: %s)", active.name)


@app.on_event("shutdown")
async def shutdown_event():
    """Clean up resources on shutdown"""
    logger.info("Shutting down Inkwell AI Editing Engine...")
    orchestrator = app.state.orchestrator
    if orchestrator is not None:
        try:
            await orchestrator.close()
            logger.info("Provider connections closed successfully")
        except Exception as e:
            logger.error(f"Error closing provider connections: {e}")
    logger.info("Shutdown complete")


__all__ = [
    "app",
    "config",
    "Config",
    "logger",
    "get_orchestrator",
    "get_document_store",
    "install_orchestrator",
    "FORCE_VERBOSE_ENV_VAR",
    "FORCE_EXTRA_VERBOSE_ENV_VAR",
    "TRUTHY_ENV_VALUES",
]
