"""Conductor -- FastAPI application entry point."""

import logging
import sys
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from conductor.api.routers.health import router as health_router
from conductor.api.routers.items import router as items_router
from conductor.api.routers.masters import router as masters_router
from conductor.config import VERSION, settings
from conductor.middleware import RequestIDMiddleware
from conductor.middleware.access_log import AccessLogMiddleware
from conductor.middleware.exception_handler import setup_exception_handlers
from conductor.repos.db import close_pool, persistence_enabled
from conductor.services.master_service import MasterService

logger = logging.getLogger(__name__)


class _ColorFormatter(logging.Formatter):
    """ANSI-colored log formatter for terminal output."""

    _COLORS = {
        logging.DEBUG:    "\033[36m",     # cyan
        logging.INFO:     "\033[32m",     # green
        logging.WARNING:  "\033[33m",     # yellow
        logging.ERROR:    "\033[31m",     # red
        logging.CRITICAL: "\033[1;31m",   # bold red
    }
    _RESET = "\033[0m"
    _DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self._COLORS.get(record.levelno, "")
        ts = self.formatTime(record, "%H:%M:%S")
        name = record.name.split(".")[-1][:20]
        msg = record.getMessage()
        return (
            f"{self._DIM}{ts}{self._RESET} "
            f"{color}{record.levelname:<8s}{self._RESET} "
            f"{self._DIM}[{name:>20s}]{self._RESET} "
            f"{color}{msg}{self._RESET}"
        )


class _PlainFormatter(logging.Formatter):
    """Plain-text formatter for file logs (no ANSI codes)."""

    def format(self, record: logging.LogRecord) -> str:
        ts = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        name = record.name.split(".")[-1][:20]
        return f"{ts} {record.levelname:<8s} [{name:>20s}] {record.getMessage()}"


def configure_logging() -> None:
    """Wire the root logger: coloured stderr, plus a rotating file if LOG_FILE is set."""
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(_ColorFormatter())
    handlers: list[logging.Handler] = [stream_handler]

    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(log_path),
            maxBytes=10 * 1024 * 1024,  # 10 MB per file
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(_PlainFormatter())
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # uvicorn's own access log duplicates conductor.access
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Application lifespan: startup and shutdown hooks."""
    configure_logging()
    service: MasterService = application.state.master_service
    if persistence_enabled():
        restored = await service.restore()
        logger.info("Restored %d master project(s) from the database.", restored)
    else:
        logger.info("DATABASE_URL not set; master configuration is in-memory only.")
    yield
    await close_pool()


def create_app(service: MasterService | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="Conductor",
        version=VERSION,
        description="Master project membership and rebuild coordination",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )
    application.state.master_service = service or MasterService()

    setup_exception_handlers(application)

    # Starlette runs the last-added middleware first: request IDs must exist
    # before the access log reads them.
    if settings.ACCESS_LOG_ENABLED:
        application.add_middleware(AccessLogMiddleware)
    application.add_middleware(RequestIDMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    application.include_router(health_router)
    application.include_router(masters_router)
    application.include_router(items_router)
    return application


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("conductor.main:app", host="0.0.0.0", port=8000)
