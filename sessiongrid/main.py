#!/usr/bin/env python3
"""
SessionGrid - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Runs the web server

All business logic is in the modules, following black box principles.
"""

import asyncio
import logging
import logging.config as log_config
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import redis.asyncio as redis
import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse
from sse_starlette.sse import EventSourceResponse

from sessiongrid.config.provider import ConfigProvider, EnvConfigProvider
from sessiongrid.logging_config import get_logging_config

# Import modules through their black box interfaces
from sessiongrid.modules.api import (
    MessageResponse,
    SaveMessageRequest,
    SaveMessageResponse,
    SessionInfoResponse,
)
from sessiongrid.modules.config import get_config
from sessiongrid.modules.lifecycle import LifecycleEvents
from sessiongrid.modules.lifecycle.clustering import SessionClusteringListener
from sessiongrid.modules.middleware import SessionMiddleware
from sessiongrid.modules.sanitizer import (
    ProcessingGuard,
    SanitizerPolicy,
    SessionAttributeSanitizer,
)
from sessiongrid.modules.session import HttpSession, SessionManager, SessionModule
from sessiongrid.modules.storage import StorageModule
from sessiongrid.modules.ui import MainView

# Get configuration
config = get_config()

# Configure logging with health check suppression
log_config.dictConfig(get_logging_config(config.get("log_level")))
logger = logging.getLogger(__name__)

# Configuration provider (centralized config access)
config_provider: ConfigProvider = EnvConfigProvider()

# Module instances (initialized at startup)
storage_module: Optional[StorageModule] = None
redis_client = None
session_module: Optional[SessionModule] = None
session_manager: Optional[SessionManager] = None
processing_guard: Optional[ProcessingGuard] = None
sweep_task: Optional[asyncio.Task] = None

HEALTH_PATHS = ("/healthz", "/health", "/metrics")


async def get_redis_client():
    """Connect to the data grid from configuration."""
    global storage_module
    storage_module = StorageModule(config_provider.get_grid_config())
    return await storage_module.connect()


async def sweep_expired_sessions(interval: int) -> None:
    """Periodically fire session-destroyed for sessions that expired in the grid."""
    while True:
        await asyncio.sleep(interval)
        if not session_manager:
            continue
        try:
            await session_manager.sweep_expired()
        except Exception as e:
            logger.warning(f"Expired session sweep failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle - initialize and cleanup resources.
    """
    global redis_client, session_module, session_manager, processing_guard, sweep_task

    # Startup
    logger.info("Starting SessionGrid with Black Box Architecture...")

    redis_client = await get_redis_client()

    processing_guard = ProcessingGuard()
    sanitizer = SessionAttributeSanitizer(
        SanitizerPolicy.from_config(config_provider.get_sanitizer_config())
    )

    events = LifecycleEvents()
    SessionClusteringListener(
        processing_guard, sanitizer, session_timeout=config.get("session_timeout")
    ).service_init(events)

    grid_config = config_provider.get_grid_config()
    session_module = SessionModule(
        redis_client,
        cluster_name=grid_config.cluster_name,
        default_timeout=config.get("session_timeout"),
    )
    session_manager = SessionManager(
        session_module, events, max_uis_per_session=config.get("session_max_uis")
    )

    sweep_interval = config.get("session_sweep_interval")
    if sweep_interval and sweep_interval > 0:
        sweep_task = asyncio.create_task(sweep_expired_sessions(sweep_interval))

    logger.info("SessionGrid started successfully")

    yield

    # Shutdown
    logger.info("Shutting down SessionGrid...")

    if sweep_task:
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass
        sweep_task = None

    if session_manager:
        session_manager.close()
    if processing_guard:
        processing_guard.clear()
    if storage_module:
        await storage_module.disconnect()
    session_manager = None
    session_module = None
    redis_client = None
    logger.info("SessionGrid shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="SessionGrid",
    description="SessionGrid - HTTP sessions replicated through a Redis data grid",
    version="1.0.0",
    lifespan=lifespan,
)

app.middleware("http")(
    SessionMiddleware(
        lambda: session_manager,
        cookie_name=config.get("session_cookie_name"),
        skip_paths=HEALTH_PATHS,
        secure=config.get("cookie_secure"),
    )
)


# Dependency injection helpers
async def current_session(request: Request) -> HttpSession:
    """Get the HTTP session attached by the session middleware."""
    session = getattr(request.state, "session", None)
    if session is None:
        raise HTTPException(503, "Service not initialized")
    return session


# UI Endpoints


@app.get("/", response_class=HTMLResponse)
async def main_view(request: Request, session: HttpSession = Depends(current_session)):
    """
    Render the main page.

    Opens a UI for the session on this node (fires UI-initialized).
    """
    ui = session_manager.open_ui(session)
    view = MainView(session, config.get("port"), ui=ui)
    return view.render(request)


# Session Endpoints


@app.post("/api/session/message", response_model=SaveMessageResponse)
async def save_message(
    payload: SaveMessageRequest, session: HttpSession = Depends(current_session)
):
    """
    Store a message in the session.

    Returns:
        200: Message saved
        400: Empty message
    """
    view = MainView(session, config.get("port"))
    saved, notification = view.save_to_session(payload.message)

    if not saved:
        return JSONResponse(
            status_code=400,
            content=SaveMessageResponse(notification=notification).model_dump(mode="json"),
        )

    return SaveMessageResponse(notification=notification, info=view.session_info())


@app.get("/api/session/message", response_model=MessageResponse)
async def load_message(session: HttpSession = Depends(current_session)):
    """Load the stored message back from the session."""
    view = MainView(session, config.get("port"))
    text = view.load_from_session()

    return MessageResponse(
        message=session.get_attribute("userMessage"),
        save_time=session.get_attribute("saveTime"),
        text=text,
    )


@app.get("/api/session/info", response_model=SessionInfoResponse)
async def session_info(session: HttpSession = Depends(current_session)):
    """Get details of the caller's session as seen by this node."""
    return MainView(session, config.get("port")).session_info()


@app.get("/api/session/stream")
async def session_stream(
    session: HttpSession = Depends(current_session), ui: Optional[str] = None
):
    """
    SSE endpoint pushing session info to pages in automatic push mode.

    Re-reads the session from the grid on every tick, so updates made on
    other nodes show up. Ends with an "expired" event once the session
    is gone. The page's UI (query parameter ui) is detached when the
    stream ends.
    """
    session_id = session.id
    interval = config.get("session_stream_interval")

    async def event_generator() -> AsyncGenerator:
        try:
            while True:
                current = await session_module.load(session_id) if session_module else None
                if current is None:
                    yield {"event": "expired", "data": session_id}
                    break

                info = MainView(current, config.get("port")).session_info()
                yield {"event": "info", "data": info.model_dump_json()}
                await asyncio.sleep(interval)
        except asyncio.CancelledError:
            logger.debug(f"Session stream for {session_id} closed")
            raise
        finally:
            if ui and session_manager:
                session_manager.close_ui(session_id, ui)

    return EventSourceResponse(event_generator())


@app.delete("/api/session", status_code=204)
async def invalidate_session(session: HttpSession = Depends(current_session)):
    """
    Invalidate the caller's session on every node.

    Returns:
        204: Session invalidated
    """
    session.invalidate()
    return Response(status_code=204)


# Health/Monitoring Endpoints


@app.get("/healthz")
async def healthz():
    """
    Minimal health check endpoint for readiness/liveness probes.

    Returns:
        200: Service is running
    """
    return {"status": "ok"}


@app.get("/health")
async def health_check():
    """
    Health check including the data grid connection.

    Returns:
        200: Service healthy
        503: Service unhealthy
    """
    try:
        if redis_client:
            await redis_client.ping()
            grid_status = "connected"
        else:
            grid_status = "disconnected"

        modules_ready = all([session_module, session_manager, processing_guard])

        if grid_status == "connected" and modules_ready:
            return {
                "status": "healthy",
                "grid": grid_status,
                "modules": "initialized",
                "node_sessions": len(session_manager),
                "version": "1.0.0",
            }
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "grid": grid_status,
                "modules": "initialized" if modules_ready else "not initialized",
            },
        )
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "unhealthy", "error": str(e)})


@app.get("/metrics")
async def metrics():
    """
    Prometheus-compatible metrics endpoint.

    Returns basic metrics about the sessions.
    """
    if not session_module or not session_manager or processing_guard is None:
        return Response(content="", status_code=503)

    active_sessions = await session_module.get_active_sessions()

    metrics_text = f"""# HELP sessiongrid_active_sessions Number of sessions stored in the data grid
# TYPE sessiongrid_active_sessions gauge
sessiongrid_active_sessions {len(active_sessions)}
# HELP sessiongrid_node_sessions Number of sessions this node has served
# TYPE sessiongrid_node_sessions gauge
sessiongrid_node_sessions {len(session_manager)}
# HELP sessiongrid_guard_entries Number of sessions tracked by the processing guard
# TYPE sessiongrid_guard_entries gauge
sessiongrid_guard_entries {len(processing_guard)}
"""

    return Response(content=metrics_text, media_type="text/plain")


# Error handlers


@app.exception_handler(redis.ConnectionError)
async def redis_error_handler(request, exc):
    """Handle data grid connection errors."""
    logger.error(f"Data grid connection error: {exc}")
    return JSONResponse(status_code=503, content={"error": "Database connection failed"})


@app.exception_handler(ValueError)
async def validation_error_handler(request, exc):
    """Handle validation errors."""
    logger.error(f"Validation error: {exc}")
    return JSONResponse(status_code=400, content={"error": str(exc)})


def run() -> None:
    """Console entry point."""
    uvicorn.run(
        "sessiongrid.main:app",
        host=config.get("host"),
        port=config.get("port"),
        log_level=config.get("log_level").lower(),
        reload=config.get("debug"),
        log_config=get_logging_config(config.get("log_level")),
    )


if __name__ == "__main__":
    run()
