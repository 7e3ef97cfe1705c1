"""
Session Middleware Module - Black Box Interface

Purpose: Attach the replicated HTTP session to every request
Interface: SessionMiddleware (FastAPI "http" middleware callable)
Hidden: Cookie handling, session resolution and persistence

Can be used by any FastAPI app or sub-app that needs grid-backed sessions.
"""

import logging
from typing import Callable, Iterable, Optional

import redis.asyncio as redis
from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class SessionMiddleware:
    """
    Cookie based session middleware.

    Resolves the session before the handler runs (exposed as
    request.state.session) and writes it back to the grid afterwards.
    """

    def __init__(
        self,
        manager_provider: Callable[[], Optional[object]],
        cookie_name: str = "SESSION",
        skip_paths: Optional[Iterable[str]] = None,
        secure: bool = False,
    ):
        """
        Initialize session middleware.

        Args:
            manager_provider: Returns the SessionManager (None until startup completes)
            cookie_name: Name of the session cookie
            skip_paths: Paths served without a session (health probes)
            secure: Only send the cookie over HTTPS
        """
        self.manager_provider = manager_provider
        self.cookie_name = cookie_name
        self.skip_paths = set(skip_paths or ())
        self.secure = secure

    def should_skip(self, request: Request) -> bool:
        return str(request.url.path) in self.skip_paths

    async def __call__(self, request: Request, call_next):
        """Process the request with its session."""
        if self.should_skip(request):
            return await call_next(request)

        manager = self.manager_provider()
        if manager is None:
            return JSONResponse(status_code=503, content={"error": "Service not initialized"})

        cookie_session_id = request.cookies.get(self.cookie_name)
        try:
            session = await manager.resolve(cookie_session_id)
        except redis.ConnectionError as e:
            logger.error(f"Data grid connection error while loading session: {e}")
            return JSONResponse(status_code=503, content={"error": "Database connection failed"})

        request.state.session = session
        response = await call_next(request)

        try:
            await manager.commit(session)
        except redis.ConnectionError as e:
            logger.error(f"Data grid connection error while saving session {session.id}: {e}")
            return JSONResponse(status_code=503, content={"error": "Database connection failed"})

        if session.invalidated:
            response.delete_cookie(self.cookie_name, path="/")
        elif session.id != cookie_session_id:
            response.set_cookie(
                self.cookie_name,
                session.id,
                path="/",
                httponly=True,
                samesite="lax",
                secure=self.secure,
            )
        return response


__all__ = ["SessionMiddleware"]
