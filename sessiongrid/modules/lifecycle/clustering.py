"""
Clustering listener for grid-replicated sessions.

Prepares every session a node sees for replication: marks it as
clustered, applies the session timeout and strips attributes that would
not survive the trip through the data grid. A session is processed at
most once at a time, so a session reload triggered while a pass is
running does not recurse into another pass.
"""

import logging
from typing import Optional

from ..sanitizer import ProcessingGuard, SessionAttributeSanitizer
from ..session.models import now_millis
from ..ui.components import UI, PushMode
from .events import LifecycleEvents, SessionDestroyEvent, SessionInitEvent, UIInitEvent

logger = logging.getLogger(__name__)

SESSION_TYPE = "redis-grid"


class SessionClusteringListener:
    """Lifecycle listener that configures sessions for clustering."""

    def __init__(
        self,
        guard: ProcessingGuard,
        sanitizer: SessionAttributeSanitizer,
        session_timeout: int = 1800,
    ):
        self.guard = guard
        self.sanitizer = sanitizer
        self.session_timeout = session_timeout

    @property
    def _prefix(self) -> str:
        return self.sanitizer.policy.internal_prefix

    def service_init(self, events: LifecycleEvents) -> None:
        """Register the listener's handlers on the lifecycle dispatcher."""
        logger.info("Initializing session clustering listener")
        events.add_session_init_listener(self.handle_session_initialization)
        events.add_session_destroy_listener(self.handle_session_destruction)
        events.add_ui_init_listener(self.handle_ui_initialization)

    def handle_session_initialization(self, event: Optional[SessionInitEvent]) -> None:
        if event is None:
            logger.warning("SessionInitEvent is None. This should not happen under normal circumstances.")
            return

        ui_session = event.session
        if ui_session is None:
            logger.warning("UI session is None during session initialization. Skipping configuration.")
            return

        try:
            wrapped_session = ui_session.session
            if wrapped_session is None:
                logger.warning(
                    "HTTP session is None for UI session. The HTTP session is not fully "
                    "initialized yet. Skipping configuration."
                )
                return

            session_id = wrapped_session.id
            if not session_id or not str(session_id).strip():
                logger.warning("Session ID is empty. Skipping configuration.")
                return
        except Exception as e:
            logger.warning(f"Exception while accessing session information: {e}. Skipping configuration.")
            return

        logger.debug(f"Session initialized: {session_id}")

        with self.guard.hold(session_id) as acquired:
            if acquired:
                self.configure_session_for_clustering(wrapped_session, session_id)
            else:
                logger.debug(f"Session {session_id} is already being processed, skipping duplicate processing")

    def handle_session_destruction(self, event: Optional[SessionDestroyEvent]) -> None:
        if event is None:
            logger.warning("SessionDestroyEvent is None. This should not happen under normal circumstances.")
            return

        ui_session = event.session
        if ui_session is None:
            logger.debug("UI session is None during session destruction. This is normal during shutdown.")
            return

        session_id = None
        try:
            wrapped_session = ui_session.session
            if wrapped_session is not None:
                session_id = wrapped_session.id
        except Exception as e:
            logger.debug(f"Exception while accessing session ID during destruction: {e}")

        if session_id:
            logger.debug(f"Session destroyed: {session_id}")
            self.guard.discard(session_id)
        else:
            logger.debug("Session destroyed but ID could not be determined")

    def handle_ui_initialization(self, event: Optional[UIInitEvent]) -> None:
        if event is None or event.ui is None:
            logger.warning("UIInitEvent or UI is None. This should not happen under normal circumstances.")
            return

        ui = event.ui
        try:
            ui_session = ui.session
            wrapped_session = ui_session.session if ui_session is not None else None
            if wrapped_session is not None:
                logger.debug(f"UI initialized for session: {wrapped_session.id or 'unknown'}")
            elif ui_session is not None:
                logger.debug("UI initialized but HTTP session is None")
            else:
                logger.debug("UI initialized but UI session is None")

            self.configure_ui_for_clustering(ui)
        except Exception as e:
            logger.warning(f"Exception during UI initialization: {e}")

    def configure_session_for_clustering(self, session, session_id: str) -> None:
        """
        Mark the session as clustered, apply the timeout and sanitize it.

        Safe to run repeatedly: the creation marker is only set once.
        """
        try:
            logger.debug(f"Configuring session for clustering: {session_id}")

            session.set_attribute(f"{self._prefix}clustered", True)
            if session.get_attribute(f"{self._prefix}created") is None:
                session.set_attribute(f"{self._prefix}created", now_millis())
            session.set_attribute(f"{self._prefix}type", SESSION_TYPE)

            session.set_max_inactive_interval(self.session_timeout)

            self.sanitizer.sanitize(session)

            logger.debug(f"Session configured for clustering: {session_id}")
        except Exception as e:
            logger.error(f"Error configuring session for clustering: {session_id}: {e}", exc_info=True)

    def configure_ui_for_clustering(self, ui: UI) -> None:
        try:
            ui.add_detach_listener(
                lambda detached: logger.debug(
                    f"UI {detached.ui_id} detached, but preserving session for clustering"
                )
            )
            ui.push_mode = PushMode.AUTOMATIC
        except Exception as e:
            logger.error(f"Error configuring UI for clustering: {e}", exc_info=True)
