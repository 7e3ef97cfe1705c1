import logging
from typing import Dict, Optional

from ..lifecycle.events import LifecycleEvents
from ..ui.components import DEFAULT_MAX_UIS, UI, UISession
from .models import HttpSession
from .session import SessionModule

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Per-node view of the replicated sessions.

    The grid holds the session data; this node keeps one UISession per
    session id it has served and fires lifecycle events as sessions
    appear and disappear.
    """

    def __init__(
        self,
        session_module: SessionModule,
        events: LifecycleEvents,
        max_uis_per_session: int = DEFAULT_MAX_UIS,
    ):
        self.sessions = session_module
        self.events = events
        self.max_uis_per_session = max_uis_per_session
        self._ui_sessions: Dict[str, UISession] = {}

    async def resolve(self, session_id: Optional[str]) -> HttpSession:
        """
        Get the session for a request.

        Args:
            session_id: Session id from the client cookie, if any

        Returns:
            The stored session, or a new one when the id is missing or
            no longer in the grid
        """
        session = None
        if session_id:
            session = await self.sessions.load(session_id)
            if session is None and session_id in self._ui_sessions:
                logger.debug(f"Session {session_id} is gone from the grid")
                self._destroy_local(session_id)

        if session is None:
            session = self.sessions.new_session()
            logger.debug(f"Created session {session.id}")

        session.touch()

        ui_session = self._ui_sessions.get(session.id)
        if ui_session is None:
            ui_session = UISession(session, self.max_uis_per_session)
            self._ui_sessions[session.id] = ui_session
            self.events.fire_session_init(ui_session)
        else:
            ui_session.session = session

        return session

    async def commit(self, session: HttpSession) -> None:
        """Persist the session, or drop it everywhere if it was invalidated."""
        if session.invalidated:
            await self.sessions.delete(session.id)
            self._destroy_local(session.id)
            return
        await self.sessions.save(session)

    def get_ui_session(self, session_id: str) -> Optional[UISession]:
        return self._ui_sessions.get(session_id)

    def open_ui(self, session: HttpSession) -> UI:
        """Create a UI for a page view and fire UI-initialized."""
        ui_session = self._ui_sessions.get(session.id)
        if ui_session is None:
            ui_session = UISession(session, self.max_uis_per_session)
            self._ui_sessions[session.id] = ui_session
        ui = ui_session.create_ui()
        self.events.fire_ui_init(ui)
        return ui

    def close_ui(self, session_id: str, ui_id: str) -> bool:
        """
        Detach a UI whose page went away.

        Returns:
            True if the UI was still open on this node
        """
        ui_session = self._ui_sessions.get(session_id)
        if ui_session is None or ui_id not in ui_session.uis:
            return False
        ui_session.uis[ui_id].detach()
        return True

    async def sweep_expired(self) -> int:
        """
        Fire session-destroyed for sessions that expired from the grid.

        Returns:
            Number of locally known sessions destroyed
        """
        destroyed = 0
        for session_id in list(self._ui_sessions):
            if not await self.sessions.exists(session_id):
                self._destroy_local(session_id)
                destroyed += 1

        await self.sessions.cleanup_expired()
        if destroyed:
            logger.info(f"Expired {destroyed} sessions")
        return destroyed

    def close(self) -> None:
        """Detach all UIs without destroying the replicated sessions."""
        for ui_session in self._ui_sessions.values():
            ui_session.close()
        self._ui_sessions.clear()

    def __len__(self) -> int:
        return len(self._ui_sessions)

    def _destroy_local(self, session_id: str) -> None:
        ui_session = self._ui_sessions.pop(session_id, None)
        if ui_session is None:
            return
        self.events.fire_session_destroy(ui_session)
        ui_session.close()
