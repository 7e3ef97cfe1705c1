import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..ui.components import UI, UISession

logger = logging.getLogger(__name__)


@dataclass
class SessionInitEvent:
    """A node saw a session for the first time."""

    session: Optional[UISession]


@dataclass
class SessionDestroyEvent:
    """A session was invalidated or expired."""

    session: Optional[UISession]


@dataclass
class UIInitEvent:
    """A page was opened in a session."""

    ui: Optional[UI]


class LifecycleEvents:
    """
    Dispatcher for session and UI lifecycle events.

    Listeners run in registration order. A failing listener is logged
    and does not stop the others or the caller.
    """

    def __init__(self):
        self._session_init_listeners: List[Callable[[SessionInitEvent], None]] = []
        self._session_destroy_listeners: List[Callable[[SessionDestroyEvent], None]] = []
        self._ui_init_listeners: List[Callable[[UIInitEvent], None]] = []

    def add_session_init_listener(self, listener: Callable[[SessionInitEvent], None]) -> None:
        self._session_init_listeners.append(listener)

    def add_session_destroy_listener(self, listener: Callable[[SessionDestroyEvent], None]) -> None:
        self._session_destroy_listeners.append(listener)

    def add_ui_init_listener(self, listener: Callable[[UIInitEvent], None]) -> None:
        self._ui_init_listeners.append(listener)

    def fire_session_init(self, session: Optional[UISession]) -> None:
        self._dispatch(self._session_init_listeners, SessionInitEvent(session), "session initialization")

    def fire_session_destroy(self, session: Optional[UISession]) -> None:
        self._dispatch(self._session_destroy_listeners, SessionDestroyEvent(session), "session destruction")

    def fire_ui_init(self, ui: Optional[UI]) -> None:
        self._dispatch(self._ui_init_listeners, UIInitEvent(ui), "UI initialization")

    def _dispatch(self, listeners, event, phase: str) -> None:
        for listener in list(listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Error during {phase} handling: {e}", exc_info=True)
