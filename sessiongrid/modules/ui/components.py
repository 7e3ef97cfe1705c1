import logging
import uuid
from enum import Enum
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

# Open pages kept per session on one node; older ones are detached
DEFAULT_MAX_UIS = 5


class PushMode(str, Enum):
    """How the server pushes updates to an open page."""

    DISABLED = "disabled"
    MANUAL = "manual"
    AUTOMATIC = "automatic"


class Component:
    """
    Base class for server-side UI components.

    Components hold live view state for one page and only make sense
    on the node that created them. They must never be replicated.
    """

    def __init__(self, component_id: Optional[str] = None):
        self.component_id = component_id or uuid.uuid4().hex[:12]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.component_id}>"


class UI:
    """A single open page bound to a UI session."""

    def __init__(self, session: Optional["UISession"], ui_id: Optional[str] = None):
        self.ui_id = ui_id or uuid.uuid4().hex
        self.session = session
        self.push_mode = PushMode.DISABLED
        self._detach_listeners: List[Callable[["UI"], None]] = []
        self.attached = True

    def add_detach_listener(self, listener: Callable[["UI"], None]) -> None:
        self._detach_listeners.append(listener)

    def detach(self) -> None:
        """Detach the UI and notify listeners. Calling twice is a no-op."""
        if not self.attached:
            return
        self.attached = False
        for listener in list(self._detach_listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error(f"Detach listener failed for UI {self.ui_id}: {e}")
        if self.session is not None and self.session.uis.get(self.ui_id) is self:
            del self.session.uis[self.ui_id]


class UISession:
    """
    Per-node UI session.

    Wraps the replicated HTTP session and tracks the UIs this node has
    opened for it. The wrapped session may be missing while the HTTP
    session is still being set up.
    """

    def __init__(self, session=None, max_uis: int = DEFAULT_MAX_UIS):
        self.session = session
        self.max_uis = max(1, max_uis)
        self.uis: Dict[str, UI] = {}

    def create_ui(self) -> UI:
        # uis keeps insertion order, so the first entry is the oldest page
        while len(self.uis) >= self.max_uis:
            oldest = next(iter(self.uis))
            self.uis.pop(oldest).detach()
        ui = UI(self)
        self.uis[ui.ui_id] = ui
        return ui

    def close(self) -> None:
        """Detach every UI of this session."""
        for ui in list(self.uis.values()):
            ui.detach()
        self.uis.clear()
