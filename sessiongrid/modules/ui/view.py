import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

from fastapi import Request
from fastapi.templating import Jinja2Templates

from ..api.models import Notification, SessionInfoResponse
from .components import UI, Component

logger = logging.getLogger(__name__)

USER_MESSAGE = "userMessage"
SAVE_TIME = "saveTime"

TITLE = "FastAPI + Redis Session Clustering"

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def _from_millis(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000).astimezone()


class MainView(Component):
    """
    The single page of the application.

    Lets the user save a message into the HTTP session, load it back and
    look at the session details served by this node.
    """

    def __init__(self, session, server_port: int, ui: Optional[UI] = None):
        super().__init__()
        self.session = session
        self.server_port = server_port
        self.ui = ui
        self.message_value = ""
        self.session_message = ""

    def save_to_session(self, message: Optional[str]) -> Tuple[bool, Notification]:
        if self.session is None or not message:
            return False, Notification(text="Please enter a message first!")

        self.session.set_attribute(USER_MESSAGE, message)
        self.session.set_attribute(SAVE_TIME, datetime.now().isoformat())
        self.message_value = message
        logger.debug(f"Saved message to session {self.session.id}")
        return True, Notification(text="Message saved to session!")

    def load_from_session(self) -> str:
        if self.session is None:
            self.session_message = "No session available"
            return self.session_message

        message = self.session.get_attribute(USER_MESSAGE)
        save_time = self.session.get_attribute(SAVE_TIME)

        if message is not None:
            self.session_message = f"Loaded from session: {message}" + (
                f" (saved at: {save_time})" if save_time is not None else ""
            )
            self.message_value = message
        else:
            self.session_message = "No message found in session"
        return self.session_message

    def session_info(self) -> Optional[SessionInfoResponse]:
        if self.session is None:
            return None
        return SessionInfoResponse(
            session_id=self.session.id,
            creation_time=_from_millis(self.session.creation_time),
            last_accessed_time=_from_millis(self.session.last_accessed_time),
            max_inactive_interval=self.session.max_inactive_interval,
            is_new=self.session.is_new,
            server_port=self.server_port,
            current_time=datetime.now().isoformat(),
        )

    def render(self, request: Request):
        return templates.TemplateResponse(
            request,
            "main.html",
            {
                "title": TITLE,
                "info": self.session_info(),
                "message_value": self.message_value,
                "session_message": self.session_message,
                "push_mode": self.ui.push_mode.value if self.ui else "disabled",
                "ui_id": self.ui.ui_id if self.ui else "",
            },
        )
