"""
SessionGrid API data models.

These models define the structure of the data exchanged between the
main page and the session endpoints.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class NotificationPosition(str, Enum):
    """Where the page shows a notification."""

    TOP_CENTER = "top-center"
    BOTTOM_START = "bottom-start"


class Notification(BaseModel):
    """Short message shown to the user after an action."""

    text: str
    duration_ms: int = Field(default=3000, ge=0)
    position: NotificationPosition = NotificationPosition.TOP_CENTER


class SaveMessageRequest(BaseModel):
    """Request to store a message in the session."""

    message: str = Field(default="", description="Message to store", max_length=10000)


class SessionInfoResponse(BaseModel):
    """Details about the caller's HTTP session."""

    session_id: str
    creation_time: datetime
    last_accessed_time: datetime
    max_inactive_interval: int = Field(..., description="Seconds before an idle session expires")
    is_new: bool
    server_port: int
    current_time: str


class SaveMessageResponse(BaseModel):
    """Result of storing a message."""

    notification: Notification
    info: Optional[SessionInfoResponse] = None


class MessageResponse(BaseModel):
    """Message loaded back from the session."""

    message: Optional[str] = None
    save_time: Optional[str] = None
    text: str
