"""
API Module - Black Box Interface

Purpose: HTTP request/response models
Interface: Pydantic models used by the REST endpoints
Hidden: Field validation

The API layer only orchestrates - it contains no business logic.
All logic is delegated to appropriate modules.
"""

from .models import (
    MessageResponse,
    Notification,
    NotificationPosition,
    SaveMessageRequest,
    SaveMessageResponse,
    SessionInfoResponse,
)

__all__ = [
    "MessageResponse",
    "Notification",
    "NotificationPosition",
    "SaveMessageRequest",
    "SaveMessageResponse",
    "SessionInfoResponse",
]
