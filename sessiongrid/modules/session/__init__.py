"""
Session Module - Black Box Interface

Purpose: Manage replicated HTTP session lifecycle
Interface: SessionModule.load(), save(), delete(); SessionManager.resolve(), commit()
Hidden: Key layout, TTL management, serialization, per-node UI session registry

Replaceable with any session backend that can store JSON documents with a TTL.
"""

from .manager import SessionManager
from .models import HttpSession, SessionInvalidatedError
from .serializer import SessionSerializationError, SessionSerializer, is_plain_data
from .session import SessionModule

__all__ = [
    "HttpSession",
    "SessionInvalidatedError",
    "SessionManager",
    "SessionModule",
    "SessionSerializer",
    "SessionSerializationError",
    "is_plain_data",
]
