"""
Session serializer for the data grid.

Only the essential session fields and plain-data attributes are written.
Anything else (live UI objects, handles, arbitrary instances) stays on the
node that created it.
"""

import json
import logging
from typing import Any

from .models import HttpSession

logger = logging.getLogger(__name__)

PLAIN_SCALARS = (str, int, float, bool)


class SessionSerializationError(Exception):
    """Raised when a session cannot be encoded or decoded."""


def is_plain_data(value: Any) -> bool:
    """
    Check whether a value can be replicated as plain data.

    Plain data is None, str, int, float, bool, or a list/tuple/dict
    (with str keys) built only from plain data.
    """
    if value is None or isinstance(value, PLAIN_SCALARS):
        return True
    if isinstance(value, (list, tuple)):
        return all(is_plain_data(item) for item in value)
    if isinstance(value, dict):
        return all(isinstance(k, str) and is_plain_data(v) for k, v in value.items())
    return False


class SessionSerializer:
    """Encode/decode HTTP sessions as JSON documents."""

    def encode(self, session: HttpSession) -> str:
        try:
            attributes = {}
            for name, value in session.attributes.items():
                if is_plain_data(value):
                    attributes[name] = value
                else:
                    logger.debug(
                        f"Skipping non-replicable attribute {name} ({type(value).__name__}) "
                        f"of session {session.id}"
                    )

            payload = {
                "id": session.id,
                "creation_time": session.creation_time,
                "last_accessed_time": session.last_accessed_time,
                "max_inactive_interval": session.max_inactive_interval,
                "attributes": attributes,
            }
            data = json.dumps(payload)
        except (TypeError, ValueError) as e:
            logger.error(f"Error serializing session {session.id}: {e}")
            raise SessionSerializationError(f"Failed to serialize session {session.id}") from e

        logger.debug(f"Serialized session {session.id} with {len(attributes)} attributes")
        return data

    def decode(self, data: str) -> HttpSession:
        try:
            payload = json.loads(data)
            session = HttpSession(
                session_id=payload["id"],
                creation_time=int(payload["creation_time"]),
                last_accessed_time=int(payload["last_accessed_time"]),
                max_inactive_interval=int(payload["max_inactive_interval"]),
                attributes=payload.get("attributes") or {},
                is_new=False,
            )
        except (TypeError, ValueError, KeyError) as e:
            logger.error(f"Error deserializing session: {e}")
            raise SessionSerializationError("Failed to deserialize session") from e

        logger.debug(f"Deserialized session {session.id} with {len(session.attributes)} attributes")
        return session
