import json
import logging
import uuid
from datetime import UTC, datetime
from typing import List, Optional

from .models import HttpSession
from .serializer import SessionSerializationError, SessionSerializer

logger = logging.getLogger(__name__)


class SessionModule:
    def __init__(
        self,
        redis_client,
        cluster_name: str = "session-cluster",
        default_timeout: int = 1800,
        serializer: Optional[SessionSerializer] = None,
    ):
        """
        Initialize session module.

        Args:
            redis_client: Async Redis client connected to the data grid
            cluster_name: Namespace for every key this module writes
            default_timeout: Max inactive interval for new sessions (30 minutes)
            serializer: Session serializer (JSON by default)
        """
        self.redis = redis_client
        self.cluster_name = cluster_name
        self.default_timeout = default_timeout
        self.serializer = serializer or SessionSerializer()

    def _session_key(self, session_id: str) -> str:
        return f"{self.cluster_name}:session:{session_id}"

    @property
    def _active_key(self) -> str:
        return f"{self.cluster_name}:sessions:active"

    def new_session(self) -> HttpSession:
        """
        Create a new, not yet stored session.

        The session is written to the grid by save() once the request
        that created it completes.
        """
        return HttpSession(
            session_id=str(uuid.uuid4()),
            max_inactive_interval=self.default_timeout,
        )

    async def save(self, session: HttpSession) -> None:
        """
        Write session to the grid.

        Logic:
        1. Serialize plain-data attributes
        2. Store with TTL = max inactive interval
        3. Add to active sessions set
        4. Publish event
        """
        data = self.serializer.encode(session)
        ttl = max(int(session.max_inactive_interval), 1)

        await self.redis.setex(self._session_key(session.id), ttl, data)
        await self.redis.sadd(self._active_key, session.id)

        await self._publish_event(
            "session.saved",
            {"session_id": session.id, "attributes": len(session.attributes)},
        )

    async def load(self, session_id: str) -> Optional[HttpSession]:
        """
        Load session from the grid.

        Args:
            session_id: Session identifier

        Returns:
            Session or None if not found, expired or unreadable
        """
        data = await self.redis.get(self._session_key(session_id))
        if not data:
            return None

        try:
            return self.serializer.decode(data)
        except SessionSerializationError:
            logger.warning(f"Dropping unreadable session {session_id} from the grid")
            await self.delete(session_id)
            return None

    async def exists(self, session_id: str) -> bool:
        return await self.redis.exists(self._session_key(session_id)) > 0

    async def delete(self, session_id: str) -> None:
        """Remove session from the grid."""
        await self.redis.delete(self._session_key(session_id))
        await self.redis.srem(self._active_key, session_id)

        await self._publish_event(
            "session.deleted",
            {"session_id": session_id, "deleted_at": datetime.now(UTC).isoformat()},
        )

    async def get_active_sessions(self) -> List[dict]:
        """
        Get all active sessions.

        Used for monitoring/admin purposes.

        Returns:
            List of session summaries
        """
        session_ids = await self.redis.smembers(self._active_key)

        sessions = []
        for session_id in session_ids:
            session = await self.load(session_id)
            if session:
                sessions.append(
                    {
                        "session_id": session.id,
                        "creation_time": session.creation_time,
                        "last_accessed_time": session.last_accessed_time,
                        "max_inactive_interval": session.max_inactive_interval,
                    }
                )
            else:
                # Clean up stale entry
                await self.redis.srem(self._active_key, session_id)

        return sessions

    async def cleanup_expired(self) -> int:
        """
        Clean up expired sessions from active set.

        Should be called periodically.

        Returns:
            Number of sessions cleaned up
        """
        session_ids = await self.redis.smembers(self._active_key)
        cleaned = 0

        for session_id in session_ids:
            if not await self.exists(session_id):
                await self.redis.srem(self._active_key, session_id)
                cleaned += 1

        return cleaned

    async def _publish_event(self, event_type: str, data: dict):
        """Publish session event for monitoring"""
        event = {"type": event_type, "timestamp": datetime.now(UTC).isoformat(), "data": data}

        await self.redis.publish(f"{self.cluster_name}:events:session", json.dumps(event))

        history_key = f"{self.cluster_name}:events:session:history"
        await self.redis.lpush(history_key, json.dumps(event))
        await self.redis.ltrim(history_key, 0, 999)  # Keep last 1000
