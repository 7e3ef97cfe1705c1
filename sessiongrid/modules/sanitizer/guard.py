import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator

logger = logging.getLogger(__name__)


class _Flag:
    __slots__ = ("in_progress",)

    def __init__(self):
        self.in_progress = False


class ProcessingGuard:
    """
    Per-session re-entry guard.

    Each session id maps to an in-progress flag. A caller that fails to
    flip the flag skips its work instead of waiting. The lock only covers
    the compare-and-set, never the guarded work itself.
    """

    def __init__(self):
        self._flags: Dict[str, _Flag] = {}
        self._lock = threading.Lock()

    def _try_acquire(self, session_id: str):
        with self._lock:
            flag = self._flags.get(session_id)
            if flag is None:
                flag = self._flags[session_id] = _Flag()
            if flag.in_progress:
                return None
            flag.in_progress = True
            return flag

    @contextmanager
    def hold(self, session_id: str) -> Iterator[bool]:
        """
        Try to mark a session as being processed.

        Yields True if this caller owns the pass, False if another pass
        for the same session is already running. The flag is reset on exit.

        Example:
            >>> with guard.hold(session_id) as acquired:
            ...     if acquired:
            ...         sanitizer.sanitize(session)
        """
        flag = self._try_acquire(session_id)
        if flag is None:
            yield False
            return
        try:
            yield True
        finally:
            # The entry may have been discarded meanwhile; this only
            # resets the flag object this pass acquired.
            with self._lock:
                flag.in_progress = False

    def is_processing(self, session_id: str) -> bool:
        with self._lock:
            flag = self._flags.get(session_id)
            return bool(flag and flag.in_progress)

    def discard(self, session_id: str) -> None:
        """Forget a session entirely (called when it is destroyed)."""
        with self._lock:
            self._flags.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._flags.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._flags)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._flags
