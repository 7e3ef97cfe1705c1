"""HTTP session model shared by the grid repository, middleware and listeners."""

import time
from typing import Any, Dict, Optional, Set


def now_millis() -> int:
    return int(time.time() * 1000)


class SessionInvalidatedError(RuntimeError):
    """Raised when an invalidated session is used."""


class HttpSession:
    """
    Server-side HTTP session.

    Attribute values can be any Python object while the session is in
    memory. Only plain-data values survive a round trip through the grid.
    """

    def __init__(
        self,
        session_id: str,
        creation_time: Optional[int] = None,
        last_accessed_time: Optional[int] = None,
        max_inactive_interval: int = 1800,
        attributes: Optional[Dict[str, Any]] = None,
        is_new: bool = True,
    ):
        now = now_millis()
        self._id = session_id
        self.creation_time = creation_time if creation_time is not None else now
        self.last_accessed_time = last_accessed_time if last_accessed_time is not None else now
        self.max_inactive_interval = max_inactive_interval
        self._attributes: Dict[str, Any] = dict(attributes or {})
        self.is_new = is_new
        self.invalidated = False

    @property
    def id(self) -> str:
        return self._id

    def _check_valid(self) -> None:
        if self.invalidated:
            raise SessionInvalidatedError(f"Session {self._id} has been invalidated")

    def get_attribute_names(self) -> Set[str]:
        self._check_valid()
        return set(self._attributes)

    def get_attribute(self, name: str) -> Any:
        self._check_valid()
        return self._attributes.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        """Set an attribute. Setting None removes it."""
        self._check_valid()
        if value is None:
            self._attributes.pop(name, None)
        else:
            self._attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self._check_valid()
        self._attributes.pop(name, None)

    def set_max_inactive_interval(self, seconds: int) -> None:
        self._check_valid()
        self.max_inactive_interval = seconds

    @property
    def attributes(self) -> Dict[str, Any]:
        """Snapshot of the attribute mapping."""
        return dict(self._attributes)

    def touch(self) -> None:
        self.last_accessed_time = now_millis()

    def invalidate(self) -> None:
        self.invalidated = True

    def __repr__(self) -> str:
        return f"<HttpSession {self._id} attributes={sorted(self._attributes)}>"
