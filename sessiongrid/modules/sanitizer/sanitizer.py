import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, Optional, Tuple

from ..session.serializer import is_plain_data
from ..ui.components import UI, Component, UISession

logger = logging.getLogger(__name__)


class Decision(str, Enum):
    """Outcome of classifying one session attribute."""

    KEEP = "keep"
    REMOVE = "remove"


@dataclass(frozen=True)
class SanitizerPolicy:
    """Which attributes may stay in a replicated session."""

    internal_prefix: str = "app.session."
    framework_prefix: str = "sessiongrid.session"
    allowed_keys: FrozenSet[str] = frozenset({"userMessage", "saveTime"})
    excluded_types: Tuple[type, ...] = field(default=(Component, UI, UISession))

    @classmethod
    def from_config(cls, config) -> "SanitizerPolicy":
        """Build a policy from a SanitizerConfig."""
        return cls(
            internal_prefix=config.internal_prefix,
            framework_prefix=config.framework_prefix,
            allowed_keys=frozenset(config.allowed_keys),
        )

    def is_safe_name(self, name: Optional[str]) -> bool:
        if name is None:
            return False
        return (
            name.startswith(self.internal_prefix)
            or name in self.allowed_keys
            or name.startswith(self.framework_prefix)
        )

    def is_safe_value(self, value: Any) -> bool:
        return is_plain_data(value) and not isinstance(value, self.excluded_types)


DEFAULT_POLICY = SanitizerPolicy()


def classify_attribute(name: str, value: Any, policy: SanitizerPolicy = DEFAULT_POLICY) -> Decision:
    """
    Decide whether a session attribute is safe to replicate.

    Safe names are kept whatever their value. Other attributes are kept
    only when the value is plain data and not a UI object.
    """
    if policy.is_safe_name(name) or policy.is_safe_value(value):
        return Decision.KEEP
    return Decision.REMOVE


class SessionAttributeSanitizer:
    """
    Removes attributes that must not be replicated through the data grid.

    Attributes that cannot be inspected are removed. The sanitizer never
    raises; on failure it logs and leaves the session as it is.
    """

    def __init__(self, policy: Optional[SanitizerPolicy] = None):
        self.policy = policy or DEFAULT_POLICY

    def sanitize(self, session) -> None:
        try:
            attribute_names = session.get_attribute_names()
            if attribute_names is None:
                logger.debug("Session attribute names is None, skipping cleanup")
                return

            attributes_to_remove = []
            for attribute_name in list(attribute_names):
                if attribute_name is None:
                    continue
                if self.policy.is_safe_name(attribute_name):
                    continue

                try:
                    value = session.get_attribute(attribute_name)
                    decision = classify_attribute(attribute_name, value, self.policy)
                except Exception as e:
                    logger.debug(
                        f"Exception while checking attribute {attribute_name}: {e}. Marking for removal."
                    )
                    decision = Decision.REMOVE

                if decision is Decision.REMOVE:
                    attributes_to_remove.append(attribute_name)
                    logger.debug(f"Marking non-replicable attribute for removal: {attribute_name}")

            for attribute_name in attributes_to_remove:
                try:
                    session.remove_attribute(attribute_name)
                    logger.debug(f"Removed non-replicable attribute: {attribute_name}")
                except Exception as e:
                    logger.debug(f"Exception while removing attribute {attribute_name}: {e}")

        except Exception as e:
            logger.error(f"Error cleaning up session attributes: {e}", exc_info=True)
