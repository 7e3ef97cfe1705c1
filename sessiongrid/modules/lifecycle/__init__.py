"""
Lifecycle Module - Black Box Interface

Purpose: Session and UI lifecycle notifications
Interface: LifecycleEvents.add_*_listener(), LifecycleEvents.fire_*()
Hidden: Listener bookkeeping, listener failure isolation

The clustering listener lives in lifecycle.clustering and is wired by the
application at startup.
"""

from .events import LifecycleEvents, SessionDestroyEvent, SessionInitEvent, UIInitEvent

__all__ = ["LifecycleEvents", "SessionInitEvent", "SessionDestroyEvent", "UIInitEvent"]
