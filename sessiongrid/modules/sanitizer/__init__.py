"""
Sanitizer Module - Black Box Interface

Purpose: Keep only replication-safe attributes in a session
Interface: classify_attribute(), SessionAttributeSanitizer.sanitize(), ProcessingGuard.hold()
Hidden: Safety rules, per-attribute error handling, guard bookkeeping

Replaceable with any policy that decides what may leave the node.
"""

from .guard import ProcessingGuard
from .sanitizer import (
    DEFAULT_POLICY,
    Decision,
    SanitizerPolicy,
    SessionAttributeSanitizer,
    classify_attribute,
)

__all__ = [
    "ProcessingGuard",
    "SessionAttributeSanitizer",
    "SanitizerPolicy",
    "Decision",
    "classify_attribute",
    "DEFAULT_POLICY",
]
