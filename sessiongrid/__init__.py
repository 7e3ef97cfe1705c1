"""
SessionGrid - Clustered HTTP Session Demo

A single-page application that stores a message in the HTTP session,
with sessions replicated across nodes through a Redis data grid.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- config: Environment configuration
- storage: Data grid client and session serialization
- session: HTTP session model, grid repository, per-node session manager
- sanitizer: Replication-safe session attribute filtering
- lifecycle: Session and UI lifecycle events
- middleware: Cookie based session resolution
- ui: UI objects and the main view
- api: REST API models
"""

__version__ = "1.0.0"
