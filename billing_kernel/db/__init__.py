"""Database layer - engine and base classes."""

from billing_kernel.db.base import UUID, Base, MonetaryMixin, TrackedBase, UUIDString
from billing_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "MonetaryMixin",
    "UUIDString",
    "UUID",
]
