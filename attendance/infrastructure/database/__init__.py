"""Relational identity store."""
from .store import SqlIdentityStore

__all__ = ["SqlIdentityStore"]
