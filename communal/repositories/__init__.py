"""Repository pattern implementation for the record store."""

from .base import BaseRepository, RepositoryError
from .json_store import ConnectionRepository, JsonRecordStore, UserRepository

__all__ = [
    "BaseRepository",
    "RepositoryError",
    "ConnectionRepository",
    "JsonRecordStore",
    "UserRepository",
]
