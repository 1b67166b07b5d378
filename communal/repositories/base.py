"""Lightweight base repository for data access patterns."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging

from ..errors import RecordNotFoundError, StorageError


class RepositoryError(StorageError):
    """Repository-specific error."""
    pass


class BaseRepository(ABC):
    """Abstract base repository over a record store."""

    record_type = "Record"

    def __init__(self, store):
        """Initialize repository.

        Args:
            store: Backing document store
        """
        self.store = store
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def get_by_id(self, id: str) -> Any:
        """Get entity by ID."""
        pass

    @abstractmethod
    def list_all(self) -> List[Any]:
        """List every entity, oldest first."""
        pass

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Any:
        """Create new entity."""
        pass

    @abstractmethod
    def update(self, id: str, data: Dict[str, Any]) -> Optional[Any]:
        """Update existing entity."""
        pass

    @abstractmethod
    def delete(self, id: str) -> None:
        """Delete entity."""
        pass

    def exists(self, id: str) -> bool:
        """Check if entity exists.

        Args:
            id: Entity ID

        Returns:
            True if exists
        """
        try:
            self.get_by_id(id)
            return True
        except RecordNotFoundError:
            return False

    def batch_get(self, ids: List[str]) -> List[Optional[Any]]:
        """Get multiple entities by IDs.

        Args:
            ids: List of entity IDs

        Returns:
            List of entities (None for ids that were not found)
        """
        results = []
        for id in ids:
            try:
                results.append(self.get_by_id(id))
            except RecordNotFoundError:
                results.append(None)

        return results
