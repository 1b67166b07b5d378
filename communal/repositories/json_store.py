"""JSON file backed record store for connections and users."""

import json
import logging
import os
import tempfile
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import RecordNotFoundError
from ..models import Connection, User
from .base import BaseRepository, RepositoryError

logger = logging.getLogger(__name__)

CONNECTION_FIELDS = (
    "name",
    "category",
    "categories",
    "mutual_connections",
    "user_id",
    "user_name",
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def connection_from_row(row: Dict[str, Any]) -> Connection:
    """Map a stored row to a Connection."""
    categories = row.get("categories") or []
    return Connection(
        id=row["id"],
        name=row["name"],
        category=row.get("category") or "",
        categories=categories,
        mutual_connections=row.get("mutual_connections") or [],
        user_id=row.get("user_id") or "",
        user_name=row.get("user_name") or "",
        created_at=row.get("created_at") or _now_iso(),
    )


def user_from_row(row: Dict[str, Any]) -> User:
    """Map a stored row to a User."""
    return User(
        id=row["id"],
        name=row["name"],
        created_at=row.get("created_at") or _now_iso(),
    )


class JsonRecordStore:
    """
    Record store kept in a single JSON document.

    The document holds ``connections`` and ``users`` row lists plus a
    ``session`` section for the current user. Every write rewrites the
    whole file.
    """

    def __init__(self, path: str):
        """Initialize the store.

        Args:
            path: Location of the JSON document; created on first write
        """
        self.path = Path(path)
        self.connections = ConnectionRepository(self)
        self.users = UserRepository(self)

    def load(self) -> Dict[str, Any]:
        """Read the whole document."""
        if not self.path.exists():
            return {"connections": [], "users": [], "session": {}}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading record store {self.path}: {e}")
            raise RepositoryError(f"Failed to read {self.path}: {e}", cause=e)

        document.setdefault("connections", [])
        document.setdefault("users", [])
        document.setdefault("session", {})
        return document

    def save(self, document: Dict[str, Any]) -> None:
        """Write the whole document atomically."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=".communal-", suffix=".json"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Error writing record store {self.path}: {e}")
            raise RepositoryError(f"Failed to write {self.path}: {e}", cause=e)

    def get_current_user(self) -> Optional[User]:
        """The user remembered from the last session, if any."""
        data = self.load()["session"].get("current_user")
        return user_from_row(data) if data else None

    def set_current_user(self, user: Optional[User]) -> None:
        document = self.load()
        if user:
            document["session"]["current_user"] = user.model_dump(mode="json")
        else:
            document["session"].pop("current_user", None)
        self.save(document)


class ConnectionRepository(BaseRepository):
    """Repository for connection rows."""

    record_type = "Connection"

    def _rows(self, document: Dict[str, Any]) -> List[Dict[str, Any]]:
        return document["connections"]

    def _find(self, document: Dict[str, Any], id: str) -> Dict[str, Any]:
        for row in self._rows(document):
            if row["id"] == id:
                return row
        raise RecordNotFoundError(self.record_type, id)

    def get_by_id(self, id: str) -> Connection:
        return connection_from_row(self._find(self.store.load(), id))

    def list_all(self) -> List[Connection]:
        """All connections, oldest first."""
        connections = [connection_from_row(row) for row in self._rows(self.store.load())]
        return sorted(connections, key=lambda c: c.created_at)

    def create(self, data: Dict[str, Any]) -> Connection:
        """Create a connection.

        Args:
            data: name, category, categories, mutual_connections, user_id, user_name

        Returns:
            The stored connection
        """
        categories = data.get("categories") or [data.get("category", "")]
        row = {
            "id": str(uuid.uuid4()),
            "name": data["name"],
            "category": data.get("category") or categories[0],
            "categories": categories,
            "mutual_connections": list(data.get("mutual_connections") or []),
            "user_id": data.get("user_id", ""),
            "user_name": data.get("user_name", ""),
            "created_at": _now_iso(),
        }

        document = self.store.load()
        self._rows(document).append(row)
        self.store.save(document)

        self.logger.debug(f"Created connection {row['id']} ({row['name']})")
        return connection_from_row(row)

    def update(self, id: str, data: Dict[str, Any]) -> Optional[Connection]:
        """Apply a partial update.

        An empty ``categories`` list clears the stored list so the legacy
        ``category`` field takes over. Updates with no known fields are
        no-ops.
        """
        payload = {k: v for k, v in data.items() if k in CONNECTION_FIELDS and v is not None}
        if "categories" in payload and not payload["categories"]:
            payload["categories"] = None

        document = self.store.load()
        row = self._find(document, id)
        if not payload:
            return connection_from_row(row)

        row.update(payload)
        self.store.save(document)
        return connection_from_row(row)

    def delete(self, id: str) -> None:
        document = self.store.load()
        row = self._find(document, id)
        self._rows(document).remove(row)
        self.store.save(document)
        self.logger.debug(f"Deleted connection {id}")


class UserRepository(BaseRepository):
    """Repository for user rows."""

    record_type = "User"

    def _find(self, document: Dict[str, Any], id: str) -> Dict[str, Any]:
        for row in document["users"]:
            if row["id"] == id:
                return row
        raise RecordNotFoundError(self.record_type, id)

    def get_by_id(self, id: str) -> User:
        return user_from_row(self._find(self.store.load(), id))

    def list_all(self) -> List[User]:
        users = [user_from_row(row) for row in self.store.load()["users"]]
        return sorted(users, key=lambda u: u.created_at)

    def create(self, data: Dict[str, Any]) -> User:
        row = {"id": str(uuid.uuid4()), "name": data["name"], "created_at": _now_iso()}

        document = self.store.load()
        document["users"].append(row)
        self.store.save(document)
        return user_from_row(row)

    def update(self, id: str, data: Dict[str, Any]) -> Optional[User]:
        document = self.store.load()
        row = self._find(document, id)
        if data.get("name"):
            row["name"] = data["name"]
            self.store.save(document)
        return user_from_row(row)

    def delete(self, id: str) -> None:
        document = self.store.load()
        row = self._find(document, id)
        document["users"].remove(row)
        self.store.save(document)
