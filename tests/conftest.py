"""Test configuration and fixtures for the communal roster tests."""

import pytest
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from communal.models import Config, Connection, User
from communal.repositories import JsonRecordStore
from communal.services import RosterService

BASE_TIME = datetime(2024, 9, 1, tzinfo=timezone.utc)


def make_connection(
    id: str,
    name: str,
    categories: Optional[List[str]] = None,
    category: str = "",
    mutual_connections: Optional[List[str]] = None,
    user_id: str = "u1",
    user_name: str = "Jordan",
    offset: int = 0,
) -> Connection:
    """Build a connection with sensible defaults."""
    return Connection(
        id=id,
        name=name,
        category=category,
        categories=categories if categories is not None else ["Large Group"],
        mutual_connections=mutual_connections or [],
        user_id=user_id,
        user_name=user_name,
        created_at=BASE_TIME + timedelta(minutes=offset),
    )


def make_user(id: str, name: str) -> User:
    return User(id=id, name=name, created_at=BASE_TIME)


@pytest.fixture
def connection_factory():
    """Factory for connection records."""
    return make_connection


@pytest.fixture
def user_factory():
    return make_user


@pytest.fixture
def store(tmp_path):
    """Empty JSON record store in a temp directory."""
    return JsonRecordStore(str(tmp_path / "roster.json"))


@pytest.fixture
def service(store):
    """Roster service with default configuration."""
    return RosterService(store, Config())


@pytest.fixture
def service_with_user(service):
    """Roster service with a current user already selected."""
    service.create_user("Jordan")
    return service
