"""Tests for the JSON record store and its repositories."""

import json

import pytest

from communal.errors import RecordNotFoundError
from communal.repositories import JsonRecordStore, RepositoryError


class TestConnectionRepository:
    """Test connection persistence."""

    def test_missing_file_is_empty(self, store):
        assert store.connections.list_all() == []
        assert store.users.list_all() == []
        assert not store.path.exists()

    def test_create_assigns_id_and_defaults(self, store):
        connection = store.connections.create({"name": "Sam", "category": "Prayer"})

        assert connection.id
        assert connection.categories == ["Prayer"]
        assert connection.category == "Prayer"
        assert connection.mutual_connections == []
        assert store.connections.get_by_id(connection.id) == connection

    def test_ids_are_unique(self, store):
        first = store.connections.create({"name": "Sam", "categories": ["Alpha"]})
        second = store.connections.create({"name": "Sam", "categories": ["Alpha"]})
        assert first.id != second.id

    def test_list_oldest_first(self, store):
        names = ["Sam", "Kim", "Lou"]
        for name in names:
            store.connections.create({"name": name, "categories": ["Alpha"]})

        assert [c.name for c in store.connections.list_all()] == names

    def test_persists_across_instances(self, store):
        store.connections.create({"name": "Sam", "categories": ["Alpha"]})

        reopened = JsonRecordStore(str(store.path))

        assert [c.name for c in reopened.connections.list_all()] == ["Sam"]

    def test_update_partial(self, store):
        connection = store.connections.create({"name": "Sam", "categories": ["Alpha"]})

        updated = store.connections.update(
            connection.id, {"mutual_connections": ["Kim"], "bogus": "ignored", "name": None}
        )

        assert updated.mutual_connections == ["Kim"]
        assert updated.name == "Sam"
        assert updated.categories == ["Alpha"]

    def test_update_empty_categories_clears_list(self, store):
        connection = store.connections.create({"name": "Sam", "category": "Prayer"})

        updated = store.connections.update(connection.id, {"categories": []})

        assert updated.categories == []
        assert updated.category == "Prayer"
        raw = json.loads(store.path.read_text(encoding="utf-8"))
        assert raw["connections"][0]["categories"] is None

    def test_update_without_fields_is_noop(self, store):
        connection = store.connections.create({"name": "Sam", "categories": ["Alpha"]})
        before = store.path.read_text(encoding="utf-8")

        assert store.connections.update(connection.id, {}) == connection
        assert store.path.read_text(encoding="utf-8") == before

    def test_delete(self, store):
        connection = store.connections.create({"name": "Sam", "categories": ["Alpha"]})

        store.connections.delete(connection.id)

        assert store.connections.list_all() == []
        assert not store.connections.exists(connection.id)

    def test_missing_record(self, store):
        with pytest.raises(RecordNotFoundError) as exc_info:
            store.connections.delete("nope")
        assert exc_info.value.record_id == "nope"

        with pytest.raises(RecordNotFoundError):
            store.connections.update("nope", {"name": "Sam"})

    def test_batch_get_marks_missing(self, store):
        connection = store.connections.create({"name": "Sam", "categories": ["Alpha"]})

        found = store.connections.batch_get([connection.id, "nope"])

        assert found[0].id == connection.id
        assert found[1] is None

    def test_null_lists_in_file(self, store):
        store.path.write_text(
            json.dumps(
                {
                    "connections": [
                        {"id": "1", "name": "Sam", "category": "Prayer",
                         "categories": None, "mutual_connections": None}
                    ]
                }
            ),
            encoding="utf-8",
        )

        (connection,) = store.connections.list_all()

        assert connection.categories == []
        assert connection.mutual_connections == []


class TestStoreDocument:
    """Test document-level behavior."""

    def test_corrupt_file(self, store):
        store.path.write_text("{not json", encoding="utf-8")

        with pytest.raises(RepositoryError):
            store.connections.list_all()

    def test_current_user_round_trip(self, store):
        user = store.users.create({"name": "Jordan"})

        store.set_current_user(user)
        assert store.get_current_user() == user

        store.set_current_user(None)
        assert store.get_current_user() is None

    def test_user_rename(self, store):
        user = store.users.create({"name": "Jordan"})

        renamed = store.users.update(user.id, {"name": "Jordan Lee"})

        assert renamed.name == "Jordan Lee"
        assert store.users.get_by_id(user.id).name == "Jordan Lee"
