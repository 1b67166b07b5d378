"""Tests for the roster service flows."""

import pytest

from communal.errors import ValidationError
from communal.models import Config, NodeType
from communal.services import RosterService
from communal.services.roster import parse_bulk_names


class TestParseBulkNames:
    """Test pasted name parsing."""

    def test_commas_and_newlines(self):
        assert parse_bulk_names("Sam, Kim\nLou\n\n , Ada") == ["Sam", "Kim", "Lou", "Ada"]

    @pytest.mark.parametrize("text", ["", "   ", "\n,\n", None])
    def test_blank(self, text):
        assert parse_bulk_names(text) == []


class TestUsers:
    """Test user creation and selection."""

    def test_create_user_becomes_current(self, service):
        user = service.create_user("  Jordan ")

        assert user.name == "Jordan"
        assert service.current_user() == user

    def test_empty_user_name_rejected(self, service):
        with pytest.raises(ValidationError):
            service.create_user("   ")

    def test_select_user(self, service):
        first = service.create_user("Jordan")
        service.create_user("Riley")

        service.select_user(first)

        assert service.current_user().id == first.id

    def test_deleted_user_forgotten(self, service_with_user):
        user = service_with_user.current_user()
        service_with_user.store.users.delete(user.id)

        assert service_with_user.current_user() is None

    def test_renamed_user_refreshed(self, service_with_user):
        user = service_with_user.current_user()
        service_with_user.store.users.update(user.id, {"name": "Jordan Lee"})

        assert service_with_user.current_user().name == "Jordan Lee"
        assert service_with_user.store.get_current_user().name == "Jordan Lee"


class TestConnections:
    """Test adding and removing connections."""

    def test_add_requires_user(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.add_connection("Sam", ["Prayer"])
        assert exc_info.value.field == "user"

    def test_add_stamps_author(self, service_with_user):
        connection = service_with_user.add_connection(" Sam ", ["Prayer", " Prayer", "LaFe"])

        assert connection.name == "Sam"
        assert connection.categories == ["Prayer", "LaFe"]
        assert connection.category == "Prayer"
        assert connection.user_name == "Jordan"
        assert connection.user_id == service_with_user.current_user().id

    @pytest.mark.parametrize("name, categories", [("", ["Prayer"]), ("Sam", []), ("Sam", ["  "])])
    def test_add_validation(self, service_with_user, name, categories):
        with pytest.raises(ValidationError) as exc_info:
            service_with_user.add_connection(name, categories)

        assert exc_info.value.message == "Please enter a name and select at least one category"
        assert service_with_user.list_connections() == []

    def test_bulk_add(self, service_with_user):
        created = service_with_user.bulk_add("Sam, Kim\nLou", ["Freshman Group"])

        assert [c.name for c in created] == ["Sam", "Kim", "Lou"]
        assert all(c.categories == ["Freshman Group"] for c in created)
        assert len(service_with_user.list_connections()) == 3

    def test_bulk_add_requires_categories(self, service_with_user):
        with pytest.raises(ValidationError) as exc_info:
            service_with_user.bulk_add("Sam", [])
        assert exc_info.value.message == "Please select at least one category for all names"

    def test_bulk_add_requires_names(self, service_with_user):
        with pytest.raises(ValidationError) as exc_info:
            service_with_user.bulk_add(" , \n", ["Prayer"])
        assert exc_info.value.message == "Please enter at least one name"

    def test_delete(self, service_with_user):
        connection = service_with_user.add_connection("Sam", ["Prayer"])

        service_with_user.delete_connection(connection.id)

        assert service_with_user.list_connections() == []


class TestDuplicateFlow:
    """Test suggestions, dismissal and merging end to end."""

    @pytest.fixture
    def roster(self, service_with_user):
        service_with_user.add_connection("Sam", ["Alpha"])
        service_with_user.add_connection("Sam", ["Beta"])
        return service_with_user

    def test_sam_scenario(self, roster):
        suggestions = roster.suggestions()

        assert len(suggestions) == 1
        assert suggestions[0].confidence == "high"

        graph = roster.network()
        assert len(graph.nodes_of_type(NodeType.PERSON)) == 2

    def test_dismiss_hides_until_change(self, roster):
        roster.dismiss("Sam")
        assert roster.suggestions() == []

        roster.add_connection("Kim", ["Alpha"])

        assert [s.name for s in roster.suggestions()] == ["Sam"]

    def test_merge(self, roster):
        suggestion = roster.suggestions()[0]
        keep = suggestion.matches[1].id

        result = roster.merge(suggestion, keep)

        assert result.success
        (survivor,) = roster.list_connections()
        assert survivor.id == keep
        assert survivor.categories == ["Alpha", "Beta"]
        assert roster.suggestions() == []

        graph = roster.network()
        assert len(graph.nodes_of_type(NodeType.PERSON)) == 1
        assert {l.target for l in graph.links if l.source == keep} == {
            "category:Alpha",
            "category:Beta",
        }

    def test_merge_empty_suggestion(self, roster):
        suggestion = roster.suggestions()[0].model_copy(update={"matches": []})

        result = roster.merge(suggestion, "x")

        assert not result.success
        assert len(roster.list_connections()) == 2

    def test_stale_suggestion_returns_failure(self, roster):
        suggestion = roster.suggestions()[0]
        roster.delete_connection(suggestion.matches[1].id)

        result = roster.merge(suggestion, suggestion.matches[0].id)

        assert not result.success
        assert "no longer exists" in result.errors[0]
        assert len(roster.list_connections()) == 1


class TestNetworkAndCategories:
    """Test derived views."""

    def test_network_includes_current_user(self, service_with_user):
        service_with_user.add_connection("Sam", ["Prayer"])

        graph = service_with_user.network()

        (user_node,) = graph.nodes_of_type(NodeType.USER)
        assert user_node.name == "Jordan"

    def test_root_label_from_config(self, store):
        config = Config(network={"root_label": "UMass InterVarsity"})
        service = RosterService(store, config)
        service.create_user("Jordan")
        service.add_connection("Sam", ["Prayer"])

        assert service.network().nodes[0].name == "UMass InterVarsity"

    def test_category_colors(self, service_with_user):
        service_with_user.add_connection("Sam", ["Hiking", "Prayer"])

        colors = service_with_user.category_colors()

        assert colors["Prayer"] == "#333333"
        assert "Hiking" in colors
        assert "Hiking" in service_with_user.category_options()
