"""HTTP-level tests for the user profile API, health and metrics endpoints."""

from unittest.mock import patch

import pytest

pytestmark = pytest.mark.integration


def _create(client, username="alice", email=None, bio="hello there"):
    response = client.post(
        "/users",
        json={"username": username, "email": email or f"{username}@example.com", "bio": bio},
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateUser:
    """POST /users"""

    def test_create_returns_201_with_full_record(self, client):
        body = _create(client, bio="  raw   bio ")

        assert isinstance(body["id"], int)
        assert body["username"] == "alice"
        assert body["email"] == "alice@example.com"
        assert body["bio"] == "  raw   bio "
        assert body["created"] is not None

    def test_client_supplied_id_and_created_are_ignored(self, client):
        response = client.post(
            "/users",
            json={
                "id": 999,
                "created": "2001-01-01T00:00:00",
                "username": "alice",
                "email": "alice@example.com",
            },
        )

        assert response.status_code == 201
        assert response.json()["id"] != 999
        assert response.json()["bio"] == ""

    def test_validation_failure_is_400_with_kind(self, client):
        response = client.post(
            "/users", json={"username": "ab", "email": "ab@example.com", "bio": ""}
        )

        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_username"

    def test_invalid_email(self, client):
        response = client.post(
            "/users",
            json={"username": "validUser1", "email": "not-an-email", "bio": "hello"},
        )

        assert response.status_code == 400
        assert "Email" in response.json()["detail"]

    def test_malformed_json_is_400(self, client):
        response = client.post(
            "/users", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400

    def test_wrong_field_type_is_400(self, client):
        response = client.post("/users", json={"username": 5, "email": "a@example.com"})

        assert response.status_code == 400

    def test_duplicate_username_is_500(self, client):
        """Uniqueness is enforced by the store and surfaces as a store error."""
        _create(client, username="alice", email="one@example.com")

        response = client.post(
            "/users",
            json={"username": "alice", "email": "two@example.com", "bio": ""},
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Database error"
        assert response.json()["kind"] == "constraint_violation"


class TestGetUser:
    """GET /users/{id}"""

    def test_get_normalizes_bio(self, client):
        created = _create(client, bio="  hello \t\n  world  ")

        response = client.get(f"/users/{created['id']}")

        assert response.status_code == 200
        assert response.json()["bio"] == "hello world"
        assert response.json()["created"] == created["created"]

    def test_missing_is_404(self, client):
        response = client.get("/users/999999")

        assert response.status_code == 404
        assert response.json()["detail"] == "User 999999 not found"

    @pytest.mark.parametrize("user_id", ["abc", "1.5", "-1", "99999999999"])
    def test_malformed_id_is_400(self, client, user_id):
        assert client.get(f"/users/{user_id}").status_code == 400

    def test_undecodable_row_is_500(self, client, insert_raw_row):
        user_id = insert_raw_row("nullbio", "nullbio@example.com", None)

        response = client.get(f"/users/{user_id}")

        assert response.status_code == 500
        assert response.json()["kind"] == "query_failure"


class TestListUsers:
    """GET /users"""

    def test_empty_list(self, client):
        response = client.get("/users")

        assert response.status_code == 200
        assert response.json() == []

    def test_newest_first(self, client):
        first = _create(client, username="first", bio="a  b")
        second = _create(client, username="second")

        body = client.get("/users").json()

        assert [u["id"] for u in body] == [second["id"], first["id"]]
        assert body[1]["bio"] == "a b"

    def test_store_failure_is_500(self, client, app_dependencies):
        from src.profile_service.core.errors import StoreError, StoreErrorKind

        repository = app_dependencies.profile_service._repository
        failure = StoreError(StoreErrorKind.CONNECTION_FAILURE, "fetch_all: store unavailable")
        with patch.object(repository, "fetch_all", side_effect=failure):
            response = client.get("/users")

        assert response.status_code == 500
        assert response.json()["kind"] == "connection_failure"


class TestUpdateUser:
    """PUT /users/{id}"""

    def test_update_echoes_fields_without_created(self, client):
        created = _create(client)

        response = client.put(
            f"/users/{created['id']}",
            json={"username": "renamed", "email": "renamed@example.com", "bio": "new"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "id": created["id"],
            "username": "renamed",
            "email": "renamed@example.com",
            "bio": "new",
        }

    def test_subsequent_get_sees_update(self, client):
        created = _create(client, bio="before")
        client.get(f"/users/{created['id']}")

        client.put(
            f"/users/{created['id']}",
            json={"username": "alice", "email": "alice@example.com", "bio": "after"},
        )

        assert client.get(f"/users/{created['id']}").json()["bio"] == "after"

    def test_missing_is_404(self, client):
        response = client.put(
            "/users/999999",
            json={"username": "ghost", "email": "ghost@example.com", "bio": ""},
        )

        assert response.status_code == 404

    def test_spam_bio_is_400(self, client):
        created = _create(client)

        response = client.put(
            f"/users/{created['id']}",
            json={"username": "alice", "email": "alice@example.com", "bio": "spam"},
        )

        assert response.status_code == 400
        assert response.json()["kind"] == "bio_rejected"


class TestSearchUsers:
    """GET /users/search"""

    def test_matches_bio(self, client):
        _create(client, username="alice", email="alice@x.com", bio="no match")
        bob = _create(client, username="bob", email="bob@x.com", bio="user profile")

        response = client.get("/users/search", params={"q": "user"})

        assert response.status_code == 200
        assert [u["id"] for u in response.json()] == [bob["id"]]

    def test_missing_query_is_400(self, client):
        response = client.get("/users/search")

        assert response.status_code == 400
        assert response.json()["detail"] == "Search query required"

    def test_empty_query_is_400(self, client):
        assert client.get("/users/search", params={"q": ""}).status_code == 400


class TestOperationalEndpoints:
    def test_request_id_is_echoed(self, client):
        response = client.get("/users", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client):
        assert client.get("/users").headers["X-Request-ID"]

    def test_health(self, client):
        _create(client)

        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["cache_entries"] == 1
        assert "checked_out" in body["database"]["pool"]

    def test_health_refreshes_connection_gauge(self, client, app_dependencies):
        app_dependencies.metrics.set_db_connections(99)

        client.get("/health")

        registry = app_dependencies.metrics.registry
        assert registry.get_sample_value("database_connections_active") == 0

    def test_health_unhealthy_is_503(self, client, database_service):
        with patch.object(database_service, "health_check", return_value=False):
            response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    def test_metrics_exposes_request_counts(self, client, app_dependencies):
        created = _create(client)
        client.get(f"/users/{created['id']}")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text
        assert "database_connections_active" in response.text

        registry = app_dependencies.metrics.registry
        get_by_id = {"path": "/users/{user_id}", "method": "GET", "status": "200"}
        post = {"path": "/users", "method": "POST", "status": "201"}
        assert registry.get_sample_value("http_requests_total", get_by_id) == 1
        assert registry.get_sample_value("http_requests_total", post) == 1
        assert registry.get_sample_value("cache_entries_total") == 1
