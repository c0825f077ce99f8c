"""
User endpoints: table rows mirrored into the identity subsystem.
"""

from datetime import datetime

import pytest

from identity import security


def _create(client, **payload):
    body = {"email": "a@x.com", "name": "A"}
    body.update(payload)
    return client.post("/api/users", json=body)


def _token_for(user):
    return security.build_access_token(user_id=user["id"], email=user["email"])


class TestCreateUser:
    def test_creates_row_and_identity(self, client, identities):
        resp = _create(client, password="correct-horse")
        assert resp.status_code == 201

        row = resp.json()
        assert row["email"] == "a@x.com"
        assert row["name"] == "A"
        assert "password" not in row
        assert row["created_at"] == row["updated_at"]

        identity = identities.records[row["id"]]
        assert identity["email"] == "a@x.com"
        assert identity["name"] == "A"
        assert security.verify_password("correct-horse", identity["password_hash"])

    def test_short_password_is_rejected(self, client):
        resp = _create(client, password="short")
        assert resp.status_code == 400
        assert resp.json()["details"][0]["field"] == "password"

    def test_mixed_case_email_is_stored_lowercased_in_both_places(self, client, identities):
        resp = _create(client, email=" B@X.com")
        assert resp.status_code == 201

        row = resp.json()
        assert row["email"] == "b@x.com"
        assert identities.records[row["id"]]["email"] == "b@x.com"

    def test_identity_failure_undoes_row(self, client, store, identities):
        identities.unavailable = True
        resp = _create(client)
        assert resp.status_code == 500
        assert resp.json() == {"error": "identity service unavailable"}
        assert store.rows("users") == []


class TestUpdateUser:
    def test_email_change_reaches_identity(self, client, identities):
        user = _create(client).json()

        resp = client.patch(f"/api/users/{user['id']}", json={"email": "b@x.com"})
        assert resp.status_code == 200
        assert resp.json()["email"] == "b@x.com"
        assert resp.json()["name"] == "A"
        assert identities.records[user["id"]]["email"] == "b@x.com"

        fetched = client.get(f"/api/users/{user['id']}").json()
        assert fetched["email"] == "b@x.com"
        assert datetime.fromisoformat(fetched["updated_at"]) > datetime.fromisoformat(user["updated_at"])

    def test_profile_only_change_skips_identity(self, client, identities):
        user = _create(client).json()
        identities.unavailable = True

        resp = client.patch(f"/api/users/{user['id']}", json={"first_name": "Ada"})
        assert resp.status_code == 200
        assert resp.json()["first_name"] == "Ada"

    def test_identity_failure_restores_previous_row(self, client, store, identities):
        user = _create(client).json()
        identities.unavailable = True

        resp = client.patch(f"/api/users/{user['id']}", json={"email": "b@x.com", "first_name": "B"})
        assert resp.status_code == 500

        (row,) = store.rows("users")
        assert row["email"] == "a@x.com"
        assert row["first_name"] is None
        assert row["updated_at"] == datetime.fromisoformat(user["updated_at"])

    def test_cleared_name_reaches_identity(self, client, identities):
        user = _create(client).json()

        resp = client.patch(f"/api/users/{user['id']}", json={"name": None})
        assert resp.status_code == 200
        assert resp.json()["name"] is None
        assert identities.records[user["id"]]["name"] is None
        assert identities.records[user["id"]]["email"] == "a@x.com"

    def test_cleared_name_is_restored_when_identity_fails(self, client, store, identities):
        user = _create(client).json()
        identities.unavailable = True

        resp = client.patch(f"/api/users/{user['id']}", json={"name": None})
        assert resp.status_code == 500

        (row,) = store.rows("users")
        assert row["name"] == "A"

    def test_email_update_is_lowercased_in_both_places(self, client, identities):
        user = _create(client).json()

        resp = client.patch(f"/api/users/{user['id']}", json={"email": "C@X.com"})
        assert resp.status_code == 200
        assert resp.json()["email"] == "c@x.com"
        assert identities.records[user["id"]]["email"] == "c@x.com"

    def test_unknown_user_returns_404(self, client):
        resp = client.patch("/api/users/missing", json={"email": "b@x.com"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "User not found"}

    def test_invalid_email_returns_400(self, client):
        user = _create(client).json()
        resp = client.patch(f"/api/users/{user['id']}", json={"email": "nope"})
        assert resp.status_code == 400


class TestPasswordUpdate:
    def test_requires_session(self, client):
        user = _create(client, password="first-password").json()
        resp = client.patch(f"/api/users/{user['id']}/password", json={"password": "second-password"})
        assert resp.status_code == 401
        assert "error" in resp.json()

    def test_rejects_other_users_session(self, client):
        user = _create(client).json()
        other = _create(client, email="o@x.com").json()
        resp = client.patch(
            f"/api/users/{user['id']}/password",
            json={"password": "second-password"},
            headers={"Authorization": f"Bearer {_token_for(other)}"},
        )
        assert resp.status_code == 403

    def test_changes_identity_password(self, client, identities):
        user = _create(client, password="first-password").json()
        resp = client.patch(
            f"/api/users/{user['id']}/password",
            json={"password": "second-password"},
            headers={"Authorization": f"Bearer {_token_for(user)}"},
        )
        assert resp.status_code == 200
        assert resp.json() == {"message": "Password updated successfully"}
        assert security.verify_password("second-password", identities.records[user["id"]]["password_hash"])

    def test_short_password_returns_400(self, client):
        user = _create(client).json()
        resp = client.patch(
            f"/api/users/{user['id']}/password",
            json={"password": "x"},
            headers={"Authorization": f"Bearer {_token_for(user)}"},
        )
        assert resp.status_code == 400


class TestDeleteUser:
    def test_removes_row_and_identity(self, client, identities):
        user = _create(client).json()
        assert client.delete(f"/api/users/{user['id']}").status_code == 204
        assert user["id"] not in identities.records
        assert client.delete(f"/api/users/{user['id']}").status_code == 404

    def test_get_unknown_returns_404(self, client):
        assert client.get("/api/users/missing").status_code == 404


class TestCollaborators:
    @pytest.fixture
    def people(self, client):
        return [_create(client, email=f"u{i}@x.com", name=f"U{i}").json() for i in range(3)]

    def test_no_collaborators(self, client, people):
        non = client.get("/api/frames/f1/non-collaborators")
        assert non.status_code == 200
        assert {u["id"] for u in non.json()} == {u["id"] for u in people}
        assert client.get("/api/frames/f1/collaborators").json() == []

    def test_all_collaborators(self, client, store, people):
        store.seed("frame_collaborators", *({"frame_id": "f1", "user_id": u["id"]} for u in people))
        assert client.get("/api/frames/f1/non-collaborators").json() == []
        assert len(client.get("/api/frames/f1/collaborators").json()) == 3

    def test_split_by_frame(self, client, store, people):
        store.seed(
            "frame_collaborators",
            {"frame_id": "f1", "user_id": people[0]["id"]},
            {"frame_id": "f2", "user_id": people[1]["id"]},
        )
        collaborators = client.get("/api/frames/f1/collaborators").json()
        non = client.get("/api/frames/f1/non-collaborators").json()
        assert [u["id"] for u in collaborators] == [people[0]["id"]]
        assert {u["id"] for u in non} == {people[1]["id"], people[2]["id"]}

    def test_collaborator_read_failure_aborts_before_users_read(self, client, store, people):
        store.fail("frame_collaborators", "select")
        store.calls.clear()

        resp = client.get("/api/frames/f1/non-collaborators")
        assert resp.status_code == 500
        assert store.calls == [("frame_collaborators", "select")]
