"""
Tests for registration and profile management.
"""

import pytest

from quire.core.models import Identity

USER = {
    "email": "testUser@example.com",
    "firstName": "Usey",
    "lastName": "Userman",
    "password": "passtest123",
}


@pytest.fixture
def register(client):
    def _register(**overrides):
        response = client.post("/api/users", json={**USER, **overrides})
        assert response.status_code == 201, response.text
        return response.json()
    return _register


@pytest.fixture
def admin_user(app, run):
    """An admin account that exists in the store."""
    hasher = app.state.hasher
    user = run(app.state.users.create({
        "email": "adminTest@example.com",
        "first_name": "Firstathy",
        "last_name": "Lastnamerham",
        "password_hash": hasher.hash("adminpass123"),
        "admin": True,
    }))
    return user.to_identity()


def _identity(data: dict) -> Identity:
    return Identity.model_validate(data)


# =============================================================================
# Registration
# =============================================================================


class TestRegistration:
    def test_root(self, client):
        assert client.get("/api/users").json() == {"ok": True}

    def test_register(self, client, register):
        data = register()

        assert data["email"] == USER["email"]
        assert data["firstName"] == "Usey"
        assert data["admin"] is False
        assert data["editor"] is False
        assert "password" not in data
        assert "passwordHash" not in data

    def test_role_flags_in_body_are_ignored(self, register):
        data = register(admin=True, editor=True)
        assert data["admin"] is False
        assert data["editor"] is False

    def test_names_are_trimmed(self, register):
        data = register(firstName="  Usey  ")
        assert data["firstName"] == "Usey"

    def test_duplicate_email(self, client, register):
        register()
        response = client.post("/api/users", json=USER)

        assert response.status_code == 422
        assert response.json() == {
            "code": 422,
            "reason": "ValidationError",
            "message": "User with that email already exists",
            "location": "email",
        }

    @pytest.mark.parametrize("field", ["email", "firstName", "lastName", "password"])
    def test_missing_field(self, client, field):
        body = {k: v for k, v in USER.items() if k != field}
        response = client.post("/api/users", json=body)

        assert response.status_code == 422
        assert response.json()["message"] == "Missing field"
        assert response.json()["location"] == field

    def test_non_string_field(self, client):
        response = client.post("/api/users", json={**USER, "firstName": 42})
        assert response.json()["message"] == "Incorrect field type: expected string"
        assert response.json()["location"] == "firstName"

    @pytest.mark.parametrize("field, value", [
        ("email", " testUser@example.com"),
        ("password", "passtest123 "),
    ])
    def test_surrounding_whitespace(self, client, field, value):
        response = client.post("/api/users", json={**USER, field: value})
        assert response.status_code == 422
        assert response.json()["message"] == "Cannot start or end with whitespace"
        assert response.json()["location"] == field

    def test_password_too_short(self, client):
        response = client.post("/api/users", json={**USER, "password": "short"})
        assert response.json()["message"] == "Must be at least 8 characters long"
        assert response.json()["location"] == "password"

    def test_password_too_long(self, client):
        response = client.post("/api/users", json={**USER, "password": "p" * 73})
        assert response.json()["message"] == "Can't be more than 72 characters long"

    def test_multibyte_password_over_72_bytes(self, client):
        # 40 characters, 80 bytes
        response = client.post("/api/users", json={**USER, "password": "\u00e9" * 40})

        assert response.status_code == 422
        assert response.json()["message"] == "Can't be more than 72 characters long"
        assert response.json()["location"] == "password"

    def test_multibyte_password_at_72_bytes(self, client):
        password = "\u00e9" * 36
        assert client.post("/api/users", json={**USER, "password": password}).status_code == 201

        near_miss = "\u00e9" * 32 + "zzzz"
        login = client.post("/api/auth/login", json={"email": USER["email"], "password": near_miss})
        assert login.status_code == 401

    def test_blank_name(self, client):
        response = client.post("/api/users", json={**USER, "lastName": "   "})
        assert response.json()["message"] == "Must be at least 1 characters long"
        assert response.json()["location"] == "lastName"

    def test_invalid_email(self, client):
        response = client.post("/api/users", json={**USER, "email": "not-an-email"})
        assert response.status_code == 422
        assert response.json()["message"] == "Invalid email address"

    def test_no_body(self, client):
        response = client.post("/api/users")
        assert response.status_code == 422
        assert response.json()["location"] == "email"


# =============================================================================
# Profiles
# =============================================================================


class TestProfiles:
    def test_get_self(self, client, register, bearer):
        data = register()
        response = client.get(f"/api/users/{data['id']}", headers=bearer(_identity(data)))

        assert response.status_code == 200
        assert response.json() == data

    def test_get_requires_token(self, client, register):
        data = register()
        response = client.get(f"/api/users/{data['id']}")

        assert response.status_code == 401
        assert response.json()["reason"] == "AuthenticationError"

    def test_get_other_user(self, client, register, bearer, stranger):
        data = register()
        response = client.get(f"/api/users/{data['id']}", headers=bearer(stranger))
        assert response.status_code == 401

    def test_editor_cannot_read_other_profiles(self, client, register, bearer, editor):
        data = register()
        assert client.get(f"/api/users/{data['id']}", headers=bearer(editor)).status_code == 401

    def test_admin_reads_any_profile(self, client, register, bearer, admin):
        data = register()
        assert client.get(f"/api/users/{data['id']}", headers=bearer(admin)).status_code == 200

    def test_admin_gets_404_for_missing_user(self, client, bearer, admin):
        assert client.get("/api/users/missing", headers=bearer(admin)).status_code == 404

    def test_update_self(self, client, register, bearer):
        data = register()
        response = client.put(
            f"/api/users/{data['id']}",
            json={"id": data["id"], "firstName": "Renamed"},
            headers=bearer(_identity(data)),
        )

        assert response.status_code == 200
        assert response.json()["firstName"] == "Renamed"
        assert response.json()["lastName"] == "Userman"

    def test_update_id_mismatch(self, client, register, bearer):
        data = register()
        response = client.put(
            f"/api/users/{data['id']}",
            json={"id": "someone-else", "firstName": "Renamed"},
            headers=bearer(_identity(data)),
        )
        assert response.status_code == 422
        assert response.json()["location"] == "id"

    def test_update_password_changes_login(self, client, register, bearer):
        data = register()
        client.put(
            f"/api/users/{data['id']}",
            json={"password": "newpass1234"},
            headers=bearer(_identity(data)),
        )

        old = client.post("/api/auth/login", json={"email": USER["email"], "password": "passtest123"})
        new = client.post("/api/auth/login", json={"email": USER["email"], "password": "newpass1234"})
        assert old.status_code == 401
        assert new.status_code == 200

    def test_update_rejects_password_over_72_bytes(self, client, register, bearer):
        data = register()
        response = client.put(
            f"/api/users/{data['id']}",
            json={"password": "\u00e9" * 40},
            headers=bearer(_identity(data)),
        )
        assert response.status_code == 422
        assert response.json()["location"] == "password"

    def test_user_cannot_grant_self_roles(self, client, register, bearer):
        data = register()
        response = client.put(
            f"/api/users/{data['id']}",
            json={"editor": True},
            headers=bearer(_identity(data)),
        )
        assert response.status_code == 401

    def test_admin_grants_editor(self, client, register, bearer, admin):
        data = register()
        response = client.put(f"/api/users/{data['id']}", json={"editor": True}, headers=bearer(admin))

        assert response.status_code == 200
        assert response.json()["editor"] is True
        assert response.json()["admin"] is False

    def test_role_flag_must_be_boolean(self, client, register, bearer, admin):
        data = register()
        response = client.put(f"/api/users/{data['id']}", json={"editor": "yes"}, headers=bearer(admin))
        assert response.status_code == 422
        assert response.json()["message"] == "Incorrect field type: expected boolean"

    def test_update_to_taken_email(self, client, register, bearer):
        register(email="first@example.com")
        second = register(email="second@example.com")
        response = client.put(
            f"/api/users/{second['id']}",
            json={"email": "first@example.com"},
            headers=bearer(_identity(second)),
        )
        assert response.status_code == 422
        assert response.json()["message"] == "User with that email already exists"


# =============================================================================
# Deletion
# =============================================================================


class TestDeletion:
    def test_delete_self(self, client, register, bearer):
        data = register()
        headers = bearer(_identity(data))

        response = client.delete(f"/api/users/{data['id']}", headers=headers)

        assert response.status_code == 204
        assert response.content == b""
        login = client.post("/api/auth/login", json={"email": USER["email"], "password": USER["password"]})
        assert login.status_code == 401

    def test_delete_other_user(self, client, register, bearer, stranger):
        data = register()
        assert client.delete(f"/api/users/{data['id']}", headers=bearer(stranger)).status_code == 401

    def test_admin_deletes_author(self, client, register, bearer, admin):
        data = register()
        assert client.delete(f"/api/users/{data['id']}", headers=bearer(admin)).status_code == 204

    def test_admin_cannot_delete_another_admin(self, client, bearer, admin, admin_user):
        response = client.delete(f"/api/users/{admin_user.id}", headers=bearer(admin))

        assert response.status_code == 403
        assert response.json()["message"] == "Cannot delete an admin account"

    def test_admin_deletes_own_account(self, client, bearer, admin_user):
        response = client.delete(f"/api/users/{admin_user.id}", headers=bearer(admin_user))
        assert response.status_code == 204

    def test_delete_missing_user(self, client, bearer, admin):
        assert client.delete("/api/users/missing", headers=bearer(admin)).status_code == 404
