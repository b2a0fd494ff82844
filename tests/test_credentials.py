"""
Tests for credential verification and the user store.
"""

import pytest

from quire.auth.credentials import CredentialVerifier, LoginError
from quire.auth.passwords import PasswordHasher
from quire.core.models import Identity
from quire.errors import NotFoundError, ValidationError
from quire.storage.local import InMemoryDocumentStore
from quire.users.store import DUPLICATE_EMAIL, UserStore


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def users():
    return UserStore(InMemoryDocumentStore())


async def _register(users, hasher, email="testUser@example.com", password="passtest123", **extra):
    return await users.create({
        "email": email,
        "first_name": "Usey",
        "last_name": "Userman",
        "password_hash": hasher.hash(password),
        **extra,
    })


# =============================================================================
# CredentialVerifier
# =============================================================================


class TestCredentialVerifier:
    @pytest.mark.asyncio
    async def test_valid_credentials(self, users, hasher):
        user = await _register(users, hasher)
        result = await CredentialVerifier(users, hasher).authenticate("testUser@example.com", "passtest123")

        assert isinstance(result, Identity)
        assert result.id == user.id
        assert result.to_claim() == {
            "id": user.id,
            "email": "testUser@example.com",
            "firstName": "Usey",
            "lastName": "Userman",
            "admin": False,
            "editor": False,
        }

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_look_the_same(self, users, hasher):
        await _register(users, hasher)
        verifier = CredentialVerifier(users, hasher)

        unknown = await verifier.authenticate("nobody@example.com", "passtest123")
        wrong = await verifier.authenticate("testUser@example.com", "passtest124")

        assert isinstance(unknown, LoginError)
        assert unknown == wrong

    @pytest.mark.asyncio
    async def test_email_is_case_sensitive(self, users, hasher):
        await _register(users, hasher)
        result = await CredentialVerifier(users, hasher).authenticate("testuser@example.com", "passtest123")
        assert isinstance(result, LoginError)

    @pytest.mark.asyncio
    async def test_role_flags_carried_into_identity(self, users, hasher):
        await _register(users, hasher, email="admin@example.com", admin=True)
        result = await CredentialVerifier(users, hasher).authenticate("admin@example.com", "passtest123")
        assert result.admin is True
        assert result.editor is False

    @pytest.mark.asyncio
    async def test_corrupt_stored_hash_is_a_failed_login(self, users, hasher):
        await users.create({
            "email": "broken@example.com",
            "first_name": "B",
            "last_name": "R",
            "password_hash": "not-a-hash",
        })
        result = await CredentialVerifier(users, hasher).authenticate("broken@example.com", "passtest123")
        assert isinstance(result, LoginError)


# =============================================================================
# UserStore
# =============================================================================


class TestUserStore:
    @pytest.mark.asyncio
    async def test_create_and_find(self, users, hasher):
        user = await _register(users, hasher)

        assert user.id.startswith("user_")
        assert (await users.find_by_id(user.id)).email == "testUser@example.com"
        assert (await users.find_by_email("testUser@example.com")).id == user.id
        assert await users.find_by_email("other@example.com") is None
        assert await users.find_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, users, hasher):
        await _register(users, hasher)
        with pytest.raises(ValidationError) as exc_info:
            await _register(users, hasher)

        assert exc_info.value.message == DUPLICATE_EMAIL
        assert exc_info.value.location == "email"
        assert await users.count_by_email("testUser@example.com") == 1

    @pytest.mark.asyncio
    async def test_update_fields(self, users, hasher):
        user = await _register(users, hasher)
        updated = await users.update(user.id, {"first_name": "Renamed", "editor": True})

        assert updated.first_name == "Renamed"
        assert updated.editor is True
        assert (await users.find_by_id(user.id)).first_name == "Renamed"

    @pytest.mark.asyncio
    async def test_update_to_taken_email_rejected(self, users, hasher):
        await _register(users, hasher, email="first@example.com")
        second = await _register(users, hasher, email="second@example.com")

        with pytest.raises(ValidationError):
            await users.update(second.id, {"email": "first@example.com"})

    @pytest.mark.asyncio
    async def test_update_keeping_own_email_is_fine(self, users, hasher):
        user = await _register(users, hasher)
        updated = await users.update(user.id, {"email": "testUser@example.com", "last_name": "New"})
        assert updated.last_name == "New"

    @pytest.mark.asyncio
    async def test_update_and_delete_missing_user(self, users):
        with pytest.raises(NotFoundError):
            await users.update("missing", {"first_name": "X"})
        with pytest.raises(NotFoundError):
            await users.delete("missing")

    @pytest.mark.asyncio
    async def test_delete(self, users, hasher):
        user = await _register(users, hasher)
        await users.delete(user.id)
        assert await users.find_by_id(user.id) is None
