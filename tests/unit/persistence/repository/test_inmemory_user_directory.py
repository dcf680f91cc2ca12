"""Unit tests for InMemoryUserDirectory."""

from uuid import uuid4

import pytest

from playnext.domain.error import (
    DirectoryAuthenticationError,
    DuplicateExternalIdError,
    NotFoundError,
)
from playnext.domain.model import DirectoryUser
from playnext.domain.value import UserId
from playnext.persistence.repository.inmemory import InMemoryUserDirectory
from tests.factories import STEAM_ID_A, STEAM_ID_B, make_identity


class TestCreateWithExternalId:
    """Tests for InMemoryUserDirectory.create_with_external_id()."""

    @pytest.mark.asyncio
    async def test_creates_user_from_identity(self):
        directory = InMemoryUserDirectory()

        user = await directory.create_with_external_id(make_identity(), "secret")

        assert user.external_id.root == STEAM_ID_A
        assert user.display_name == "gabe"
        assert await directory.find_by_external_id(user.external_id) == user

    @pytest.mark.asyncio
    async def test_rejects_claimed_external_id(self):
        directory = InMemoryUserDirectory()
        await directory.create_with_external_id(make_identity(), "secret")

        with pytest.raises(DuplicateExternalIdError):
            await directory.create_with_external_id(make_identity(), "secret")


class TestAttachExternalId:
    """Tests for InMemoryUserDirectory.attach_external_id()."""

    @pytest.mark.asyncio
    async def test_attaches_and_refreshes_profile(self):
        directory = InMemoryUserDirectory()
        user = directory.add(DirectoryUser(id=UserId(uuid4()), email="a@example.com"))

        updated = await directory.attach_external_id(
            user.id, make_identity(name="new"), "secret"
        )

        assert updated.external_id.root == STEAM_ID_A
        assert updated.display_name == "new"
        assert updated.email == "a@example.com"

    @pytest.mark.asyncio
    async def test_attached_secret_replaces_previous_credential(self):
        """Re-linking should make the new secret the only valid one."""
        directory = InMemoryUserDirectory()
        user = await directory.create_with_external_id(
            make_identity(STEAM_ID_A), "old-secret"
        )

        await directory.attach_external_id(
            user.id, make_identity(STEAM_ID_B), "new-secret"
        )

        assert (await directory.authenticate(user.id, "new-secret")).id == user.id
        with pytest.raises(DirectoryAuthenticationError):
            await directory.authenticate(user.id, "old-secret")

    @pytest.mark.asyncio
    async def test_detach_drops_credential(self):
        directory = InMemoryUserDirectory()
        user = await directory.create_with_external_id(make_identity(), "secret")

        await directory.detach_external_id(user.id)

        with pytest.raises(DirectoryAuthenticationError):
            await directory.authenticate(user.id, "secret")

    @pytest.mark.asyncio
    async def test_rejects_id_owned_by_another_user(self):
        directory = InMemoryUserDirectory()
        await directory.create_with_external_id(make_identity(STEAM_ID_B), "secret")
        user = directory.add(DirectoryUser(id=UserId(uuid4())))

        with pytest.raises(DuplicateExternalIdError):
            await directory.attach_external_id(
                user.id, make_identity(STEAM_ID_B), "secret"
            )

    @pytest.mark.asyncio
    async def test_unknown_user(self):
        with pytest.raises(NotFoundError):
            await InMemoryUserDirectory().attach_external_id(
                UserId(uuid4()), make_identity(), "secret"
            )


class TestAuthenticate:
    """Tests for InMemoryUserDirectory.authenticate()."""

    @pytest.mark.asyncio
    async def test_accepts_matching_secret(self):
        directory = InMemoryUserDirectory()
        user = await directory.create_with_external_id(make_identity(), "secret")

        assert (await directory.authenticate(user.id, "secret")).id == user.id

    @pytest.mark.asyncio
    async def test_rejects_wrong_secret(self):
        directory = InMemoryUserDirectory()
        user = await directory.create_with_external_id(make_identity(), "secret")

        with pytest.raises(DirectoryAuthenticationError):
            await directory.authenticate(user.id, "wrong")

    @pytest.mark.asyncio
    async def test_rejects_user_without_secret(self):
        directory = InMemoryUserDirectory()
        user = directory.add(DirectoryUser(id=UserId(uuid4()), email="a@example.com"))

        with pytest.raises(DirectoryAuthenticationError):
            await directory.authenticate(user.id, "anything")
