"""In-memory user directory for testing."""

import hmac
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from playnext.domain.error import (
    DirectoryAuthenticationError,
    DuplicateExternalIdError,
    NotFoundError,
)
from playnext.domain.model.user import DirectoryUser
from playnext.domain.repository.user_directory import UserDirectory
from playnext.domain.value import ExternalIdentity, SteamId, UserId


class InMemoryUserDirectory(UserDirectory):
    """In-memory implementation of UserDirectory for testing.

    Enforces the same external_id uniqueness as the database constraint.
    """

    def __init__(self) -> None:
        self._users: dict[UserId, DirectoryUser] = {}
        self._secrets: dict[UserId, str] = {}

    def add(self, user: DirectoryUser, secret: str | None = None) -> DirectoryUser:
        """Seed a user directly, bypassing the Steam flow."""
        self._check_unique(user.external_id, user.id)
        self._users[user.id] = user
        if secret is not None:
            self._secrets[user.id] = secret
        return user

    async def find_by_id(self, user_id: UserId) -> Optional[DirectoryUser]:
        """Find a user by ID."""
        return self._users.get(user_id)

    async def find_by_external_id(
        self, external_id: SteamId
    ) -> Optional[DirectoryUser]:
        """Find the user that claims a Steam ID."""
        for user in self._users.values():
            if user.external_id == external_id:
                return user
        return None

    async def create_with_external_id(
        self, identity: ExternalIdentity, secret: str
    ) -> DirectoryUser:
        """Create a user owning the Steam identity."""
        self._check_unique(identity.external_id, None)
        now = datetime.now(timezone.utc)
        user = DirectoryUser(
            id=UserId(uuid4()),
            external_id=identity.external_id,
            display_name=identity.display_name,
            avatar_url=identity.avatar_url,
            created_at=now,
            updated_at=now,
        )
        self._users[user.id] = user
        self._secrets[user.id] = secret
        return user

    async def attach_external_id(
        self, user_id: UserId, identity: ExternalIdentity, secret: str
    ) -> DirectoryUser:
        """Attach a Steam identity and its credential to an existing user."""
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        self._check_unique(identity.external_id, user_id)

        updated = user.model_copy(
            update={
                "external_id": identity.external_id,
                "display_name": identity.display_name,
                "avatar_url": identity.avatar_url,
                "updated_at": datetime.now(timezone.utc),
            }
        )
        self._users[user_id] = updated
        self._secrets[user_id] = secret
        return updated

    async def detach_external_id(self, user_id: UserId) -> DirectoryUser:
        """Remove the Steam identity from a user."""
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        updated = user.model_copy(
            update={"external_id": None, "updated_at": datetime.now(timezone.utc)}
        )
        self._users[user_id] = updated
        self._secrets.pop(user_id, None)
        return updated

    async def authenticate(self, user_id: UserId, secret: str) -> DirectoryUser:
        """Authenticate a user with its directory secret."""
        user = self._users.get(user_id)
        stored = self._secrets.get(user_id)
        if user is None or stored is None:
            raise DirectoryAuthenticationError("Invalid directory credentials")
        if not hmac.compare_digest(stored.encode("utf-8"), secret.encode("utf-8")):
            raise DirectoryAuthenticationError("Invalid directory credentials")
        return user

    def _check_unique(self, external_id: SteamId | None, owner: UserId | None) -> None:
        if external_id is None:
            return
        for user in self._users.values():
            if user.external_id == external_id and user.id != owner:
                raise DuplicateExternalIdError(external_id.root)
