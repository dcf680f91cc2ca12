"""PostgreSQL implementation of the user directory."""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from playnext.domain.error import (
    DirectoryAuthenticationError,
    DirectoryUnavailableError,
    DuplicateExternalIdError,
    NotFoundError,
)
from playnext.domain.model import DirectoryUser
from playnext.domain.repository import UserDirectory
from playnext.domain.value import ExternalIdentity, SteamId, UserId
from playnext.persistence.mappers import identity_to_dict, row_to_directory_user
from playnext.persistence.tables import directory_users_table

EXTERNAL_ID_CONSTRAINT = "uq_directory_users_external_id"


def _is_external_id_violation(error: IntegrityError) -> bool:
    return EXTERNAL_ID_CONSTRAINT in str(error.orig)


class PostgresUserDirectory(UserDirectory):
    """PostgreSQL implementation of UserDirectory.

    Secrets are stored as argon2 hashes. Writes that may collide on the
    external_id constraint run inside a savepoint so the request transaction
    stays usable after a DuplicateExternalIdError.
    """

    def __init__(
        self, session: AsyncSession, password_hasher: PasswordHasher | None = None
    ) -> None:
        """Initialize directory with database session.

        Args:
            session: SQLAlchemy async session
            password_hasher: argon2 hasher for directory secrets
        """
        self.session = session
        self.password_hasher = password_hasher or PasswordHasher()

    async def find_by_id(self, user_id: UserId) -> Optional[DirectoryUser]:
        """Find a user by ID."""
        stmt = select(directory_users_table).where(directory_users_table.c.id == user_id)
        row = await self._first(stmt)
        return row_to_directory_user(row) if row else None

    async def find_by_external_id(
        self, external_id: SteamId
    ) -> Optional[DirectoryUser]:
        """Find the user that claims a Steam ID."""
        stmt = select(directory_users_table).where(
            directory_users_table.c.external_id == external_id.root
        )
        row = await self._first(stmt)
        return row_to_directory_user(row) if row else None

    async def create_with_external_id(
        self, identity: ExternalIdentity, secret: str
    ) -> DirectoryUser:
        """Insert a new user owning the Steam identity.

        Raises:
            DuplicateExternalIdError: If the Steam ID is already claimed
            DirectoryUnavailableError: On any other database failure
        """
        now = datetime.now(timezone.utc)
        values = {
            "id": uuid4(),
            **identity_to_dict(identity),
            "secret_hash": self.password_hasher.hash(secret),
            "created_at": now,
            "updated_at": now,
        }
        stmt = (
            directory_users_table.insert()
            .values(**values)
            .returning(directory_users_table)
        )
        row = await self._write(stmt, identity.external_id)
        return row_to_directory_user(row)

    async def attach_external_id(
        self, user_id: UserId, identity: ExternalIdentity, secret: str
    ) -> DirectoryUser:
        """Set the Steam identity, its credential and profile fields on a user.

        Raises:
            NotFoundError: If the user does not exist
            DuplicateExternalIdError: If another user claims the Steam ID
            DirectoryUnavailableError: On any other database failure
        """
        stmt = (
            directory_users_table.update()
            .where(directory_users_table.c.id == user_id)
            .values(
                **identity_to_dict(identity),
                secret_hash=self.password_hasher.hash(secret),
                updated_at=datetime.now(timezone.utc),
            )
            .returning(directory_users_table)
        )
        row = await self._write(stmt, identity.external_id)
        if row is None:
            raise NotFoundError("User", str(user_id))
        return row_to_directory_user(row)

    async def detach_external_id(self, user_id: UserId) -> DirectoryUser:
        """Clear the Steam identity from a user.

        Raises:
            NotFoundError: If the user does not exist
        """
        stmt = (
            directory_users_table.update()
            .where(directory_users_table.c.id == user_id)
            .values(
                external_id=None,
                secret_hash=None,
                updated_at=datetime.now(timezone.utc),
            )
            .returning(directory_users_table)
        )
        row = await self._first(stmt)
        if row is None:
            raise NotFoundError("User", str(user_id))
        return row_to_directory_user(row)

    async def authenticate(self, user_id: UserId, secret: str) -> DirectoryUser:
        """Check a directory secret against the stored hash.

        Raises:
            DirectoryAuthenticationError: Unknown user, no secret, or mismatch
        """
        stmt = select(directory_users_table).where(directory_users_table.c.id == user_id)
        row = await self._first(stmt)
        if row is None or not row.get("secret_hash"):
            raise DirectoryAuthenticationError("Invalid directory credentials")

        try:
            self.password_hasher.verify(row["secret_hash"], secret)
        except (VerificationError, InvalidHashError) as e:
            raise DirectoryAuthenticationError("Invalid directory credentials") from e

        return row_to_directory_user(row)

    async def _first(self, stmt) -> Optional[dict]:
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise DirectoryUnavailableError(str(e)) from e
        row = result.mappings().first()
        return dict(row) if row else None

    async def _write(self, stmt, external_id: SteamId) -> Optional[dict]:
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(stmt)
                row = result.mappings().first()
        except IntegrityError as e:
            if _is_external_id_violation(e):
                raise DuplicateExternalIdError(external_id.root) from e
            raise DirectoryUnavailableError(str(e)) from e
        except SQLAlchemyError as e:
            raise DirectoryUnavailableError(str(e)) from e
        return dict(row) if row else None
