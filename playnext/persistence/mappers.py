"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict
from uuid import UUID

from playnext.domain.model import DirectoryUser
from playnext.domain.value import ExternalIdentity, SteamId, UserId


def row_to_directory_user(row: Dict[str, Any]) -> DirectoryUser:
    """Convert database row to DirectoryUser domain model.

    Args:
        row: Database row as dict

    Returns:
        DirectoryUser domain model
    """
    return DirectoryUser(
        id=UserId(UUID(row["id"]) if isinstance(row["id"], str) else row["id"]),
        external_id=SteamId(row["external_id"]) if row.get("external_id") else None,
        display_name=row.get("display_name"),
        avatar_url=row.get("avatar_url"),
        email=row.get("email"),
        total_games=row.get("total_games", 0),
        total_playtime=row.get("total_playtime", 0),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def identity_to_dict(identity: ExternalIdentity) -> Dict[str, Any]:
    """Convert an ExternalIdentity to the directory columns it sets.

    Args:
        identity: Verified Steam identity

    Returns:
        Dict suitable for database insertion/update
    """
    return {
        "external_id": identity.external_id.root,
        "display_name": identity.display_name,
        "avatar_url": identity.avatar_url,
    }
