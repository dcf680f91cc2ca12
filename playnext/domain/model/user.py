"""Directory user aggregate root.

Users sign in with Steam or with credentials managed elsewhere, and carry
library aggregates maintained by the sync subsystem.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from playnext.domain.model.common import DomainModel
from playnext.domain.value import SteamId, UserId


class DirectoryUser(DomainModel):
    """A user as stored in the user directory.

    At most one DirectoryUser may claim a given external_id.
    """

    id: UserId
    external_id: Optional[SteamId] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    # Only set for accounts created outside the Steam flow
    email: Optional[str] = None
    total_games: int = Field(default=0, ge=0)
    total_playtime: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_linked(self) -> bool:
        return self.external_id is not None
