"""Domain models."""

from playnext.domain.model.link_state import LinkState
from playnext.domain.model.resolution import Resolution
from playnext.domain.model.user import DirectoryUser

__all__ = ["DirectoryUser", "LinkState", "Resolution"]
