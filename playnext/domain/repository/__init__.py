"""Repository interfaces.

Interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from playnext.domain.repository.user_directory import UserDirectory

__all__ = ["UserDirectory"]
