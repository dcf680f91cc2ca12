"""PostgreSQL repository implementations."""

from playnext.persistence.repository.user_directory import PostgresUserDirectory

__all__ = ["PostgresUserDirectory"]
