"""In-memory repository implementations for testing."""

from .user_directory import InMemoryUserDirectory

__all__ = ["InMemoryUserDirectory"]
