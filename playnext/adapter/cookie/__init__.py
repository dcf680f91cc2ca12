"""Cookie-backed credential storage."""

from .slot import CookieCredentialSlot, InMemoryCredentialSlot

__all__ = ["CookieCredentialSlot", "InMemoryCredentialSlot"]
