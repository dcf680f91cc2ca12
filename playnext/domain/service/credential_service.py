"""Directory credential derivation.

Steam accounts authenticate against the user directory with a secret derived
from the SteamID64 and a server-held key, so no provider token is ever
stored. Anyone holding the key can compute the secret for any Steam ID, so
this class is the only holder of it; rotating the key invalidates every
derived secret and requires Steam accounts to be re-linked.
"""

import hashlib
import hmac

from playnext.config import AuthSettings
from playnext.domain.value import SteamId

from .base import Service

# Hex digest of SHA-256
MAX_CREDENTIAL_LENGTH = 64


class CredentialDeriver(Service):
    """Computes deterministic directory secrets for Steam identities."""

    def __init__(self, auth_settings: AuthSettings) -> None:
        """Initialize credential deriver.

        Args:
            auth_settings: Authentication settings holding the derivation key

        Raises:
            ValueError: If the configured length is out of range
        """
        if not 16 <= auth_settings.credential_length <= MAX_CREDENTIAL_LENGTH:
            raise ValueError(
                f"credential_length must be between 16 and {MAX_CREDENTIAL_LENGTH}"
            )
        self._key = auth_settings.credential_secret.encode("utf-8")
        self._length = auth_settings.credential_length

    def derive(self, external_id: SteamId) -> str:
        """Derive the directory secret for a Steam ID.

        Pure and deterministic: the same Steam ID always yields the same secret.

        Args:
            external_id: SteamID64

        Returns:
            Hex secret truncated to the directory's accepted length
        """
        message = f"steam:{external_id.root}".encode("utf-8")
        digest = hmac.new(self._key, message, hashlib.sha256).hexdigest()
        return digest[: self._length]
