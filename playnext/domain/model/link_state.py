"""Link state entity.

Correlates one Steam handshake attempt across the external redirect.
"""

from datetime import datetime

from playnext.domain.model.common import DomainModel
from playnext.domain.value import LinkMode


class LinkState(DomainModel):
    """Anti-forgery state for a single login or link attempt.

    Held by the caller in a signed, HTTP-only, short-lived slot. Never
    stored server-side and never valid for more than one verification.
    """

    state_token: str
    issued_at: datetime
    expires_at: datetime
    mode: LinkMode
    return_to: str = "/"

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at
