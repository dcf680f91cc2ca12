"""Identity resolution result."""

from playnext.domain.model.common import DomainModel
from playnext.domain.model.user import DirectoryUser
from playnext.domain.value import ResolutionOutcome


class Resolution(DomainModel):
    """Terminal state reached by the identity resolver and the user it concerns."""

    outcome: ResolutionOutcome
    user: DirectoryUser

    @property
    def grants_new_session(self) -> bool:
        return self.outcome in (
            ResolutionOutcome.PROVISIONED,
            ResolutionOutcome.SIGNED_IN,
            ResolutionOutcome.LINKED,
        )
