"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class BusinessRuleViolationError(DomainError):
    """Business rule violation error."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


# ============================================================================
# USER DIRECTORY
# ============================================================================


class DirectoryError(DomainError):
    """Base error raised by user directory implementations."""

    pass


class DuplicateExternalIdError(DirectoryError):
    """The external ID is already claimed by another directory user.

    Raised by the directory's own uniqueness constraint on write.
    """

    def __init__(self, external_id: str):
        self.external_id = external_id
        super().__init__(f"External ID already claimed: {external_id}")


class DirectoryAuthenticationError(DirectoryError):
    """The supplied secret does not authenticate the directory user."""

    pass


class DirectoryUnavailableError(DirectoryError):
    """The directory could not be reached or failed unexpectedly."""

    pass


# ============================================================================
# EXTERNAL (STEAM) AUTHENTICATION
# ============================================================================


class ExternalAuthError(DomainError):
    """Terminal failure of a Steam login or link attempt.

    Every subclass carries a stable machine-readable code that is appended
    to the error redirect for the frontend to translate.
    """

    code: str = "unexpected"

    def __init__(self, message: str | None = None, mode: str | None = None):
        super().__init__(message or self.code)
        # "login" or "link" once the attempt's LinkState is known
        self.mode = mode


class InvalidStateError(ExternalAuthError):
    """Anti-forgery state is absent, mismatched, tampered with or expired."""

    code = "invalid_state"


class ProviderRejectedError(ExternalAuthError):
    """Steam did not confirm the assertion (or the user cancelled)."""

    code = "provider_rejected"


class MalformedAssertionError(ExternalAuthError):
    """The callback parameters are not a well-formed Steam assertion."""

    code = "malformed_assertion"


class NetworkFailureError(ExternalAuthError):
    """Steam could not be reached in time."""

    code = "network_failure"


class ProfileUnavailableError(ExternalAuthError):
    """The verified Steam ID could not be resolved to a profile."""

    code = "profile_unavailable"


class NotAuthenticatedError(ExternalAuthError):
    """A link was attempted without an application session."""

    code = "not_authenticated"


class ConflictRejectedError(ExternalAuthError):
    """The Steam ID already belongs to a different account."""

    code = "already_linked"


class SessionIssuanceFailedError(ExternalAuthError):
    """The resolved identity could not be exchanged for a session."""

    code = "session_issuance_failed"
