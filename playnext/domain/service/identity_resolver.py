"""Identity resolver domain service.

Decides what a verified Steam identity means for the caller:

    mode=login  existing owner          -> SIGNED_IN
                no owner                -> PROVISIONED (new directory user)
    mode=link   no session              -> NotAuthenticatedError
                owned by someone else   -> ConflictRejectedError
                owned by the caller     -> LINK_REJECTED_ALREADY_LINKED_TO_SELF
                no owner                -> LINKED (attached to the caller)

The directory's uniqueness constraint is the final authority: a duplicate
on write is re-read and mapped onto the same outcomes, never surfaced as a
storage error. Conflict paths never write.
"""

import logfire

from playnext.domain.error import (
    ConflictRejectedError,
    DuplicateExternalIdError,
    NotAuthenticatedError,
    NotFoundError,
)
from playnext.domain.model.resolution import Resolution
from playnext.domain.model.user import DirectoryUser
from playnext.domain.repository.user_directory import UserDirectory
from playnext.domain.value import (
    AuthenticatedContext,
    ExternalIdentity,
    LinkMode,
    ResolutionOutcome,
)

from .base import Service
from .credential_service import CredentialDeriver


class IdentityResolver(Service):
    """Resolves a verified Steam identity against the user directory."""

    def __init__(
        self, user_directory: UserDirectory, credential_deriver: CredentialDeriver
    ) -> None:
        """Initialize identity resolver.

        Args:
            user_directory: User directory
            credential_deriver: Derives directory secrets for Steam IDs
        """
        self.user_directory = user_directory
        self.credential_deriver = credential_deriver

    async def resolve(
        self,
        identity: ExternalIdentity,
        mode: LinkMode,
        context: AuthenticatedContext,
    ) -> Resolution:
        """Resolve an identity to a terminal outcome, mutating the directory if needed.

        Args:
            identity: Verified Steam identity
            mode: Login or link, as recorded in the LinkState
            context: Caller's current session (read-only)

        Returns:
            Resolution with the outcome and the user it concerns

        Raises:
            NotAuthenticatedError: Link attempted without a valid session
            ConflictRejectedError: Steam ID belongs to a different user
        """
        with logfire.span(
            "identity_resolver.resolve",
            mode=mode.value,
            external_id=identity.external_id.root,
            authenticated=context.is_authenticated,
        ):
            existing = await self.user_directory.find_by_external_id(
                identity.external_id
            )

            if mode == LinkMode.LINK:
                resolution = await self._resolve_link(identity, context, existing)
            else:
                resolution = await self._resolve_login(identity, existing)

            logfire.info(
                "Identity resolved",
                outcome=resolution.outcome.value,
                user_id=str(resolution.user.id),
                external_id=identity.external_id.root,
            )
            return resolution

    async def _resolve_login(
        self, identity: ExternalIdentity, existing: DirectoryUser | None
    ) -> Resolution:
        if existing is not None:
            return Resolution(outcome=ResolutionOutcome.SIGNED_IN, user=existing)

        secret = self.credential_deriver.derive(identity.external_id)
        try:
            user = await self.user_directory.create_with_external_id(identity, secret)
        except DuplicateExternalIdError:
            # Lost a race with a concurrent provisioning of the same Steam ID
            winner = await self.user_directory.find_by_external_id(
                identity.external_id
            )
            if winner is None:
                raise ConflictRejectedError(
                    "Steam ID is claimed but its owner could not be read"
                )
            logfire.info(
                "Provisioning raced, signing in existing user",
                user_id=str(winner.id),
                external_id=identity.external_id.root,
            )
            return Resolution(outcome=ResolutionOutcome.SIGNED_IN, user=winner)

        return Resolution(outcome=ResolutionOutcome.PROVISIONED, user=user)

    async def _resolve_link(
        self,
        identity: ExternalIdentity,
        context: AuthenticatedContext,
        existing: DirectoryUser | None,
    ) -> Resolution:
        if not context.is_authenticated:
            logfire.warn(
                "Link attempted without a session",
                external_id=identity.external_id.root,
            )
            raise NotAuthenticatedError("Sign in before linking a Steam account")

        if existing is not None:
            return self._classify_claimed(existing, context)

        current = await self.user_directory.find_by_id(context.user_id)
        if current is None:
            raise NotAuthenticatedError("Session user no longer exists")

        if current.external_id is not None:
            logfire.info(
                "Replacing previously linked Steam ID",
                user_id=str(current.id),
                previous_external_id=current.external_id.root,
                external_id=identity.external_id.root,
            )

        secret = self.credential_deriver.derive(identity.external_id)
        try:
            user = await self.user_directory.attach_external_id(
                current.id, identity, secret
            )
        except DuplicateExternalIdError:
            winner = await self.user_directory.find_by_external_id(
                identity.external_id
            )
            if winner is None:
                raise ConflictRejectedError(
                    "Steam ID is claimed but its owner could not be read"
                )
            return self._classify_claimed(winner, context)
        except NotFoundError:
            raise NotAuthenticatedError("Session user no longer exists")

        return Resolution(outcome=ResolutionOutcome.LINKED, user=user)

    def _classify_claimed(
        self, owner: DirectoryUser, context: AuthenticatedContext
    ) -> Resolution:
        """Map an already-claimed Steam ID onto a link outcome."""
        if owner.id == context.user_id:
            return Resolution(
                outcome=ResolutionOutcome.LINK_REJECTED_ALREADY_LINKED_TO_SELF,
                user=owner,
            )

        logfire.warn(
            "Link rejected, Steam ID belongs to another user",
            outcome=ResolutionOutcome.CONFLICT_REJECTED.value,
            external_id=owner.external_id.root if owner.external_id else None,
            requested_by=str(context.user_id),
        )
        raise ConflictRejectedError("This Steam account is linked to another user")
