"""Authentication use cases."""

from .complete_external_login import CompleteExternalLoginUseCase
from .get_current_user import GetCurrentUserUseCase
from .get_link_status import GetLinkStatusUseCase
from .start_external_login import StartExternalLoginUseCase
from .unlink_steam import UnlinkSteamUseCase

__all__ = [
    "CompleteExternalLoginUseCase",
    "GetCurrentUserUseCase",
    "GetLinkStatusUseCase",
    "StartExternalLoginUseCase",
    "UnlinkSteamUseCase",
]
