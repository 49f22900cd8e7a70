"""Domain exceptions raised by the directories and the analysis pipeline.

Routes translate these into HTTP responses; the message of each exception is
meant to be shown to the user as-is.
"""

from __future__ import annotations

from typing import Optional


class DermaSightError(Exception):
    """Base class for all domain errors."""


class ValidationError(DermaSightError):
    """Input rejected before any I/O took place."""


class DuplicateAccount(ValidationError):
    """An account with the same (case-insensitive) email already exists."""


class EmailTaken(ValidationError):
    """Profile update would move onto an email owned by another account."""


class NotFoundError(DermaSightError):
    """The referenced account or case does not exist."""


class AccountNotFound(NotFoundError):
    pass


class CaseNotFound(NotFoundError):
    pass


class AuthError(DermaSightError):
    """Credentials or reset code rejected."""


class InvalidCredentials(AuthError):
    pass


class InvalidCode(AuthError):
    pass


class CodeExpired(AuthError):
    pass


class AccessDenied(AuthError):
    """The current user may not act on the requested resource."""


class RemoteAnalysisError(DermaSightError):
    """The remote analyzer failed or returned an unusable payload.

    Attributes:
        image_index: 1-based position of the failing image within a batch,
            or None when raised outside of a batch.
    """

    def __init__(self, message: str, image_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.image_index = image_index


class StorageError(DermaSightError):
    """Reading or writing the key-value store failed."""
