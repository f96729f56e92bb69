"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.

Domain errors (invalid credentials, duplicate email) carry user-facing
messages. Provider outages are IdentityProviderError, which the UI
renders as a retry prompt rather than as specific guidance.
"""

from typing import Optional

from shared.exceptions import (
    AuthenticationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)


class InvalidCredentialsError(AuthenticationError):
    """Raised when email/password sign-in is rejected by the provider."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class EmailAlreadyRegisteredError(ConflictError):
    """Raised when signing up with an email that already has a profile."""

    def __init__(self, email: str):
        super().__init__(
            f"An account with {email} is already registered. Sign in instead.",
            code="EMAIL_ALREADY_REGISTERED",
            details={"email": email},
        )


class IdentityProviderError(ExternalServiceError):
    """Raised when the identity provider fails for reasons other than bad input."""

    def __init__(self, message: str, operation: str):
        super().__init__(
            message,
            service="supabase_auth",
            code="IDENTITY_PROVIDER_ERROR",
            details={"operation": operation},
        )


class ProfileNotFoundError(NotFoundError):
    """Raised when no profile exists for a user ID."""

    def __init__(self, user_id: str):
        super().__init__(
            f"User profile not found: {user_id}",
            code="PROFILE_NOT_FOUND",
            details={"user_id": user_id},
        )


class ProfileResolutionError(ExternalServiceError):
    """
    Raised when a live session could not be turned into a profile.

    Profile storage failed, so this is a retry-able transport error.
    Callers in the background lifecycle treat it as "no usable session".
    """

    def __init__(self, user_id: str, cause: Optional[Exception] = None):
        reason = str(cause) if cause else "unknown error"
        super().__init__(
            f"Could not resolve profile for {user_id}: {reason}",
            service="supabase",
            code="PROFILE_RESOLUTION_FAILED",
            details={"user_id": user_id},
        )
        self.cause = cause


class InvalidRoleError(ValidationError):
    """Raised when a role assignment targets a role that cannot be assigned."""

    def __init__(self, role: str):
        super().__init__(
            f"Cannot assign role: {role}",
            code="INVALID_ROLE",
            details={"role": role},
        )
