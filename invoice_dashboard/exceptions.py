from typing import Optional


class DatabaseError(Exception):
    """Raised when a statement against the invoice store fails."""

    def __init__(self, message: str, *, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class AuthError(Exception):
    """Raised by the identity provider when a sign-in attempt fails.

    ``type`` discriminates the failure: ``CredentialsSignin`` for rejected
    credentials, anything else for provider-side problems.
    """

    def __init__(self, error_type: str, message: Optional[str] = None):
        super().__init__(message or error_type)
        self.type = error_type
