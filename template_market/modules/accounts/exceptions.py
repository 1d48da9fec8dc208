"""Account domain specific exceptions."""


class AccountError(Exception):
    """Base class for account domain errors."""


class AccountAlreadyExistsError(AccountError):
    """Raised when attempting to register an email that is already taken."""


class AccountNotFoundError(AccountError):
    """Raised when the requested account cannot be found."""


class InvalidRefreshTokenError(AccountError):
    """Raised when a refresh token is malformed, expired or already rotated."""
