from __future__ import annotations

from fastapi import status


class ConfigError(Exception):
    """Raised at startup when the environment does not describe a usable configuration."""


class IdentityProviderError(Exception):
    """An identity provider call failed; the message is the upstream one."""


class DocumentStoreError(Exception):
    """A document store call failed; the message is the upstream one."""


# PUBLIC_INTERFACE
class ApiError(Exception):
    """
    Base class for failures rendered as ``{"error": message}`` with ``status_code``.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class InvalidToken(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class NotFoundOrUnauthorized(ApiError):
    """The todo does not exist or belongs to someone else; deliberately one outcome."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Todo not found or unauthorized") -> None:
        super().__init__(message)


class UpstreamFailure(ApiError):
    """
    An identity provider or document store error, surfaced with its message verbatim.

    Signup/login report these as 400, todo operations as 500.
    """

    @classmethod
    def from_exc(cls, exc: Exception, status_code: int) -> "UpstreamFailure":
        return cls(str(exc), status_code=status_code)
