"""Errors surfaced to storefront client code.

Gateway and persistence failures share their types with the server so a
caller handles ``GatewayError(kind=DECLINED)`` the same way whether the
decline came from the API or from confirming a payment directly.
"""

from shared.errors import GatewayError, GatewayErrorKind, PersistenceError


class StorefrontError(Exception):
    """Base class for failures reported by the storefront client."""


class ValidationError(StorefrontError):
    """The API rejected the request as invalid. ``errors`` holds field messages."""

    def __init__(self, errors) -> None:
        self.errors = errors
        super().__init__(str(errors))


class AuthenticationError(StorefrontError):
    """No valid credentials: missing, expired or rejected token."""


class PermissionDeniedError(StorefrontError):
    pass


class NotFoundError(StorefrontError):
    pass


class NetworkError(StorefrontError):
    """The API could not be reached or did not answer in time.

    When raised while creating an order the outcome is unknown: the order may
    exist on the server.
    """


class ApiError(StorefrontError):
    """Any other unexpected response."""

    def __init__(self, status_code: int, body) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}: {body}")


__all__ = [
    "ApiError",
    "AuthenticationError",
    "GatewayError",
    "GatewayErrorKind",
    "NetworkError",
    "NotFoundError",
    "PermissionDeniedError",
    "PersistenceError",
    "StorefrontError",
    "ValidationError",
]
