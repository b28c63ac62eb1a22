"""Custom exceptions for the marketplace backend."""


class MarketplaceException(Exception):
    """Base exception for the marketplace backend."""

    pass


class ValidationError(MarketplaceException):
    """Raised when validation fails."""

    pass


class NotFoundError(MarketplaceException):
    """Raised when a resource is not found."""

    pass


class DatabaseError(MarketplaceException):
    """Raised when a database operation fails."""

    pass


class ConfigurationError(MarketplaceException):
    """Raised when configuration is invalid."""

    pass


class AuthenticationError(MarketplaceException):
    """Raised when authentication fails."""

    pass


class AuthorizationError(MarketplaceException):
    """Raised when an authenticated caller lacks a required permission."""

    pass
