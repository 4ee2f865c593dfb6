"""
Exception classes for libvault.

Every failure carries ``errors``: a list of human-readable strings (plus any
offending payload), so callers can handle one shape regardless of which layer
failed.
"""

from typing import Any, List, Optional


class VaultError(Exception):
    """Base exception for libvault."""

    def __init__(self, errors: List[Any], message: Optional[str] = None):
        errors = list(errors)
        message = message or (str(errors[0]) if errors else "Unknown error")
        super().__init__(message)
        self.message = message
        self.errors = errors

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.errors!r})"


class ConfigurationError(VaultError):
    """A required adapter or the host is not configured."""
    pass


class ValidationError(VaultError):
    """Credentials or required options are missing or malformed."""
    pass


class HTTPAdapterError(VaultError):
    """The transport failed to complete the request."""
    pass


class CodecError(VaultError):
    """A payload could not be encoded or decoded."""
    pass


class VaultResponseError(VaultError):
    """Vault answered with a list of errors."""
    pass


class NotFoundError(VaultResponseError):
    """Vault had nothing stored at the requested path."""
    pass


class UnexpectedResponseError(VaultError):
    """Vault answered with a body of an unrecognized shape."""
    pass


class UnknownResponseError(UnexpectedResponseError):
    """The transport returned something other than a response."""
    pass


class TransportError(Exception):
    """Raised by transport implementations when a request cannot be completed."""

    def __init__(self, details: Any):
        super().__init__(str(details))
        self.details = details
